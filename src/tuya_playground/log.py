# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
import logging
import sys

from pythonjsonlogger.json import JsonFormatter

LOG_FORMAT = "{asctime}{levelname}{name}{message}"
LOG_FORMAT_NO_TS = "{levelname}{name}{message}"


def setup_logging(level: int = logging.INFO, hide_ts: bool = False) -> None:
    formatter = JsonFormatter(
        LOG_FORMAT_NO_TS if hide_ts else LOG_FORMAT,
        style="{",
        rename_fields={"asctime": "ts", "levelname": "level", "name": "logger"},
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
