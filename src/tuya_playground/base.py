# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

import aiohttp
import argparse
import asyncio
from datetime import datetime
import json
import logging
import os
from pathlib import Path
from types import TracebackType

from typing import Any, Self, cast

from tuya_playground.interface import TuyaServiceProtocol as TuyaPlayground
from tuya_playground.log import get_logger, setup_logging
from tuya_playground.mixins.helpers import Notification
from tuya_playground.models import Device, Group
from tuya_playground.sampler import ColorSampler, Position
from tuya_playground.surface import ColorSurface

STATE_FILE = "tuya_playground.dat"


class Base:
    def __init__(self: TuyaPlayground, args: argparse.Namespace | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)

        self.session: aiohttp.ClientSession | None = None

        self.args = args
        self.logger = get_logger(__name__)

        # now load self.config right away
        cfg_arg = getattr(args, "config", None)
        self.config = self.load_config(cfg_arg)

        if not self.config["tuya"] or not self.config["playground"]:
            raise ValueError("config was not loaded")

        # down in trenches if we have to
        if self.config.get("debug") or self.config.get("hide_ts"):
            setup_logging(logging.DEBUG if self.config.get("debug") else logging.INFO, hide_ts=self.config.get("hide_ts", False))

        self.tuya_config = self.config["tuya"]
        self.playground_config = self.config["playground"]

        self.base_url = self.tuya_config["base_url"]
        self.space_id = self.tuya_config["space_id"]
        self.page_size = self.tuya_config["page_size"]
        self.refresh_interval = self.tuya_config["refresh_interval"]
        self.group_poll_interval = self.tuya_config["group_poll_interval"]

        self.running = False

        self.devices: dict[str, Device] = {}
        self.groups: dict[str, Group] = {}
        self.notifications: list[Notification] = []
        self.pending_writes: set[asyncio.Task] = set()

        self.listening: set[str] = set(self.playground_config["listen"])
        self.positions: dict[str, Position] = {}
        self.surface: ColorSurface | None = None
        self.sampler: ColorSampler | None = None
        self.sampler_tasks: list[asyncio.Task] = []

        self.rate_limited = False
        self.api_calls = 0
        self.last_call_date: datetime | None = None

    async def __aenter__(self: Self) -> TuyaPlayground:
        super_enter = getattr(super(), "__enter__", None)
        if callable(super_enter):
            super_enter()

        timeout = aiohttp.ClientTimeout(total=cast(Any, self).tuya_config["timeout"])
        cast(Any, self).session = aiohttp.ClientSession(timeout=timeout)

        cast(Any, self).restore_state()
        cast(Any, self).setup_playground()
        cast(Any, self).running = True

        return cast(TuyaPlayground, self)

    async def __aexit__(self: Self, exc_type: BaseException | None, exc_val: BaseException | None, exc_tb: TracebackType) -> None:
        super_exit = getattr(super(), "__exit__", None)
        if callable(super_exit):
            super_exit(exc_type, exc_val, exc_tb)

        service = cast(Any, self)
        service.running = False
        service.stop_sampler_loops()

        # in-flight writes are never cancelled, let them land
        await service.wait_for_writes()
        service.persist_state()

        if service.session and not service.session.closed:
            await service.session.close()

        service.logger.info("exiting gracefully")

    def save_state(self: TuyaPlayground) -> None:
        data_file = Path(self.config["config_path"]) / STATE_FILE
        state = {
            "api_calls": self.api_calls,
            "last_call_date": self.last_call_date.isoformat() if self.last_call_date else None,
            "listening": sorted(self.listening),
            "positions": {group_id: list(position) for group_id, position in self.positions.items()},
        }
        with open(data_file, "w", encoding="utf-8") as file:
            json.dump(state, file, indent=4)
        self.logger.debug(f"saved state to {data_file}")

    def restore_state(self: TuyaPlayground) -> None:
        data_file = Path(self.config["config_path"]) / STATE_FILE
        if not os.path.exists(data_file):
            return

        with open(data_file, "r") as file:
            try:
                state = json.loads(file.read())
            except ValueError as err:
                self.logger.warning(f"ignoring unreadable state file {data_file}: {err}")
                return

        self.restore_state_values(state.get("api_calls", 0), state.get("last_call_date"))
        self.listening |= set(state.get("listening", []))
        self.positions = {group_id: (float(x), float(y)) for group_id, (x, y) in state.get("positions", {}).items()}
        self.logger.info(f"restored state from {data_file}")
