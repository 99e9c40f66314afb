# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from importlib.metadata import PackageNotFoundError, version as package_version
import logging
import os
import signal
import threading
from types import FrameType
import yaml

from typing import TYPE_CHECKING, Any, cast

if TYPE_CHECKING:
    from tuya_playground.interface import TuyaServiceProtocol as TuyaPlayground

MAX_NOTIFICATIONS = 20
PLAYGROUND_MODES = ("gradient", "static")


class ConfigError(ValueError):
    """Raised when the configuration file is invalid."""

    pass


@dataclass
class Notification:
    message: str
    level: str = "error"
    created: datetime = field(default_factory=datetime.now)


def _env_list(name: str) -> list[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


class HelpersMixin:
    # Notifications -------------------------------------------------------------------------------

    def notify(self: TuyaPlayground, message: str, level: str = "error") -> Notification:
        notification = Notification(message=message, level=level)
        self.notifications.append(notification)
        # only the newest few matter, older ones scroll away
        del self.notifications[:-MAX_NOTIFICATIONS]
        return notification

    def dismiss_notification(self: TuyaPlayground, index: int) -> None:
        if 0 <= index < len(self.notifications):
            self.notifications.pop(index)

    # Utility functions ---------------------------------------------------------------------------

    def _handle_signal(self: TuyaPlayground, signum: int, frame: FrameType | None = None) -> None:
        sig_name = signal.Signals(signum).name
        self.logger.warning(f"{sig_name} received - stopping service loop")
        self.running = False

        # Try saving state before timer kicks in
        try:
            self.save_state()
            self.logger.info("state saved after signal")
        except Exception as e:
            self.logger.warning(f"failed to save state on signal: {e}")

        def _force_exit() -> None:
            self.logger.warning("force-exiting process after signal")
            os._exit(0)

        timer = threading.Timer(5.0, _force_exit)
        timer.daemon = True
        timer.start()

    def app_version(self: TuyaPlayground) -> str:
        env_version = os.getenv("APP_VERSION")
        if env_version:
            return env_version
        try:
            return package_version("tuya-playground")
        except PackageNotFoundError:
            return "0.0.0"

    def load_config(self: TuyaPlayground, config_arg: Any | None = None) -> dict[str, Any]:
        version = self.app_version()
        tier = os.getenv("APP_TIER", "prod")
        if tier == "dev":
            version += ":DEV"

        config_from = "env"
        config: dict[str, Any] = {}

        # Determine config file path
        config_path = config_arg or "/config"
        config_path = os.path.expanduser(config_path)
        config_path = os.path.abspath(config_path)

        if os.path.isdir(config_path):
            config_file = os.path.join(config_path, "config.yaml")
        elif os.path.isfile(config_path):
            config_file = config_path
            config_path = os.path.dirname(config_file)
        else:
            if config_path.endswith(".yaml"):
                config_file = config_path
                config_path = os.path.dirname(config_file)
            else:
                config_file = os.path.join(config_path, "config.yaml")

        # Try to load from YAML
        if os.path.exists(config_file):
            try:
                with open(config_file, "r") as f:
                    config = yaml.safe_load(f) or {}
                config_from = "file"
            except yaml.YAMLError as e:
                raise ConfigError(f"failed to parse {config_file}: {e}") from e
        else:
            logging.warning(f"Config file not found at {config_file}, falling back to environment vars")

        tuya = cast(dict[str, Any], config.get("tuya") or {})
        playground = cast(dict[str, Any], config.get("playground") or {})

        try:
            # fmt: off
            tuya = {
                "base_url":                  tuya.get("base_url")            or os.getenv("TUYA_BASE_URL", "http://localhost:3000"),
                "space_id":              str(tuya.get("space_id")            or os.getenv("TUYA_SPACE_ID", "227120177")),
                "page_size":             int(tuya.get("page_size")           or os.getenv("TUYA_PAGE_SIZE", 18)),
                "refresh_interval":    float(tuya.get("refresh_interval")    or os.getenv("TUYA_REFRESH_INTERVAL", 30)),
                "group_poll_interval": float(tuya.get("group_poll_interval") or os.getenv("TUYA_GROUP_POLL_INTERVAL", 5)),
                "timeout":             float(tuya.get("timeout")             or os.getenv("TUYA_TIMEOUT", 15)),
            }

            playground = {
                "width":             int(playground.get("width")           or os.getenv("PLAYGROUND_WIDTH", 600)),
                "height":            int(playground.get("height")          or os.getenv("PLAYGROUND_HEIGHT", 400)),
                "mode":                  playground.get("mode")            or os.getenv("PLAYGROUND_MODE", "gradient"),
                "image":                 playground.get("image")           or os.getenv("PLAYGROUND_IMAGE"),
                "fill":       [int(c) for c in playground.get("fill")      or (255, 0, 0)],
                "sample_interval": float(playground.get("sample_interval") or os.getenv("PLAYGROUND_SAMPLE_INTERVAL", 1.0)),
                "fps":             float(playground.get("fps")             or os.getenv("PLAYGROUND_FPS", 30)),
                "speed":           float(playground.get("speed")           or os.getenv("PLAYGROUND_SPEED", 0.5)),
                "stops":             int(playground.get("stops")           or os.getenv("PLAYGROUND_STOPS", 12)),
                "smoothness":      float(playground.get("smoothness", os.getenv("PLAYGROUND_SMOOTHNESS", 0.5))),
                "listen": [str(g) for g in playground.get("listen")        or _env_list("PLAYGROUND_LISTEN")],
            }
            # fmt: on
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid value in config: {e}") from e

        # fmt: off
        config = {
            "tuya":        tuya,
            "playground":  playground,
            "debug":       str(config.get("debug") or os.getenv("DEBUG", "")).lower() == "true",
            "hide_ts":     str(config.get("hide_ts") or os.getenv("HIDE_TS", "")).lower() == "true",
            "config_from": config_from,
            "config_path": config_path,
            "version":     version,
        }
        # fmt: on

        # Validate required fields
        if not tuya["base_url"]:
            raise ConfigError("`tuya.base_url` required in config file or TUYA_BASE_URL env var")
        if playground["width"] <= 0 or playground["height"] <= 0:
            raise ConfigError(f"playground size must be positive, got {playground['width']}x{playground['height']}")
        if not 0.5 <= playground["sample_interval"] <= 1.0:
            raise ConfigError(f"`playground.sample_interval` must be between 0.5 and 1.0, got {playground['sample_interval']}")
        if playground["mode"] not in PLAYGROUND_MODES:
            raise ConfigError(f"`playground.mode` must be one of {', '.join(PLAYGROUND_MODES)}, got {playground['mode']!r}")
        if len(playground["fill"]) != 3 or not all(0 <= c <= 255 for c in playground["fill"]):
            raise ConfigError(f"`playground.fill` must be three 0-255 channels, got {playground['fill']}")
        if playground["fps"] <= 0:
            raise ConfigError("`playground.fps` must be positive")

        return config
