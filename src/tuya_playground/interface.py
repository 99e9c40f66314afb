# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

import aiohttp
import argparse
import asyncio
from datetime import datetime
import logging
from types import FrameType

from typing import TYPE_CHECKING, Any, Coroutine, Protocol

from tuya_playground.color import HSV
from tuya_playground.models import Device, Group
from tuya_playground.sampler import ColorSampler, Position
from tuya_playground.surface import ColorSurface, GradientSettings

if TYPE_CHECKING:
    from tuya_playground.mixins.helpers import Notification
    from tuya_playground.mixins.tuya_api import TransportFailure


class TuyaServiceProtocol(Protocol):
    """Everything the mixins expect to find on the composed service."""

    args: argparse.Namespace | None
    logger: logging.Logger
    config: dict[str, Any]
    tuya_config: dict[str, Any]
    playground_config: dict[str, Any]
    session: aiohttp.ClientSession

    base_url: str
    space_id: str
    page_size: int
    refresh_interval: float
    group_poll_interval: float

    running: bool
    devices: dict[str, Device]
    groups: dict[str, Group]
    notifications: list["Notification"]
    pending_writes: set[asyncio.Task]

    listening: set[str]
    positions: dict[str, Position]
    surface: ColorSurface
    sampler: ColorSampler
    sampler_tasks: list[asyncio.Task]

    rate_limited: bool
    api_calls: int
    last_call_date: datetime | None

    # base
    def save_state(self) -> None: ...
    def restore_state(self) -> None: ...

    # helpers
    def notify(self, message: str, level: str = "error") -> "Notification": ...
    def dismiss_notification(self, index: int) -> None: ...
    def _handle_signal(self, signum: int, frame: FrameType | None = None) -> None: ...
    def app_version(self) -> str: ...
    def load_config(self, config_arg: Any | None = None) -> dict[str, Any]: ...

    # tuya api
    def restore_state_values(self, api_calls: int, last_call_date: str | None) -> None: ...
    def increase_api_calls(self) -> None: ...
    def set_if_rate_limited(self, status: int) -> None: ...
    def get_url(self, path: str) -> str: ...
    def _failure(
        self, message: str, target_id: str | None, operation: str, status: int | None = None, payload: Any = None
    ) -> "TransportFailure": ...
    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        target_id: str | None = None,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any: ...
    async def fetch_devices(self) -> list[dict[str, Any]]: ...
    async def fetch_device_status(self, device_id: str) -> list[dict[str, Any]]: ...
    async def send_commands(self, device_id: str, commands: list[dict[str, Any]]) -> Any: ...
    async def fetch_groups_page(self, page_no: int = 1, page_size: int | None = None) -> dict[str, Any]: ...
    async def fetch_groups(self) -> list[dict[str, Any]]: ...
    async def fetch_group_status(self, group_id: str) -> list[dict[str, Any]]: ...
    async def fetch_group_properties(self, group_id: str) -> dict[str, Any]: ...
    async def send_properties(self, group_id: str, properties: dict[str, Any]) -> Any: ...

    # refresh
    async def refresh_all(self) -> bool: ...
    async def refresh_group_state(self, group_id: str) -> None: ...
    async def refresh_group_states(self) -> None: ...
    def dispatch_write(self, write: Coroutine[Any, Any, Any], description: str) -> asyncio.Task: ...
    async def _run_write(self, write: Coroutine[Any, Any, Any], description: str) -> None: ...
    async def wait_for_writes(self) -> None: ...

    # devices
    async def get_devices(self) -> dict[str, Device]: ...
    def _commit_device_commands(self, device_id: str, commands: list[dict[str, Any]], description: str) -> asyncio.Task: ...
    def toggle_device(self, device_id: str) -> asyncio.Task: ...
    def set_brightness(self, device_id: str, value: int | float) -> asyncio.Task: ...
    def set_color(self, device_id: str, h: float, s: float, v: float) -> asyncio.Task: ...

    # groups
    async def get_groups(self) -> dict[str, Group]: ...
    def _commit_group_properties(self, group_id: str, properties: dict[str, Any], description: str) -> asyncio.Task: ...
    def toggle_group(self, group_id: str) -> asyncio.Task: ...
    def set_group_brightness(self, group_id: str, value: int | float) -> asyncio.Task: ...
    def set_group_color(self, group_id: str, h: float, s: float, v: float) -> asyncio.Task: ...

    # playground
    def setup_playground(self) -> ColorSampler: ...
    def repaint(self) -> None: ...
    def on_sampler_color(self, group_id: str, hsv: HSV) -> None: ...
    def on_sampler_positions(self, positions: dict[str, Position]) -> None: ...
    def persist_state(self) -> bool: ...
    def set_color_listening(self, group_id: str, enabled: bool) -> None: ...
    def toggle_color_listening(self, group_id: str) -> bool: ...
    def move_target(self, group_id: str, x: float, y: float) -> bool: ...
    def reset_target(self, group_id: str) -> None: ...
    def resize_playground(self, width: int, height: int) -> None: ...
    def configure_gradient(
        self, speed: float | None = None, stops: int | None = None, smoothness: float | None = None
    ) -> GradientSettings: ...

    # loops
    async def refresh_loop(self) -> None: ...
    async def group_poll_loop(self) -> None: ...
    async def render_loop(self) -> None: ...
    async def sample_loop(self) -> None: ...
    def start_sampler_loops(self) -> list[asyncio.Task]: ...
    def stop_sampler_loops(self) -> None: ...
    def restart_sampler_loops(self) -> None: ...
    async def main_loop(self) -> None: ...
