# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

import asyncio

from typing import TYPE_CHECKING, Any

from tuya_playground import commands as cmd
from tuya_playground.color import normalized_to_device_hsv
from tuya_playground.models import Device

if TYPE_CHECKING:
    from tuya_playground.interface import TuyaServiceProtocol as TuyaPlayground


class DevicesMixin:
    async def get_devices(self: TuyaPlayground) -> dict[str, Device]:
        raw = await self.fetch_devices()
        devices: dict[str, Device] = {}
        for item in raw:
            device = Device.from_dict(item)
            devices[device.id] = device

        self.devices = devices
        self.logger.info(f"found {len(devices)} devices")
        return devices

    def _commit_device_commands(self: TuyaPlayground, device_id: str, commands: list[dict[str, Any]], description: str) -> asyncio.Task:
        cmd.validate_commands(commands)
        device = self.devices[device_id]

        for entry in cmd.commands_to_status(commands):
            device.apply(entry)

        self.logger.debug(f"{description}: {commands}")
        return self.dispatch_write(self.send_commands(device_id, commands), description)

    # device intents ------------------------------------------------------------------------------

    def toggle_device(self: TuyaPlayground, device_id: str) -> asyncio.Task:
        # compounds off the local view, so rapid toggles alternate without waiting on Tuya
        commands = cmd.toggle_device(self.devices[device_id].is_on)
        return self._commit_device_commands(device_id, commands, f"toggle device {device_id}")

    def set_brightness(self: TuyaPlayground, device_id: str, value: int | float) -> asyncio.Task:
        commands = cmd.device_brightness(value)
        return self._commit_device_commands(device_id, commands, f"set brightness on device {device_id}")

    def set_color(self: TuyaPlayground, device_id: str, h: float, s: float, v: float) -> asyncio.Task:
        commands = cmd.device_color(normalized_to_device_hsv(h, s, v))
        return self._commit_device_commands(device_id, commands, f"set color on device {device_id}")
