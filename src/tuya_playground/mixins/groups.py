# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

import asyncio

from typing import TYPE_CHECKING, Any

from tuya_playground import commands as cmd
from tuya_playground.color import normalized_to_device_hsv
from tuya_playground.models import Group

if TYPE_CHECKING:
    from tuya_playground.interface import TuyaServiceProtocol as TuyaPlayground


class GroupsMixin:
    async def get_groups(self: TuyaPlayground) -> dict[str, Group]:
        raw = await self.fetch_groups()
        groups = [Group.from_dict(item) for item in raw]

        details = await asyncio.gather(
            *[asyncio.gather(self.fetch_group_status(g.id), self.fetch_group_properties(g.id), return_exceptions=True) for g in groups]
        )
        for group, (status, properties) in zip(groups, details):
            failure = next((r for r in (status, properties) if isinstance(r, Exception)), None)
            if failure is not None:
                # keep the group with defaults; the next poll fills it in
                self.logger.warning(f"could not load status for group {group.name} ({group.id}): {failure}")
                continue
            group.set_status(status)
            group.properties = properties

        self.groups = {group.id: group for group in groups}
        self.logger.info(f"found {len(self.groups)} groups")
        return self.groups

    def _commit_group_properties(self: TuyaPlayground, group_id: str, properties: dict[str, Any], description: str) -> asyncio.Task:
        cmd.validate_properties(properties)
        group = self.groups[group_id]

        for entry in cmd.properties_to_status(properties):
            group.apply(entry)

        self.logger.debug(f"{description}: {properties}")
        return self.dispatch_write(self.send_properties(group_id, properties), description)

    # group intents -------------------------------------------------------------------------------

    def toggle_group(self: TuyaPlayground, group_id: str) -> asyncio.Task:
        properties = cmd.toggle_group(self.groups[group_id].is_on)
        return self._commit_group_properties(group_id, properties, f"toggle group {group_id}")

    def set_group_brightness(self: TuyaPlayground, group_id: str, value: int | float) -> asyncio.Task:
        properties = cmd.group_brightness(value)
        return self._commit_group_properties(group_id, properties, f"set brightness on group {group_id}")

    def set_group_color(self: TuyaPlayground, group_id: str, h: float, s: float, v: float) -> asyncio.Task:
        hsv = normalized_to_device_hsv(h, s, v)
        properties = cmd.group_color(hsv)
        task = self._commit_group_properties(group_id, properties, f"set color on group {group_id}")
        # copy so the dict returned by the last fetch is never touched
        group = self.groups[group_id]
        group.properties = {**group.properties, "colour_data_v2": hsv.as_dict()}
        return task
