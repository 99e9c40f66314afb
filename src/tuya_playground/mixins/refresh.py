# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

import asyncio

from typing import TYPE_CHECKING, Any, Coroutine

if TYPE_CHECKING:
    from tuya_playground.interface import TuyaServiceProtocol as TuyaPlayground


class RefreshMixin:
    async def refresh_all(self: TuyaPlayground) -> bool:
        """Re-fetch devices and groups, replacing local state. Never raises."""
        self.logger.info("refreshing all devices and groups from Tuya")

        results = await asyncio.gather(self.get_devices(), self.get_groups(), return_exceptions=True)

        ok = True
        for kind, result in zip(("devices", "groups"), results):
            if isinstance(result, Exception):
                ok = False
                self.logger.error(f"failed to refresh {kind}: {result}")
                self.notify(f"Could not refresh {kind}: {result}")
        return ok

    # poll group status ---------------------------------------------------------------------------

    async def refresh_group_state(self: TuyaPlayground, group_id: str) -> None:
        status, properties = await asyncio.gather(self.fetch_group_status(group_id), self.fetch_group_properties(group_id), return_exceptions=True)
        for result in (status, properties):
            if isinstance(result, Exception):
                raise result

        group = self.groups.get(group_id)
        if group is None:
            # dropped by a full refresh while we were waiting
            return
        group.set_status(status)
        group.properties = properties

    async def refresh_group_states(self: TuyaPlayground) -> None:
        if not self.groups:
            return

        group_ids = list(self.groups)
        results = await asyncio.gather(*[self.refresh_group_state(group_id) for group_id in group_ids], return_exceptions=True)

        failed = [group_id for group_id, result in zip(group_ids, results) if isinstance(result, Exception)]
        if failed:
            self.logger.warning(f"polling failed for {len(failed)} group(s): {', '.join(failed)}")
            await self.refresh_all()

    # dispatch writes -----------------------------------------------------------------------------

    def dispatch_write(self: TuyaPlayground, write: Coroutine[Any, Any, Any], description: str) -> asyncio.Task:
        task = asyncio.create_task(self._run_write(write, description), name=description)
        self.pending_writes.add(task)
        task.add_done_callback(self.pending_writes.discard)
        return task

    async def _run_write(self: TuyaPlayground, write: Coroutine[Any, Any, Any], description: str) -> None:
        try:
            await write
        except Exception as err:
            # no rollback, local state reconverges from a full refetch
            self.logger.error(f"{description} failed: {err}")
            self.notify(f"{description} failed, refreshing from Tuya")
            await self.refresh_all()

    async def wait_for_writes(self: TuyaPlayground) -> None:
        while self.pending_writes:
            await asyncio.gather(*list(self.pending_writes), return_exceptions=True)
