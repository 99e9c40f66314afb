# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

import asyncio
import signal

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tuya_playground.interface import TuyaServiceProtocol as TuyaPlayground


class LoopsMixin:
    async def refresh_loop(self: TuyaPlayground) -> None:
        while self.running:
            try:
                await asyncio.sleep(self.refresh_interval)
            except asyncio.CancelledError:
                self.logger.debug("refresh_loop cancelled during sleep")
                break
            if self.running:
                await self.refresh_all()

    async def group_poll_loop(self: TuyaPlayground) -> None:
        while self.running:
            await self.refresh_group_states()
            try:
                await asyncio.sleep(self.group_poll_interval)
            except asyncio.CancelledError:
                self.logger.debug("group_poll_loop cancelled during sleep")
                break

    # sampler loops -------------------------------------------------------------------------------

    async def render_loop(self: TuyaPlayground) -> None:
        frame_delay = 1.0 / self.playground_config["fps"]
        while self.running:
            try:
                self.sampler.render_frame()
            except Exception as err:
                self.logger.error(f"failed to render playground frame: {err}")
            try:
                await asyncio.sleep(frame_delay)
            except asyncio.CancelledError:
                self.logger.debug("render_loop cancelled during sleep")
                break

    async def sample_loop(self: TuyaPlayground) -> None:
        while self.running:
            self.sampler.sample_all()
            try:
                await asyncio.sleep(self.playground_config["sample_interval"])
            except asyncio.CancelledError:
                self.logger.debug("sample_loop cancelled during sleep")
                break

    def start_sampler_loops(self: TuyaPlayground) -> list[asyncio.Task]:
        self.stop_sampler_loops()
        if self.sampler.animated:
            self.sampler_tasks.append(asyncio.create_task(self.render_loop(), name="render_loop"))
        self.sampler_tasks.append(asyncio.create_task(self.sample_loop(), name="sample_loop"))
        return self.sampler_tasks

    def stop_sampler_loops(self: TuyaPlayground) -> None:
        for task in self.sampler_tasks:
            task.cancel()
        self.sampler_tasks = []

    def restart_sampler_loops(self: TuyaPlayground) -> None:
        if self.sampler_tasks:
            self.start_sampler_loops()

    # main loop
    async def main_loop(self: TuyaPlayground) -> None:
        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                signal.signal(sig, self._handle_signal)
            except Exception:
                self.logger.debug(f"cannot install handler for {sig}")

        await self.refresh_all()
        self.running = True
        self.start_sampler_loops()

        tasks = [
            asyncio.create_task(self.refresh_loop(), name="refresh_loop"),
            asyncio.create_task(self.group_poll_loop(), name="group_poll_loop"),
        ]

        try:
            await asyncio.gather(*tasks)
        except asyncio.CancelledError:
            self.logger.warning("main loop cancelled - shutting down...")
        except Exception as err:
            self.logger.exception(f"unhandled exception in main loop: {err}")
            self.running = False
        finally:
            self.stop_sampler_loops()
            self.logger.info("all loops terminated - cleanup complete.")
