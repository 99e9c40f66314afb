# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

from typing import TYPE_CHECKING

from tuya_playground.color import HSV
from tuya_playground.sampler import ColorSampler, Position
from tuya_playground.surface import ColorSurface, GradientSettings

if TYPE_CHECKING:
    from tuya_playground.interface import TuyaServiceProtocol as TuyaPlayground


class PlaygroundMixin:
    def setup_playground(self: TuyaPlayground) -> ColorSampler:
        cfg = self.playground_config
        self.surface = ColorSurface(cfg["width"], cfg["height"])

        gradient = None
        if cfg["mode"] == "gradient":
            gradient = GradientSettings(speed=cfg["speed"], stops=cfg["stops"], smoothness=cfg["smoothness"])

        self.sampler = ColorSampler(self.surface, self.on_sampler_color, self.on_sampler_positions, gradient)
        self.repaint()
        self.sampler.set_listening(self.listening, self.positions)

        self.logger.info(f"playground ready: {cfg['mode']} {cfg['width']}x{cfg['height']}, listening groups: {sorted(self.listening)}")
        return self.sampler

    def repaint(self: TuyaPlayground) -> None:
        if self.sampler.animated:
            self.sampler.render_frame()
        elif self.playground_config.get("image"):
            self.surface.load_image(self.playground_config["image"])
        else:
            self.surface.fill(self.playground_config["fill"])

    # sampler callbacks ---------------------------------------------------------------------------

    def on_sampler_color(self: TuyaPlayground, group_id: str, hsv: HSV) -> None:
        if group_id not in self.groups:
            self.logger.debug(f"sampled color for unknown group {group_id}, skipping")
            return
        h, s, v = hsv
        self.set_group_color(group_id, h, s, v)

    def on_sampler_positions(self: TuyaPlayground, positions: dict[str, Position]) -> None:
        self.positions.update(positions)
        self.persist_state()

    def persist_state(self: TuyaPlayground) -> bool:
        # an unwritable state file costs persistence, never the session
        try:
            self.save_state()
        except OSError as err:
            self.logger.warning(f"could not save playground state: {err}")
            return False
        return True

    # listening -----------------------------------------------------------------------------------

    def set_color_listening(self: TuyaPlayground, group_id: str, enabled: bool) -> None:
        if enabled:
            self.listening.add(group_id)
        else:
            self.listening.discard(group_id)

        if self.sampler:
            self.sampler.set_listening(self.listening, self.positions)
        self.logger.info(f"group {group_id} {'now' if enabled else 'no longer'} follows the playground")
        self.persist_state()

    def toggle_color_listening(self: TuyaPlayground, group_id: str) -> bool:
        enabled = group_id not in self.listening
        self.set_color_listening(group_id, enabled)
        return enabled

    # targets and surface -------------------------------------------------------------------------

    def move_target(self: TuyaPlayground, group_id: str, x: float, y: float) -> bool:
        if not self.sampler.pointer_down(group_id):
            return False
        try:
            return self.sampler.pointer_move(x, y)
        finally:
            self.sampler.pointer_up()

    def reset_target(self: TuyaPlayground, group_id: str) -> None:
        self.sampler.reset_target(group_id)

    def resize_playground(self: TuyaPlayground, width: int, height: int) -> None:
        self.sampler.resize(width, height)
        self.playground_config["width"] = width
        self.playground_config["height"] = height
        self.repaint()
        self.restart_sampler_loops()

    def configure_gradient(
        self: TuyaPlayground, speed: float | None = None, stops: int | None = None, smoothness: float | None = None
    ) -> GradientSettings:
        current = self.sampler.gradient or GradientSettings()
        gradient = GradientSettings(
            speed=current.speed if speed is None else speed,
            stops=current.stops if stops is None else stops,
            smoothness=current.smoothness if smoothness is None else smoothness,
        )
        self.sampler.gradient = gradient
        self.playground_config.update(mode="gradient", speed=gradient.speed, stops=gradient.stops, smoothness=gradient.smoothness)
        self.repaint()
        self.restart_sampler_loops()
        return gradient
