# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
"""Sample targets on a color surface and turn what they see into group colors.

Each listening group owns one target. Colors are emitted two ways:

* while a target is dragged, at most once per ``DEBOUNCE_DELAY`` per target;
* from ``sample_all()``, driven by a timer, whenever the color under a target
  (or the target's position) moved away from what was last emitted.

All state lives on the ``ColorSampler`` instance, one per surface.
"""
from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Callable

from tuya_playground.color import HSV, colors_equal, pixel_to_hsv, to_comparison_scale
from tuya_playground.log import get_logger
from tuya_playground.surface import ColorSurface, GradientSettings, render_gradient

DEBOUNCE_DELAY = 0.1  # seconds between drag-time emissions for one target
DEFAULT_POSITION = (50.0, 50.0)

IDLE = "idle"
DRAGGING = "dragging"

Position = tuple[float, float]
ColorCallback = Callable[[str, HSV], None]
PositionsCallback = Callable[[dict[str, Position]], None]


@dataclass
class SampleTarget:
    group_id: str
    x: float
    y: float
    state: str = IDLE

    @property
    def position(self) -> Position:
        return (self.x, self.y)


@dataclass
class CacheEntry:
    color: HSV
    position: Position
    timestamp: float


class ColorSampler:
    def __init__(
        self,
        surface: ColorSurface,
        on_color: ColorCallback,
        on_positions: PositionsCallback | None = None,
        gradient: GradientSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.logger = get_logger(__name__)
        self.surface = surface
        self.on_color = on_color
        self.on_positions = on_positions
        self.gradient = gradient
        self.clock = clock

        self.phase = 0.0
        self.targets: dict[str, SampleTarget] = {}
        self.cache: dict[str, CacheEntry] = {}
        self.last_drag_emit: dict[str, float] = {}
        self.dragging: str | None = None

    @property
    def animated(self) -> bool:
        return self.gradient is not None

    # Targets -------------------------------------------------------------------------------------

    def clamp(self, x: float, y: float) -> Position:
        return (max(0.0, min(float(x), float(self.surface.width))), max(0.0, min(float(y), float(self.surface.height))))

    def set_listening(self, group_ids: set[str] | list[str], positions: dict[str, Position] | None = None) -> None:
        """Keep exactly one target per listening group, reusing known positions."""
        wanted = set(group_ids)
        positions = positions or {}
        changed = False

        for group_id in list(self.targets):
            if group_id not in wanted:
                self._drop_target(group_id)
                changed = True

        for group_id in sorted(wanted):
            if group_id not in self.targets:
                x, y = self.clamp(*positions.get(group_id, DEFAULT_POSITION))
                self.targets[group_id] = SampleTarget(group_id=group_id, x=x, y=y)
                self.logger.debug(f"added sample target for group {group_id} at ({x}, {y})")
                changed = True

        if changed:
            self._positions_changed()

    def remove_target(self, group_id: str) -> None:
        if group_id in self.targets:
            self._drop_target(group_id)
            self._positions_changed()

    def _drop_target(self, group_id: str) -> None:
        if self.dragging == group_id:
            self.dragging = None
        self.targets.pop(group_id, None)
        self.cache.pop(group_id, None)
        self.last_drag_emit.pop(group_id, None)
        self.logger.debug(f"removed sample target for group {group_id}")

    def reset_target(self, group_id: str) -> None:
        target = self.targets[group_id]
        target.x, target.y = self.clamp(*DEFAULT_POSITION)
        self._positions_changed()

    def positions(self) -> dict[str, Position]:
        return {group_id: target.position for group_id, target in self.targets.items()}

    def _positions_changed(self) -> None:
        if self.on_positions:
            self.on_positions(self.positions())

    # Pointer handling ----------------------------------------------------------------------------

    def pointer_down(self, group_id: str) -> bool:
        target = self.targets.get(group_id)
        if target is None:
            self.logger.debug(f"pointer down on unknown target {group_id}")
            return False
        if self.dragging and self.dragging != group_id:
            self.targets[self.dragging].state = IDLE
        target.state = DRAGGING
        self.dragging = group_id
        return True

    def pointer_move(self, x: float, y: float) -> bool:
        """Move the dragged target; returns True when a color was emitted."""
        if self.dragging is None:
            return False

        target = self.targets[self.dragging]
        target.x, target.y = self.clamp(x, y)
        self._positions_changed()

        now = self.clock()
        last = self.last_drag_emit.get(target.group_id)
        if last is not None and now - last < DEBOUNCE_DELAY:
            return False

        color = pixel_to_hsv(self.surface, target.x, target.y)
        if color is None:
            return False

        self.last_drag_emit[target.group_id] = now
        self._emit(target, color, now)
        return True

    def pointer_up(self) -> None:
        if self.dragging is not None:
            target = self.targets.get(self.dragging)
            if target is not None:
                target.state = IDLE
        self.dragging = None

    def pointer_leave(self) -> None:
        # leaving the surface ends a drag exactly like releasing the button
        self.pointer_up()

    # Sampling ------------------------------------------------------------------------------------

    def sample(self, group_id: str) -> HSV | None:
        target = self.targets[group_id]
        return pixel_to_hsv(self.surface, target.x, target.y)

    def needs_update(self, group_id: str, color: HSV) -> bool:
        cached = self.cache.get(group_id)
        if cached is None:
            return True
        if cached.position != self.targets[group_id].position:
            return True
        return not colors_equal(to_comparison_scale(cached.color), to_comparison_scale(color))

    def sample_all(self, force: bool = False) -> list[str]:
        """Re-sample every target and emit where the color changed. Returns emitted group ids."""
        emitted: list[str] = []
        now = self.clock()
        for group_id, target in list(self.targets.items()):
            color = pixel_to_hsv(self.surface, target.x, target.y)
            if color is None:
                continue
            if force or self.needs_update(group_id, color):
                self._emit(target, color, now)
                emitted.append(group_id)
        return emitted

    def _emit(self, target: SampleTarget, color: HSV, now: float) -> None:
        previous = self.cache.get(target.group_id)
        self.cache[target.group_id] = CacheEntry(color=color, position=target.position, timestamp=now)
        if previous:
            self.logger.debug(
                f"color update for group {target.group_id}: {previous.color} -> {color} " f"after {now - previous.timestamp:.3f}s"
            )
        try:
            self.on_color(target.group_id, color)
        except Exception as err:
            self.logger.error(f"color listener failed for group {target.group_id}: {err}", exc_info=True)

    # Surface -------------------------------------------------------------------------------------

    def render_frame(self) -> None:
        if self.gradient is None:
            return
        self.phase = (self.phase + self.gradient.speed) % 360.0
        self.surface.paint(render_gradient(self.surface.width, self.surface.height, self.gradient, self.phase))

    def resize(self, width: int, height: int) -> None:
        self.surface.resize(width, height)
        for target in self.targets.values():
            target.x, target.y = self.clamp(target.x, target.y)
        self._positions_changed()
