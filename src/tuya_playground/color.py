# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
import colorsys
import math
from typing import TYPE_CHECKING, NamedTuple

from tuya_playground.log import get_logger

if TYPE_CHECKING:
    from tuya_playground.surface import ColorSurface

logger = get_logger(__name__)

HUE_MAX = 360
SV_MAX = 1000
HEX_CHUNK = 4
HEX_LENGTH = HEX_CHUNK * 3

# anything closer than this (per component, in device HSV units) is treated as the same color
COLOR_TOLERANCE = 1.0

HSV = tuple[float, float, float]


class MalformedColorEncoding(ValueError):
    """Raised when a packed hex color cannot be parsed or produced."""

    pass


class DeviceHSV(NamedTuple):
    h: int
    s: int
    v: int

    def as_dict(self) -> dict[str, int]:
        return {"h": self.h, "s": self.s, "v": self.v}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# Normalized <-> device HSV -----------------------------------------------------------------------


def normalized_to_device_hsv(h: float, s: float, v: float) -> DeviceHSV:
    """Convert h in degrees [0,360) and s, v in [0,1] to the device's integer ranges."""
    return DeviceHSV(
        h=round_half_up(_clamp(h, 0.0, HUE_MAX)),
        s=round_half_up(_clamp(s, 0.0, 1.0) * SV_MAX),
        v=round_half_up(_clamp(v, 0.0, 1.0) * SV_MAX),
    )


def unit_to_device_hsv(h: float, s: float, v: float) -> DeviceHSV:
    """Same as normalized_to_device_hsv, but for sliders where hue is also 0-1."""
    return normalized_to_device_hsv(h * HUE_MAX, s, v)


def device_hsv_to_normalized(hsv: DeviceHSV) -> HSV:
    return (float(hsv.h), hsv.s / SV_MAX, hsv.v / SV_MAX)


def device_hsv_from_dict(data: dict[str, int]) -> DeviceHSV:
    return DeviceHSV(h=int(data["h"]), s=int(data["s"]), v=int(data["v"]))


# Packed hex --------------------------------------------------------------------------------------


def device_hsv_to_hex(hsv: DeviceHSV) -> str:
    for name, value, high in (("h", hsv.h, HUE_MAX), ("s", hsv.s, SV_MAX), ("v", hsv.v, SV_MAX)):
        if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= high:
            raise MalformedColorEncoding(f"cannot encode {name}={value!r}, expected int in 0..{high}")
    return f"{hsv.h:04x}{hsv.s:04x}{hsv.v:04x}"


def hex_to_device_hsv(value: str) -> DeviceHSV:
    if not isinstance(value, str) or len(value) != HEX_LENGTH:
        raise MalformedColorEncoding(f"packed color must be {HEX_LENGTH} hex digits, got {value!r}")

    parts: list[int] = []
    for start in range(0, HEX_LENGTH, HEX_CHUNK):
        chunk = value[start : start + HEX_CHUNK]
        # int(x, 16) tolerates signs, underscores and whitespace; the wire format does not
        if any(c not in "0123456789abcdefABCDEF" for c in chunk):
            raise MalformedColorEncoding(f"invalid hex chunk {chunk!r} in {value!r}")
        parts.append(int(chunk, 16))

    return DeviceHSV(*parts)


# RGB / pixels ------------------------------------------------------------------------------------


def rgb_to_hsv(r: int, g: int, b: int) -> HSV:
    """Convert 0-255 channels to h in degrees [0,360) and s, v in [0,1]. Grays get hue 0."""
    h, s, v = colorsys.rgb_to_hsv(r / 255, g / 255, b / 255)
    return ((h * HUE_MAX) % HUE_MAX, s, v)


def pixel_to_hsv(surface: "ColorSurface", x: float, y: float) -> HSV | None:
    try:
        r, g, b = surface.get_pixel(x, y)
    except Exception as err:
        logger.debug(f"no color at ({x}, {y}): {err}")
        return None
    return rgb_to_hsv(r, g, b)


def to_comparison_scale(color: HSV) -> HSV:
    h, s, v = color
    return (h, s * SV_MAX, v * SV_MAX)


def colors_equal(a: HSV, b: HSV, tolerance: float = COLOR_TOLERANCE) -> bool:
    return all(abs(x - y) < tolerance for x, y in zip(a, b))
