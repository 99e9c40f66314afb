# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
import colorsys
import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
from PIL import Image, ImageFilter

from tuya_playground.log import get_logger

logger = get_logger(__name__)

Pixels = npt.NDArray[np.uint8]

# Hue anchors reached at equal steps along the gradient. Red through yellow changes
# fast to the eye and green/blue slowly, so those arcs are squeezed to share the space evenly.
PERCEPTUAL_HUE_ANCHORS = np.array([0.0, 30.0, 60.0, 120.0, 180.0, 240.0, 280.0, 320.0, 360.0])

# blur radius in pixels at smoothness 1.0
MAX_BLUR_RADIUS = 24.0


@dataclass
class GradientSettings:
    speed: float = 0.5  # degrees of phase per frame
    stops: int = 12
    smoothness: float = 0.5  # 0..1


def perceptual_hue(position: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Map positions in [0,1) onto hue degrees so equal steps look equally different."""
    steps = np.linspace(0.0, 1.0, len(PERCEPTUAL_HUE_ANCHORS))
    wrapped = np.mod(np.asarray(position, dtype=np.float64), 1.0)
    return np.interp(wrapped, steps, PERCEPTUAL_HUE_ANCHORS) % 360.0


def gradient_stops(stops: int, phase: float) -> npt.NDArray[np.float64]:
    """RGB (0-255) colors for ``stops`` evenly spaced hue stops, shifted by ``phase`` degrees."""
    positions = np.arange(stops, dtype=np.float64) / stops + phase / 360.0
    hues = perceptual_hue(positions)
    return np.array([[c * 255.0 for c in colorsys.hsv_to_rgb(h / 360.0, 1.0, 1.0)] for h in hues])


def render_gradient(width: int, height: int, settings: GradientSettings, phase: float) -> Pixels:
    stops = max(2, settings.stops)
    colors = gradient_stops(stops, phase)
    # repeat the first stop at the far edge so the band wraps seamlessly while it scrolls
    colors = np.vstack([colors, colors[:1]])
    anchors = np.linspace(0.0, 1.0, stops + 1)
    xs = (np.arange(width, dtype=np.float64) + 0.5) / width

    row = np.stack([np.interp(xs, anchors, colors[:, channel]) for channel in range(3)], axis=-1)
    pixels = np.repeat(row[np.newaxis, :, :], height, axis=0).round().astype(np.uint8)

    radius = max(0.0, min(1.0, settings.smoothness)) * MAX_BLUR_RADIUS
    if radius > 0:
        pixels = blur(pixels, radius)
    return pixels


def blur(pixels: Pixels, radius: float) -> Pixels:
    image = Image.fromarray(pixels).filter(ImageFilter.GaussianBlur(radius))
    return np.asarray(image, dtype=np.uint8).copy()


class ColorSurface:
    """RGB pixel buffer that sample targets read colors from."""

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"surface must have a positive size, got {width}x{height}")
        self.width = width
        self.height = height
        self.pixels: Pixels | None = None

    @property
    def painted(self) -> bool:
        return self.pixels is not None

    def resize(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"surface must have a positive size, got {width}x{height}")
        # drawn content is dropped; the next render pass repaints
        self.width = width
        self.height = height
        self.pixels = None
        logger.debug(f"surface resized to {width}x{height}")

    def paint(self, pixels: Pixels) -> None:
        if pixels.shape != (self.height, self.width, 3):
            raise ValueError(f"expected pixels of shape {(self.height, self.width, 3)}, got {pixels.shape}")
        self.pixels = pixels

    def fill(self, rgb: tuple[int, int, int] | list[int]) -> None:
        pixels = np.empty((self.height, self.width, 3), dtype=np.uint8)
        pixels[:, :] = [int(c) for c in rgb[:3]]
        self.pixels = pixels

    def load_image(self, path: str) -> None:
        with Image.open(path) as image:
            scaled = image.convert("RGB").resize((self.width, self.height))
        self.pixels = np.asarray(scaled, dtype=np.uint8).copy()
        logger.info(f"loaded playground image {path} at {self.width}x{self.height}")

    def get_pixel(self, x: float, y: float) -> tuple[int, int, int]:
        if self.pixels is None:
            raise RuntimeError("surface has not been painted yet")
        col, row = math.floor(x), math.floor(y)
        if not (0 <= col < self.width and 0 <= row < self.height):
            raise IndexError(f"({x}, {y}) is outside the {self.width}x{self.height} surface")
        r, g, b = self.pixels[row, col]
        return (int(r), int(g), int(b))
