"""Color values and color-space conversion for vector operators and raster samples.

Every conversion first produces 8-bit samples; the floating-point operator
arguments are those samples divided by 255. Vector output and raster output
therefore share a single rounding rule and cannot drift apart for the same
input color.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from eps_tools.constants import (
    BITMAP_THRESHOLD,
    COLOR_SHADE_FACTOR,
    LUMA_BLUE,
    LUMA_GREEN,
    LUMA_RED,
)


class ColorMode(Enum):
    """Output color space; fixes operator family and channel count."""

    BITMAP = 'bitmap'
    GRAYSCALE = 'grayscale'
    RGB = 'rgb'
    CMYK = 'cmyk'

    @property
    def channels(self) -> int:
        """Samples per pixel (1, 1, 3, 4)."""
        return _CHANNELS[self]

    @classmethod
    def parse(cls, name: str) -> ColorMode:
        """Return the mode for a case-insensitive name such as ``'cmyk'``."""
        key = name.strip().lower()
        for mode in cls:
            if mode.value == key:
                return mode
        valid = ', '.join(m.value for m in cls)
        raise ValueError(f'Unknown color mode {name!r}; expected one of {valid}')


_CHANNELS: dict[ColorMode, int] = {
    ColorMode.BITMAP: 1,
    ColorMode.GRAYSCALE: 1,
    ColorMode.RGB: 3,
    ColorMode.CMYK: 4,
}


@dataclass(frozen=True)
class Color:
    """sRGB color with 0-255 integer components. Alpha is carried but never written."""

    red: int
    green: int
    blue: int
    alpha: int = 255

    def __post_init__(self) -> None:
        for name in ('red', 'green', 'blue', 'alpha'):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError(f'{name} must be in 0-255, got {value!r}')

    @classmethod
    def from_floats(cls, red: float, green: float, blue: float, alpha: float = 1.0) -> Color:
        """Build a color from 0.0-1.0 components (rounded half up)."""
        return cls(*(int(min(max(v, 0.0), 1.0) * 255.0 + 0.5) for v in (red, green, blue, alpha)))

    @classmethod
    def from_hex(cls, text: str) -> Color:
        """Parse ``#RRGGBB`` or ``RRGGBB``."""
        digits = text.strip().lstrip('#')
        if len(digits) != 6:
            raise ValueError(f'Expected 6 hex digits, got {text!r}')
        try:
            value = int(digits, 16)
        except ValueError as e:
            raise ValueError(f'Invalid hex color {text!r}') from e
        return cls((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)

    @property
    def rgb(self) -> tuple[int, int, int]:
        return (self.red, self.green, self.blue)

    def brighter(self) -> Color:
        """Scale components up by 1/0.7; pure black becomes a dark gray."""
        floor = int(1.0 / (1.0 - COLOR_SHADE_FACTOR))
        if self.rgb == (0, 0, 0):
            return Color(floor, floor, floor, self.alpha)
        parts = []
        for v in self.rgb:
            if 0 < v < floor:
                v = floor
            parts.append(min(int(v / COLOR_SHADE_FACTOR), 255))
        return Color(parts[0], parts[1], parts[2], self.alpha)

    def darker(self) -> Color:
        """Scale components down by 0.7."""
        r, g, b = (max(int(v * COLOR_SHADE_FACTOR), 0) for v in self.rgb)
        return Color(r, g, b, self.alpha)


BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)


def _round_samples(values: np.ndarray) -> np.ndarray:
    """0.0-1.0 (or 0-255 luminance) floats to uint8, half up."""
    return np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)


def _gray_samples(rgb: np.ndarray) -> np.ndarray:
    rgbf = rgb.astype(np.float64)
    luminance = LUMA_RED * rgbf[..., 0] + LUMA_GREEN * rgbf[..., 1] + LUMA_BLUE * rgbf[..., 2]
    return _round_samples(luminance)


def _bitmap_samples(rgb: np.ndarray) -> np.ndarray:
    gray = _gray_samples(rgb)
    out = np.where(gray >= BITMAP_THRESHOLD, 255, 0).astype(np.uint8)
    # Absolute black and white never go through the luminance threshold.
    out[np.all(rgb == 0, axis=-1)] = 0
    out[np.all(rgb == 255, axis=-1)] = 255
    return out


def _cmyk_samples(rgb: np.ndarray) -> np.ndarray:
    rgbf = rgb.astype(np.float64) / 255.0
    black = 1.0 - rgbf.max(axis=-1)
    ink = (1.0 - black)[..., np.newaxis]
    with np.errstate(divide='ignore', invalid='ignore'):
        cmy = np.where(ink > 0.0, (1.0 - rgbf - black[..., np.newaxis]) / ink, 0.0)
    out = _round_samples(np.concatenate([cmy, black[..., np.newaxis]], axis=-1) * 255.0)
    out[np.all(rgb == 0, axis=-1)] = (0, 0, 0, 255)
    out[np.all(rgb == 255, axis=-1)] = (0, 0, 0, 0)
    return out


def convert_samples(rgb: np.ndarray, mode: ColorMode) -> np.ndarray:
    """Convert an ``(..., 3)`` uint8 RGB array to ``(..., channels)`` uint8 samples.

    Args:
        rgb: Red, green, blue samples in the last axis.
        mode: Target color space.

    Returns:
        Array with ``mode.channels`` samples in the last axis.
    """
    rgb = np.asarray(rgb, dtype=np.uint8)
    if rgb.shape[-1:] != (3,):
        raise ValueError(f'Expected RGB samples in the last axis, got shape {rgb.shape}')
    if mode is ColorMode.BITMAP:
        return _bitmap_samples(rgb)[..., np.newaxis]
    if mode is ColorMode.GRAYSCALE:
        return _gray_samples(rgb)[..., np.newaxis]
    if mode is ColorMode.RGB:
        return rgb.copy()
    return _cmyk_samples(rgb)


def color_samples(color: Color, mode: ColorMode) -> tuple[int, ...]:
    """8-bit samples for one color in the given mode."""
    samples = convert_samples(np.array(color.rgb, dtype=np.uint8), mode)
    return tuple(int(v) for v in samples)


def color_floats(color: Color, mode: ColorMode) -> tuple[float, ...]:
    """0.0-1.0 operator arguments for one color, derived from its samples."""
    return tuple(v / 255.0 for v in color_samples(color, mode))


def color_hex(color: Color, mode: ColorMode) -> tuple[str, ...]:
    """Two-digit upper-case hex per channel."""
    return tuple(f'{v:02X}' for v in color_samples(color, mode))


def rgb_to_bitmap(color: Color) -> float:
    return color_floats(color, ColorMode.BITMAP)[0]


def rgb_to_gray(color: Color) -> float:
    return color_floats(color, ColorMode.GRAYSCALE)[0]


def rgb_to_rgb(color: Color) -> tuple[float, float, float]:
    r, g, b = color_floats(color, ColorMode.RGB)
    return (r, g, b)


def rgb_to_cmyk(color: Color) -> tuple[float, float, float, float]:
    c, m, y, k = color_floats(color, ColorMode.CMYK)
    return (c, m, y, k)
