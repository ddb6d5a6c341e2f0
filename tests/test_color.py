"""Tests for color values and color-space conversion."""

from __future__ import annotations

import numpy as np
import pytest

from eps_tools.color import (
    BLACK,
    WHITE,
    Color,
    ColorMode,
    color_floats,
    color_hex,
    convert_samples,
    rgb_to_bitmap,
    rgb_to_cmyk,
    rgb_to_gray,
    rgb_to_rgb,
)

_SAMPLE_COLORS = [
    BLACK,
    WHITE,
    Color(255, 0, 0),
    Color(0, 128, 255),
    Color(17, 200, 99),
    Color(127, 127, 127),
    Color(1, 2, 3),
]


def test_channel_counts() -> None:
    """Bitmap and grayscale use one channel, RGB three, CMYK four."""
    assert [m.channels for m in ColorMode] == [1, 1, 3, 4]


def test_parse_color_mode() -> None:
    """Mode names are case-insensitive; unknown names raise ValueError."""
    assert ColorMode.parse(' CMYK ') is ColorMode.CMYK
    with pytest.raises(ValueError, match='Unknown color mode'):
        ColorMode.parse('lab')


@pytest.mark.parametrize('mode', list(ColorMode))
@pytest.mark.parametrize('color', _SAMPLE_COLORS)
def test_floats_in_range_and_agree_with_hex(color: Color, mode: ColorMode) -> None:
    """Float operator arguments and hex samples come from the same rounding."""
    floats = color_floats(color, mode)
    hexes = color_hex(color, mode)
    assert len(floats) == len(hexes) == mode.channels
    for value, digits in zip(floats, hexes):
        assert 0.0 <= value <= 1.0
        assert len(digits) == 2
        assert int(digits, 16) / 255.0 == value


def test_bitmap_threshold_and_extremes() -> None:
    """Black and white are exact; other colors threshold on luminance."""
    assert rgb_to_bitmap(BLACK) == 0.0
    assert rgb_to_bitmap(WHITE) == 1.0
    assert rgb_to_bitmap(Color(200, 200, 200)) == 1.0
    assert rgb_to_bitmap(Color(50, 50, 50)) == 0.0
    assert rgb_to_bitmap(Color(0, 0, 255)) == 0.0


def test_grayscale_luminance() -> None:
    """Gray uses the 0.299/0.587/0.114 weights, rounded to 8 bits."""
    assert rgb_to_gray(Color(255, 0, 0)) == 76 / 255.0
    assert rgb_to_gray(Color(0, 255, 0)) == 150 / 255.0
    assert rgb_to_gray(WHITE) == 1.0


def test_rgb_passthrough() -> None:
    """RGB floats are the components divided by 255."""
    assert rgb_to_rgb(Color(255, 0, 51)) == (1.0, 0.0, 51 / 255.0)


def test_cmyk_conversion() -> None:
    """Subtractive conversion with exact black and white."""
    assert rgb_to_cmyk(Color(255, 0, 0)) == (0.0, 1.0, 1.0, 0.0)
    assert rgb_to_cmyk(BLACK) == (0.0, 0.0, 0.0, 1.0)
    assert rgb_to_cmyk(WHITE) == (0.0, 0.0, 0.0, 0.0)


def test_convert_samples_keeps_leading_shape() -> None:
    """Array conversion keeps image dimensions and sets the channel axis."""
    rgb = np.zeros((2, 5, 3), dtype=np.uint8)
    assert convert_samples(rgb, ColorMode.CMYK).shape == (2, 5, 4)
    assert convert_samples(rgb, ColorMode.GRAYSCALE).shape == (2, 5, 1)
    with pytest.raises(ValueError):
        convert_samples(np.zeros((2, 2), dtype=np.uint8), ColorMode.RGB)


def test_color_validation_and_constructors() -> None:
    """Components outside 0-255 are rejected; hex and float constructors round."""
    with pytest.raises(ValueError):
        Color(256, 0, 0)
    assert Color.from_hex('#FF8000') == Color(255, 128, 0)
    assert Color.from_floats(1.0, 0.5, 0.0) == Color(255, 128, 0)
    with pytest.raises(ValueError):
        Color.from_hex('12345')


def test_brighter_and_darker() -> None:
    """Shade steps scale by 0.7; pure black brightens to a dark gray."""
    assert Color(100, 100, 100).darker() == Color(70, 70, 70)
    assert Color(100, 0, 0).brighter() == Color(142, 0, 0)
    assert BLACK.brighter() == Color(3, 3, 3)
    assert WHITE.brighter() == WHITE
