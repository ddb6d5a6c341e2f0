"""Tests for raster image encoding."""

from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from eps_tools.color import ColorMode, convert_samples
from eps_tools.constants import MAX_LINE_LENGTH
from eps_tools.geometry import Affine
from eps_tools.rendering import raster
from eps_tools.rendering.writer import EpsWriter


def test_red_blue_pair_encodes_as_one_row() -> None:
    """A 2x1 red/blue RGB image is the hex row FF0000 0000FF."""
    pixels = np.array([[[255, 0, 0], [0, 0, 255]]], dtype=np.uint8)
    assert raster.hex_rows(pixels, ColorMode.RGB) == ['FF00000000FF']


@pytest.mark.parametrize(
    ('mode', 'pixels_per_line'),
    [(ColorMode.GRAYSCALE, 33), (ColorMode.BITMAP, 33), (ColorMode.RGB, 11), (ColorMode.CMYK, 9)],
)
def test_soft_wrap_flushes_past_64_characters(mode: ColorMode, pixels_per_line: int) -> None:
    """A line is flushed once it grows past 64 characters; rows run together."""
    rgb = np.full((3, 25, 3), 200, dtype=np.uint8)
    rows = raster.hex_rows(convert_samples(rgb, mode), mode)
    line_chars = pixels_per_line * 2 * mode.channels
    assert all(len(row) == line_chars for row in rows[:-1])
    assert 0 < len(rows[-1]) <= line_chars
    assert len(rows[-2]) > 64
    assert max(len(row) for row in rows) <= MAX_LINE_LENGTH
    assert sum(len(row) for row in rows) == 75 * 2 * mode.channels


@pytest.mark.parametrize('mode', list(ColorMode))
def test_hex_rows_decode_to_converted_samples(mode: ColorMode) -> None:
    """Decoding the hex stream gives back every converted sample byte."""
    rng = np.random.default_rng(7)
    rgb = rng.integers(0, 256, size=(9, 13, 3), dtype=np.uint8)
    samples = convert_samples(rgb, mode)
    decoded = bytes.fromhex(''.join(raster.hex_rows(samples, mode)))
    assert decoded == samples.tobytes()
    assert len(decoded) == 9 * 13 * mode.channels


def test_image_procedure_single_channel() -> None:
    """One-channel modes read width bytes and use image."""
    writer = EpsWriter()
    raster.write_image_procedure(writer, 7, ColorMode.GRAYSCALE)
    assert writer.getvalue().splitlines() == [
        '{currentfile 7 string readhexstring pop} bind',
        'image',
    ]


def test_image_procedure_multi_channel() -> None:
    """Multi-channel modes read channels*width bytes and use colorimage."""
    writer = EpsWriter()
    raster.write_image_procedure(writer, 7, ColorMode.CMYK)
    assert writer.getvalue().splitlines() == [
        '{currentfile 28 string readhexstring pop} bind',
        'false 4',
        'colorimage',
    ]


def test_write_image_sequence() -> None:
    """Preamble, matrix, procedure, then samples."""
    writer = EpsWriter()
    pixels = np.array([[[255, 0, 0], [0, 0, 255]]], dtype=np.uint8)
    raster.write_image(writer, pixels, Affine.scaling(1.0, -1.0), ColorMode.RGB)
    assert writer.getvalue().splitlines() == [
        '2 1 8',
        '[1.0 0.0 0.0 -1.0 0.0 0.0]',
        '{currentfile 6 string readhexstring pop} bind',
        'false 3',
        'colorimage',
        'FF00000000FF',
    ]


def test_image_pixels_accepts_arrays_and_pillow() -> None:
    """Gray, RGB, RGBA arrays and Pillow images all become (H, W, 3) uint8."""
    gray = np.array([[0, 128]], dtype=np.uint8)
    assert raster.image_pixels(gray).tolist() == [[[0, 0, 0], [128, 128, 128]]]
    rgba = np.zeros((2, 2, 4), dtype=np.uint8)
    assert raster.image_pixels(rgba).shape == (2, 2, 3)
    wide = np.array([[[10, 20, 30]]], dtype=np.int64)
    assert raster.image_pixels(wide).dtype == np.uint8
    image = Image.new('RGB', (2, 1), (255, 0, 0))
    assert raster.image_pixels(image).tolist() == [[[255, 0, 0], [255, 0, 0]]]


def test_image_pixels_rejects_bad_input() -> None:
    """Unsupported types raise TypeError; bad shapes and ranges raise ValueError."""
    with pytest.raises(TypeError):
        raster.image_pixels([[0, 1]])
    with pytest.raises(ValueError):
        raster.image_pixels(np.zeros((2, 2), dtype=np.float32))
    with pytest.raises(ValueError):
        raster.image_pixels(np.full((1, 1), 300, dtype=np.int32))
    with pytest.raises(ValueError):
        raster.image_pixels(np.zeros((2, 2, 2), dtype=np.uint8))
