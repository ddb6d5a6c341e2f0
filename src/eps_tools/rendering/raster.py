"""Raster image encoding: pixel extraction, image operator preamble, hex sample rows."""

from __future__ import annotations

import logging

import numpy as np
from PIL import Image

from eps_tools.color import ColorMode, convert_samples
from eps_tools.constants import BITS_PER_SAMPLE, HEX_LINE_WIDTH
from eps_tools.geometry import Affine
from eps_tools.rendering.operators import format_number
from eps_tools.rendering.writer import EpsWriter

logger = logging.getLogger(__name__)


def image_pixels(image: object) -> np.ndarray:
    """Return an ``(H, W, 3)`` uint8 RGB block from an array or a Pillow image.

    Accepts grayscale ``(H, W)``, RGB ``(H, W, 3)`` and RGBA ``(H, W, 4)``
    arrays; alpha is dropped. Pillow images are converted to RGB.

    Raises:
        TypeError: Unsupported source type.
        ValueError: Wrong shape or sample range.
    """
    if isinstance(image, Image.Image):
        return np.asarray(image.convert('RGB'), dtype=np.uint8)
    if not isinstance(image, np.ndarray):
        raise TypeError(f'Unsupported image source {type(image).__name__}')
    if image.dtype != np.uint8:
        if not np.issubdtype(image.dtype, np.integer):
            raise ValueError(f'Pixel samples must be integers, got dtype {image.dtype}')
        if image.size and (image.min() < 0 or image.max() > 255):
            raise ValueError('Pixel samples must be in 0-255')
        image = image.astype(np.uint8)
    if image.ndim == 2:
        return np.repeat(image[:, :, np.newaxis], 3, axis=2)
    if image.ndim == 3 and image.shape[2] in (3, 4):
        return np.ascontiguousarray(image[:, :, :3])
    raise ValueError(f'Expected (H, W), (H, W, 3) or (H, W, 4) pixels, got shape {image.shape}')


def hex_rows(samples: np.ndarray, mode: ColorMode) -> list[str]:
    """Hex text for converted samples, wrapped per the soft line limit.

    Pixels are appended whole; a line is flushed as soon as it grows past
    ``HEX_LINE_WIDTH`` characters, so every line holds the same pixel count
    (the last may be shorter). Lines run across image rows.
    """
    text = np.ascontiguousarray(samples, dtype=np.uint8).tobytes().hex().upper()
    pixel_chars = 2 * mode.channels
    line_chars = (HEX_LINE_WIDTH // pixel_chars + 1) * pixel_chars
    return [text[i : i + line_chars] for i in range(0, len(text), line_chars)]


def write_image_preamble(writer: EpsWriter, width: int, height: int, matrix: Affine) -> None:
    """Dimensions, bits per sample, then the user-to-image matrix."""
    writer.append(f'{width} {height} {BITS_PER_SAMPLE}')
    writer.append('[' + ' '.join(format_number(v) for v in matrix.as_list()) + ']')


def write_image_procedure(writer: EpsWriter, width: int, mode: ColorMode) -> None:
    """Data-reading procedure and the ``image`` or ``colorimage`` operator."""
    channels = mode.channels
    if channels == 1:
        writer.append(f'{{currentfile {width} string readhexstring pop}} bind')
        writer.append('image')
    else:
        writer.append(f'{{currentfile {channels * width} string readhexstring pop}} bind')
        writer.append(f'false {channels}')
        writer.append('colorimage')


def write_image_contents(writer: EpsWriter, pixels: np.ndarray, mode: ColorMode) -> None:
    for row in hex_rows(convert_samples(pixels, mode), mode):
        writer.append(row)


def write_image(
    writer: EpsWriter,
    pixels: np.ndarray,
    matrix: Affine,
    mode: ColorMode,
) -> None:
    """Preamble, procedure and samples for an ``(H, W, 3)`` RGB block."""
    height, width = pixels.shape[:2]
    write_image_preamble(writer, width, height, matrix)
    write_image_procedure(writer, width, mode)
    write_image_contents(writer, pixels, mode)
    logger.debug('Wrote %dx%d %s image', width, height, mode.value)
