"""DSC header and footer, page prolog and epilogue, and page-mapping arithmetic."""

from __future__ import annotations

import math
from datetime import date

from eps_tools.constants import EPS_IDENTIFICATION_COMMENT, LANGUAGE_LEVEL
from eps_tools.rendering.operators import format_number

BoundingBox = tuple[int, int, int, int]


def bounding_box(page_width: float, page_height: float) -> BoundingBox:
    """Integer page box ``(0, 0, ceil(width), ceil(height))``.

    Raises:
        ValueError: Width or height is not a positive finite number.
    """
    for name, value in (('page_width', page_width), ('page_height', page_height)):
        if not math.isfinite(value) or value <= 0.0:
            raise ValueError(f'{name} must be positive, got {value!r}')
    return (0, 0, math.ceil(page_width), math.ceil(page_height))


def scale_factor(
    source_width: float, source_height: float, page_width: float, page_height: float
) -> float:
    """Largest uniform scale that fits the source on the page without clipping either axis.

    A zero-extent axis does not constrain the scale; when both are zero the scale is 1.
    """
    factors = []
    if source_width > 0.0:
        factors.append(page_width / source_width)
    if source_height > 0.0:
        factors.append(page_height / source_height)
    return min(factors) if factors else 1.0


def page_mapping(
    page_width: float,
    page_height: float,
    bounds: tuple[float, float, float, float],
) -> tuple[float, float, float]:
    """Return ``(translate_x, translate_y, scale)`` mapping content bounds onto the page.

    Bounds are ``(min_x, min_y, max_x, max_y)`` in y-down source units. The y
    offset is added because the axis is flipped at emission.
    """
    min_x, min_y, max_x, max_y = bounds
    scale = scale_factor(abs(max_x - min_x), abs(max_y - min_y), page_width, page_height)
    return (-(min_x * scale), page_height + (min_y * scale), scale)


def header_lines(
    title: str,
    creator: str,
    bbox: BoundingBox,
    creation_date: date,
) -> list[str]:
    """DSC comment block, ending with ``%%EndComments`` and a blank line."""
    return [
        EPS_IDENTIFICATION_COMMENT,
        f'%%Title: {title}',
        f'%%Creator: {creator}',
        f'%%CreationDate: {creation_date.isoformat()}',
        '%%DocumentData: Clean8Bit',
        '%%DocumentProcessColors: Black',
        '%%ColorUsage: Color',
        f'%%LanguageLevel: {LANGUAGE_LEVEL}',
        '%%Origin: 0 0',
        '%%Pages: 1',
        '%%Page: 1 1',
        '%%BoundingBox: ' + ' '.join(str(v) for v in bbox),
        '%%EndComments',
        '',
    ]


def start_page_lines(translate_x: float, translate_y: float, scale: float) -> list[str]:
    """Open the page graphics state; translate must precede scale."""
    return [
        'gsave',
        f'{format_number(translate_x)} {format_number(translate_y)} translate',
        f'{format_number(scale)} {format_number(scale)} scale',
    ]


def end_page_lines() -> list[str]:
    return ['grestore', 'showpage']


def footer_text() -> str:
    """Blank line and ``%%EOF`` (no trailing newline)."""
    return '\n%%EOF'
