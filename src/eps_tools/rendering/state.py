"""Graphics-state value types: strokes, fonts, draw modes, clip marker."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, IntEnum

from shapely.geometry.base import BaseGeometry

from eps_tools.constants import (
    DEFAULT_FONT_NAME,
    DEFAULT_FONT_SIZE,
    DEFAULT_LINE_WIDTH,
    DEFAULT_MITER_LIMIT,
)
from eps_tools.geometry import Affine


class LineCap(IntEnum):
    """``setlinecap`` operand."""

    BUTT = 0
    ROUND = 1
    SQUARE = 2


class LineJoin(IntEnum):
    """``setlinejoin`` operand."""

    MITER = 0
    ROUND = 1
    BEVEL = 2


@dataclass(frozen=True)
class BasicStroke:
    """Stroke attributes PostScript can express directly.

    Parameters:
        width: Line width in user-space units.
        cap: End cap style.
        join: Join style.
        miter_limit: Miter limit; values below 1.0 are clamped on output.
        dash: Alternating on/off lengths, or None for a solid line.
        dash_phase: Kept for callers; PostScript output always uses phase 0.
    """

    width: float = DEFAULT_LINE_WIDTH
    cap: LineCap = LineCap.SQUARE
    join: LineJoin = LineJoin.MITER
    miter_limit: float = DEFAULT_MITER_LIMIT
    dash: tuple[float, ...] | None = None
    dash_phase: float = 0.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.width) or self.width < 0.0:
            raise ValueError(f'Stroke width must be finite and non-negative, got {self.width!r}')
        if self.dash is not None:
            dash = tuple(float(v) for v in self.dash)
            if any(v < 0.0 for v in dash) or (dash and all(v == 0.0 for v in dash)):
                raise ValueError(f'Invalid dash array {self.dash!r}')
            object.__setattr__(self, 'dash', dash)
        object.__setattr__(self, 'cap', LineCap(self.cap))
        object.__setattr__(self, 'join', LineJoin(self.join))


@dataclass(frozen=True)
class Font:
    """Font reference for literal text mode; metrics live with the caller."""

    name: str = DEFAULT_FONT_NAME
    size: float = DEFAULT_FONT_SIZE
    style: str = ''

    @property
    def ps_name(self) -> str:
        """PostScript font name, e.g. ``Helvetica-Bold``."""
        base = self.name.replace(' ', '')
        return f'{base}-{self.style}' if self.style else base


class DrawMode(Enum):
    """Terminal operator for a rendered path."""

    STROKE = 'stroke'
    FILL = 'fill'
    CLIP = 'clip'


class TextRenderingMode(Enum):
    """VECTOR fills glyph outlines; TEXT writes ``show`` with a named font."""

    VECTOR = 'vector'
    TEXT = 'text'

    @classmethod
    def parse(cls, name: str) -> TextRenderingMode:
        key = name.strip().lower()
        for mode in cls:
            if mode.value == key:
                return mode
        raise ValueError(f'Unknown text rendering mode {name!r}; expected vector or text')


def resolve_draw_mode(candidate: DrawMode, stroke: object) -> DrawMode:
    """Stroke requests fall back to fill when the stroke is not a BasicStroke."""
    if candidate is DrawMode.STROKE and not isinstance(stroke, BasicStroke):
        return DrawMode.FILL
    return candidate


@dataclass
class ClipState:
    """Clip marker: whether a ``gsave`` is open for a clip, and the logical clip area.

    ``area`` is held in device space (after the transform active at clip time).
    """

    active: bool = False
    transform: Affine = field(default_factory=Affine.identity)
    area: BaseGeometry | None = None
