"""PostScript graphics operators and path rendering.

All coordinates reach this module in y-down source space. The path renderer
applies the current transform, negates y, and writes the operator; no other
code path flips coordinates.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np

from eps_tools.color import Color, ColorMode, color_floats
from eps_tools.constants import MIN_MITER_LIMIT
from eps_tools.geometry import (
    Affine,
    Close,
    CubicTo,
    LineTo,
    MoveTo,
    PathSegment,
    QuadTo,
    elevate_quadratic,
)
from eps_tools.rendering.state import BasicStroke, DrawMode, Font
from eps_tools.rendering.writer import EpsWriter


def format_number(value: float) -> str:
    """Shortest positional decimal of the 32-bit float value: ``1.5``, ``100.0``, ``-0.25``."""
    # Adding 0.0 turns -0.0 into 0.0.
    return np.format_float_positional(np.float32(value + 0.0), unique=True, trim='0')


def _numbers(*values: float) -> str:
    return ' '.join(format_number(v) for v in values)


def gsave(writer: EpsWriter) -> None:
    writer.append('gsave')


def grestore(writer: EpsWriter) -> None:
    writer.append('grestore')


def newpath(writer: EpsWriter) -> None:
    writer.append('newpath')


def closepath(writer: EpsWriter) -> None:
    writer.append('closepath')


def moveto(writer: EpsWriter, x: float, y: float) -> None:
    writer.append(f'{_numbers(x, y)} moveto')


def lineto(writer: EpsWriter, x: float, y: float) -> None:
    writer.append(f'{_numbers(x, y)} lineto')


def curveto(
    writer: EpsWriter, x1: float, y1: float, x2: float, y2: float, x3: float, y3: float
) -> None:
    writer.append(f'{_numbers(x1, y1, x2, y2, x3, y3)} curveto')


def setgray(writer: EpsWriter, gray: float) -> None:
    writer.append(f'{format_number(gray)} setgray')


def setrgbcolor(writer: EpsWriter, red: float, green: float, blue: float) -> None:
    writer.append(f'{_numbers(red, green, blue)} setrgbcolor')


def sethsbcolor(writer: EpsWriter, hue: float, saturation: float, brightness: float) -> None:
    writer.append(f'{_numbers(hue, saturation, brightness)} sethsbcolor')


def setcmykcolor(
    writer: EpsWriter, cyan: float, magenta: float, yellow: float, black: float
) -> None:
    writer.append(f'{_numbers(cyan, magenta, yellow, black)} setcmykcolor')


def setdash(writer: EpsWriter, dash: Iterable[float] | None) -> None:
    """Dash array with phase 0; an empty array means a solid line."""
    values = ''.join(f'{format_number(v)} ' for v in dash or ())
    writer.append(f'[ {values}] 0 setdash')


def setfont(writer: EpsWriter, font: Font) -> None:
    writer.append(f'/{font.ps_name} findfont {format_number(font.size)} scalefont setfont')


def set_color(writer: EpsWriter, color: Color, mode: ColorMode) -> None:
    """Write the operator for ``color`` in the family ``mode`` selects."""
    values = color_floats(color, mode)
    if mode in (ColorMode.BITMAP, ColorMode.GRAYSCALE):
        setgray(writer, values[0])
    elif mode is ColorMode.RGB:
        setrgbcolor(writer, *values)
    else:
        setcmykcolor(writer, *values)


def set_stroke(writer: EpsWriter, stroke: BasicStroke) -> None:
    """Line width, miter limit, join, cap, then dash pattern."""
    writer.append(f'{format_number(stroke.width)} setlinewidth')
    writer.append(f'{format_number(max(MIN_MITER_LIMIT, stroke.miter_limit))} setmiterlimit')
    writer.append(f'{int(stroke.join)} setlinejoin')
    writer.append(f'{int(stroke.cap)} setlinecap')
    setdash(writer, stroke.dash)


def draw_path(
    writer: EpsWriter,
    segments: Iterable[PathSegment],
    transform: Affine | None,
    mode: DrawMode,
) -> None:
    """Render segments as ``newpath ... <mode>``.

    Quadratic segments are degree-elevated to exact cubics; PostScript has
    no quadratic curve operator.
    """
    tp = None if transform is None or transform.is_identity else transform.transform_point

    def flip(x: float, y: float) -> tuple[float, float]:
        if tp is not None:
            x, y = tp(x, y)
        return (x, -y)

    newpath(writer)
    current = (0.0, 0.0)
    start = (0.0, 0.0)
    for seg in segments:
        if isinstance(seg, MoveTo):
            current = start = flip(seg.x, seg.y)
            moveto(writer, *current)
        elif isinstance(seg, LineTo):
            current = flip(seg.x, seg.y)
            lineto(writer, *current)
        elif isinstance(seg, CubicTo):
            c1 = flip(seg.c1x, seg.c1y)
            c2 = flip(seg.c2x, seg.c2y)
            current = flip(seg.x, seg.y)
            curveto(writer, *c1, *c2, *current)
        elif isinstance(seg, QuadTo):
            end = flip(seg.x, seg.y)
            c1, c2 = elevate_quadratic(current, flip(seg.cx, seg.cy), end)
            curveto(writer, *c1, *c2, *end)
            current = end
        elif isinstance(seg, Close):
            closepath(writer)
            current = start
    writer.append(mode.value)


def draw_shape(
    writer: EpsWriter,
    shape: Iterable[PathSegment] | None,
    transform: Affine | None,
    mode: DrawMode,
) -> None:
    """Like ``draw_path`` but a None shape writes nothing."""
    if shape is None:
        return
    draw_path(writer, shape, transform, mode)


def draw_points(
    writer: EpsWriter,
    xs: np.ndarray,
    ys: np.ndarray,
    transform: Affine | None,
    mode: DrawMode,
    closed: bool = False,
) -> None:
    """Polyline through point arrays, transformed in one vectorised step."""
    xs = np.asarray(xs, dtype=np.float64).ravel()
    ys = np.asarray(ys, dtype=np.float64).ravel()
    if xs.shape != ys.shape:
        raise ValueError(f'x and y arrays differ in length: {xs.size} != {ys.size}')
    if xs.size == 0:
        return
    if transform is not None and not transform.is_identity:
        xs, ys = transform.transform_points(xs, ys)
    ys = -ys
    newpath(writer)
    moveto(writer, xs[0], ys[0])
    for x, y in zip(xs[1:].tolist(), ys[1:].tolist()):
        lineto(writer, x, y)
    if closed:
        closepath(writer)
    writer.append(mode.value)


def escape_text(text: str) -> str:
    """Escape backslashes and parentheses for a PostScript string literal."""
    return text.replace('\\', '\\\\').replace('(', '\\(').replace(')', '\\)')


def draw_text(writer: EpsWriter, text: str, x: float, y: float) -> None:
    """Literal text at an already-flipped page position."""
    newpath(writer)
    moveto(writer, x, y)
    writer.append(f'({escape_text(text)}) show')
