"""Tests for operator emitters and the path renderer."""

from __future__ import annotations

import numpy as np
import pytest

from eps_tools.color import BLACK, WHITE, Color, ColorMode
from eps_tools.geometry import Affine, Close, CubicTo, LineTo, MoveTo, QuadTo
from eps_tools.rendering import operators
from eps_tools.rendering.state import BasicStroke, DrawMode, Font, LineCap, LineJoin
from eps_tools.rendering.writer import EpsWriter


def _lines(writer: EpsWriter) -> list[str]:
    return writer.getvalue().splitlines()


@pytest.mark.parametrize(
    ('value', 'text'),
    [(1.5, '1.5'), (100, '100.0'), (-0.0, '0.0'), (0.1, '0.1'), (-2.25, '-2.25'), (1e7, '10000000.0')],
)
def test_format_number(value: float, text: str) -> None:
    """Shortest positional decimal, never exponent form."""
    assert operators.format_number(value) == text


def test_set_stroke_order_and_clamp() -> None:
    """Width, miter limit (at least 1), join, cap, then dash."""
    writer = EpsWriter()
    stroke = BasicStroke(
        width=2.0, cap=LineCap.ROUND, join=LineJoin.BEVEL, miter_limit=0.5, dash=(3.0, 1.0)
    )
    operators.set_stroke(writer, stroke)
    assert _lines(writer) == [
        '2.0 setlinewidth',
        '1.0 setmiterlimit',
        '2 setlinejoin',
        '1 setlinecap',
        '[ 3.0 1.0 ] 0 setdash',
    ]


def test_solid_dash() -> None:
    """No dash array writes an empty array."""
    writer = EpsWriter()
    operators.setdash(writer, None)
    assert _lines(writer) == ['[ ] 0 setdash']


@pytest.mark.parametrize(
    ('color', 'mode', 'line'),
    [
        (Color(255, 0, 0), ColorMode.RGB, '1.0 0.0 0.0 setrgbcolor'),
        (WHITE, ColorMode.GRAYSCALE, '1.0 setgray'),
        (BLACK, ColorMode.BITMAP, '0.0 setgray'),
        (BLACK, ColorMode.CMYK, '0.0 0.0 0.0 1.0 setcmykcolor'),
    ],
)
def test_set_color_operator_family(color: Color, mode: ColorMode, line: str) -> None:
    """The color mode selects the operator."""
    writer = EpsWriter()
    operators.set_color(writer, color, mode)
    assert _lines(writer) == [line]


def test_setfont() -> None:
    """Font names are joined with their style."""
    writer = EpsWriter()
    operators.setfont(writer, Font('Times', 10.0, 'Bold'))
    assert _lines(writer) == ['/Times-Bold findfont 10.0 scalefont setfont']


def test_draw_path_flips_y_and_terminates() -> None:
    """Segments are emitted with negated y and end in the draw mode."""
    writer = EpsWriter()
    segments = [MoveTo(5, 5), LineTo(15, 5), CubicTo(1, 2, 3, 4, 5, 6), Close()]
    operators.draw_path(writer, segments, Affine.identity(), DrawMode.STROKE)
    assert _lines(writer) == [
        'newpath',
        '5.0 -5.0 moveto',
        '15.0 -5.0 lineto',
        '1.0 -2.0 3.0 -4.0 5.0 -6.0 curveto',
        'closepath',
        'stroke',
    ]


def test_draw_path_applies_transform_before_flip() -> None:
    """The transform maps source space first; the flip comes last."""
    writer = EpsWriter()
    operators.draw_path(writer, [MoveTo(0, 0)], Affine.translation(10, 20), DrawMode.FILL)
    assert _lines(writer) == ['newpath', '10.0 -20.0 moveto', 'fill']


def test_draw_path_elevates_quadratics() -> None:
    """A quadratic is written as the equivalent cubic."""
    writer = EpsWriter()
    operators.draw_path(writer, [MoveTo(0, 0), QuadTo(3, 3, 6, 0)], None, DrawMode.STROKE)
    assert _lines(writer)[2] == '2.0 -2.0 4.0 -2.0 6.0 0.0 curveto'


def test_quadratic_after_close_starts_at_subpath_start() -> None:
    """closepath returns the current point to the last moveto."""
    writer = EpsWriter()
    segments = [MoveTo(0, 0), LineTo(9, 0), Close(), QuadTo(0, 3, 0, 6)]
    operators.draw_path(writer, segments, None, DrawMode.STROKE)
    assert _lines(writer)[4] == '0.0 -2.0 0.0 -4.0 0.0 -6.0 curveto'


def test_draw_shape_none_is_noop() -> None:
    """A missing shape writes nothing."""
    writer = EpsWriter()
    operators.draw_shape(writer, None, None, DrawMode.CLIP)
    assert writer.getvalue() == ''


def test_draw_points_vectorised() -> None:
    """Point arrays become one moveto and n-1 linetos."""
    writer = EpsWriter()
    xs = np.arange(1000, dtype=np.float64)
    operators.draw_points(writer, xs, np.zeros(1000), Affine.scaling(2, 1), DrawMode.STROKE)
    lines = _lines(writer)
    assert lines[1] == '0.0 0.0 moveto'
    assert lines[-2] == '1998.0 0.0 lineto'
    assert sum(line.endswith('lineto') for line in lines) == 999
    assert lines[-1] == 'stroke'


def test_draw_points_closed_and_mismatch() -> None:
    """Closed polygons end with closepath; unequal arrays raise ValueError."""
    writer = EpsWriter()
    operators.draw_points(writer, [0, 1, 2], [0, 1, 0], None, DrawMode.FILL, closed=True)
    assert _lines(writer)[-2:] == ['closepath', 'fill']
    with pytest.raises(ValueError, match='differ in length'):
        operators.draw_points(writer, [0, 1], [0], None, DrawMode.FILL)


def test_draw_text_escapes() -> None:
    """Backslashes and parentheses are escaped inside the string literal."""
    writer = EpsWriter()
    operators.draw_text(writer, 'a(b)\\c', 1, -2)
    assert _lines(writer) == ['newpath', '1.0 -2.0 moveto', '(a\\(b\\)\\\\c) show']
