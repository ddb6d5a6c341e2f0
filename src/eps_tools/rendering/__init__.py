"""EPS output layer: operator writers, path renderer, raster encoder, DSC framing.

Everything here writes to an ``EpsWriter`` line buffer. Coordinates arrive
in y-down source space and are flipped exactly once, in
``operators.draw_path`` / ``operators.draw_points``.
"""

from eps_tools.rendering.state import (
    BasicStroke,
    ClipState,
    DrawMode,
    Font,
    LineCap,
    LineJoin,
    TextRenderingMode,
    resolve_draw_mode,
)
from eps_tools.rendering.writer import EpsWriter

__all__: list[str] = [
    'BasicStroke',
    'ClipState',
    'DrawMode',
    'EpsWriter',
    'Font',
    'LineCap',
    'LineJoin',
    'TextRenderingMode',
    'resolve_draw_mode',
]
