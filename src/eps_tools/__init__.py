"""Encapsulated PostScript export for 2D vector drawing.

Drawing calls on an ``EpsGraphics`` context (paths, strokes, fills, clips,
text and raster images) are written as PostScript operators into a
single-page EPS document that follows the Document Structuring Conventions.
"""

from eps_tools.color import BLACK, WHITE, Color, ColorMode
from eps_tools.config import EpsConfig
from eps_tools.constants import __version__
from eps_tools.document import EpsDocument
from eps_tools.geometry import Affine, ArcType, Path
from eps_tools.graphics import DrawingSurface, EpsGraphics
from eps_tools.rendering.state import (
    BasicStroke,
    DrawMode,
    Font,
    LineCap,
    LineJoin,
    TextRenderingMode,
)

__all__: list[str] = [
    'Affine',
    'ArcType',
    'BLACK',
    'BasicStroke',
    'Color',
    'ColorMode',
    'DrawMode',
    'DrawingSurface',
    'EpsConfig',
    'EpsDocument',
    'EpsGraphics',
    'Font',
    'LineCap',
    'LineJoin',
    'Path',
    'TextRenderingMode',
    'WHITE',
    '__version__',
]
