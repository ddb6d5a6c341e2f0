"""Graphics state machine: current color, stroke, font, transform and clip.

Every state change writes its operators to the document's writer right
away. Drawing calls resolve the draw mode against the current stroke and
hand the shape to the path renderer. Only one clip ``gsave`` is ever open
in the operator stream; the logical clip area still accumulates by
intersection so bounds and hit-testing queries stay correct.
"""

from __future__ import annotations

import copy
import logging
import math
from typing import Iterable, Protocol, Sequence

import numpy as np
from shapely.geometry import LineString, MultiLineString, box
from shapely.geometry.base import BaseGeometry

from eps_tools import geometry
from eps_tools.color import Color, ColorMode
from eps_tools.config import EpsConfig
from eps_tools.geometry import Affine, Path, PathSegment
from eps_tools.rendering import operators, raster
from eps_tools.rendering.state import (
    BasicStroke,
    ClipState,
    DrawMode,
    Font,
    TextRenderingMode,
    resolve_draw_mode,
)
from eps_tools.rendering.writer import EpsWriter

logger = logging.getLogger(__name__)

Shape = Iterable[PathSegment]


class DrawingSurface(Protocol):
    """Primitive calls a host drawing-API adapter forwards to."""

    def set_color(self, color: Color | None) -> None:
        ...

    def set_stroke(self, stroke: object) -> None:
        ...

    def set_transform(self, transform: Affine | None) -> None:
        ...

    def set_clip(self, shape: Shape | None) -> None:
        ...

    def draw_path(self, shape: Shape | None, mode: DrawMode) -> None:
        ...

    def draw_image(self, image: object, x: float = 0.0, y: float = 0.0) -> bool:
        ...


class EpsGraphics:
    """Drawing context bound to one document's writer.

    Construction writes the initial color, font and stroke so the operator
    stream starts from a known state.
    """

    def __init__(self, writer: EpsWriter, config: EpsConfig | None = None) -> None:
        self._writer = writer
        self.config = config if config is not None else EpsConfig()
        self._color_mode = self.config.color_mode
        self._text_mode = self.config.text_rendering_mode
        self._background = self.config.background
        self._foreground = self.config.foreground
        self._paint: object = self._foreground
        self._stroke: object = BasicStroke()
        self._font = Font()
        self._transform = Affine.identity()
        self._clip = ClipState()
        self._warned_no_outliner = False
        # Every context sharing this writer, in creation order.
        self._contexts: list[EpsGraphics] = [self]
        self._emit_state()

    def _emit_state(self) -> None:
        """Write the cached color, font and stroke; a clip grestore discards them."""
        operators.set_color(self._writer, self._foreground, self._color_mode)
        if self._text_mode is TextRenderingMode.TEXT:
            operators.setfont(self._writer, self._font)
        if isinstance(self._stroke, BasicStroke):
            operators.set_stroke(self._writer, self._stroke)

    def create(self) -> EpsGraphics:
        """Child context on the same writer with a copy of this state.

        The child owns its clip encapsulation: when this context is clipped,
        the child opens its own ``gsave`` with the same clip area.
        """
        child = copy.copy(self)
        child._clip = ClipState()
        self._contexts.append(child)
        if self._clip.area is not None:
            child._set_clip(geometry.from_geometry(self._clip.area), Affine.identity())
            child._clip.transform = self._clip.transform
        child._emit_state()
        return child

    def close_clips(self) -> None:
        """Clear the clip of every context on this writer, newest first."""
        for context in reversed(self._contexts):
            context.set_clip(None)

    # ------------------------------------------------------------------
    # Color
    # ------------------------------------------------------------------

    @property
    def color_mode(self) -> ColorMode:
        return self._color_mode

    @color_mode.setter
    def color_mode(self, mode: ColorMode) -> None:
        self._color_mode = mode

    @property
    def color(self) -> Color:
        return self._foreground

    @property
    def paint(self) -> object:
        return self._paint

    @property
    def background(self) -> Color:
        return self._background

    def set_background(self, color: Color) -> None:
        self._background = color

    def set_color(self, color: Color | None) -> None:
        """Set the foreground color. Always writes the operator, even if unchanged."""
        if color is None:
            return
        self._foreground = color
        self._paint = color
        operators.set_color(self._writer, color, self._color_mode)

    def set_paint(self, paint: object) -> None:
        """Colors are applied; gradients and other paints are ignored."""
        if paint is None:
            return
        if isinstance(paint, Color):
            self.set_color(paint)
            return
        self._paint = paint
        logger.warning('Unsupported paint %s ignored; EPS output supports solid colors only',
                       type(paint).__name__)

    def set_hsb_color(self, hue: float, saturation: float, brightness: float) -> None:
        """Write ``sethsbcolor`` directly (components 0.0-1.0)."""
        for name, value in (('hue', hue), ('saturation', saturation), ('brightness', brightness)):
            if not 0.0 <= value <= 1.0:
                raise ValueError(f'{name} must be in 0.0-1.0, got {value!r}')
        operators.sethsbcolor(self._writer, hue, saturation, brightness)

    # ------------------------------------------------------------------
    # Stroke and font
    # ------------------------------------------------------------------

    @property
    def stroke(self) -> object:
        return self._stroke

    def set_stroke(self, stroke: object) -> None:
        """Cache the stroke; write its operators only when it is a BasicStroke.

        Any other stroke object makes later stroke draws render as fills.

        Raises:
            ValueError: stroke is None.
        """
        if stroke is None:
            raise ValueError('Null stroke argument')
        self._stroke = stroke
        if isinstance(stroke, BasicStroke):
            operators.set_stroke(self._writer, stroke)

    @property
    def font(self) -> Font:
        return self._font

    @property
    def text_rendering_mode(self) -> TextRenderingMode:
        return self._text_mode

    @text_rendering_mode.setter
    def text_rendering_mode(self, mode: TextRenderingMode) -> None:
        self._text_mode = mode

    def set_font(self, font: Font | None) -> None:
        """Cache the font; ``setfont`` is written only in literal text mode."""
        self._font = font if font is not None else Font()
        if self._text_mode is TextRenderingMode.TEXT:
            operators.setfont(self._writer, self._font)

    # ------------------------------------------------------------------
    # Transform
    # ------------------------------------------------------------------

    def get_transform(self) -> Affine:
        return self._transform

    def set_transform(self, transform: Affine | None) -> None:
        self._transform = transform if transform is not None else Affine.identity()

    def transform(self, transform: Affine) -> None:
        """Concatenate: ``transform`` applies to coordinates before the current one."""
        self._transform = self._transform.concatenate(transform)

    def translate(self, tx: float, ty: float) -> None:
        self.transform(Affine.translation(tx, ty))

    def rotate(self, theta: float, x: float = 0.0, y: float = 0.0) -> None:
        self.transform(Affine.rotation(theta, x, y))

    def scale(self, sx: float, sy: float) -> None:
        self.transform(Affine.scaling(sx, sy))

    def shear(self, shx: float, shy: float) -> None:
        self.transform(Affine.shearing(shx, shy))

    # ------------------------------------------------------------------
    # Clip
    # ------------------------------------------------------------------

    @property
    def clip_active(self) -> bool:
        return self._clip.active

    @property
    def clip_transform(self) -> Affine:
        return self._clip.transform

    @property
    def clip_area(self) -> BaseGeometry | None:
        """Logical clip area in device space, or None when unclipped."""
        return self._clip.area

    def set_clip(self, shape: Shape | None) -> None:
        """Replace the clip encapsulation with ``shape``; None removes it.

        Any open clip ``gsave`` is closed first, whatever the new shape is.
        """
        self._set_clip(shape, self._transform)

    def _set_clip(self, shape: Shape | None, transform: Affine) -> None:
        if self._clip.active:
            operators.grestore(self._writer)
            self._emit_state()
        if shape is None:
            self._clip.active = False
            self._clip.area = None
            logger.debug('Clip cleared')
            return
        segments = list(shape)
        area = geometry.to_geometry(segments, transform)
        if self._clip.area is not None:
            area = area.intersection(self._clip.area)
        self._clip.active = True
        self._clip.area = area
        self._clip.transform = self._transform
        operators.gsave(self._writer)
        operators.draw_shape(self._writer, segments, transform, DrawMode.CLIP)
        logger.debug('Clip set, area bounds %s', area.bounds)

    def clip(self, shape: Shape | None) -> None:
        """Intersect the clip with ``shape`` and write the intersection as the new clip."""
        if shape is None:
            self.set_clip(None)
            return
        if self._clip.area is None:
            self.set_clip(shape)
            return
        area = geometry.to_geometry(shape, self._transform).intersection(self._clip.area)
        self._set_clip(geometry.from_geometry(area), Affine.identity())

    def clip_rect(self, x: float, y: float, width: float, height: float) -> None:
        self.clip(geometry.rectangle(x, y, width, height))

    def get_clip(self) -> Path | None:
        """Clip area mapped back into the current user space."""
        if self._clip.area is None:
            return None
        try:
            inverse = self._transform.inverted()
        except ValueError:
            return None
        return geometry.from_geometry(self._clip.area).transformed(inverse)

    def get_clip_bounds(self) -> tuple[float, float, float, float] | None:
        """``(x, y, width, height)`` of the clip in user space."""
        clip = self.get_clip()
        if clip is None:
            return None
        area = geometry.to_geometry(clip)
        if area.is_empty:
            return (0.0, 0.0, 0.0, 0.0)
        min_x, min_y, max_x, max_y = area.bounds
        return (min_x, min_y, max_x - min_x, max_y - min_y)

    def hit(
        self, rect: tuple[float, float, float, float], shape: Shape, on_stroke: bool
    ) -> bool:
        """True if the device-space ``rect`` touches ``shape`` (inside the clip)."""
        target = box(rect[0], rect[1], rect[0] + rect[2], rect[1] + rect[3])
        area = self._device_geometry(shape, on_stroke)
        if self._clip.area is not None:
            area = area.intersection(self._clip.area)
        return bool(area.intersects(target))

    def hit_clip(self, x: float, y: float, width: float, height: float) -> bool:
        """True if the device-space rectangle overlaps the clip area (always true when unclipped)."""
        if self._clip.area is None:
            return True
        return bool(self._clip.area.intersects(box(x, y, x + width, y + height)))

    def _device_geometry(self, shape: Shape, on_stroke: bool) -> BaseGeometry:
        segments = list(shape)
        if not on_stroke:
            return geometry.to_geometry(segments, self._transform)
        width = self._stroke.width if isinstance(self._stroke, BasicStroke) else 1.0
        lines = [
            LineString(pts)
            for pts in geometry.flatten(geometry.transform_segments(segments, self._transform))
            if len(pts) > 1
        ]
        # Stroke width is scaled by the transform's mean linear factor.
        factor = math.sqrt(abs(self._transform.determinant)) or 1.0
        return MultiLineString(lines).buffer(max(width * factor, 1e-9) / 2.0)

    # ------------------------------------------------------------------
    # Shapes
    # ------------------------------------------------------------------

    def draw_path(self, shape: Shape | None, mode: DrawMode) -> None:
        """Render ``shape`` under the current transform with an explicit draw mode."""
        operators.draw_shape(
            self._writer, shape, self._transform, resolve_draw_mode(mode, self._stroke)
        )

    def draw(self, shape: Shape | None) -> None:
        """Stroke ``shape`` (filled instead when the stroke is not a BasicStroke)."""
        mode = resolve_draw_mode(DrawMode.STROKE, self._stroke)
        operators.draw_shape(self._writer, shape, self._transform, mode)

    def fill(self, shape: Shape | None) -> None:
        mode = resolve_draw_mode(DrawMode.FILL, self._stroke)
        operators.draw_shape(self._writer, shape, self._transform, mode)

    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self.draw(geometry.line(x1, y1, x2, y2))

    def draw_rect(self, x: float, y: float, width: float, height: float) -> None:
        if width < 0 or height < 0:
            return
        if width == 0 or height == 0:
            self.draw_line(x, y, x + width, y + height)
        else:
            self.draw(geometry.rectangle(x, y, width, height))

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None:
        if width < 0 or height < 0:
            return
        if width == 0 or height == 0:
            self.draw_line(x, y, x + width, y + height)
        else:
            self.fill(geometry.rectangle(x, y, width, height))

    def clear_rect(
        self, x: float, y: float, width: float, height: float, color: Color | None = None
    ) -> None:
        """Fill with the background color, then restore the previous paint."""
        background = color if color is not None else self._background
        if background is None:
            return
        previous = self._paint
        self.set_paint(background)
        self.fill_rect(x, y, width, height)
        self.set_paint(previous)

    def draw_round_rect(
        self, x: float, y: float, width: float, height: float, arc_width: float, arc_height: float
    ) -> None:
        if width < 0 or height < 0:
            return
        if width == 0 or height == 0:
            self.draw_line(x, y, x + width, y + height)
        else:
            self.draw(geometry.round_rectangle(x, y, width, height, arc_width, arc_height))

    def fill_round_rect(
        self, x: float, y: float, width: float, height: float, arc_width: float, arc_height: float
    ) -> None:
        if width < 0 or height < 0:
            return
        if width == 0 or height == 0:
            self.draw_line(x, y, x + width, y + height)
        else:
            self.fill(geometry.round_rectangle(x, y, width, height, arc_width, arc_height))

    def draw_oval(self, x: float, y: float, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            return
        self.draw(geometry.ellipse(x, y, width, height))

    def fill_oval(self, x: float, y: float, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            return
        self.fill(geometry.ellipse(x, y, width, height))

    def draw_arc(
        self, x: float, y: float, width: float, height: float, start_deg: float, extent_deg: float
    ) -> None:
        if width <= 0 or height <= 0:
            return
        self.draw(geometry.arc(x, y, width, height, start_deg, extent_deg, geometry.ArcType.OPEN))

    def fill_arc(
        self, x: float, y: float, width: float, height: float, start_deg: float, extent_deg: float
    ) -> None:
        if width <= 0 or height <= 0:
            return
        self.fill(geometry.arc(x, y, width, height, start_deg, extent_deg, geometry.ArcType.PIE))

    def draw_polyline(self, xs: Sequence[float] | np.ndarray, ys: Sequence[float] | np.ndarray) -> None:
        """Open polyline; arrays of any length are transformed in one step."""
        mode = resolve_draw_mode(DrawMode.STROKE, self._stroke)
        operators.draw_points(self._writer, xs, ys, self._transform, mode)

    def draw_polygon(self, xs: Sequence[float] | np.ndarray, ys: Sequence[float] | np.ndarray) -> None:
        mode = resolve_draw_mode(DrawMode.STROKE, self._stroke)
        operators.draw_points(self._writer, xs, ys, self._transform, mode, closed=True)

    def fill_polygon(self, xs: Sequence[float] | np.ndarray, ys: Sequence[float] | np.ndarray) -> None:
        mode = resolve_draw_mode(DrawMode.FILL, self._stroke)
        operators.draw_points(self._writer, xs, ys, self._transform, mode, closed=True)

    def draw_3d_rect(self, x: float, y: float, width: float, height: float, raised: bool) -> None:
        """One-pixel bevel: light top/left and dark bottom/right when raised."""
        old_paint = self._paint
        old_color = self._foreground
        brighter = old_color.brighter().brighter()
        darker = old_color.darker().darker()

        self.set_color(brighter if raised else darker)
        self.fill_rect(x, y, 1, height + 1)
        self.fill_rect(x + 1, y, width - 1, 1)

        self.set_color(darker if raised else brighter)
        self.fill_rect(x + 1, y + height, width, 1)
        self.fill_rect(x + width, y, 1, height)

        self.set_paint(old_paint)
        self.set_color(old_color)

    def fill_3d_rect(self, x: float, y: float, width: float, height: float, raised: bool) -> None:
        old_paint = self._paint
        old_color = self._foreground
        brighter = old_color.brighter().brighter()
        darker = old_color.darker().darker()

        if not raised:
            self.set_color(darker)
        elif old_paint != old_color:
            self.set_color(old_color)
        self.fill_rect(x + 1, y + 1, width - 2, height - 2)

        self.set_color(brighter if raised else darker)
        self.fill_rect(x, y, 1, height)
        self.fill_rect(x + 1, y, width - 2, 1)

        self.set_color(darker if raised else brighter)
        self.fill_rect(x + 1, y + height - 1, width - 1, 1)
        self.fill_rect(x + width - 1, y, 1, height - 1)

        self.set_paint(old_paint)
        self.set_color(old_color)

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def draw_string(self, text: str, x: float, y: float) -> None:
        """Draw text at the baseline origin ``(x, y)``.

        Vector mode fills the outline from the configured outliner; without
        one, literal text is written instead (warned once per context).

        Raises:
            ValueError: text is None.
        """
        if text is None:
            raise ValueError('Null text argument')
        if not text:
            return
        if self._text_mode is TextRenderingMode.VECTOR:
            outliner = self.config.text_outliner
            if outliner is not None:
                self.draw_glyph_outline(outliner(text, self._font, x, y))
                return
            if not self._warned_no_outliner:
                logger.warning('No text outliner configured; writing literal text instead')
                self._warned_no_outliner = True
            operators.setfont(self._writer, self._font)
        px, py = self._transform.transform_point(x, y)
        operators.draw_text(self._writer, text, px, -py)

    def draw_glyph_outline(self, outline: Shape | None) -> None:
        """Fill an already outlined run of glyphs."""
        self.fill(outline)

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def draw_image(
        self,
        image: object,
        x: float = 0.0,
        y: float = 0.0,
        width: float | None = None,
        height: float | None = None,
        *,
        source: tuple[int, int, int, int] | None = None,
        background: Color | None = None,
    ) -> bool:
        """Draw a pixel block into the destination rectangle.

        Args:
            image: numpy uint8 array or Pillow image; None draws nothing.
            x, y: Destination top-left corner in user space.
            width, height: Destination size; defaults to the source size.
            source: ``(x, y, width, height)`` sub-rectangle in pixels.
            background: Fill color used when ``fill_image_background`` is set.

        Returns:
            False when nothing was drawn (missing image or empty rectangles).
        """
        if image is None:
            return False
        pixels = raster.image_pixels(image)
        sx, sy, sw, sh = source if source is not None else (0, 0, pixels.shape[1], pixels.shape[0])
        if sw <= 0 or sh <= 0 or sx < 0 or sy < 0:
            return False
        block = pixels[sy : sy + sh, sx : sx + sw]
        if block.size == 0:
            return False
        src_h, src_w = block.shape[:2]
        dest_w = src_w if width is None else width
        dest_h = src_h if height is None else height
        if dest_w <= 0 or dest_h <= 0:
            return False

        matrix = self._transform.concatenate(Affine.translation(x, y)).concatenate(
            Affine.scaling(dest_w / src_w, dest_h / src_h)
        )
        try:
            matrix = matrix.inverted()
        except ValueError as e:
            # The image operator accepts a singular matrix; keep it as-is.
            logger.debug('Image placement matrix not inverted: %s', e)
        matrix = matrix.concatenate(Affine.scaling(1.0, -1.0))

        operators.gsave(self._writer)
        if self.config.fill_image_background:
            raster.write_image_preamble(self._writer, src_w, src_h, matrix)
            self.clear_rect(x, y, dest_w, dest_h, background)
            raster.write_image_procedure(self._writer, src_w, self._color_mode)
            raster.write_image_contents(self._writer, block, self._color_mode)
        else:
            raster.write_image(self._writer, block, matrix, self._color_mode)
        operators.grestore(self._writer)
        return True

    def draw_image_transformed(self, image: object, transform: Affine) -> bool:
        """Draw at the origin under ``transform`` concatenated onto the current transform."""
        if image is None:
            return False
        saved = self._transform
        self.transform(transform)
        try:
            return self.draw_image(image, 0.0, 0.0)
        finally:
            self._transform = saved
