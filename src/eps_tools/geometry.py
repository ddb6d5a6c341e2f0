"""2D geometry: affine transforms, path segments, shape builders, clip-area conversion.

Source coordinates are y-down (screen convention). Nothing in this module
flips the y axis; that happens once, in the path renderer, at emission time.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Sequence, Union

import numpy as np
from shapely.geometry import GeometryCollection, LineString, MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient
from shapely.ops import polygonize, unary_union

from eps_tools.constants import CURVE_FLATTEN_STEPS


@dataclass(frozen=True)
class Affine:
    """2x3 affine matrix in PostScript order ``[a b c d e f]``.

    Maps ``(x, y)`` to ``(a*x + c*y + e, b*x + d*y + f)``.
    """

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def identity(cls) -> Affine:
        return cls()

    @classmethod
    def translation(cls, tx: float, ty: float) -> Affine:
        return cls(e=tx, f=ty)

    @classmethod
    def scaling(cls, sx: float, sy: float) -> Affine:
        return cls(a=sx, d=sy)

    @classmethod
    def rotation(cls, theta: float, x: float = 0.0, y: float = 0.0) -> Affine:
        """Rotation by theta radians about ``(x, y)``."""
        cos_t = math.cos(theta)
        sin_t = math.sin(theta)
        rot = cls(a=cos_t, b=sin_t, c=-sin_t, d=cos_t)
        if x == 0.0 and y == 0.0:
            return rot
        return cls.translation(x, y).concatenate(rot).concatenate(cls.translation(-x, -y))

    @classmethod
    def shearing(cls, shx: float, shy: float) -> Affine:
        return cls(b=shy, c=shx)

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> Affine:
        """Build from a 3x3 homogeneous matrix."""
        m = np.asarray(matrix, dtype=np.float64)
        return cls(m[0, 0], m[1, 0], m[0, 1], m[1, 1], m[0, 2], m[1, 2])

    @property
    def matrix(self) -> np.ndarray:
        """3x3 homogeneous matrix."""
        return np.array(
            [[self.a, self.c, self.e], [self.b, self.d, self.f], [0.0, 0.0, 1.0]],
            dtype=np.float64,
        )

    @property
    def determinant(self) -> float:
        return self.a * self.d - self.b * self.c

    @property
    def is_identity(self) -> bool:
        return self == Affine()

    def as_list(self) -> list[float]:
        return [self.a, self.b, self.c, self.d, self.e, self.f]

    def concatenate(self, other: Affine) -> Affine:
        """Return ``self x other``: ``other`` is applied first, then ``self``."""
        return Affine.from_matrix(self.matrix @ other.matrix)

    def inverted(self) -> Affine:
        """Inverse transform. Raises ValueError when the matrix is singular."""
        det = self.determinant
        if det == 0.0 or not math.isfinite(det):
            raise ValueError(f'Affine transform is not invertible (determinant {det!r})')
        return Affine.from_matrix(np.linalg.inv(self.matrix))

    def transform_point(self, x: float, y: float) -> tuple[float, float]:
        return (self.a * x + self.c * y + self.e, self.b * x + self.d * y + self.f)

    def transform_points(self, xs: np.ndarray, ys: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Vectorised transform of coordinate arrays."""
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        return (self.a * xs + self.c * ys + self.e, self.b * xs + self.d * ys + self.f)


# ---------------------------------------------------------------------------
# Path segments
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MoveTo:
    x: float
    y: float


@dataclass(frozen=True)
class LineTo:
    x: float
    y: float


@dataclass(frozen=True)
class QuadTo:
    """Quadratic Bezier: control point ``(cx, cy)``, end point ``(x, y)``."""

    cx: float
    cy: float
    x: float
    y: float


@dataclass(frozen=True)
class CubicTo:
    """Cubic Bezier: control points ``(c1x, c1y)`` and ``(c2x, c2y)``, end ``(x, y)``."""

    c1x: float
    c1y: float
    c2x: float
    c2y: float
    x: float
    y: float


@dataclass(frozen=True)
class Close:
    pass


PathSegment = Union[MoveTo, LineTo, QuadTo, CubicTo, Close]
Point = tuple[float, float]


def elevate_quadratic(p0: Point, control: Point, p1: Point) -> tuple[Point, Point]:
    """Exact cubic control points for the quadratic ``(p0, control, p1)``.

    ``c1 = p0 + 2/3 (control - p0)`` and ``c2 = p1 + 2/3 (control - p1)``.
    """
    c1 = (p0[0] + 2.0 / 3.0 * (control[0] - p0[0]), p0[1] + 2.0 / 3.0 * (control[1] - p0[1]))
    c2 = (p1[0] + 2.0 / 3.0 * (control[0] - p1[0]), p1[1] + 2.0 / 3.0 * (control[1] - p1[1]))
    return (c1, c2)


class Path:
    """Mutable list of path segments with builder methods. Iterating yields segments."""

    def __init__(self, segments: Iterable[PathSegment] = ()) -> None:
        self._segments: list[PathSegment] = list(segments)

    def __iter__(self) -> Iterator[PathSegment]:
        return iter(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return self._segments == other._segments

    def __repr__(self) -> str:
        return f'Path({self._segments!r})'

    def move_to(self, x: float, y: float) -> Path:
        self._segments.append(MoveTo(x, y))
        return self

    def line_to(self, x: float, y: float) -> Path:
        self._segments.append(LineTo(x, y))
        return self

    def quad_to(self, cx: float, cy: float, x: float, y: float) -> Path:
        self._segments.append(QuadTo(cx, cy, x, y))
        return self

    def curve_to(self, c1x: float, c1y: float, c2x: float, c2y: float, x: float, y: float) -> Path:
        self._segments.append(CubicTo(c1x, c1y, c2x, c2y, x, y))
        return self

    def extend(self, segments: Iterable[PathSegment]) -> Path:
        self._segments.extend(segments)
        return self

    def close(self) -> Path:
        self._segments.append(Close())
        return self

    def transformed(self, affine: Affine) -> Path:
        """Copy of this path with every point mapped through ``affine``."""
        return Path(transform_segments(self._segments, affine))


def transform_segments(segments: Iterable[PathSegment], affine: Affine) -> Iterator[PathSegment]:
    """Lazily map each segment's points through ``affine``."""
    tp = affine.transform_point
    for seg in segments:
        if isinstance(seg, (MoveTo, LineTo)):
            yield type(seg)(*tp(seg.x, seg.y))
        elif isinstance(seg, QuadTo):
            yield QuadTo(*tp(seg.cx, seg.cy), *tp(seg.x, seg.y))
        elif isinstance(seg, CubicTo):
            yield CubicTo(*tp(seg.c1x, seg.c1y), *tp(seg.c2x, seg.c2y), *tp(seg.x, seg.y))
        else:
            yield seg


# ---------------------------------------------------------------------------
# Shape builders
# ---------------------------------------------------------------------------


class ArcType(Enum):
    """Closure of an elliptical arc."""

    OPEN = 'open'
    CHORD = 'chord'
    PIE = 'pie'


def line(x1: float, y1: float, x2: float, y2: float) -> Path:
    return Path([MoveTo(x1, y1), LineTo(x2, y2)])


def rectangle(x: float, y: float, width: float, height: float) -> Path:
    return Path(
        [
            MoveTo(x, y),
            LineTo(x + width, y),
            LineTo(x + width, y + height),
            LineTo(x, y + height),
            Close(),
        ]
    )


def polyline(xs: Sequence[float], ys: Sequence[float], closed: bool = False) -> Path:
    """Connected line segments through the given points (empty input gives an empty path)."""
    path = Path()
    for i, (x, y) in enumerate(zip(xs, ys)):
        if i == 0:
            path.move_to(x, y)
        else:
            path.line_to(x, y)
    if closed and len(path):
        path.close()
    return path


def polygon(xs: Sequence[float], ys: Sequence[float]) -> Path:
    return polyline(xs, ys, closed=True)


def _arc_cubics(
    cx: float, cy: float, rx: float, ry: float, start_deg: float, extent_deg: float
) -> list[CubicTo]:
    """Cubic approximation of an elliptical arc, one curve per quarter turn or less.

    Angles run counter-clockwise as seen on screen, so the y term is subtracted.
    """
    count = max(1, math.ceil(abs(extent_deg) / 90.0 - 1e-9))
    step = math.radians(extent_deg) / count
    k = 4.0 / 3.0 * math.tan(step / 4.0)
    curves = []
    theta = math.radians(start_deg)
    for _ in range(count):
        cos1, sin1 = math.cos(theta), math.sin(theta)
        cos2, sin2 = math.cos(theta + step), math.sin(theta + step)
        u1, v1 = cos1 - k * sin1, sin1 + k * cos1
        u2, v2 = cos2 + k * sin2, sin2 - k * cos2
        curves.append(
            CubicTo(
                cx + rx * u1,
                cy - ry * v1,
                cx + rx * u2,
                cy - ry * v2,
                cx + rx * cos2,
                cy - ry * sin2,
            )
        )
        theta += step
    return curves


def arc(
    x: float,
    y: float,
    width: float,
    height: float,
    start_deg: float,
    extent_deg: float,
    arc_type: ArcType = ArcType.OPEN,
) -> Path:
    """Arc of the ellipse inscribed in the given frame."""
    rx, ry = width / 2.0, height / 2.0
    cx, cy = x + rx, y + ry
    theta = math.radians(start_deg)
    start = (cx + rx * math.cos(theta), cy - ry * math.sin(theta))
    path = Path()
    if arc_type is ArcType.PIE:
        path.move_to(cx, cy).line_to(*start)
    else:
        path.move_to(*start)
    if extent_deg != 0.0:
        path.extend(_arc_cubics(cx, cy, rx, ry, start_deg, extent_deg))
    if arc_type is not ArcType.OPEN:
        path.close()
    return path


def ellipse(x: float, y: float, width: float, height: float) -> Path:
    return arc(x, y, width, height, 0.0, 360.0, ArcType.CHORD)


def round_rectangle(
    x: float, y: float, width: float, height: float, arc_width: float, arc_height: float
) -> Path:
    """Rectangle with elliptical corners; corner diameters are clamped to the frame."""
    rx = min(abs(arc_width), abs(width)) / 2.0
    ry = min(abs(arc_height), abs(height)) / 2.0
    if rx == 0.0 or ry == 0.0:
        return rectangle(x, y, width, height)
    right, bottom = x + width, y + height
    path = Path().move_to(x + rx, y).line_to(right - rx, y)
    path.extend(_arc_cubics(right - rx, y + ry, rx, ry, 90.0, -90.0))
    path.line_to(right, bottom - ry)
    path.extend(_arc_cubics(right - rx, bottom - ry, rx, ry, 0.0, -90.0))
    path.line_to(x + rx, bottom)
    path.extend(_arc_cubics(x + rx, bottom - ry, rx, ry, 270.0, -90.0))
    path.line_to(x, y + ry)
    path.extend(_arc_cubics(x + rx, y + ry, rx, ry, 180.0, -90.0))
    return path.close()


# ---------------------------------------------------------------------------
# Clip-area geometry (shapely)
# ---------------------------------------------------------------------------


def _bezier_points(ctrl: np.ndarray, steps: int) -> list[Point]:
    """Sample a Bezier of any degree at ``steps`` parameters after t=0."""
    t = np.linspace(0.0, 1.0, steps + 1)[1:, np.newaxis]
    degree = len(ctrl) - 1
    pts = np.zeros((steps, 2))
    for i, p in enumerate(ctrl):
        pts += math.comb(degree, i) * (1.0 - t) ** (degree - i) * t**i * p
    return [(float(px), float(py)) for px, py in pts]


def flatten(segments: Iterable[PathSegment], steps: int = CURVE_FLATTEN_STEPS) -> list[list[Point]]:
    """Split a path into subpaths of points, with curves replaced by polylines."""
    subpaths: list[list[Point]] = []
    current: list[Point] = []
    start: Point = (0.0, 0.0)
    last: Point = (0.0, 0.0)
    for seg in segments:
        if isinstance(seg, MoveTo):
            if len(current) > 1:
                subpaths.append(current)
            start = last = (seg.x, seg.y)
            current = [start]
            continue
        if not current:
            current = [last]
        if isinstance(seg, LineTo):
            last = (seg.x, seg.y)
            current.append(last)
        elif isinstance(seg, QuadTo):
            ctrl = np.array([last, (seg.cx, seg.cy), (seg.x, seg.y)])
            current.extend(_bezier_points(ctrl, steps))
            last = (seg.x, seg.y)
        elif isinstance(seg, CubicTo):
            ctrl = np.array([last, (seg.c1x, seg.c1y), (seg.c2x, seg.c2y), (seg.x, seg.y)])
            current.extend(_bezier_points(ctrl, steps))
            last = (seg.x, seg.y)
        else:
            if current[-1] != start:
                current.append(start)
            if len(current) > 1:
                subpaths.append(current)
            current = []
            last = start
    if len(current) > 1:
        subpaths.append(current)
    return subpaths


def to_geometry(segments: Iterable[PathSegment], affine: Affine | None = None) -> BaseGeometry:
    """Filled area of a path under the nonzero winding rule, optionally transformed first.

    This is the area ``fill`` and ``clip`` paint: the subpath outlines are
    noded into faces and a face is kept when its winding number is not zero.
    """
    if affine is not None and not affine.is_identity:
        segments = transform_segments(segments, affine)
    rings = [np.asarray(points, dtype=np.float64) for points in flatten(segments) if len(points) > 2]
    if not rings:
        return Polygon()
    edges = unary_union([LineString(np.vstack([ring, ring[:1]])) for ring in rings])
    inside = []
    for face in polygonize(edges):
        point = face.representative_point()
        if _winding_number(rings, point.x, point.y) != 0:
            inside.append(face)
    return unary_union(inside) if inside else Polygon()


def _winding_number(rings: list[np.ndarray], x: float, y: float) -> int:
    """Signed count of ring edges crossing the ray from ``(x, y)`` towards +x."""
    total = 0
    for ring in rings:
        x0, y0 = ring[:, 0], ring[:, 1]
        x1, y1 = np.roll(x0, -1), np.roll(y0, -1)
        side = (x1 - x0) * (y - y0) - (x - x0) * (y1 - y0)
        upward = (y0 <= y) & (y1 > y) & (side > 0.0)
        downward = (y0 > y) & (y1 <= y) & (side < 0.0)
        total += int(upward.sum()) - int(downward.sum())
    return total


def _polygons(geom: BaseGeometry) -> Iterator[Polygon]:
    if isinstance(geom, Polygon):
        if not geom.is_empty:
            yield geom
    elif isinstance(geom, (MultiPolygon, GeometryCollection)):
        for part in geom.geoms:
            yield from _polygons(part)


def from_geometry(geom: BaseGeometry) -> Path:
    """Outline path of every polygon ring in ``geom``; other geometry types are dropped.

    Holes run opposite to their exterior so the outline fills the same area
    under the nonzero rule.
    """
    path = Path()
    for poly in _polygons(geom):
        poly = orient(poly, sign=1.0)
        for ring in (poly.exterior, *poly.interiors):
            coords = list(ring.coords)[:-1]
            if len(coords) < 3:
                continue
            path.move_to(*coords[0])
            for x, y in coords[1:]:
                path.line_to(x, y)
            path.close()
    return path
