"""
Vector diagrams.

A diagram is an ordered display list of primitives in y-down user
coordinates. Later primitives paint over earlier ones, so ``a + b`` puts
``b`` on top of ``a`` and ``a.atop(b)`` puts ``a`` on top of ``b``. Sizes,
including line widths, are in diagram units; the rasterizer scales the whole
diagram to the requested ``SizeSpec``.

Nothing here draws pixels. See ``core.rasterizer`` for that.
"""

import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import cv2

from .raster import RasterImage
from ..utils.config import Config

Point = Tuple[float, float]
Bounds = Tuple[float, float, float, float]  # x0, y0, x1, y1
RGBA = Tuple[int, int, int, int]
ColorLike = Union[str, Sequence[int]]

TEXT_FONT = cv2.FONT_HERSHEY_SIMPLEX

NAMED_COLORS = {
    "black": (0, 0, 0, 255),
    "white": (255, 255, 255, 255),
    "red": (255, 0, 0, 255),
    "green": (0, 128, 0, 255),
    "lime": (0, 255, 0, 255),
    "blue": (0, 0, 255, 255),
    "yellow": (255, 255, 0, 255),
    "orange": (255, 165, 0, 255),
    "purple": (128, 0, 128, 255),
    "gray": (128, 128, 128, 255),
    "grey": (128, 128, 128, 255),
    "transparent": (0, 0, 0, 0),
}


def resolve_color(color: Optional[ColorLike]) -> Optional[RGBA]:
    """Resolve a colour name, ``#rgb`` / ``#rrggbb`` string or RGB(A) tuple to RGBA."""
    if color is None:
        return None

    if isinstance(color, str):
        color_str = color.strip().lower()
        if color_str.startswith("#"):
            return _parse_hex(color_str[1:])
        if color_str not in NAMED_COLORS:
            raise ValueError(f"Unknown colour name: {color!r}")
        return NAMED_COLORS[color_str]

    values = tuple(int(c) for c in color)
    if len(values) == 3:
        values = values + (255,)
    if len(values) != 4 or any(not 0 <= c <= 255 for c in values):
        raise ValueError(f"Colour must be 3 or 4 values in 0..255, got {color!r}")
    return values


def _parse_hex(hex_val: str) -> RGBA:
    if len(hex_val) == 3:
        hex_val = "".join(c * 2 for c in hex_val)
    if len(hex_val) != 6:
        raise ValueError(f"Invalid hex colour: #{hex_val}")
    return int(hex_val[0:2], 16), int(hex_val[2:4], 16), int(hex_val[4:6], 16), 255


@dataclass(frozen=True)
class Style:
    """How a primitive is stroked and filled. A ``None`` colour is not painted."""
    stroke: Optional[RGBA] = (0, 0, 0, 255)
    fill: Optional[RGBA] = None
    line_width: float = 1.0

    @classmethod
    def of(cls, stroke: Optional[ColorLike] = "black", fill: Optional[ColorLike] = None,
           line_width: float = 1.0) -> "Style":
        if line_width < 0:
            raise ValueError(f"Line width must be non-negative, got {line_width}")
        return cls(resolve_color(stroke), resolve_color(fill), float(line_width))


DEFAULT_STYLE = Style()


# ---------------------------------------------------------------------------
# Primitives


@dataclass(frozen=True)
class Primitive:
    """Base class for everything a diagram can contain."""
    style: Style = field(default=DEFAULT_STYLE, kw_only=True)

    def bounds(self) -> Bounds:
        raise NotImplementedError

    def _stroke_pad(self) -> float:
        if self.style.stroke is None:
            return 0.0
        return self.style.line_width / 2.0


@dataclass(frozen=True)
class Line(Primitive):
    start: Point
    end: Point

    def bounds(self) -> Bounds:
        return _pad(_points_bounds([self.start, self.end]), self._stroke_pad())


@dataclass(frozen=True)
class Polyline(Primitive):
    """A polyline, or a polygon when ``closed``."""
    points: Tuple[Point, ...]
    closed: bool = False

    def bounds(self) -> Bounds:
        return _pad(_points_bounds(self.points), self._stroke_pad())


@dataclass(frozen=True)
class Rect(Primitive):
    x: float
    y: float
    width: float
    height: float

    @property
    def corners(self) -> Tuple[Point, ...]:
        x0, y0 = self.x, self.y
        x1, y1 = self.x + self.width, self.y + self.height
        return (x0, y0), (x1, y0), (x1, y1), (x0, y1)

    def bounds(self) -> Bounds:
        return _pad(_points_bounds(self.corners), self._stroke_pad())


@dataclass(frozen=True)
class Ellipse(Primitive):
    """An ellipse with radii ``rx``, ``ry`` rotated by ``angle`` degrees."""
    center: Point
    rx: float
    ry: float
    angle: float = 0.0

    def bounds(self) -> Bounds:
        theta = math.radians(self.angle)
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        half_w = math.hypot(self.rx * cos_t, self.ry * sin_t)
        half_h = math.hypot(self.rx * sin_t, self.ry * cos_t)
        cx, cy = self.center
        return _pad((cx - half_w, cy - half_h, cx + half_w, cy + half_h), self._stroke_pad())


@dataclass(frozen=True)
class Arc(Primitive):
    """A circular arc, angles in degrees measured clockwise from +x."""
    center: Point
    radius: float
    start_angle: float
    end_angle: float

    def bounds(self) -> Bounds:
        cx, cy = self.center
        r = self.radius
        return _pad((cx - r, cy - r, cx + r, cy + r), self._stroke_pad())


@dataclass(frozen=True)
class Text(Primitive):
    """A line of text whose baseline starts at ``position``; painted in the stroke colour."""
    position: Point
    text: str
    height: float = Config.DEFAULT_TEXT_HEIGHT

    def measure(self) -> Tuple[float, float]:
        """Return (width, descent) in diagram units."""
        if not self.text:
            return 0.0, 0.0
        (w, h), baseline = cv2.getTextSize(self.text, TEXT_FONT, 1.0, 1)
        unit = self.height / h if h else 0.0
        return w * unit, baseline * unit

    def bounds(self) -> Bounds:
        width, descent = self.measure()
        x, y = self.position
        return x, y - self.height, x + width, y + descent


@dataclass(frozen=True)
class Raster(Primitive):
    """An image embedded in the diagram, stretched to the given rectangle."""
    image: RasterImage
    x: float
    y: float
    width: float
    height: float

    def bounds(self) -> Bounds:
        return self.x, self.y, self.x + self.width, self.y + self.height


@dataclass(frozen=True)
class ExternalRaster(Primitive):
    """An image file referenced by path, loaded when the diagram is rasterized."""
    path: Path
    x: float
    y: float
    width: float
    height: float

    def bounds(self) -> Bounds:
        return self.x, self.y, self.x + self.width, self.y + self.height


# ---------------------------------------------------------------------------
# Diagrams


@dataclass(frozen=True)
class Diagram:
    """An ordered, immutable collection of primitives with an optional background."""
    elements: Tuple[Primitive, ...] = ()
    background: Optional[RGBA] = None

    def __add__(self, other: "Diagram") -> "Diagram":
        if not isinstance(other, Diagram):
            return NotImplemented
        return Diagram(self.elements + other.elements, self.background or other.background)

    def atop(self, other: "Diagram") -> "Diagram":
        """Place this diagram on top of ``other``."""
        return other + self

    def add(self, *primitives: Primitive) -> "Diagram":
        return replace(self, elements=self.elements + tuple(primitives))

    def with_background(self, color: Optional[ColorLike]) -> "Diagram":
        return replace(self, background=resolve_color(color))

    @property
    def is_empty(self) -> bool:
        return not self.elements

    def envelope(self) -> Optional[Bounds]:
        """Bounding box of all primitives, or None for an empty diagram."""
        if not self.elements:
            return None
        boxes = [element.bounds() for element in self.elements]
        return (
            min(b[0] for b in boxes),
            min(b[1] for b in boxes),
            max(b[2] for b in boxes),
            max(b[3] for b in boxes),
        )


# Single-primitive constructors, so diagrams can be built with ``+``

def line(start: Point, end: Point, color: ColorLike = "black", width: float = 1.0) -> Diagram:
    return Diagram((Line(start, end, style=Style.of(color, None, width)),))


def polyline(points: Sequence[Point], color: ColorLike = "black", width: float = 1.0) -> Diagram:
    return Diagram((Polyline(tuple(points), False, style=Style.of(color, None, width)),))


def polygon(points: Sequence[Point], stroke: Optional[ColorLike] = "black",
            fill: Optional[ColorLike] = None, width: float = 1.0) -> Diagram:
    return Diagram((Polyline(tuple(points), True, style=Style.of(stroke, fill, width)),))


def rect(x: float, y: float, w: float, h: float, stroke: Optional[ColorLike] = "black",
         fill: Optional[ColorLike] = None, width: float = 1.0) -> Diagram:
    return Diagram((Rect(x, y, w, h, style=Style.of(stroke, fill, width)),))


def square(x: float, y: float, side: float, **kwargs) -> Diagram:
    return rect(x, y, side, side, **kwargs)


def circle(center: Point, radius: float, stroke: Optional[ColorLike] = "black",
           fill: Optional[ColorLike] = None, width: float = 1.0) -> Diagram:
    return ellipse(center, radius, radius, stroke=stroke, fill=fill, width=width)


def ellipse(center: Point, rx: float, ry: float, angle: float = 0.0,
            stroke: Optional[ColorLike] = "black", fill: Optional[ColorLike] = None,
            width: float = 1.0) -> Diagram:
    return Diagram((Ellipse(center, rx, ry, angle, style=Style.of(stroke, fill, width)),))


def arc(center: Point, radius: float, start_angle: float, end_angle: float,
        color: ColorLike = "black", width: float = 1.0) -> Diagram:
    return Diagram((Arc(center, radius, start_angle, end_angle, style=Style.of(color, None, width)),))


def text(position: Point, value: str, height: float = Config.DEFAULT_TEXT_HEIGHT,
         color: ColorLike = "black", weight: float = 1.0) -> Diagram:
    return Diagram((Text(position, str(value), height, style=Style.of(color, None, weight)),))


def blank(width: float, height: float) -> Diagram:
    """An invisible rectangle, useful to pin the envelope of a diagram."""
    return Diagram((Rect(0, 0, width, height, style=Style(stroke=None, fill=None)),))


# ---------------------------------------------------------------------------
# Output sizes


@dataclass(frozen=True)
class SizeSpec:
    """
    Requested output size in pixels.

    Only a width or only a height scales the diagram uniformly and derives the
    other dimension from the diagram's aspect ratio. Both produce exactly that
    many pixels with the diagram scaled to fit and centred. Neither renders
    one diagram unit per pixel.
    """
    width: Optional[float] = None
    height: Optional[float] = None

    def __post_init__(self):
        for name, value in (("width", self.width), ("height", self.height)):
            if value is not None and value <= 0:
                raise ValueError(f"Size {name} must be positive, got {value}")


def mk_width(width: float) -> SizeSpec:
    return SizeSpec(width=width)


def mk_height(height: float) -> SizeSpec:
    return SizeSpec(height=height)


def dims2d(width: float, height: float) -> SizeSpec:
    return SizeSpec(width=width, height=height)


def absolute() -> SizeSpec:
    return SizeSpec()


@dataclass(frozen=True)
class SizedDiagram:
    """A diagram together with the size it should be rendered at."""
    size: SizeSpec
    diagram: Diagram


def _points_bounds(points: Sequence[Point]) -> Bounds:
    if not points:
        return 0.0, 0.0, 0.0, 0.0
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def _pad(bounds: Bounds, pad: float) -> Bounds:
    x0, y0, x1, y1 = bounds
    return x0 - pad, y0 - pad, x1 + pad, y1 + pad
