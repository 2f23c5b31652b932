"""
Diagram rasterization with OpenCV.

Each primitive is drawn into an anti-aliased coverage mask and composited
onto an 8-bit BGRA canvas, so translucent colours and overlapping shapes
blend the same way regardless of drawing order inside OpenCV.

Also holds the adapters between diagrams and raster images.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Type, Union

import cv2
import numpy as np

from .codec import read_image, write_png
from .diagram import (
    Arc, Bounds, Diagram, Ellipse, ExternalRaster, Line, Polyline, Primitive,
    RGBA, Raster, Rect, SizeSpec, Text, TEXT_FONT, dims2d,
)
from .raster import PixelFormat, RasterImage
from ..utils.config import Config
from ..utils.image_utils import alpha_blit, from_cv, to_bgra8, to_displayable
from ..utils.temp_files import make_temp_path, temp_path

# Fractional bits used for sub-pixel coordinates in OpenCV drawing calls
SHIFT = 4
_ONE = 1 << SHIFT


@dataclass(frozen=True)
class Transform:
    """Maps diagram units to canvas pixels: ``pixel = unit * scale + offset``."""
    scale: float
    dx: float
    dy: float

    def apply(self, point: Tuple[float, float]) -> Tuple[float, float]:
        return point[0] * self.scale + self.dx, point[1] * self.scale + self.dy

    def fixed(self, point: Tuple[float, float]) -> Tuple[int, int]:
        """Transform a point to OpenCV fixed-point coordinates."""
        x, y = self.apply(point)
        return int(round(x * _ONE)), int(round(y * _ONE))

    def length(self, value: float) -> float:
        return value * self.scale


def compute_layout(envelope: Optional[Bounds], size: SizeSpec) -> Tuple[int, int, Transform]:
    """
    Work out the canvas size and the transform for a diagram.

    Args:
        envelope: Diagram bounds, or None for an empty diagram
        size: Requested output size

    Returns:
        (width, height, transform) with both dimensions at least one pixel
    """
    min_size = Config.MIN_CANVAS_SIZE
    if envelope is None:
        x0 = y0 = 0.0
        env_w = env_h = 0.0
    else:
        x0, y0, x1, y1 = envelope
        env_w, env_h = x1 - x0, y1 - y0

    req_w, req_h = size.width, size.height

    if req_w is not None and req_h is not None:
        candidates = []
        if env_w > 0:
            candidates.append(req_w / env_w)
        if env_h > 0:
            candidates.append(req_h / env_h)
        scale = min(candidates) if candidates else 1.0
        out_w, out_h = req_w, req_h
    elif req_w is not None:
        scale = req_w / env_w if env_w > 0 else 1.0
        out_w = req_w
        # Without an aspect ratio the canvas is square
        out_h = env_h * scale if env_w > 0 else req_w
    elif req_h is not None:
        scale = req_h / env_h if env_h > 0 else 1.0
        out_h = req_h
        out_w = env_w * scale if env_h > 0 else req_h
    else:
        scale = 1.0
        out_w, out_h = env_w, env_h

    width = max(int(round(out_w)), min_size)
    height = max(int(round(out_h)), min_size)

    # Centre the scaled envelope on the canvas
    dx = (width - env_w * scale) / 2.0 - x0 * scale
    dy = (height - env_h * scale) / 2.0 - y0 * scale
    return width, height, Transform(scale, dx, dy)


class DiagramRasterizer:
    """Draws diagrams onto BGRA canvases."""

    def __init__(self):
        self._draw_handlers: Dict[Type[Primitive], Callable] = {
            Line: self._draw_line,
            Polyline: self._draw_polyline,
            Rect: self._draw_rect,
            Ellipse: self._draw_ellipse,
            Arc: self._draw_arc,
            Text: self._draw_text,
            Raster: self._draw_raster,
            ExternalRaster: self._draw_external_raster,
        }

    def rasterize(self, diagram: Diagram, size: SizeSpec) -> RasterImage:
        """Render a diagram to an RGBA8 raster image."""
        bgra = self.render_bgra(diagram, size)
        return RasterImage.from_array(cv2.cvtColor(bgra, cv2.COLOR_BGRA2RGBA), PixelFormat.RGBA8)

    def render_bgra(self, diagram: Diagram, size: SizeSpec) -> np.ndarray:
        width, height, transform = compute_layout(diagram.envelope(), size)

        canvas = np.zeros((height, width, 4), dtype=np.uint8)
        if diagram.background is not None:
            canvas[:, :] = _bgra(diagram.background)

        for element in diagram.elements:
            handler = self._draw_handlers.get(type(element))
            if handler is None:
                raise TypeError(f"Don't know how to draw {type(element).__name__}")
            handler(canvas, element, transform)

        return canvas

    # -- shapes ------------------------------------------------------------

    def _draw_line(self, canvas: np.ndarray, element: Line, transform: Transform) -> None:
        if element.style.stroke is None or element.style.line_width <= 0:
            return
        mask = _new_mask(canvas)
        cv2.line(mask, transform.fixed(element.start), transform.fixed(element.end),
                 255, _thickness(element, transform), cv2.LINE_AA, SHIFT)
        _composite(canvas, mask, element.style.stroke)

    def _draw_polyline(self, canvas: np.ndarray, element: Polyline, transform: Transform) -> None:
        if not element.points:
            return
        points = np.array([transform.fixed(p) for p in element.points], dtype=np.int32)
        self._draw_points(canvas, element, points, element.closed, transform)

    def _draw_rect(self, canvas: np.ndarray, element: Rect, transform: Transform) -> None:
        points = np.array([transform.fixed(p) for p in element.corners], dtype=np.int32)
        self._draw_points(canvas, element, points, True, transform)

    def _draw_points(self, canvas: np.ndarray, element: Primitive, points: np.ndarray,
                     closed: bool, transform: Transform) -> None:
        style = element.style
        if style.fill is not None and closed:
            mask = _new_mask(canvas)
            cv2.fillPoly(mask, [points], 255, cv2.LINE_AA, SHIFT)
            _composite(canvas, mask, style.fill)
        if style.stroke is not None and style.line_width > 0:
            mask = _new_mask(canvas)
            cv2.polylines(mask, [points], closed, 255, _thickness(element, transform),
                          cv2.LINE_AA, SHIFT)
            _composite(canvas, mask, style.stroke)

    def _draw_ellipse(self, canvas: np.ndarray, element: Ellipse, transform: Transform) -> None:
        self._draw_conic(canvas, element, element.center, (element.rx, element.ry),
                         element.angle, 0, 360, transform)

    def _draw_arc(self, canvas: np.ndarray, element: Arc, transform: Transform) -> None:
        # Arcs are never filled
        self._draw_conic(canvas, element, element.center, (element.radius, element.radius),
                         0, element.start_angle, element.end_angle, transform, fill=False)

    def _draw_conic(self, canvas: np.ndarray, element: Primitive, center, radii, angle,
                    start, end, transform: Transform, fill: bool = True) -> None:
        style = element.style
        fixed_center = transform.fixed(center)
        axes = (
            int(round(transform.length(radii[0]) * _ONE)),
            int(round(transform.length(radii[1]) * _ONE)),
        )
        if fill and style.fill is not None:
            mask = _new_mask(canvas)
            cv2.ellipse(mask, fixed_center, axes, angle, start, end, 255,
                        cv2.FILLED, cv2.LINE_AA, SHIFT)
            _composite(canvas, mask, style.fill)
        if style.stroke is not None and style.line_width > 0:
            mask = _new_mask(canvas)
            cv2.ellipse(mask, fixed_center, axes, angle, start, end, 255,
                        _thickness(element, transform), cv2.LINE_AA, SHIFT)
            _composite(canvas, mask, style.stroke)

    def _draw_text(self, canvas: np.ndarray, element: Text, transform: Transform) -> None:
        if not element.text or element.style.stroke is None:
            return
        (_, unit_height), _ = cv2.getTextSize(element.text, TEXT_FONT, 1.0, 1)
        if unit_height == 0:
            return
        font_scale = transform.length(element.height) / unit_height
        x, y = transform.apply(element.position)

        mask = _new_mask(canvas)
        cv2.putText(mask, element.text, (int(round(x)), int(round(y))), TEXT_FONT,
                    font_scale, 255, _thickness(element, transform), cv2.LINE_AA)
        _composite(canvas, mask, element.style.stroke)

    # -- images ------------------------------------------------------------

    def _draw_raster(self, canvas: np.ndarray, element: Raster, transform: Transform) -> None:
        self._paste(canvas, to_bgra8(element.image), element, transform)

    def _draw_external_raster(self, canvas: np.ndarray, element: ExternalRaster,
                              transform: Transform) -> None:
        self._paste(canvas, to_bgra8(read_image(element.path)), element, transform)

    def _paste(self, canvas: np.ndarray, source: np.ndarray,
               element: Union[Raster, ExternalRaster], transform: Transform) -> None:
        x, y = transform.apply((element.x, element.y))
        target_w = int(round(transform.length(element.width)))
        target_h = int(round(transform.length(element.height)))
        if target_w <= 0 or target_h <= 0 or source.size == 0:
            return

        src_h, src_w = source.shape[:2]
        if (target_w, target_h) != (src_w, src_h):
            shrinking = target_w < src_w or target_h < src_h
            interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
            source = cv2.resize(source, (target_w, target_h), interpolation=interpolation)

        alpha_blit(canvas, source, int(round(x)), int(round(y)))


_default_rasterizer = DiagramRasterizer()


def rasterize(diagram: Diagram, size: SizeSpec) -> RasterImage:
    """Render a diagram to an RGBA8 raster image."""
    return _default_rasterizer.rasterize(diagram, size)


def render_diagram_file(path: Union[str, Path], size: SizeSpec, diagram: Diagram) -> None:
    """Render a diagram to a PNG file at ``path``."""
    bgra = _default_rasterizer.render_bgra(diagram, size)
    params = [cv2.IMWRITE_PNG_COMPRESSION, Config.PNG_COMPRESSION]
    if not cv2.imwrite(str(path), bgra, params):
        raise OSError(f"Could not write diagram to {path}")


def render_diagram_png(size: SizeSpec, diagram: Diagram) -> bytes:
    """Render a diagram to PNG bytes through a scoped temporary file."""
    with temp_path("out.png") as path:
        render_diagram_file(path, size, diagram)
        return path.read_bytes()


def diagram_to_image(diagram: Diagram, width: float, height: float) -> RasterImage:
    """Render a diagram at exactly ``width`` x ``height`` and read it back as an image."""
    with temp_path("out.png") as path:
        render_diagram_file(path, dims2d(width, height), diagram)
        decoded = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if decoded is None:
        raise OSError("Could not read back rendered diagram")
    return from_cv(decoded)


def image_to_diagram_emb(image: RasterImage) -> Diagram:
    """Embed an image of any pixel format in a diagram, one unit per pixel."""
    return Diagram((Raster(image, 0, 0, image.width, image.height),))


def image_to_diagram_ext(image: RasterImage) -> Diagram:
    """
    Write an image to a PNG file in the system temp directory, and create a
    diagram which references that file.

    The file is not deleted: it has to exist for as long as the diagram is
    rendered.
    """
    path = make_temp_path("out.png")
    try:
        write_png(path, to_displayable(image))
    except Exception:
        path.unlink(missing_ok=True)
        raise
    return Diagram((ExternalRaster(path, 0, 0, image.width, image.height),))


def _new_mask(canvas: np.ndarray) -> np.ndarray:
    return np.zeros(canvas.shape[:2], dtype=np.uint8)


def _thickness(element: Primitive, transform: Transform) -> int:
    return max(1, int(round(transform.length(element.style.line_width))))


def _bgra(color: RGBA) -> Tuple[int, int, int, int]:
    r, g, b, a = color
    return b, g, r, a


def _composite(canvas: np.ndarray, mask: np.ndarray, color: RGBA) -> None:
    """Paint ``color`` onto the canvas wherever the coverage mask is set."""
    x, y, w, h = cv2.boundingRect(mask)
    if w == 0 or h == 0:
        return
    r, g, b, a = color
    layer = np.empty((h, w, 4), dtype=np.uint8)
    layer[:, :, 0] = b
    layer[:, :, 1] = g
    layer[:, :, 2] = r
    layer[:, :, 3] = (mask[y:y + h, x:x + w].astype(np.uint16) * a // 255).astype(np.uint8)
    alpha_blit(canvas, layer, x, y)
