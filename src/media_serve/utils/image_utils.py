"""
Image utility functions for moving pixels between raster images and OpenCV.

OpenCV works on BGR / BGRA arrays, raster images keep the channel order their
pixel format names. Everything crossing into ``cv2`` goes through here.
"""

import cv2
import numpy as np

from ..core.errors import MalformedImageError, UnsupportedPixelFormatError
from ..core.raster import PixelFormat, RasterImage


def to_displayable(image: RasterImage) -> RasterImage:
    """
    Convert any pixel format to a PNG-savable one.

    Grey and colour images that are already 8 or 16 bits per channel are
    returned unchanged. Wider integer, float, YCbCr and CMYK images are
    converted to the closest grey or RGB format.
    """
    fmt = image.pixel_format
    pixels = image.pixels

    if fmt.png_savable:
        return image
    if fmt == PixelFormat.Y32:
        return RasterImage.from_array((pixels >> 16).astype(np.uint16), PixelFormat.Y16)
    if fmt == PixelFormat.YF:
        return RasterImage.from_array(_float_to_u16(pixels), PixelFormat.Y16)
    if fmt == PixelFormat.RGBF:
        return RasterImage.from_array(_float_to_u16(pixels), PixelFormat.RGB16)
    if fmt == PixelFormat.YCBCR8:
        return RasterImage.from_array(ycbcr_to_rgb(pixels), PixelFormat.RGB8)
    if fmt == PixelFormat.CMYK8:
        return RasterImage.from_array(_cmyk_to_rgb(pixels, 255, np.uint8), PixelFormat.RGB8)
    if fmt == PixelFormat.CMYK16:
        return RasterImage.from_array(_cmyk_to_rgb(pixels, 65535, np.uint16), PixelFormat.RGB16)

    raise UnsupportedPixelFormatError(f"Cannot display {fmt.value} images")


def to_cv(image: RasterImage) -> np.ndarray:
    """Convert a PNG-savable raster image to a grey, BGR or BGRA array."""
    fmt = image.pixel_format
    pixels = image.pixels

    if not fmt.png_savable:
        raise UnsupportedPixelFormatError(
            f"{fmt.value} images have no direct OpenCV layout; convert them first"
        )

    if fmt.channels == 1:
        return pixels
    if fmt.channels == 2:
        # OpenCV has no grey+alpha layout, expand to BGRA
        grey, alpha = pixels[:, :, 0], pixels[:, :, 1]
        return np.dstack([grey, grey, grey, alpha])
    if fmt.channels == 3:
        return cv2.cvtColor(pixels, cv2.COLOR_RGB2BGR)
    return cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGRA)


def from_cv(array: np.ndarray) -> RasterImage:
    """Convert a grey, BGR or BGRA array returned by OpenCV to a raster image."""
    if array.dtype not in (np.uint8, np.uint16):
        raise MalformedImageError(f"Unexpected OpenCV image depth: {array.dtype}")

    if array.ndim == 2:
        return RasterImage.from_array(array)

    channels = array.shape[2]
    if channels == 1:
        return RasterImage.from_array(array[:, :, 0])
    if channels == 3:
        return RasterImage.from_array(cv2.cvtColor(array, cv2.COLOR_BGR2RGB))
    if channels == 4:
        return RasterImage.from_array(cv2.cvtColor(array, cv2.COLOR_BGRA2RGBA))

    raise MalformedImageError(f"Unexpected OpenCV channel count: {channels}")


def to_bgra8(image: RasterImage) -> np.ndarray:
    """Convert any raster image to an 8-bit BGRA array, for compositing."""
    cv_image = to_cv(to_displayable(image))
    if cv_image.dtype == np.uint16:
        cv_image = (cv_image >> 8).astype(np.uint8)

    if cv_image.ndim == 2:
        return cv2.cvtColor(cv_image, cv2.COLOR_GRAY2BGRA)
    if cv_image.shape[2] == 3:
        return cv2.cvtColor(cv_image, cv2.COLOR_BGR2BGRA)
    return cv_image


def ycbcr_to_rgb(pixels: np.ndarray) -> np.ndarray:
    """Convert Y, Cb, Cr ordered pixels to RGB."""
    # OpenCV orders the chroma planes Cr, Cb
    ycrcb = np.ascontiguousarray(pixels[:, :, [0, 2, 1]])
    return cv2.cvtColor(ycrcb, cv2.COLOR_YCrCb2RGB)


def rgb_to_ycbcr(pixels: np.ndarray) -> np.ndarray:
    """Convert RGB pixels to Y, Cb, Cr order."""
    ycrcb = cv2.cvtColor(pixels, cv2.COLOR_RGB2YCrCb)
    return np.ascontiguousarray(ycrcb[:, :, [0, 2, 1]])


def alpha_blit(canvas: np.ndarray, source: np.ndarray, x: int, y: int) -> None:
    """
    Composite a BGRA source onto a BGRA canvas in place, source-over.

    Args:
        canvas: Destination 8-bit BGRA array
        source: 8-bit BGRA array to paint
        x, y: Canvas position of the source's top-left corner; may be
            negative or partly outside the canvas, the overlap is clipped
    """
    canvas_h, canvas_w = canvas.shape[:2]
    src_h, src_w = source.shape[:2]

    x0, y0 = max(x, 0), max(y, 0)
    x1, y1 = min(x + src_w, canvas_w), min(y + src_h, canvas_h)
    if x0 >= x1 or y0 >= y1:
        return

    src = source[y0 - y:y1 - y, x0 - x:x1 - x].astype(np.float32) / 255.0
    dst = canvas[y0:y1, x0:x1].astype(np.float32) / 255.0

    src_a = src[:, :, 3:4]
    dst_a = dst[:, :, 3:4]
    out_a = src_a + dst_a * (1.0 - src_a)

    out_rgb = src[:, :, :3] * src_a + dst[:, :, :3] * dst_a * (1.0 - src_a)
    out_rgb = np.divide(out_rgb, out_a, out=np.zeros_like(out_rgb), where=out_a > 0)

    result = np.concatenate([out_rgb, out_a], axis=2)
    canvas[y0:y1, x0:x1] = np.clip(result * 255.0 + 0.5, 0, 255).astype(np.uint8)


def _float_to_u16(pixels: np.ndarray) -> np.ndarray:
    return (np.clip(pixels, 0.0, 1.0) * 65535.0 + 0.5).astype(np.uint16)


def _cmyk_to_rgb(pixels: np.ndarray, max_value: int, dtype) -> np.ndarray:
    cmyk = pixels.astype(np.float64) / max_value
    c, m, y, k = cmyk[:, :, 0], cmyk[:, :, 1], cmyk[:, :, 2], cmyk[:, :, 3]
    rgb = np.dstack([(1.0 - c) * (1.0 - k), (1.0 - m) * (1.0 - k), (1.0 - y) * (1.0 - k)])
    return (rgb * max_value + 0.5).astype(dtype)
