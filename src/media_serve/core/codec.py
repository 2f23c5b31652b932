"""
PNG and JPEG encoding for raster images.

All codec work is delegated to OpenCV. Functions here raise ``EncodingError``
when OpenCV refuses a buffer and ``UnsupportedPixelFormatError`` when the
pixel format has no representation in the target format.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from .errors import EncodingError, UnsupportedPixelFormatError
from .raster import PixelFormat, RasterImage
from ..utils.config import Config
from ..utils.image_utils import from_cv, to_cv, ycbcr_to_rgb

JPEG_INPUT_FORMATS = frozenset({PixelFormat.YCBCR8, PixelFormat.RGB8, PixelFormat.Y8})


@dataclass(eq=False)
class Jpeg:
    """
    Image data that should be served as a JPEG rather than a PNG.

    Attributes:
        quality: Requested JPEG quality, from 0 to 100
        image: YCbCr8 image (RGB8 and Y8 images are accepted too)
    """
    quality: int
    image: RasterImage

    def __post_init__(self):
        if not 0 <= self.quality <= 100:
            raise ValueError(f"JPEG quality must be between 0 and 100, got {self.quality}")


def encode_png(image: RasterImage) -> bytes:
    """Encode a raster image as PNG bytes."""
    if not image.pixel_format.png_savable:
        raise UnsupportedPixelFormatError(
            f"{image.pixel_format.value} images cannot be saved as PNG"
        )
    _check_not_empty(image)

    params = [cv2.IMWRITE_PNG_COMPRESSION, Config.PNG_COMPRESSION]
    return _imencode(".png", to_cv(image), params)


def encode_jpeg(image: RasterImage, quality: int) -> bytes:
    """
    Encode a raster image as JPEG bytes at the given quality.

    Args:
        image: YCbCr8, RGB8 or Y8 image
        quality: JPEG quality from 0 to 100

    Returns:
        JPEG file contents
    """
    fmt = image.pixel_format
    if fmt not in JPEG_INPUT_FORMATS:
        raise UnsupportedPixelFormatError(f"{fmt.value} images cannot be saved as JPEG")
    _check_not_empty(image)

    if fmt == PixelFormat.YCBCR8:
        cv_image = cv2.cvtColor(ycbcr_to_rgb(image.pixels), cv2.COLOR_RGB2BGR)
    else:
        cv_image = to_cv(image)

    params = [cv2.IMWRITE_JPEG_QUALITY, int(quality)]
    return _imencode(".jpg", cv_image, params)


def decode_image(data: bytes) -> RasterImage:
    """Decode PNG or JPEG bytes, keeping bit depth and alpha."""
    buffer = np.frombuffer(data, dtype=np.uint8)
    decoded = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED) if buffer.size else None
    if decoded is None:
        raise EncodingError("Could not decode image data")
    return from_cv(decoded)


def read_image(path: Union[str, Path]) -> RasterImage:
    """Load an image file from disk."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")
    return decode_image(path.read_bytes())


def write_png(path: Union[str, Path], image: RasterImage) -> None:
    """Write a raster image to disk as a PNG file."""
    Path(path).write_bytes(encode_png(image))


def _imencode(ext: str, cv_image: np.ndarray, params) -> bytes:
    try:
        success, buffer = cv2.imencode(ext, cv_image, params)
    except cv2.error as e:
        raise EncodingError(f"OpenCV failed to encode {ext} image: {e}") from e
    if not success:
        raise EncodingError(f"OpenCV failed to encode {ext} image")
    return buffer.tobytes()


def _check_not_empty(image: RasterImage) -> None:
    if image.width == 0 or image.height == 0:
        raise EncodingError(
            f"Cannot encode an empty image ({image.width}x{image.height})"
        )
