"""
In-memory raster images.

A raster image is a numpy pixel buffer plus an explicit pixel-format tag, so
that values such as 16-bit grey or YCbCr survive until they reach a codec.
Buffers are shaped ``(height, width)`` for single-channel formats and
``(height, width, channels)`` otherwise, in the channel order the format
name spells out (RGB, not OpenCV's BGR).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from .errors import MalformedImageError


class PixelFormat(Enum):
    """Pixel layouts a raster image can carry."""
    Y8 = "Y8"
    Y16 = "Y16"
    Y32 = "Y32"
    YF = "YF"
    YA8 = "YA8"
    YA16 = "YA16"
    RGB8 = "RGB8"
    RGB16 = "RGB16"
    RGBF = "RGBF"
    RGBA8 = "RGBA8"
    RGBA16 = "RGBA16"
    YCBCR8 = "YCbCr8"
    CMYK8 = "CMYK8"
    CMYK16 = "CMYK16"

    @property
    def channels(self) -> int:
        return _LAYOUTS[self][0]

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(_LAYOUTS[self][1])

    @property
    def png_savable(self) -> bool:
        return self in PNG_FORMATS


_LAYOUTS = {
    PixelFormat.Y8: (1, np.uint8),
    PixelFormat.Y16: (1, np.uint16),
    PixelFormat.Y32: (1, np.uint32),
    PixelFormat.YF: (1, np.float32),
    PixelFormat.YA8: (2, np.uint8),
    PixelFormat.YA16: (2, np.uint16),
    PixelFormat.RGB8: (3, np.uint8),
    PixelFormat.RGB16: (3, np.uint16),
    PixelFormat.RGBF: (3, np.float32),
    PixelFormat.RGBA8: (4, np.uint8),
    PixelFormat.RGBA16: (4, np.uint16),
    PixelFormat.YCBCR8: (3, np.uint8),
    PixelFormat.CMYK8: (4, np.uint8),
    PixelFormat.CMYK16: (4, np.uint16),
}

PNG_FORMATS = frozenset({
    PixelFormat.Y8, PixelFormat.Y16,
    PixelFormat.YA8, PixelFormat.YA16,
    PixelFormat.RGB8, PixelFormat.RGB16,
    PixelFormat.RGBA8, PixelFormat.RGBA16,
})

# (channels, dtype kind, itemsize) -> format, used when none is given
_INFERRED = {
    (1, "u", 1): PixelFormat.Y8,
    (1, "u", 2): PixelFormat.Y16,
    (1, "u", 4): PixelFormat.Y32,
    (1, "f", None): PixelFormat.YF,
    (2, "u", 1): PixelFormat.YA8,
    (2, "u", 2): PixelFormat.YA16,
    (3, "u", 1): PixelFormat.RGB8,
    (3, "u", 2): PixelFormat.RGB16,
    (3, "f", None): PixelFormat.RGBF,
    (4, "u", 1): PixelFormat.RGBA8,
    (4, "u", 2): PixelFormat.RGBA16,
}


@dataclass(eq=False)
class RasterImage:
    """A 2D pixel buffer with explicit width, height and pixel format."""
    width: int
    height: int
    pixel_format: PixelFormat
    pixels: np.ndarray

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise MalformedImageError(
                f"Image dimensions must be non-negative, got {self.width}x{self.height}"
            )
        if not isinstance(self.pixels, np.ndarray):
            raise MalformedImageError("Pixel buffer must be a numpy array")
        if self.pixels.shape != self.expected_shape:
            raise MalformedImageError(
                f"{self.pixel_format.value} buffer for {self.width}x{self.height} "
                f"must have shape {self.expected_shape}, got {self.pixels.shape}"
            )
        if self.pixels.dtype != self.pixel_format.dtype:
            raise MalformedImageError(
                f"{self.pixel_format.value} buffer must be {self.pixel_format.dtype}, "
                f"got {self.pixels.dtype}"
            )

    @property
    def expected_shape(self) -> Tuple[int, ...]:
        if self.pixel_format.channels == 1:
            return (self.height, self.width)
        return (self.height, self.width, self.pixel_format.channels)

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @classmethod
    def from_array(cls, array, pixel_format: Optional[PixelFormat] = None) -> "RasterImage":
        """
        Wrap a numpy array as a raster image.

        Args:
            array: Pixel data shaped (height, width) or (height, width, channels)
            pixel_format: Format tag; inferred from shape and dtype when omitted

        Returns:
            RasterImage viewing (not copying) the array where possible
        """
        pixels = np.asarray(array)
        if pixels.ndim == 3 and pixels.shape[2] == 1:
            pixels = pixels[:, :, 0]
        if pixels.ndim not in (2, 3):
            raise MalformedImageError(f"Cannot interpret array of shape {pixels.shape} as an image")

        if pixel_format is None:
            pixel_format = _infer_format(pixels)
        if pixels.dtype.kind == "f" and pixel_format.dtype.kind == "f":
            pixels = pixels.astype(pixel_format.dtype, copy=False)

        height, width = pixels.shape[:2]
        return cls(width, height, pixel_format, np.ascontiguousarray(pixels))

    @classmethod
    def blank(cls, width: int, height: int,
              pixel_format: PixelFormat = PixelFormat.RGB8, fill=0) -> "RasterImage":
        """Create an image of the given size filled with a single value or colour."""
        if pixel_format.channels == 1:
            shape = (height, width)
        else:
            shape = (height, width, pixel_format.channels)
        pixels = np.empty(shape, dtype=pixel_format.dtype)
        pixels[...] = fill
        return cls(width, height, pixel_format, pixels)


def _infer_format(pixels: np.ndarray) -> PixelFormat:
    channels = 1 if pixels.ndim == 2 else pixels.shape[2]
    kind = pixels.dtype.kind
    itemsize = None if kind == "f" else pixels.dtype.itemsize
    fmt = _INFERRED.get((channels, kind, itemsize))
    if fmt is None:
        raise MalformedImageError(
            f"No pixel format for {channels} channel(s) of {pixels.dtype}"
        )
    return fmt
