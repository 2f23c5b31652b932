"""Nested-list pixel data, for serving images without touching numpy."""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from .raster import PixelFormat, RasterImage

RGB = Tuple[int, int, int]

BLACK: RGB = (0, 0, 0)


@dataclass
class PixelList:
    """
    RGB8 image data stored in nested lists.

    Each inner sequence is one row of the image, and the tuple elements are
    the red / green / blue values, respectively.
    """
    width: int
    height: int
    rows: Sequence[Sequence[RGB]] = field(default_factory=list)


def pixel_list_to_image(pixel_list: PixelList) -> RasterImage:
    """
    Convert a PixelList to an RGB8 raster image of exactly width x height.

    Rows shorter than the width and missing rows are filled with black;
    longer rows and extra rows are truncated.
    """
    width = max(pixel_list.width, 0)
    height = max(pixel_list.height, 0)
    pixels = np.zeros((height, width, 3), dtype=np.uint8)

    for y, row in enumerate(pixel_list.rows[:height]):
        cropped: List[RGB] = list(row[:width])
        if cropped:
            pixels[y, :len(cropped)] = np.asarray(cropped, dtype=np.uint8).reshape(-1, 3)

    return RasterImage(width, height, PixelFormat.RGB8, pixels)
