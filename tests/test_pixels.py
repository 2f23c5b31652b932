"""Tests for converting nested pixel lists to raster images."""

import numpy as np

from media_serve.core.pixels import PixelList, pixel_list_to_image
from media_serve.core.raster import PixelFormat


def test_exact_size_list_is_copied():
    image = pixel_list_to_image(PixelList(2, 2, [
        [(1, 2, 3), (4, 5, 6)],
        [(7, 8, 9), (10, 11, 12)],
    ]))

    assert image.pixel_format == PixelFormat.RGB8
    assert (image.width, image.height) == (2, 2)
    assert image.pixels[0, 1].tolist() == [4, 5, 6]
    assert image.pixels[1, 0].tolist() == [7, 8, 9]


def test_short_rows_and_missing_rows_are_black():
    image = pixel_list_to_image(PixelList(3, 3, [
        [(255, 255, 255)],
        [],
    ]))

    assert image.pixels.shape == (3, 3, 3)
    assert image.pixels[0, 0].tolist() == [255, 255, 255]
    # Everything not given is black
    image.pixels[0, 0] = 0
    assert not image.pixels.any()


def test_oversized_rows_and_columns_are_truncated():
    row = [(9, 9, 9)] * 5
    image = pixel_list_to_image(PixelList(2, 1, [row, row, row]))

    assert (image.width, image.height) == (2, 1)
    assert image.pixels.tolist() == [[[9, 9, 9], [9, 9, 9]]]


def test_empty_list_gives_black_image():
    image = pixel_list_to_image(PixelList(4, 2))

    assert image.pixels.shape == (2, 4, 3)
    assert image.pixels.dtype == np.uint8
    assert not image.pixels.any()


def test_negative_dimensions_are_treated_as_zero():
    image = pixel_list_to_image(PixelList(-1, 2, [[(1, 1, 1)]]))

    assert (image.width, image.height) == (0, 2)
