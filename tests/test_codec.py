"""Tests for PNG and JPEG encoding."""

import numpy as np
import pytest

from media_serve.core.codec import Jpeg, decode_image, encode_jpeg, encode_png, read_image, write_png
from media_serve.core.errors import EncodingError, UnsupportedPixelFormatError
from media_serve.core.raster import PixelFormat, RasterImage

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8"


def test_png_output_decodes_to_same_pixels(rgb_image):
    data = encode_png(rgb_image)

    assert data.startswith(PNG_SIGNATURE)
    decoded = decode_image(data)
    assert decoded.pixel_format == PixelFormat.RGB8
    np.testing.assert_array_equal(decoded.pixels, rgb_image.pixels)


@pytest.mark.parametrize("pixel_format", [
    PixelFormat.Y8,
    PixelFormat.Y16,
    PixelFormat.YA8,
    PixelFormat.YA16,
    PixelFormat.RGB8,
    PixelFormat.RGB16,
    PixelFormat.RGBA8,
    PixelFormat.RGBA16,
])
def test_png_keeps_dimensions_for_other_layouts(pixel_format):
    image = RasterImage.blank(7, 5, pixel_format, fill=100)

    decoded = decode_image(encode_png(image))

    assert (decoded.width, decoded.height) == (7, 5)


def test_sixteen_bit_grey_keeps_its_depth():
    pixels = np.array([[0, 1000], [40000, 65535]], dtype=np.uint16)

    decoded = decode_image(encode_png(RasterImage.from_array(pixels)))

    assert decoded.pixel_format == PixelFormat.Y16
    assert decoded.pixels.tolist() == pixels.tolist()


@pytest.mark.parametrize("pixel_format", [PixelFormat.YF, PixelFormat.YCBCR8, PixelFormat.CMYK16])
def test_png_rejects_formats_it_cannot_store(pixel_format):
    with pytest.raises(UnsupportedPixelFormatError):
        encode_png(RasterImage.blank(2, 2, pixel_format))


def test_empty_image_cannot_be_encoded():
    with pytest.raises(EncodingError):
        encode_png(RasterImage.blank(0, 3, PixelFormat.RGB8))


def test_jpeg_from_ycbcr_keeps_dimensions():
    # Mid grey in YCbCr
    image = RasterImage.blank(16, 8, PixelFormat.YCBCR8, fill=(128, 128, 128))

    data = encode_jpeg(image, 90)

    assert data.startswith(JPEG_SIGNATURE)
    decoded = decode_image(data)
    assert (decoded.width, decoded.height) == (16, 8)
    assert np.abs(decoded.pixels.astype(int) - 128).max() <= 3


def test_jpeg_from_grey_keeps_dimensions():
    image = RasterImage.blank(9, 4, PixelFormat.Y8, fill=200)

    data = encode_jpeg(image, 90)

    assert data.startswith(JPEG_SIGNATURE)
    decoded = decode_image(data)
    assert (decoded.width, decoded.height) == (9, 4)
    assert np.abs(decoded.pixels.astype(int) - 200).max() <= 3


def test_jpeg_quality_changes_output_size():
    rng = np.random.default_rng(0)
    image = RasterImage.from_array(rng.integers(0, 256, (64, 64, 3), dtype=np.uint8))

    assert len(encode_jpeg(image, 10)) < len(encode_jpeg(image, 95))


def test_jpeg_rejects_alpha_images():
    with pytest.raises(UnsupportedPixelFormatError):
        encode_jpeg(RasterImage.blank(2, 2, PixelFormat.RGBA8), 50)


@pytest.mark.parametrize("quality", [-1, 101])
def test_jpeg_wrapper_validates_quality(quality, rgb_image):
    with pytest.raises(ValueError):
        Jpeg(quality, rgb_image)


def test_decode_rejects_garbage():
    with pytest.raises(EncodingError):
        decode_image(b"definitely not a png")
    with pytest.raises(EncodingError):
        decode_image(b"")


def test_write_and_read_png(tmp_path, rgb_image):
    path = tmp_path / "image.png"

    write_png(path, rgb_image)

    np.testing.assert_array_equal(read_image(path).pixels, rgb_image.pixels)


def test_read_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_image(tmp_path / "missing.png")
