"""Tests for the content-type dispatch."""

import numpy as np
import pytest

from media_serve.core.codec import Jpeg, decode_image
from media_serve.core.content import TYPE_JPEG, TYPE_PNG, RenderedContent, render_content
from media_serve.core.diagram import SizedDiagram, circle, dims2d
from media_serve.core.errors import UnsupportedContentError, UnsupportedPixelFormatError
from media_serve.core.pixels import PixelList
from media_serve.core.raster import PixelFormat, RasterImage


def test_raster_image_renders_as_png(rgb_image):
    rendered = render_content(rgb_image)

    assert rendered.content_type == TYPE_PNG
    assert decode_image(rendered.body).size == (4, 3)


def test_numpy_array_renders_as_png():
    rendered = render_content(np.zeros((5, 6), dtype=np.uint8))

    assert rendered.content_type == TYPE_PNG
    assert decode_image(rendered.body).size == (6, 5)


def test_pixel_list_renders_padded_image():
    rendered = render_content(PixelList(3, 2, [[(255, 0, 0)]]))

    decoded = decode_image(rendered.body)
    assert decoded.size == (3, 2)
    assert decoded.pixels[0, 0].tolist() == [255, 0, 0]
    assert decoded.pixels[1, 2].tolist() == [0, 0, 0]


def test_jpeg_wrapper_renders_as_jpeg():
    image = RasterImage.blank(8, 8, PixelFormat.YCBCR8, fill=(80, 128, 128))

    rendered = render_content(Jpeg(75, image))

    assert rendered.content_type == TYPE_JPEG
    assert decode_image(rendered.body).size == (8, 8)


def test_diagram_defaults_to_640_pixels_wide():
    rendered = render_content(circle((0, 0), 10, stroke=None, fill="red"))

    assert rendered.content_type == TYPE_PNG
    assert decode_image(rendered.body).size == (640, 640)


def test_sized_diagram_uses_its_size():
    rendered = render_content(SizedDiagram(dims2d(120, 40), circle((0, 0), 10)))

    assert decode_image(rendered.body).size == (120, 40)


def test_rendering_is_deterministic(rgb_image):
    assert render_content(rgb_image) == render_content(rgb_image)


def test_callables_are_evaluated_on_each_render():
    calls = []

    def compute():
        calls.append(1)
        return PixelList(len(calls), 1)

    first = render_content(compute)
    second = render_content(compute)

    assert decode_image(first.body).size == (1, 1)
    assert decode_image(second.body).size == (2, 1)


def test_prerendered_content_passes_through():
    content = RenderedContent("image/png", b"not checked")

    assert render_content(content) is content


def test_unknown_values_are_rejected():
    with pytest.raises(UnsupportedContentError):
        render_content("a string is not an image")


def test_codec_errors_propagate():
    with pytest.raises(UnsupportedPixelFormatError):
        render_content(RasterImage.blank(2, 2, PixelFormat.RGBF))


def test_new_types_can_be_registered():
    class Swatch:
        def __init__(self, rgb):
            self.rgb = rgb

    @render_content.register
    def _(swatch: Swatch) -> RenderedContent:
        return render_content(PixelList(2, 2, [[swatch.rgb] * 2] * 2))

    decoded = decode_image(render_content(Swatch((1, 2, 3))).body)
    assert decoded.pixels[1, 1].tolist() == [1, 2, 3]
