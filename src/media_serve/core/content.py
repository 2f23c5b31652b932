"""
Content-type dispatch.

``render_content`` turns one renderable value into exactly one
``RenderedContent``: the bytes to send and the media type to declare. The
result depends only on the value, never on the request. Additional value
types can be supported with ``render_content.register``.
"""

from functools import singledispatch
from typing import NamedTuple

import numpy as np

from .codec import Jpeg, encode_jpeg, encode_png
from .diagram import Diagram, SizedDiagram, mk_width
from .errors import UnsupportedContentError
from .pixels import PixelList, pixel_list_to_image
from .raster import RasterImage
from .rasterizer import render_diagram_png
from ..utils.config import Config

TYPE_PNG = "image/png"
TYPE_JPEG = "image/jpeg"


class RenderedContent(NamedTuple):
    """Response body together with its declared media type."""
    content_type: str
    body: bytes


@singledispatch
def render_content(value) -> RenderedContent:
    """
    Compute the content which should be sent to the client in order to view ``value``.

    Zero-argument callables are invoked and their result rendered, so content
    can be recomputed on every request.
    """
    if callable(value):
        return render_content(value())
    raise UnsupportedContentError(f"Don't know how to render {type(value).__name__} values")


@render_content.register
def _(value: RenderedContent) -> RenderedContent:
    return value


@render_content.register
def _(image: RasterImage) -> RenderedContent:
    return RenderedContent(TYPE_PNG, encode_png(image))


@render_content.register
def _(array: np.ndarray) -> RenderedContent:
    return render_content(RasterImage.from_array(array))


@render_content.register
def _(pixel_list: PixelList) -> RenderedContent:
    return render_content(pixel_list_to_image(pixel_list))


@render_content.register
def _(jpeg: Jpeg) -> RenderedContent:
    return RenderedContent(TYPE_JPEG, encode_jpeg(jpeg.image, jpeg.quality))


@render_content.register
def _(diagram: Diagram) -> RenderedContent:
    return render_content(SizedDiagram(mk_width(Config.DEFAULT_DIAGRAM_WIDTH), diagram))


@render_content.register
def _(sized: SizedDiagram) -> RenderedContent:
    return RenderedContent(TYPE_PNG, render_diagram_png(sized.size, sized.diagram))
