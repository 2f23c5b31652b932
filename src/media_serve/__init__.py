"""
media-serve: pop an image or a diagram into a browser.

    >>> from media_serve import serve, PixelList
    >>> serve(PixelList(2, 1, [[(255, 0, 0), (0, 0, 255)]]))

starts a server on http://localhost:3000 (or $PORT) that answers every GET
request with the value rendered as a PNG.
"""

from .api import __version__
from .api.main import serve, serve_diagram, serve_handler, use_default_port
from .core.codec import Jpeg, decode_image, encode_jpeg, encode_png, read_image, write_png
from .core.content import TYPE_JPEG, TYPE_PNG, RenderedContent, render_content
from .core.diagram import (
    Diagram, SizeSpec, SizedDiagram, Style, absolute, arc, blank, circle, dims2d,
    ellipse, line, mk_height, mk_width, polygon, polyline, rect, square, text,
)
from .core.errors import (
    EncodingError, MalformedImageError, RenderError, UnsupportedContentError,
    UnsupportedPixelFormatError,
)
from .core.pixels import PixelList, pixel_list_to_image
from .core.raster import PixelFormat, RasterImage
from .core.rasterizer import (
    diagram_to_image, image_to_diagram_emb, image_to_diagram_ext, rasterize,
    render_diagram_file,
)

__all__ = [
    "__version__",
    "serve",
    "serve_handler",
    "serve_diagram",
    "use_default_port",
    "render_content",
    "RenderedContent",
    "TYPE_PNG",
    "TYPE_JPEG",
    "RasterImage",
    "PixelFormat",
    "PixelList",
    "pixel_list_to_image",
    "Jpeg",
    "encode_png",
    "encode_jpeg",
    "decode_image",
    "read_image",
    "write_png",
    "Diagram",
    "SizedDiagram",
    "SizeSpec",
    "Style",
    "mk_width",
    "mk_height",
    "dims2d",
    "absolute",
    "line",
    "polyline",
    "polygon",
    "rect",
    "square",
    "circle",
    "ellipse",
    "arc",
    "text",
    "blank",
    "rasterize",
    "render_diagram_file",
    "diagram_to_image",
    "image_to_diagram_emb",
    "image_to_diagram_ext",
    "RenderError",
    "UnsupportedContentError",
    "UnsupportedPixelFormatError",
    "MalformedImageError",
    "EncodingError",
]
