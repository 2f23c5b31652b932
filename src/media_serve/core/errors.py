"""Exceptions raised while turning a value into a browser-viewable image."""


class RenderError(Exception):
    """Base class for failures that abort a single render."""

    code = "RENDER_ERROR"


class UnsupportedContentError(RenderError, TypeError):
    """No renderer is registered for the value's type."""

    code = "UNSUPPORTED_CONTENT"


class UnsupportedPixelFormatError(RenderError):
    """The pixel format cannot be written by the requested codec."""

    code = "UNSUPPORTED_PIXEL_FORMAT"


class MalformedImageError(RenderError, ValueError):
    """The pixel buffer does not match its declared dimensions or format."""

    code = "MALFORMED_IMAGE"


class EncodingError(RenderError):
    """The codec refused to encode or decode the image."""

    code = "ENCODING_ERROR"
