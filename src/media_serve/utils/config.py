"""Configuration parameters for rendering."""

import os
from typing import Dict, Any


class Config:
    """Configuration class for rendering defaults."""

    # Diagrams without an explicit size are rendered this many pixels wide
    DEFAULT_DIAGRAM_WIDTH = int(os.getenv('DIAGRAM_WIDTH', '640'))

    # Used by the CLI when --jpeg is given without a value
    DEFAULT_JPEG_QUALITY = int(os.getenv('JPEG_QUALITY', '90'))

    # cv2.IMWRITE_PNG_COMPRESSION, 0 (fastest) to 9 (smallest)
    PNG_COMPRESSION = int(os.getenv('PNG_COMPRESSION', '3'))

    # Text primitives without an explicit height, in diagram units
    DEFAULT_TEXT_HEIGHT = float(os.getenv('TEXT_HEIGHT', '12'))

    # Every rendered diagram canvas has at least this many pixels per side
    MIN_CANVAS_SIZE = 1

    @classmethod
    def to_dict(cls) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'default_diagram_width': cls.DEFAULT_DIAGRAM_WIDTH,
            'default_jpeg_quality': cls.DEFAULT_JPEG_QUALITY,
            'png_compression': cls.PNG_COMPRESSION,
            'default_text_height': cls.DEFAULT_TEXT_HEIGHT,
            'min_canvas_size': cls.MIN_CANVAS_SIZE
        }
