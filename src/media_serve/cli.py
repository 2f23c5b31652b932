"""Command line entry point: serve an image file for viewing in a browser."""

import argparse
import os
import sys
from pathlib import Path
from typing import Any, List, Optional

import numpy as np

from .api.main import serve
from .core.codec import Jpeg, read_image
from .core.diagram import SizedDiagram, dims2d, mk_width
from .core.errors import RenderError
from .core.raster import PixelFormat, RasterImage
from .core.rasterizer import image_to_diagram_emb, rasterize
from .utils.config import Config
from .utils.image_utils import rgb_to_ycbcr, to_displayable


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="media-serve",
        description="Serve an image file to the browser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  media-serve photo.png
  media-serve photo.png --jpeg 75
  media-serve scan.png --width 320 --port 8080
        """
    )

    parser.add_argument(
        'image',
        help='PNG or JPEG file to serve'
    )

    parser.add_argument(
        '--jpeg',
        nargs='?',
        type=int,
        const=Config.DEFAULT_JPEG_QUALITY,
        metavar='QUALITY',
        help=f'Serve as JPEG at this quality, 0-100 (default {Config.DEFAULT_JPEG_QUALITY})'
    )

    size = parser.add_mutually_exclusive_group()
    size.add_argument(
        '--width',
        type=float,
        help='Rescale the image to this width in pixels'
    )
    size.add_argument(
        '--dims',
        type=float,
        nargs=2,
        metavar=('WIDTH', 'HEIGHT'),
        help='Fit the image into a WIDTH x HEIGHT canvas'
    )

    parser.add_argument(
        '--port', '-p',
        type=int,
        help='Port to listen on (default: $PORT or 3000)'
    )

    return parser.parse_args(argv)


def build_content(args: argparse.Namespace) -> Any:
    """Load the image and wrap it according to the arguments."""
    image_path = Path(args.image)
    if not image_path.exists():
        raise FileNotFoundError(f"Input file does not exist: {image_path}")

    image = read_image(image_path)

    if args.width is not None or args.dims is not None:
        spec = mk_width(args.width) if args.width is not None else dims2d(*args.dims)
        content = SizedDiagram(spec, image_to_diagram_emb(image))
        if args.jpeg is None:
            return content
        # JPEG output of a resized image needs the pixels first
        image = rasterize(content.diagram, content.size)

    if args.jpeg is not None:
        return Jpeg(args.jpeg, _to_ycbcr(image))
    return image


def _to_ycbcr(image: RasterImage) -> RasterImage:
    image = to_displayable(image)
    pixels = image.pixels
    if image.pixel_format.channels <= 2:
        grey = pixels if pixels.ndim == 2 else pixels[:, :, 0]
        pixels = grey[:, :, None].repeat(3, axis=2)
    else:
        pixels = pixels[:, :, :3]
    if pixels.dtype != np.uint8:
        pixels = (pixels >> 8).astype(np.uint8)
    ycbcr = rgb_to_ycbcr(pixels.copy())
    return RasterImage.from_array(ycbcr, PixelFormat.YCBCR8)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)

    try:
        content = build_content(args)
    except (FileNotFoundError, RenderError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.port is not None:
        os.environ["PORT"] = str(args.port)

    serve(content)
    return 0


if __name__ == "__main__":
    sys.exit(main())
