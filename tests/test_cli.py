"""Tests for the media-serve command line."""

import os

import pytest

from media_serve import cli
from media_serve.core.codec import Jpeg, write_png
from media_serve.core.diagram import SizedDiagram
from media_serve.core.raster import PixelFormat, RasterImage


@pytest.fixture
def image_file(tmp_path, rgb_image):
    path = tmp_path / "input.png"
    write_png(path, rgb_image)
    return path


def test_plain_image_is_served_as_is(image_file):
    content = cli.build_content(cli.parse_arguments([str(image_file)]))

    assert isinstance(content, RasterImage)
    assert content.size == (4, 3)


def test_jpeg_flag_wraps_image(image_file):
    content = cli.build_content(cli.parse_arguments([str(image_file), "--jpeg", "40"]))

    assert isinstance(content, Jpeg)
    assert content.quality == 40
    assert content.image.pixel_format == PixelFormat.YCBCR8


def test_jpeg_flag_without_value_uses_default_quality(image_file):
    args = cli.parse_arguments([str(image_file), "--jpeg"])

    assert args.jpeg == cli.Config.DEFAULT_JPEG_QUALITY


def test_width_wraps_image_in_sized_diagram(image_file):
    content = cli.build_content(cli.parse_arguments([str(image_file), "--width", "40"]))

    assert isinstance(content, SizedDiagram)
    assert content.size.width == 40


def test_dims_with_jpeg_rasterizes_first(image_file):
    args = cli.parse_arguments([str(image_file), "--dims", "20", "10", "--jpeg", "90"])

    content = cli.build_content(args)

    assert isinstance(content, Jpeg)
    assert content.image.size == (20, 10)


def test_missing_file_is_an_error(tmp_path, capsys):
    assert cli.main([str(tmp_path / "nope.png")]) == 1
    assert "does not exist" in capsys.readouterr().err


def test_main_serves_content_on_requested_port(image_file, monkeypatch):
    monkeypatch.setenv("PORT", "1")
    served = []
    monkeypatch.setattr(cli, "serve", lambda content: served.append((content, os.environ["PORT"])))

    assert cli.main([str(image_file), "--port", "8123"]) == 0

    (content, port), = served
    assert isinstance(content, RasterImage)
    assert port == "8123"
