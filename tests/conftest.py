"""Shared fixtures for media-serve tests."""

import numpy as np
import pytest
from fastapi.testclient import TestClient

from media_serve.api.main import create_app
from media_serve.api.models.config import ServerConfig
from media_serve.api.services.rendering import RenderService
from media_serve.core.raster import PixelFormat, RasterImage


@pytest.fixture(autouse=True)
def isolated_temp_dir(tmp_path, monkeypatch):
    """Send every intermediate file to a per-test directory."""
    temp_dir = tmp_path / "render-tmp"
    temp_dir.mkdir()
    monkeypatch.setenv("TEMP_DIR", str(temp_dir))
    return temp_dir


@pytest.fixture
def rgb_image():
    """A 4x3 RGB8 image with a distinct colour in each corner."""
    pixels = np.zeros((3, 4, 3), dtype=np.uint8)
    pixels[0, 0] = (255, 0, 0)
    pixels[0, 3] = (0, 255, 0)
    pixels[2, 0] = (0, 0, 255)
    pixels[2, 3] = (255, 255, 255)
    return RasterImage(4, 3, PixelFormat.RGB8, pixels)


@pytest.fixture
def make_client():
    """Build a TestClient serving the given content (or render service)."""

    def _make(content, **client_kwargs):
        if isinstance(content, RenderService):
            service = content
        else:
            service = RenderService.for_content(content)
        app = create_app(service, ServerConfig())
        return TestClient(app, **client_kwargs)

    return _make
