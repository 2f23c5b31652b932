"""Tests for temporary file helpers."""

import tempfile
from pathlib import Path

import pytest

from media_serve.utils.temp_files import get_temp_dir, make_temp_path, temp_path


def test_temp_dir_follows_environment(isolated_temp_dir):
    assert get_temp_dir() == isolated_temp_dir


def test_temp_dir_defaults_to_system_temp(monkeypatch):
    monkeypatch.delenv("TEMP_DIR")

    assert get_temp_dir() == Path(tempfile.gettempdir())


def test_temp_paths_are_unique_and_keep_suffix():
    first = make_temp_path("out.png")
    second = make_temp_path("out.png")

    assert first != second
    assert first.suffix == second.suffix == ".png"
    assert first.name.startswith("out-")


def test_temp_path_is_removed_after_block(isolated_temp_dir):
    with temp_path() as path:
        path.write_bytes(b"data")
        assert path.exists()

    assert not path.exists()
    assert list(isolated_temp_dir.iterdir()) == []


def test_temp_path_is_removed_on_error(isolated_temp_dir):
    with pytest.raises(RuntimeError):
        with temp_path() as path:
            raise RuntimeError("render failed")

    assert not path.exists()


def test_temp_path_tolerates_file_already_gone():
    with temp_path() as path:
        path.unlink()

    assert not path.exists()
