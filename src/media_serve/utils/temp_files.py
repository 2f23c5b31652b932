"""Temporary file helpers used as an intermediate step for rasterizing."""

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional


def get_temp_dir() -> Path:
    """Return the directory temporary images are written to."""
    temp_dir = Path(os.getenv("TEMP_DIR") or tempfile.gettempdir())
    temp_dir.mkdir(parents=True, exist_ok=True)
    return temp_dir


def make_temp_path(base: str = "out.png", temp_dir: Optional[Path] = None) -> Path:
    """
    Create a unique, empty file in the temp directory and return its path.

    The name keeps the stem and suffix of ``base`` so codecs that choose the
    format from the extension still work. The caller owns the file.
    """
    stem, suffix = os.path.splitext(base)
    fd, path = tempfile.mkstemp(
        prefix=f"{stem}-",
        suffix=suffix,
        dir=str(temp_dir or get_temp_dir())
    )
    os.close(fd)
    return Path(path)


@contextmanager
def temp_path(base: str = "out.png", temp_dir: Optional[Path] = None) -> Iterator[Path]:
    """Yield a unique temp file path that is removed however the block exits."""
    path = make_temp_path(base, temp_dir)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)
