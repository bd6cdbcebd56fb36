"""
Test configuration and shared fixtures for termgrid.

This module defines reusable pytest fixtures for building image trees
on disk, in-memory image entries, fixed terminal geometries and byte
output streams. These fixtures support all test modules in the test
suite.

Note:
    This file is automatically loaded by pytest and should not be
    renamed.

"""
from __future__ import annotations

import io
import logging
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from PIL import Image

from termgrid.constants import COLOR_MODE_RGB
from termgrid.logging_utils import logger
from termgrid.protocols import DataUriProtocol
from termgrid.render import Renderer
from termgrid.terminal import FixedGeometry
from termgrid.type_defs import ImageEntry


def write_png(
    path: Path,
    size: tuple[int, int] = (32, 24),
    color: str = "red",
) -> Path:
    """Save a small real PNG at ``path`` and return the path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new(COLOR_MODE_RGB, size, color=color).save(path, format="PNG")
    return path


@pytest.fixture
def make_png() -> Callable[..., Path]:
    """Factory that writes real PNG files."""
    return write_png


@pytest.fixture
def image_tree(tmp_path: Path) -> Path:
    """
    Build a directory with 5 top-level PNGs and 3 nested ones.

    Layout::

        images/
            image0.png .. image4.png
            notes.txt
            subdir/
                sub_image0.png .. sub_image2.png

    """
    root = tmp_path / "images"
    for i in range(5):
        write_png(root / f"image{i}.png", color="blue")
    for i in range(3):
        write_png(root / "subdir" / f"sub_image{i}.png", color="green")
    (root / "notes.txt").write_text("not an image", encoding="utf-8")
    return root


@pytest.fixture
def empty_dir(tmp_path: Path) -> Path:
    """Provide an existing directory without any files."""
    path = tmp_path / "empty"
    path.mkdir()
    return path


@pytest.fixture
def make_entry() -> Callable[..., ImageEntry]:
    """Factory for in-memory entries with a recognizable payload."""

    def _build(
        name: str = "image.png",
        *,
        payload: bytes = b"iVBORw0KGgo=",
        width: int = 32,
        height: int = 24,
    ) -> ImageEntry:
        return ImageEntry(path=Path(name), width=width, height=height,
                          payload=payload)

    return _build


@pytest.fixture
def entries(make_entry: Callable[..., ImageEntry]) -> tuple[ImageEntry, ...]:
    """Five entries named image0.png .. image4.png."""
    return tuple(make_entry(f"image{i}.png") for i in range(5))


@pytest.fixture
def output_stream() -> io.BytesIO:
    """Byte stream standing in for the terminal."""
    return io.BytesIO()


@pytest.fixture
def data_uri_renderer(output_stream: io.BytesIO) -> Renderer:
    """Renderer writing plain data URIs to ``output_stream``."""
    return Renderer(output_stream, DataUriProtocol())


@pytest.fixture
def wide_terminal() -> FixedGeometry:
    """An 80x24 terminal."""
    return FixedGeometry(80, 24)


@pytest.fixture(autouse=True)
def enable_logger_propagation(monkeypatch: pytest.MonkeyPatch) -> None:
    """Enable propagation for the viewer logger to allow caplog to work."""
    monkeypatch.setattr(logger, "propagate", True)


@pytest.fixture(autouse=True)
def reset_logger_level() -> Generator[None, None, None]:
    """Restore the default INFO level after tests that enable --verbose."""
    yield
    logger.setLevel(logging.INFO)
