"""Input validation helpers for runtime configuration."""

from __future__ import annotations

import os
from pathlib import Path

from termgrid.errors import DirectoryError


def validate_root_directory(root: str | Path) -> Path:
    """
    Ensure ``root`` names a directory the viewer can list.

    Returns the root as a ``Path`` so callers can keep working with it.
    """
    root_path = Path(root)
    if not root_path.exists():
        msg = "Directory does not exist"
        raise DirectoryError(root_path, msg)
    if not root_path.is_dir():
        msg = "Not a directory"
        raise DirectoryError(root_path, msg)
    if not os.access(root_path, os.R_OK | os.X_OK):
        msg = "Directory is not readable"
        raise DirectoryError(root_path, msg)
    return root_path


def validate_max_images(max_images: int | None) -> None:
    """Validate that an image cap, when given, is at least one."""
    if max_images is not None and max_images < 1:
        msg = f"Maximum image count must be at least 1, got {max_images}"
        raise ValueError(msg)
