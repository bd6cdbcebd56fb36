"""
Image discovery under a root directory.

Traversal is iterative with an explicit stack of pending directories so
that deep trees never hit the recursion limit and a ``max_count`` cap
becomes a plain early stop of the generator.
"""

from __future__ import annotations

import os
from itertools import islice
from pathlib import Path
from typing import TYPE_CHECKING

from termgrid.constants import IMAGE_EXTENSIONS
from termgrid.errors import DirectoryError
from termgrid.logging_utils import logger
from termgrid.runtime.validation import validate_root_directory

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Collection, Iterator


def is_image_file(
    name: str,
    extensions: Collection[str] = IMAGE_EXTENSIONS,
) -> bool:
    """Return True when ``name`` carries a recognized image suffix."""
    return Path(name).suffix.lower() in extensions


def _sorted_entries(directory: Path) -> list[os.DirEntry[str]]:
    with os.scandir(directory) as it:
        return sorted(it, key=lambda entry: entry.name)


def iter_image_paths(
    root: str | Path,
    *,
    recursive: bool = False,
    extensions: Collection[str] = IMAGE_EXTENSIONS,
) -> Iterator[Path]:
    """
    Yield image paths under ``root`` in a deterministic order.

    Entries of one directory are visited in name order. Files of a
    directory are yielded before any of its subdirectories, which are
    then descended depth-first, also in name order. Symlinked
    directories are not followed.

    The root itself must be listable; a nested directory that cannot be
    read is logged and skipped.

    Raises:
        DirectoryError: If the root directory cannot be listed.

    """
    root_path = validate_root_directory(root)
    try:
        root_entries = _sorted_entries(root_path)
    except OSError as exc:
        raise DirectoryError(root_path, f"Cannot read directory ({exc.strerror})") from exc

    stack: list[list[os.DirEntry[str]]] = [root_entries]
    while stack:
        entries = stack.pop()
        subdirs: list[Path] = []
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    subdirs.append(Path(entry.path))
                elif entry.is_file() and is_image_file(entry.name, extensions):
                    yield Path(entry.path)
            except OSError as exc:
                logger.debug("Skipping %s: %s", entry.path, exc)

        if not recursive:
            continue

        # Push in reverse so the lexicographically first subdir is next.
        for subdir in reversed(subdirs):
            try:
                stack.append(_sorted_entries(subdir))
            except OSError as exc:
                logger.warning("Skipping unreadable directory %s: %s",
                               subdir, exc)


def discover(
    root: str | Path,
    *,
    recursive: bool = False,
    max_count: int | None = None,
    extensions: Collection[str] = IMAGE_EXTENSIONS,
) -> list[Path]:
    """
    Return the ordered image paths under ``root``.

    Args:
        root: Directory to scan.
        recursive: Descend into subdirectories when True.
        max_count: Stop after this many matches. ``None`` means no cap.
        extensions: Lower-cased suffixes that identify image files.

    Returns:
        Image paths in discovery order. An empty list is a valid result.

    Raises:
        DirectoryError: If ``root`` is missing, not a directory, or
            unreadable.
        ValueError: If ``max_count`` is given and smaller than 1.

    """
    if max_count is not None and max_count < 1:
        msg = f"max_count must be at least 1, got {max_count}"
        raise ValueError(msg)

    paths = iter_image_paths(root, recursive=recursive, extensions=extensions)
    found = list(islice(paths, max_count))
    logger.debug("Discovered %d image(s) under %s", len(found), root)
    return found
