"""Exception types raised by the viewer."""

from __future__ import annotations

from pathlib import Path


class TermgridError(Exception):
    """Base class for viewer errors."""


class MissingArgumentError(TermgridError):
    """No directory was supplied on the command line."""


class DirectoryError(TermgridError):
    """The root directory is missing, not a directory, or unreadable."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class EncodingError(TermgridError):
    """A single file could not be decoded or encoded as an image."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot encode image '{path}': {reason}")
