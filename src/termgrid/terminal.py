"""
Terminal geometry and raw output helpers.

The viewer consumes terminal size through the small
:class:`GeometryProvider` interface so tests and the resize coordinator
can swap in fixed or scripted geometries.
"""

from __future__ import annotations

import shutil
import sys
from typing import TYPE_CHECKING, BinaryIO, Protocol

from termgrid.constants import FALLBACK_COLUMNS, FALLBACK_ROWS
from termgrid.type_defs import TerminalGeometry

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable


class GeometryProvider(Protocol):
    """Anything that reports the current terminal size."""

    def __call__(self) -> TerminalGeometry: ...


def get_terminal_geometry(
    fallback: tuple[int, int] = (FALLBACK_COLUMNS, FALLBACK_ROWS),
) -> TerminalGeometry:
    """
    Return the current terminal size in character cells.

    Honors ``COLUMNS``/``LINES`` and falls back to ``fallback`` when the
    size cannot be queried (for example when output is piped). Zero
    sizes reported by some pseudo terminals also use the fallback.
    """
    try:
        size = shutil.get_terminal_size(fallback=fallback)
        columns, rows = size.columns, size.lines
    except (ValueError, OSError):
        columns, rows = fallback
    if columns < 1 or rows < 1:
        columns, rows = fallback
    return TerminalGeometry(columns=columns, rows=rows)


class FixedGeometry:
    """Geometry provider that always reports the same size."""

    def __init__(self, columns: int, rows: int) -> None:
        self.geometry = TerminalGeometry(columns=columns, rows=rows)

    def __call__(self) -> TerminalGeometry:
        return self.geometry


class ScriptedGeometry:
    """
    Geometry provider that replays a sequence of sizes.

    Each call returns the next size; the last one repeats once the
    script is exhausted.
    """

    def __init__(self, sizes: Iterable[tuple[int, int]]) -> None:
        self._sizes = [TerminalGeometry(columns=c, rows=r) for c, r in sizes]
        if not self._sizes:
            msg = "ScriptedGeometry needs at least one size"
            raise ValueError(msg)
        self._index = 0

    def __call__(self) -> TerminalGeometry:
        geometry = self._sizes[min(self._index, len(self._sizes) - 1)]
        self._index += 1
        return geometry


def binary_stdout() -> BinaryIO:
    """Return the byte stream behind ``sys.stdout``."""
    return getattr(sys.stdout, "buffer", sys.stdout)


def stream_is_tty(stream: object) -> bool:
    """Return True when ``stream`` is attached to a terminal."""
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except ValueError:
        # closed stream
        return False
