"""
Defines shared types for the terminal image grid viewer.

Centralizes the data model passed between discovery, layout, rendering
and the resize coordinator.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:  # pragma: no cover
    from pathlib import Path

ProtocolName = Literal["auto", "kitty", "iterm2", "data-uri"]
WatchMode = Literal["auto", "always", "never"]
RenderReason = Literal["startup", "resize"]


@dataclass(frozen=True, slots=True)
class ImageEntry:
    """
    A discovered image ready for display.

    ``width`` and ``height`` are the intrinsic pixel dimensions of the
    source file. ``payload`` holds the base64 text of the encoded
    thumbnail and is never modified after creation.
    """

    path: Path
    width: int
    height: int
    payload: bytes


@dataclass(frozen=True, slots=True)
class TerminalGeometry:
    """Terminal size in character cells."""

    columns: int
    rows: int

    def __post_init__(self) -> None:
        if self.columns < 1 or self.rows < 1:
            msg = (f"Terminal geometry must be positive, got "
                   f"{self.columns}x{self.rows}")
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class GridLayout:
    """Rows and columns of the grid plus the size of one cell in cells."""

    rows: int
    columns: int
    cell_width: int
    cell_height: int

    @classmethod
    def empty(cls) -> GridLayout:
        """Return the degenerate layout used when there are no images."""
        return cls(rows=0, columns=0, cell_width=0, cell_height=0)

    @property
    def is_empty(self) -> bool:
        """True when the layout holds no cells."""
        return self.columns == 0

    @property
    def capacity(self) -> int:
        """Number of cells in the grid."""
        return self.rows * self.columns

    @property
    def total_width(self) -> int:
        """Width of a full row of cells."""
        return self.columns * self.cell_width

    def position(self, index: int) -> tuple[int, int]:
        """Return the ``(row, column)`` cell that holds image ``index``."""
        if self.is_empty:
            msg = "Empty layout has no cell positions"
            raise ValueError(msg)
        if not 0 <= index < self.capacity:
            msg = f"Index {index} outside grid of {self.capacity} cells"
            raise IndexError(msg)
        return divmod(index, self.columns)
