"""
Grid rendering to a terminal byte stream.

A frame is composed fully in memory and written with a single call,
then the stream is flushed, so a resize arriving between frames never
finds half a grid on screen.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO

from termgrid.constants import ESC, NO_IMAGES_MESSAGE
from termgrid.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

    from termgrid.protocols import ImageProtocol
    from termgrid.type_defs import GridLayout, ImageEntry

_SAVE_CURSOR = ESC + b"7"
_RESTORE_CURSOR = ESC + b"8"
_CLEAR_SCREEN = ESC + b"[2J" + ESC + b"[H"


def summary_line(layout: GridLayout) -> str:
    """Return the status line describing the resolved grid."""
    return (f"rows: {layout.rows} columns: {layout.columns} "
            f"cell: {layout.cell_width}x{layout.cell_height}")


def label_line(index: int, entry: ImageEntry) -> str:
    """Return the label printed for image ``index``."""
    return f"[{index}] {entry.path}"


def _label_bytes(text: str) -> bytes:
    # undecodable filename bytes come back as lone surrogates
    return text.encode("utf-8", "surrogateescape")


def _move_to_column(column: int) -> bytes:
    # CSI n G, 1-based
    return ESC + f"[{column + 1}G".encode("ascii")


class Renderer:
    """Compose a layout and encoded images into terminal output."""

    def __init__(self, stream: BinaryIO, protocol: ImageProtocol) -> None:
        self.stream = stream
        self.protocol = protocol

    def write_line(self, text: str) -> None:
        """Write one status line and flush."""
        self.stream.write(text.encode("utf-8") + b"\n")
        self.stream.flush()

    def clear(self) -> None:
        """
        Remove the previous frame before a redraw.

        Only positioned protocols draw over the screen; text output is
        left alone so piped logs keep every frame.
        """
        if not self.protocol.positioned:
            return
        self.stream.write(self.protocol.clear + _CLEAR_SCREEN)
        self.stream.flush()

    def compose(
        self,
        images: Sequence[ImageEntry],
        layout: GridLayout,
    ) -> bytes:
        """
        Build the bytes for one full frame without writing them.

        Raises:
            ValueError: If the layout cannot hold every image.

        """
        if not images:
            return NO_IMAGES_MESSAGE.encode("utf-8") + b"\n"
        if layout.capacity < len(images):
            msg = (f"Layout {layout.rows}x{layout.columns} cannot hold "
                   f"{len(images)} images")
            raise ValueError(msg)

        out = bytearray(summary_line(layout).encode("utf-8") + b"\n")
        for start in range(0, len(images), layout.columns):
            row = images[start:start + layout.columns]
            for offset, entry in enumerate(row):
                out += _label_bytes(label_line(start + offset, entry))
                out += b"\n"
            out += self._compose_row(row, layout)
        return bytes(out)

    def _compose_row(
        self,
        row: Sequence[ImageEntry],
        layout: GridLayout,
    ) -> bytes:
        out = bytearray()
        if not self.protocol.positioned:
            for entry in row:
                out += self.protocol.encode(
                    entry, layout.cell_width, layout.cell_height)
                out += b"\n"
            return bytes(out)

        for column, entry in enumerate(row):
            out += _SAVE_CURSOR
            out += _move_to_column(column * layout.cell_width)
            out += self.protocol.encode(
                entry, layout.cell_width, layout.cell_height)
            out += _RESTORE_CURSOR
        # Row separator: step below the tallest cell.
        out += b"\n" * layout.cell_height
        return bytes(out)

    def render(
        self,
        images: Sequence[ImageEntry],
        layout: GridLayout,
    ) -> int:
        """
        Write the grid for ``images`` and flush the stream.

        Image ``i`` lands in cell ``(i // columns, i % columns)``. An
        empty sequence writes only the "No images found" line.

        Returns:
            The number of images written.

        """
        frame = self.compose(images, layout)
        self.stream.write(frame)
        self.stream.flush()
        logger.debug("Rendered %d image(s) with %s protocol",
                     len(images), self.protocol.name)
        return len(images)
