"""
Grid layout computation.

``compute_layout`` is a pure function of the image count and the
terminal geometry, so it is safe to call again on every resize.

Columns are bounded by how many ``min_cell_width``-wide cells fit the
terminal, never by more than the number of images, and never drop below
one. Rows follow from the column count, so no full row is ever left
empty. Cell height is derived from cell width with a fixed ratio because
terminal cells are roughly twice as tall as they are wide.
"""

from __future__ import annotations

import math

from termgrid.constants import CELL_HEIGHT_RATIO, MIN_CELL_WIDTH
from termgrid.type_defs import GridLayout, TerminalGeometry


def compute_layout(
    image_count: int,
    geometry: TerminalGeometry,
    *,
    min_cell_width: int = MIN_CELL_WIDTH,
    cell_height_ratio: float = CELL_HEIGHT_RATIO,
) -> GridLayout:
    """
    Compute rows, columns and cell size for ``image_count`` images.

    Args:
        image_count: Number of images to place.
        geometry: Current terminal size in cells.
        min_cell_width: Narrowest usable cell, in character cells.
        cell_height_ratio: Cell height as a fraction of cell width.

    Returns:
        The grid layout; the degenerate empty layout when
        ``image_count`` is zero.

    Raises:
        ValueError: On a negative count or non-positive layout constants.

    """
    if image_count < 0:
        msg = f"image_count must be non-negative, got {image_count}"
        raise ValueError(msg)
    if min_cell_width < 1:
        msg = f"min_cell_width must be at least 1, got {min_cell_width}"
        raise ValueError(msg)
    if cell_height_ratio <= 0:
        msg = f"cell_height_ratio must be positive, got {cell_height_ratio}"
        raise ValueError(msg)

    if image_count == 0:
        return GridLayout.empty()

    fit = geometry.columns // min_cell_width
    columns = max(1, min(image_count, fit))
    rows = math.ceil(image_count / columns)
    cell_width = geometry.columns // columns
    cell_height = max(1, math.floor(cell_width * cell_height_ratio))
    return GridLayout(
        rows=rows,
        columns=columns,
        cell_width=cell_width,
        cell_height=cell_height,
    )


def cell_origin(index: int, layout: GridLayout) -> tuple[int, int]:
    """Return the 0-based ``(x, y)`` cell of the top-left of image ``index``."""
    row, column = layout.position(index)
    return column * layout.cell_width, row * layout.cell_height
