"""Print the grid layout chosen for a range of image counts and widths."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING

from termgrid.cli import _wrap_validator, positive_int
from termgrid.constants import CELL_HEIGHT_RATIO, MIN_CELL_WIDTH
from termgrid.layout import compute_layout
from termgrid.render import summary_line
from termgrid.type_defs import TerminalGeometry

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable, Sequence


def layout_rows(
    counts: Iterable[int],
    widths: Iterable[int],
    *,
    height: int = 24,
    min_cell_width: int = MIN_CELL_WIDTH,
) -> list[str]:
    """Return one formatted line per (width, count) combination."""
    lines = []
    for width in widths:
        geometry = TerminalGeometry(columns=width, rows=height)
        for count in counts:
            layout = compute_layout(
                count,
                geometry,
                min_cell_width=min_cell_width,
                cell_height_ratio=CELL_HEIGHT_RATIO,
            )
            lines.append(f"width={width:<4} images={count:<4} "
                         f"{summary_line(layout)}")
    return lines


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser for the layout table tool."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--counts", type=_wrap_validator(positive_int), nargs="+",
        default=[1, 2, 5, 8, 20])
    parser.add_argument(
        "--widths", type=_wrap_validator(positive_int), nargs="+",
        default=[40, 80, 120, 200])
    parser.add_argument(
        "--min-cell-width", type=_wrap_validator(positive_int),
        default=MIN_CELL_WIDTH)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments and print the layout table."""
    args = build_parser().parse_args(argv)
    for line in layout_rows(args.counts, args.widths,
                            min_cell_width=args.min_cell_width):
        print(line)  # noqa: T201
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
