"""Tests for the layout table developer tool."""
from __future__ import annotations

import pytest

from tools import layout_table


def test_layout_rows() -> None:
    lines = layout_table.layout_rows([1, 8], [80])
    assert lines == [
        "width=80   images=1    rows: 1 columns: 1 cell: 80x40",
        "width=80   images=8    rows: 2 columns: 5 cell: 16x8",
    ]


def test_main_prints_table(capsys: pytest.CaptureFixture[str]) -> None:
    code = layout_table.main(["--counts", "3", "--widths", "40", "120"])
    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert len(out) == 2
    assert out[0].endswith("rows: 2 columns: 2 cell: 20x10")
    assert out[1].endswith("rows: 1 columns: 3 cell: 40x20")


def test_rejects_non_positive_width() -> None:
    with pytest.raises(SystemExit):
        layout_table.main(["--widths", "0"])
