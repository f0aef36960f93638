"""
Cell-level helpers: styled writes, KPI cards, column sizing.
"""
from __future__ import annotations

from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from biblio.excel.styles import HIGHLIGHTS, style_name

# Columns holding long prose get a fixed width and wrap instead of stretching
WRAP_WIDTH = 60


def put(ws: Worksheet, row: int, col: int, value, kind: str = "text", highlight: str | None = None):
    """Write value with the named style for kind ("text", "wrap", "number", "header", ...)."""
    cell = ws.cell(row=row, column=col, value=value)
    cell.style = style_name(kind)
    if highlight:
        cell.fill = HIGHLIGHTS[highlight]
    return cell


def header_row(ws: Worksheet, row: int, labels: list[str]) -> None:
    for col, label in enumerate(labels, 1):
        put(ws, row, col, label, "header")


def kpi_card(ws: Worksheet, row: int, col: int, value, label: str, failed: bool = False) -> None:
    """Large value with a small caption underneath."""
    put(ws, row, col, value, "kpi_failed" if failed else "kpi")
    put(ws, row + 1, col, label, "kpi_label")


def fit_columns(
    ws: Worksheet,
    from_row: int = 1,
    wrap_cols: set[int] = frozenset(),
    min_width: int = 10,
    max_width: int = 50,
) -> None:
    """Size each column to its longest line from from_row down; wrapped columns get WRAP_WIDTH."""
    widths: dict[int, int] = {}
    for row in ws.iter_rows(min_row=from_row):
        for cell in row:
            if cell.value is None:
                continue
            longest = max((len(line) for line in str(cell.value).splitlines()), default=0)
            widths[cell.column] = max(widths.get(cell.column, 0), longest)
    for col, longest in widths.items():
        width = WRAP_WIDTH if col in wrap_cols else min(max(longest + 2, min_width), max_width)
        ws.column_dimensions[get_column_letter(col)].width = width
