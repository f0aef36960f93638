"""
ExcelWriter — builds a styled catalog workbook sheet by sheet.
"""
from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, Optional

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from biblio.excel.formatters import fit_columns, header_row, kpi_card, put
from biblio.excel.styles import register_styles

ColSpec = tuple[str, str, str]  # (key, kind, label)
HighlightFn = Callable[[int, dict], Optional[str]]

# Excel forbids these in sheet titles and caps them at 31 characters
_BAD_SHEET_CHARS = str.maketrans({c: "-" for c in "[]:*?/\\"})


def safe_sheet_title(title: str) -> str:
    return title.translate(_BAD_SHEET_CHARS).strip()[:31] or "Hoja"


class ExcelWriter:
    def __init__(self) -> None:
        self.wb = Workbook()
        register_styles(self.wb)
        # Workbook() starts with one empty sheet; the first add_sheet renames it
        self._fresh: Optional[Worksheet] = self.wb.active

    def add_sheet(self, title: str) -> Worksheet:
        title = self._unique_title(safe_sheet_title(title))
        if self._fresh is not None:
            ws, self._fresh = self._fresh, None
            ws.title = title
            return ws
        return self.wb.create_sheet(title=title)

    def _unique_title(self, title: str) -> str:
        taken = {t.lower() for t in self.wb.sheetnames if self._fresh is None or t != self._fresh.title}
        candidate, n = title, 2
        while candidate.lower() in taken:
            suffix = f" ({n})"
            candidate = title[:31 - len(suffix)] + suffix
            n += 1
        return candidate

    def write_title(self, ws: Worksheet, title: str, subtitle: str, width: int = 6) -> int:
        """Title and subtitle across the first `width` columns. Returns the next free row."""
        put(ws, 1, 1, title, "title")
        put(ws, 2, 1, subtitle, "subtitle")
        for row in (1, 2):
            ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=width)
        return 4

    def write_section(self, ws: Worksheet, row: int, title: str) -> int:
        put(ws, row, 1, title, "section")
        return row + 1

    def write_kpi_row(self, ws: Worksheet, row: int, cards: Iterable[tuple], spacing: int = 2) -> int:
        """cards: (value, label, failed) triples laid out left to right."""
        for i, (value, label, failed) in enumerate(cards):
            kpi_card(ws, row, 1 + i * spacing, value, label, failed=failed)
        return row + 3

    def write_table(
        self,
        ws: Worksheet,
        start_row: int,
        columns: list[ColSpec],
        rows: Iterable[dict],
        highlight_fn: Optional[HighlightFn] = None,
        freeze: bool = True,
    ) -> int:
        """Header plus one line per dict; missing keys are blank.

        highlight_fn(index, row) may return a highlight name ("failed") for
        the whole line; otherwise lines are striped. Returns the next free row.
        """
        header_row(ws, start_row, [label for _, _, label in columns])
        row = start_row + 1
        for idx, data in enumerate(rows):
            highlight = highlight_fn(idx, data) if highlight_fn else None
            if highlight is None and idx % 2:
                highlight = "stripe"
            for col, (key, kind, _) in enumerate(columns, 1):
                value = data.get(key)
                put(ws, row, col, "" if value is None else value, kind, highlight)
            row += 1

        fit_columns(ws, from_row=start_row,
                    wrap_cols={i for i, (_, kind, _) in enumerate(columns, 1) if kind == "wrap"})
        if freeze:
            ws.freeze_panes = ws.cell(row=start_row + 1, column=1)
        return row

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(path)
        return path
