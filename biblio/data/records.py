"""
Turn a located header + column mapping + data rows into category-tagged records.
"""
from __future__ import annotations

from biblio.config import OVERFLOW_KEY, OVERFLOW_SEPARATOR
from biblio.data.normalize import clean_cell
from biblio.data.schemas import CanonicalField, RawGrid, Record

SUMMARY_KEY = CanonicalField.SUMMARY.value


def _overflow_text(row: list[str], width: int) -> str:
    extras = [c for c in (clean_cell(v) for v in row[width:]) if c]
    return OVERFLOW_SEPARATOR.join(extras)


def build_records(
    grid: RawGrid,
    header_row: int,
    columns: list[str],
    category: str,
) -> list[Record]:
    """Build one record per non-blank row after the header.

    Short rows pad with "". Cells past the header width are joined and
    appended to summary, or to the overflow key when there is no summary
    column. Every record of a call shares the same key set.
    """
    width = len(columns)
    data_rows = [
        row for row in grid[header_row + 1:]
        if any(clean_cell(c) for c in row)
    ]

    overflow_key = None
    if SUMMARY_KEY in columns:
        overflow_key = SUMMARY_KEY
    elif any(_overflow_text(row, width) for row in data_rows):
        overflow_key = OVERFLOW_KEY
        if overflow_key in columns:
            overflow_key = f"{OVERFLOW_KEY}_{width}"

    records: list[Record] = []
    for row in data_rows:
        fields = {
            key: clean_cell(row[i]) if i < len(row) else ""
            for i, key in enumerate(columns)
        }
        if overflow_key is not None:
            extra = _overflow_text(row, width)
            current = fields.get(overflow_key, "")
            if extra:
                fields[overflow_key] = f"{current}{OVERFLOW_SEPARATOR}{extra}" if current else extra
            else:
                fields[overflow_key] = current
        records.append(Record(category=category, fields=fields))
    return records
