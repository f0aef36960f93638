"""
Delimiter detection and quote-aware parsing of delimited text into a raw grid.
"""
from __future__ import annotations

from biblio.config import DELIMITER_CANDIDATES, DEFAULT_DELIMITER, SNIFF_CHARS
from biblio.data.normalize import BOM, clean_cell
from biblio.data.schemas import RawGrid


def strip_bom(text: str) -> str:
    return text.lstrip(BOM)


# ---------------------------------------------------------------------------
# Delimiter detection
# ---------------------------------------------------------------------------

def count_delimiters(
    text: str,
    candidates: tuple[str, ...] = DELIMITER_CANDIDATES,
) -> dict[str, int]:
    """Count candidate delimiters that appear outside quoted fields."""
    counts = {c: 0 for c in candidates}
    in_quotes = False
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == '"':
            if in_quotes and i + 1 < n and text[i + 1] == '"':
                i += 2  # escaped quote, state unchanged
                continue
            in_quotes = not in_quotes
        elif not in_quotes and ch in counts:
            counts[ch] += 1
        i += 1
    return counts


def detect_delimiter(
    text: str,
    sample_size: int = SNIFF_CHARS,
    candidates: tuple[str, ...] = DELIMITER_CANDIDATES,
) -> str:
    """Most frequent unquoted delimiter in the first sample_size chars.

    Ties (including no delimiter at all) go to the earliest candidate.
    """
    counts = count_delimiters(strip_bom(text)[:sample_size], candidates)
    best = DEFAULT_DELIMITER if DEFAULT_DELIMITER in counts else candidates[0]
    for c in candidates:
        if counts[c] > counts[best]:
            best = c
    return best


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_rows(text: str, delimiter: str = DEFAULT_DELIMITER) -> RawGrid:
    """Single-pass CSV state machine.

    Quoted fields may contain the delimiter, line breaks and doubled quotes.
    LF, CRLF and a lone CR all end a row. An unterminated quote at end of
    input is tolerated; whatever was accumulated becomes the last cell.
    """
    text = strip_bom(text)
    rows: RawGrid = []
    row: list[str] = []
    cell: list[str] = []
    in_quotes = False
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        if ch == '"':
            if in_quotes and i + 1 < n and text[i + 1] == '"':
                cell.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
            i += 1
            continue

        if in_quotes:
            cell.append(ch)
        elif ch == delimiter:
            row.append(clean_cell("".join(cell)))
            cell = []
        elif ch == "\n" or ch == "\r":
            if ch == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
            row.append(clean_cell("".join(cell)))
            rows.append(row)
            row = []
            cell = []
        else:
            cell.append(ch)
        i += 1

    if cell or row:
        row.append(clean_cell("".join(cell)))
        rows.append(row)
    return rows
