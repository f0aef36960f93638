"""
Header-row location and header label → canonical field mapping.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from biblio.config import HEADER_SCAN_ROWS, HEADER_SIGNALS
from biblio.data.normalize import normalize_text, slugify_label
from biblio.data.schemas import CanonicalField, RawGrid

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[a-z0-9]+")


# ---------------------------------------------------------------------------
# Header row location
# ---------------------------------------------------------------------------

def _row_is_blank(row: list[str]) -> bool:
    return all(not str(c).strip() for c in row)


def find_signal_row(
    grid: RawGrid,
    window: int = HEADER_SCAN_ROWS,
    signals: tuple[str, ...] = HEADER_SIGNALS,
) -> Optional[int]:
    """First row within the window holding a title-like label, else None."""
    for idx, row in enumerate(grid[:window]):
        for cell in row:
            norm = normalize_text(cell)
            if any(s in norm for s in signals):
                return idx
    return None


def find_positional_row(grid: RawGrid) -> Optional[int]:
    """Row after the first non-blank row, unless that next row is blank.

    The first non-blank row is assumed to be a banner; when nothing useful
    follows it, it is taken as the header itself.
    """
    anchor = next((i for i, row in enumerate(grid) if not _row_is_blank(row)), None)
    if anchor is None:
        return None
    nxt = anchor + 1
    if nxt < len(grid) and not _row_is_blank(grid[nxt]):
        return nxt
    return anchor


HEADER_STRATEGIES: list[tuple[str, Callable[[RawGrid], Optional[int]]]] = [
    ("signal", find_signal_row),
    ("positional", find_positional_row),
]


def locate_header_row(grid: RawGrid) -> int:
    """Index of the row holding column labels; 0 for an empty grid."""
    for name, strategy in HEADER_STRATEGIES:
        idx = strategy(grid)
        if idx is not None:
            if name != HEADER_STRATEGIES[0][0]:
                logger.debug("Header row %d found by %s strategy", idx, name)
            return idx
    return 0


# ---------------------------------------------------------------------------
# Column mapping
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HeaderRule:
    """Maps a normalized header to a field when it contains any fragment
    or has any of the whole-word tokens."""
    field: CanonicalField
    fragments: tuple[str, ...] = ()
    words: tuple[str, ...] = ()

    def matches(self, normalized: str) -> bool:
        if any(f in normalized for f in self.fragments):
            return True
        if self.words:
            tokens = set(_TOKEN_RE.findall(normalized))
            return any(w in tokens for w in self.words)
        return False


# Order matters: first match wins. "titulacion" must precede "titul",
# and "año de edición" is a year, not an edition.
HEADER_RULES = [
    HeaderRule(CanonicalField.PROGRAM, fragments=("titulacion",), words=("grado", "programa", "program", "degree")),
    HeaderRule(CanonicalField.TITLE, fragments=("titul", "title", "titol")),
    HeaderRule(CanonicalField.AUTHOR, fragments=("autor", "author")),
    HeaderRule(CanonicalField.PUBLISHER, fragments=("editorial", "publisher", "editora")),
    HeaderRule(CanonicalField.YEAR, fragments=("fecha",), words=("ano", "anio", "year")),
    HeaderRule(CanonicalField.EDITION, fragments=("edicion", "edicao", "edition")),
    HeaderRule(CanonicalField.ISBN, fragments=("isbn",)),
    HeaderRule(CanonicalField.SUBJECT, fragments=("mater", "tematic", "subject", "assunto")),
    HeaderRule(CanonicalField.SHELF_LOCATION, fragments=("signatur", "shelf", "ubicacion")),
    HeaderRule(CanonicalField.SUMMARY, fragments=("resum", "sinopsis", "abstract", "summary")),
]


def map_header(label, position: int, rules: list[HeaderRule] = HEADER_RULES) -> str:
    """Key for a single header cell: canonical field value or a fallback slug."""
    normalized = normalize_text(label)
    for rule in rules:
        if rule.matches(normalized):
            return rule.field.value
    fallback = slugify_label(label)
    if normalized:
        logger.debug("Unrecognized header %r → %r", label, fallback or f"col{position}")
    return fallback or f"col{position}"


def map_headers(header_row: list[str], rules: list[HeaderRule] = HEADER_RULES) -> list[str]:
    """Positional keys for a header row. Repeated keys get a _2, _3... suffix."""
    keys: list[str] = []
    seen: dict[str, int] = {}
    for i, label in enumerate(header_row):
        key = map_header(label, i, rules)
        if key in seen:
            seen[key] += 1
            key = f"{key}_{seen[key]}"
        else:
            seen[key] = 1
        keys.append(key)
    return keys
