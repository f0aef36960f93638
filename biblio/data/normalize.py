"""
Text normalization shared by header matching and title search.
"""
from __future__ import annotations

import math
import re
import unicodedata

_COMBINING_RE = re.compile("[\u0300-\u036f]")
_NON_WORD_RE = re.compile(r"[^a-z0-9]+")

BOM = "\ufeff"


def normalize_text(value) -> str:
    """Lowercase, trim and strip diacritics. None/NaN → ""."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    text = str(value).lower()
    text = unicodedata.normalize("NFD", text)
    text = _COMBINING_RE.sub("", text)
    return text.strip()


def clean_cell(value) -> str:
    """Trim a raw cell, dropping BOMs and residual wrapping quotes."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    text = str(value).replace(BOM, "").strip()
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        text = text[1:-1].strip()
    return text


def slugify_label(label) -> str:
    """Fallback key for an unrecognized header: "Nº de ejemplares" → "n_de_ejemplares"."""
    return _NON_WORD_RE.sub("_", normalize_text(label)).strip("_")


def title_sort_key(title) -> tuple[str, str]:
    """Accent-insensitive ordering key; raw title breaks ties."""
    return normalize_text(title), "" if title is None else str(title)
