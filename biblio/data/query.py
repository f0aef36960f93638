"""
Title search and category filtering over a loaded Catalog.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from biblio.config import ALL_CATEGORIES
from biblio.data.normalize import normalize_text, title_sort_key
from biblio.data.schemas import Catalog, Record


class SearchState(str, Enum):
    OK = "ok"
    NO_MATCHES = "no_matches"
    UNAVAILABLE = "unavailable"     # nothing loaded at all


@dataclass
class SearchResult:
    query: str
    category: str
    state: SearchState
    records: list[Record] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.records)


def normalize_category(value) -> str:
    """Category filters are matched trimmed and lowercased; blank means all."""
    return (value or "").strip().lower() or ALL_CATEGORIES


def search(catalog: Catalog, query_text: str = "", category_filter: str = ALL_CATEGORIES) -> list[Record]:
    """Records in category_filter whose normalized title contains the normalized query.

    An empty query keeps every record in the category. Results are ordered
    by title, ignoring case and accents.
    """
    base = catalog.by_category(category_filter or ALL_CATEGORIES)
    q = normalize_text(query_text)
    if q:
        base = [r for r in base if q in normalize_text(r.title)]
    return sorted(base, key=lambda r: title_sort_key(r.title))


def run_search(catalog: Catalog, query_text: str = "", category_filter: str = ALL_CATEGORIES) -> SearchResult:
    """search() plus a state that separates "nothing loaded" from "no matches"."""
    category = category_filter or ALL_CATEGORIES
    records = search(catalog, query_text, category)
    if catalog.is_empty:
        state = SearchState.UNAVAILABLE
    elif not records:
        state = SearchState.NO_MATCHES
    else:
        state = SearchState.OK
    return SearchResult(query=query_text or "", category=category, state=state, records=records)
