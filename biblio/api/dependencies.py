"""
FastAPI dependencies — CatalogStore handle, category validation.
"""
from __future__ import annotations

from fastapi import HTTPException, Query

from biblio.config import ALL_CATEGORIES
from biblio.data.query import normalize_category
from biblio.data.store import CatalogStore

# ---------------------------------------------------------------------------
# Store handle (set during startup)
# ---------------------------------------------------------------------------
_store: CatalogStore | None = None


def set_store(store: CatalogStore | None) -> None:
    global _store
    _store = store


def get_store() -> CatalogStore:
    if _store is None or not _store.is_loaded:
        raise HTTPException(503, "Catalog not loaded yet")
    return _store


def get_store_or_empty() -> CatalogStore:
    """Return the store even before its first load (for health/reload)."""
    if _store is None:
        raise HTTPException(503, "Server not initialized yet")
    return _store


def parse_category(
    category: str = Query(ALL_CATEGORIES, description="'all' or a configured category"),
) -> str:
    category = normalize_category(category)
    store = get_store_or_empty()
    if not store.has_category(category):
        raise HTTPException(400, f"Unknown category: {category}")
    return category
