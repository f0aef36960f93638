"""
CatalogStore — the one long-lived, explicitly reloadable handle on the catalog.

Loaded once at startup, queried on every request. Reloading builds a new
Catalog and swaps it in; a Catalog itself is never mutated.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from biblio.config import ALL_CATEGORIES, FETCH_TIMEOUT
from biblio.data.loader import Reader, default_sources, load_catalog, make_reader
from biblio.data.query import SearchResult, run_search, search
from biblio.data.schemas import Catalog, Record, Source, SourceStatus

logger = logging.getLogger(__name__)


class CatalogStore:
    """Holds the current Catalog and how to rebuild it."""

    def __init__(
        self,
        sources: Optional[list[Source]] = None,
        reader: Optional[Reader] = None,
        data_dir: Optional[Path] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = FETCH_TIMEOUT,
    ) -> None:
        self.sources = list(sources) if sources is not None else default_sources()
        self.reader = reader or make_reader(data_dir=data_dir, base_url=base_url)
        self.timeout = timeout
        self.catalog = Catalog()
        self._loaded = False

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def aload(self) -> "CatalogStore":
        """Rebuild the catalog from all sources. Safe to call repeatedly."""
        logger.info("Loading catalog sources: %s", ", ".join(s.category for s in self.sources))
        self.catalog = await load_catalog(self.sources, self.reader, self.timeout)
        self._loaded = True
        return self

    def load(self) -> "CatalogStore":
        """Synchronous load for scripts and the CLI (no running event loop)."""
        return asyncio.run(self.aload())

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(self, query: str = "", category: str = ALL_CATEGORIES) -> list[Record]:
        return search(self.catalog, query, category)

    def run_search(self, query: str = "", category: str = ALL_CATEGORIES) -> SearchResult:
        return run_search(self.catalog, query, category)

    def categories(self) -> list[str]:
        return [s.category for s in self.sources]

    def labels(self) -> dict[str, str]:
        return {s.category: s.display_label for s in self.sources}

    def has_category(self, category: str) -> bool:
        return category == ALL_CATEGORIES or category in self.categories()

    def statuses(self) -> list[SourceStatus]:
        return list(self.catalog.statuses)

    def record_count(self) -> int:
        return self.catalog.record_count()

    def failed_count(self) -> int:
        return len(self.catalog.failed())
