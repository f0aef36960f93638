"""Catalog ingestion: parsing, header mapping, record building, loading and search."""
from .loader import load_catalog, build_source, make_reader, default_sources
from .store import CatalogStore
from .query import search, run_search, SearchResult, SearchState
from .schemas import Catalog, Record, Source, SourceStatus, SourceUnavailable, CanonicalField
