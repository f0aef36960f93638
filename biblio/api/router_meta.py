"""
Meta endpoints: health, categories, per-source load status, reload.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from biblio.data.store import CatalogStore
from biblio.api.dependencies import get_store, get_store_or_empty
from biblio.api.response_models import (
    HealthResponse, CategoriesResponse, CategoryInfo, SourcesResponse, SourceStatusResponse,
)

router = APIRouter(prefix="/api", tags=["meta"])


def _health(store: CatalogStore) -> HealthResponse:
    catalog = store.catalog
    if not store.is_loaded:
        status = "loading"
    elif catalog.is_empty:
        status = "empty"
    elif catalog.failed():
        status = "degraded"
    else:
        status = "ok"
    return HealthResponse(
        status=status,
        records=store.record_count(),
        by_category=catalog.counts(),
        failed_sources=store.failed_count(),
        loaded_at=catalog.loaded_at.isoformat() if catalog.loaded_at else None,
    )


@router.get("/health", response_model=HealthResponse)
def health(store: CatalogStore = Depends(get_store_or_empty)):
    return _health(store)


@router.get("/categories", response_model=CategoriesResponse)
def list_categories(store: CatalogStore = Depends(get_store)):
    by_cat = {s.category: s for s in store.statuses()}
    return CategoriesResponse(categories=[
        CategoryInfo(
            category=cat,
            label=label,
            records=by_cat[cat].record_count if cat in by_cat else 0,
            ok=by_cat[cat].ok if cat in by_cat else False,
        )
        for cat, label in store.labels().items()
    ])


@router.get("/sources", response_model=SourcesResponse)
def list_sources(store: CatalogStore = Depends(get_store)):
    return SourcesResponse(sources=[SourceStatusResponse(**s.to_dict()) for s in store.statuses()])


@router.post("/reload", response_model=HealthResponse)
async def reload_catalog(store: CatalogStore = Depends(get_store_or_empty)):
    """Re-read every source and swap in the new catalog."""
    await store.aload()
    return _health(store)
