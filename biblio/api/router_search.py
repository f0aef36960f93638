"""
Search endpoints — title search with faculty filter, JSON or Excel.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse

from biblio.config import EXPORTS_FOLDER
from biblio.data.store import CatalogStore
from biblio.api.dependencies import get_store, parse_category
from biblio.api.response_models import SearchResponse
from biblio.reports import catalog_report

router = APIRouter(prefix="/api", tags=["search"])


@router.get("/search", response_model=SearchResponse)
def search_catalog(
    q: str = Query("", description="Title substring; accents and case are ignored"),
    category: str = Depends(parse_category),
    store: CatalogStore = Depends(get_store),
):
    result = store.run_search(q, category)
    return SearchResponse(
        query=result.query,
        category=result.category,
        state=result.state.value,
        total=result.total,
        records=[r.to_dict() for r in result.records],
    )


@router.get("/search/excel")
def search_excel(
    q: str = Query(""),
    category: str = Depends(parse_category),
    store: CatalogStore = Depends(get_store),
):
    EXPORTS_FOLDER.mkdir(parents=True, exist_ok=True)
    # One file per request; the download keeps the short name
    out = EXPORTS_FOLDER / f"Catalogo_{category}_{datetime.now():%Y%m%d_%H%M%S}_{uuid.uuid4().hex[:8]}.xlsx"
    path = catalog_report.generate_excel(store, out, q, category)
    return FileResponse(path=str(path), filename=f"Catalogo_{category}.xlsx",
                        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
