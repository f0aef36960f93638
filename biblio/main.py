"""
Biblio Catalog — FastAPI app factory with startup catalog loading.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles

from biblio.data.store import CatalogStore
from biblio.api.dependencies import set_store
from biblio.api.router_meta import router as meta_router
from biblio.api.router_search import router as search_router
from biblio.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def create_app(store: CatalogStore | None = None) -> FastAPI:
    """Build the API. Pass a pre-configured store to override config-driven sources."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load the catalog at startup."""
        setup_logging()
        from biblio.config import BASE_URL, DATA_FOLDER
        logger.info("BIBLIO_DATA_DIR = %s", DATA_FOLDER)
        logger.info("BIBLIO_BASE_URL = %s", BASE_URL or "(not set)")

        current = store or CatalogStore()
        await current.aload()
        set_store(current)

        if current.catalog.is_empty:
            logger.warning("Biblio Catalog ready — no records loaded. Check /api/sources.")
        else:
            logger.info("Biblio Catalog ready — %d records, %d failed source(s)",
                        current.record_count(), current.failed_count())
        yield
        set_store(None)

    app = FastAPI(
        title="Biblio Catalog API",
        description="Library catalog search across faculty source files",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(meta_router)
    app.include_router(search_router)

    # Serve the catalog page with no-cache headers so browsers always get fresh JS
    static_dir = Path(__file__).parent / "static"
    if static_dir.is_dir():
        index_html = static_dir / "index.html"

        @app.get("/", response_class=HTMLResponse)
        async def serve_index():
            return HTMLResponse(
                content=index_html.read_text(encoding="utf-8"),
                headers={"Cache-Control": "no-cache, no-store, must-revalidate", "Pragma": "no-cache"},
            )

        app.mount("/", StaticFiles(directory=str(static_dir)), name="static")

    return app


app = create_app()
