"""FastAPI application factory.

Lifespan
--------
On startup the app configures logging, opens a single SQLite connection
(shared across all requests via ``request.app.state.db``), initialises the
schema and creates the :class:`IndexingService` that owns crawl runs.  On
shutdown it stops a running crawl and closes the connection.

Routers
-------
Everything is mounted under ``/api``:

    /api/startIndexing, /api/stopIndexing, /api/indexPage
    /api/search
    /api/statistics
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from searchengine.config import settings
from searchengine.db import get_connection, init_db
from searchengine.indexing.service import IndexingService
from searchengine.logs import configure_logging

from searchengine.api.routers import indexing as indexing_router
from searchengine.api.routers import search as search_router
from searchengine.api.routers import statistics as statistics_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the DB on startup and close it on shutdown."""
    configure_logging(settings.log_level)
    conn = get_connection()
    init_db(conn)
    app.state.db = conn
    app.state.indexing = IndexingService(conn)
    app.state.extractor = None
    try:
        yield
    finally:
        app.state.indexing.stop_indexing()
        app.state.indexing.wait()
        conn.close()


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="Search Engine API",
        description=(
            "Crawls the configured sites into a lemma index and answers "
            "ranked full-text queries with highlighted snippets."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(indexing_router.router, prefix="/api", tags=["indexing"])
    app.include_router(search_router.router, prefix="/api", tags=["search"])
    app.include_router(statistics_router.router, prefix="/api", tags=["statistics"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn searchengine.api.app:app --reload
app = create_app()
