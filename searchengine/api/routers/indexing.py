"""Indexing endpoints.

Routes
------
GET  /api/startIndexing        Start a full crawl in the background
GET  /api/stopIndexing         Stop the running crawl
POST /api/indexPage?url=...    Re-index a single page
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from searchengine.indexing.service import IndexingResult, IndexingService

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class IndexingResponse(BaseModel):
    result: bool
    error: Optional[str] = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _service(request: Request) -> IndexingService:
    return request.app.state.indexing


def _response(outcome: IndexingResult) -> IndexingResponse:
    return IndexingResponse(result=outcome.result, error=outcome.error)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/startIndexing", response_model=IndexingResponse, response_model_exclude_none=True)
def start_indexing(request: Request) -> IndexingResponse:
    """Start re-crawling every configured site; returns once accepted."""
    return _response(_service(request).start_indexing(background=True))


@router.get("/stopIndexing", response_model=IndexingResponse, response_model_exclude_none=True)
def stop_indexing(request: Request) -> IndexingResponse:
    return _response(_service(request).stop_indexing())


@router.post("/indexPage", response_model=IndexingResponse, response_model_exclude_none=True)
def index_page(request: Request, url: str) -> IndexingResponse:
    """Fetch and index one page of a configured site."""
    return _response(_service(request).index_page(url))
