"""Search endpoint.

Routes
------
GET /api/search?query=<text>&site=<url>&offset=0&limit=20
"""

from __future__ import annotations

from typing import Optional, Union

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from searchengine.exceptions import SearchError
from searchengine.search.ranking import DEFAULT_LIMIT, search as run_search

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class SearchItem(BaseModel):
    site: str
    siteName: str
    uri: str
    title: str
    snippet: str
    relevance: float


class SearchResponse(BaseModel):
    result: bool = True
    count: int
    data: list[SearchItem]


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------

@router.get("/search", response_model=SearchResponse)
def search(
    request: Request,
    query: str = "",
    site: Optional[str] = None,
    offset: int = Query(0, ge=0),
    limit: int = Query(DEFAULT_LIMIT, ge=0),
) -> Union[SearchResponse, JSONResponse]:
    """Search indexed pages by lemma.

    Query errors (blank query, unknown or unindexed site) are answered with
    ``400 {"result": false, "error": ...}``.
    """
    try:
        result = run_search(
            request.app.state.db,
            query,
            site_url=site,
            offset=offset,
            limit=limit,
            extractor=request.app.state.extractor,
        )
    except SearchError as exc:
        return JSONResponse(status_code=400, content={"result": False, "error": str(exc)})
    return SearchResponse(
        count=result.count,
        data=[
            SearchItem(
                site=hit.site,
                siteName=hit.site_name,
                uri=hit.uri,
                title=hit.title,
                snippet=hit.snippet,
                relevance=hit.relevance,
            )
            for hit in result.data
        ],
    )
