"""Statistics endpoint.

Routes
------
GET /api/statistics    Totals and per-site page/lemma counts
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Request

from searchengine.db.stats import get_statistics

router = APIRouter()


@router.get("/statistics")
def statistics(request: Request) -> dict[str, Any]:
    service = request.app.state.indexing
    stats = get_statistics(request.app.state.db, indexing=service.is_indexing)
    return {"result": True, "statistics": asdict(stats)}
