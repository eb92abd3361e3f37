"""Read-and-sum statistics over the stored sites."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field

from searchengine.db.index import count_lemmas
from searchengine.db.pages import count_pages
from searchengine.db.sites import list_sites


@dataclass
class SiteStatistics:
    url: str
    name: str
    status: str
    status_time: int
    error: str | None
    pages: int
    lemmas: int


@dataclass
class TotalStatistics:
    sites: int = 0
    pages: int = 0
    lemmas: int = 0
    indexing: bool = False


@dataclass
class Statistics:
    total: TotalStatistics
    detailed: list[SiteStatistics] = field(default_factory=list)


def get_statistics(conn: sqlite3.Connection, indexing: bool = False) -> Statistics:
    """Per-site page/lemma counts plus their totals.

    Args:
        indexing: Whether a crawl is currently running; reported as-is.
    """
    detailed = [
        SiteStatistics(
            url=site.url,
            name=site.name,
            status=site.status.value,
            status_time=site.status_time,
            error=site.last_error,
            pages=count_pages(conn, site.id),
            lemmas=count_lemmas(conn, site.id),
        )
        for site in list_sites(conn)
    ]
    total = TotalStatistics(
        sites=len(detailed),
        pages=sum(item.pages for item in detailed),
        lemmas=sum(item.lemmas for item in detailed),
        indexing=indexing,
    )
    return Statistics(total=total, detailed=detailed)
