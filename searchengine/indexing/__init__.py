"""Crawl/index pipeline."""

from searchengine.indexing.crawler import crawl_site, index_url
from searchengine.indexing.service import IndexingResult, IndexingService
from searchengine.indexing.state import CrawlState, VisitedSet

__all__ = [
    "crawl_site",
    "index_url",
    "IndexingResult",
    "IndexingService",
    "CrawlState",
    "VisitedSet",
]
