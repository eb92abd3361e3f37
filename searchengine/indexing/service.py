"""Indexing service: full crawls, cancellation and single-page reindexing.

A full run has two phases:

1. every configured site is crawled by its own task on a bounded
   ``ThreadPoolExecutor``; the caller (or a background thread) waits for all
   of them;
2. once the pool has drained, each site's terminal status is decided in one
   pass: FAILED if the run was stopped, INDEXED if its crawl completed.

Outcomes that the caller must report (already running, nothing configured,
URL outside the configured sites …) are returned as :class:`IndexingResult`
values rather than raised.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Optional

from searchengine.config import SiteConfig, settings
from searchengine.db.index import delete_old_site_data, delete_page_data
from searchengine.db.models import Site, SiteStatus
from searchengine.db.pages import get_page_by_path
from searchengine.db.sites import (
    any_site_indexing,
    create_site,
    get_site,
    get_site_by_url,
    list_sites_by_status,
    update_site_status,
)
from searchengine.indexing.crawler import crawl_site, index_url
from searchengine.indexing.state import CrawlState
from searchengine.lemmas.extractor import LemmaExtractor, get_extractor
from searchengine.scraper.extractor import path_of

logger = logging.getLogger(__name__)

ALREADY_RUNNING = "Indexing is already running"
NOT_RUNNING = "Indexing is not running"
NO_SITES = "No sites are configured for indexing"
OUTSIDE_SITES = "This page is outside the sites listed in the configuration"
STOPPED_BY_USER = "Indexing stopped by user"


@dataclass
class IndexingResult:
    result: bool
    error: Optional[str] = None


class IndexingService:
    """Owns the crawl lifecycle for one database connection.

    Args:
        conn: Shared connection used by every crawl thread.
        sites: Sites to crawl; defaults to ``settings.sites`` at call time.
        extractor: Lemma extractor; defaults to the shared pymorphy3 one.
        max_workers: Pool size; defaults to ``settings.crawl_workers``.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        sites: Optional[list[SiteConfig]] = None,
        extractor: Optional[LemmaExtractor] = None,
        max_workers: Optional[int] = None,
    ) -> None:
        self.conn = conn
        self._sites = sites
        self._extractor = extractor
        self._max_workers = max_workers
        self._lock = threading.Lock()
        self._state: Optional[CrawlState] = None
        self._runner: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def site_configs(self) -> list[SiteConfig]:
        return self._sites if self._sites is not None else settings.sites

    @property
    def extractor(self) -> LemmaExtractor:
        if self._extractor is None:
            self._extractor = get_extractor()
        return self._extractor

    @property
    def is_indexing(self) -> bool:
        return self._state is not None or any_site_indexing(self.conn)

    # ------------------------------------------------------------------
    # Full crawl
    # ------------------------------------------------------------------
    def start_indexing(self, background: bool = False) -> IndexingResult:
        """Drop all stored data of the configured sites and crawl them again.

        Blocks until every site is done unless *background* is set, in which
        case the crawl and the final status update run on a separate thread
        and this returns as soon as the run is accepted.
        """
        with self._lock:
            if self.is_indexing:
                return IndexingResult(False, ALREADY_RUNNING)
            configs = self.site_configs
            if not configs:
                return IndexingResult(False, NO_SITES)
            sites = [self._reset_site(config) for config in configs]
            state = CrawlState()
            self._state = state

        logger.info("Indexing started for %d site(s)", len(sites))
        if background:
            self._runner = threading.Thread(
                target=self._run, args=(sites, state), name="indexing", daemon=True
            )
            self._runner.start()
        else:
            self._run(sites, state)
        return IndexingResult(True)

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until a background run started by this service finishes."""
        if self._runner is not None:
            self._runner.join(timeout)

    def stop_indexing(self) -> IndexingResult:
        """Ask every running crawl to stop and mark its site FAILED."""
        with self._lock:
            indexing = list_sites_by_status(self.conn, SiteStatus.INDEXING)
            if not indexing:
                return IndexingResult(False, NOT_RUNNING)
            if self._state is not None:
                self._state.stop()
            for site in indexing:
                update_site_status(self.conn, site.id, SiteStatus.FAILED, STOPPED_BY_USER)
        logger.info("Stop requested for %d site(s)", len(indexing))
        return IndexingResult(True)

    def _reset_site(self, config: SiteConfig) -> Site:
        existing = get_site_by_url(self.conn, config.url)
        if existing is not None:
            delete_old_site_data(self.conn, existing)
        return create_site(self.conn, config.url, config.name, SiteStatus.INDEXING)

    def _run(self, sites: list[Site], state: CrawlState) -> None:
        failures: dict[int, str] = {}
        try:
            workers = self._max_workers or settings.crawl_workers
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="crawler") as pool:
                future_to_site = {
                    pool.submit(crawl_site, self.conn, site, state, self.extractor): site
                    for site in sites
                }
                for future in as_completed(future_to_site):
                    site = future_to_site[future]
                    try:
                        future.result()
                    except Exception as exc:
                        logger.exception("Crawl of %s aborted", site.url)
                        failures[site.id] = str(exc)
            self._finalize(sites, state, failures)
        finally:
            with self._lock:
                self._state = None
        logger.info("Indexing finished")

    def _finalize(self, sites: list[Site], state: CrawlState, failures: dict[int, str]) -> None:
        for site in sites:
            current = get_site(self.conn, site.id)
            if current is None:
                continue
            if state.stopped:
                update_site_status(self.conn, site.id, SiteStatus.FAILED, STOPPED_BY_USER)
            elif site.id in failures:
                update_site_status(self.conn, site.id, SiteStatus.FAILED, failures[site.id])
            elif current.status is SiteStatus.INDEXING:
                update_site_status(self.conn, site.id, SiteStatus.INDEXED)

    # ------------------------------------------------------------------
    # Single page
    # ------------------------------------------------------------------
    def _config_for_url(self, url: str) -> Optional[SiteConfig]:
        owners = [c for c in self.site_configs if url.startswith(c.url)]
        return max(owners, key=lambda c: len(c.url), default=None)

    def index_page(self, url: str) -> IndexingResult:
        """Re-index one URL of a configured site without following links.

        A page already stored at the same path is retracted first, so calling
        this repeatedly leaves exactly one copy of the page in the index.
        """
        config = self._config_for_url(url)
        if config is None:
            return IndexingResult(False, OUTSIDE_SITES)

        try:
            site = get_site_by_url(self.conn, config.url)
            if site is None:
                site = create_site(self.conn, config.url, config.name, SiteStatus.FAILED)
            existing = get_page_by_path(self.conn, site.id, path_of(url))
            if existing is not None:
                delete_page_data(self.conn, existing)
            index_url(self.conn, site, url, CrawlState(), self.extractor)
        except Exception as exc:
            logger.exception("Indexing of page %s failed", url)
            return IndexingResult(False, f"Page indexing failed: {exc}")
        return IndexingResult(True)
