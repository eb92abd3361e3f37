"""Per-site crawl: fetch → extract lemmas → update the index → follow links.

The walk is iterative over an explicit stack, so pages are discovered in
depth-first order.  Cancellation is cooperative: the shared
:class:`~searchengine.indexing.state.CrawlState` is polled before each URL,
right after each fetch, and before a page's links are expanded.  A fetch in
flight always completes.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from searchengine.db.connection import transaction
from searchengine.db.index import update_lemma_and_index
from searchengine.db.models import Site
from searchengine.db.pages import get_page_by_path, save_page
from searchengine.exceptions import PageFetchError, UnsupportedContentTypeError
from searchengine.indexing.state import CrawlState, VisitedSet
from searchengine.lemmas.extractor import LemmaExtractor
from searchengine.scraper.extractor import extract_links, path_of, strip_to_plain_text
from searchengine.scraper.fetcher import fetch_page
from searchengine.scraper.models import RawPage

logger = logging.getLogger(__name__)


def index_url(
    conn: sqlite3.Connection,
    site: Site,
    url: str,
    state: CrawlState,
    extractor: LemmaExtractor,
) -> Optional[RawPage]:
    """Fetch *url*, store it as a page of *site* and index its lemmas.

    Returns:
        The fetched page, or ``None`` if the run was stopped while the
        request was in flight (nothing is stored in that case).

    Raises:
        PageFetchError: The server answered with a status >= 400.
        UnsupportedContentTypeError: The body is not a document.
        httpx.HTTPError: The request itself failed.
    """
    raw = fetch_page(url)
    if state.stopped:
        logger.info("Indexing of %s stopped, dropping %s", site.url, url)
        return None
    if raw.status_code >= 400:
        raise PageFetchError(url, raw.status_code)

    lemma_counts = extractor.parse_lemmas(strip_to_plain_text(raw.html))
    with transaction(conn):
        page = save_page(conn, site.id, path_of(url), raw.status_code, raw.html)
        update_lemma_and_index(conn, site, page, lemma_counts)

    logger.info("Indexed %s (%d lemmas)", url, len(lemma_counts))
    return raw


def crawl_site(
    conn: sqlite3.Connection,
    site: Site,
    state: CrawlState,
    extractor: LemmaExtractor,
    visited: Optional[VisitedSet] = None,
) -> None:
    """Index every page of *site* reachable from its base URL.

    Only links whose absolute URL starts with ``site.url`` are followed.  A
    page that fails (bad status, unsupported content, network error, parse
    error …) is logged and skipped; it never aborts the crawl.  Returns
    quietly when the run is stopped.
    """
    visited = visited if visited is not None else VisitedSet()
    frontier: list[str] = [site.url]

    while frontier:
        if state.stopped:
            logger.warning("Indexing of %s stopped by request", site.url)
            return

        url = frontier.pop()
        if not visited.add(url):
            continue
        try:
            if get_page_by_path(conn, site.id, path_of(url)) is not None:
                continue
            raw = index_url(conn, site, url, state, extractor)
        except (PageFetchError, UnsupportedContentTypeError) as exc:
            logger.warning("Skipping %s: %s", url, exc)
            continue
        except Exception:
            logger.exception("Failed to index %s", url)
            continue

        if raw is None:
            continue
        if state.stopped:
            logger.warning("Indexing of %s stopped by request", site.url)
            return

        # Reversed so the first link on the page is the next one popped.
        for link in reversed(extract_links(raw.html, raw.url)):
            if link.startswith(site.url) and link not in visited:
                frontier.append(link)

    logger.info("Finished crawling %s (%d URLs visited)", site.url, len(visited))
