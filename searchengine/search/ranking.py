"""Relevance-ranked search over the lemma index.

For each target site:

1. query lemmas present on ``exclusion_threshold`` (75 %) or more of the
   site's pages are dropped, the rest are ordered rarest first;
2. candidate pages are those of the rarest lemma, intersected with the pages
   of each following lemma;
3. a page's absolute relevance is the sum of its ranks over those lemmas.

Scores of all sites are then divided by the overall maximum, so the best page
always has relevance 1.0.
"""

from __future__ import annotations

import logging
import math
import sqlite3
from dataclasses import dataclass, field
from typing import Optional

from searchengine.config import settings
from searchengine.db.connection import transaction
from searchengine.db.index import (
    filter_pages_with_lemma,
    get_lemma,
    pages_for_lemma,
    sum_rank,
)
from searchengine.db.models import Lemma, Page, Site, SiteStatus
from searchengine.db.pages import count_pages, get_pages
from searchengine.db.sites import find_site_for_url, list_sites
from searchengine.exceptions import (
    InvalidQueryError,
    SiteNotFoundError,
    SitesNotIndexedError,
)
from searchengine.lemmas.extractor import LemmaExtractor, get_extractor
from searchengine.scraper.extractor import extract_title, strip_to_plain_text
from searchengine.search.snippet import generate_snippet

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20


@dataclass
class SearchHit:
    site: str
    site_name: str
    uri: str
    title: str
    snippet: str
    relevance: float


@dataclass
class SearchResult:
    count: int
    data: list[SearchHit] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Per-site ranking
# ---------------------------------------------------------------------------

def exclusion_threshold(page_count: int) -> int:
    """Frequency from which a lemma counts as near-universal on a site."""
    # Round half up, not half to even.
    return math.floor(page_count * settings.exclusion_threshold + 0.5)


def select_lemmas(conn: sqlite3.Connection, site: Site, lemma_texts: set[str]) -> list[Lemma]:
    """Site lemmas for the query, near-universal ones removed, rarest first.

    The cut only applies to sites with at least ``exclusion_min_pages``
    pages.  On a two-page site the threshold is 2, so a word on both pages
    would be dropped and searching a small site for its one shared word
    ("кот" on both pages of a home page and an about page) would return
    nothing.
    """
    found = [
        lemma
        for lemma in (get_lemma(conn, site.id, text) for text in lemma_texts)
        if lemma is not None
    ]
    page_count = count_pages(conn, site.id)
    if page_count >= settings.exclusion_min_pages:
        threshold = exclusion_threshold(page_count)
        found = [lemma for lemma in found if lemma.frequency < threshold]
    return sorted(found, key=lambda lemma: lemma.frequency)


def find_pages(conn: sqlite3.Connection, lemmas: list[Lemma]) -> set[int]:
    """Ids of pages containing every lemma of *lemmas* (rarest first)."""
    if not lemmas:
        return set()
    pages = pages_for_lemma(conn, lemmas[0].id)
    for lemma in lemmas[1:]:
        if not pages:
            break
        pages = filter_pages_with_lemma(conn, lemma.id, pages)
    return pages


def rank_site(conn: sqlite3.Connection, site: Site, lemma_texts: set[str]) -> dict[int, float]:
    """Absolute relevance of every matching page of *site*, by page id."""
    with transaction(conn):
        lemmas = select_lemmas(conn, site, lemma_texts)
        lemma_ids = [lemma.id for lemma in lemmas]
        return {
            page_id: sum_rank(conn, page_id, lemma_ids)
            for page_id in find_pages(conn, lemmas)
        }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def _target_sites(conn: sqlite3.Connection, site_url: Optional[str]) -> list[Site]:
    if not site_url or not site_url.strip():
        return list_sites(conn)
    site = find_site_for_url(conn, site_url.strip())
    if site is None:
        raise SiteNotFoundError(f"Site {site_url!r} is not indexed by this engine")
    return [site]


def _to_hit(query: str, page: Page, site: Site, relevance: float, extractor: LemmaExtractor) -> SearchHit:
    return SearchHit(
        site=site.url,
        site_name=site.name,
        uri=page.path,
        title=extract_title(page.content),
        snippet=generate_snippet(query, strip_to_plain_text(page.content), extractor),
        relevance=relevance,
    )


def search(
    conn: sqlite3.Connection,
    query: str,
    site_url: Optional[str] = None,
    offset: int = 0,
    limit: int = DEFAULT_LIMIT,
    extractor: Optional[LemmaExtractor] = None,
) -> SearchResult:
    """Search every indexed site, or the one owning *site_url*.

    Args:
        query: Free text; its lemmas are matched against the index.
        site_url: Restrict to the site whose base URL prefixes this value.
        offset: Number of ranked results to skip; may exceed the total.
        limit: Maximum number of results to return.

    Returns:
        The total number of matching pages and one page of results, each with
        its title, snippet and relevance in ``[0, 1]``.

    Raises:
        InvalidQueryError: *query* is empty or blank.
        SiteNotFoundError: No site owns *site_url*.
        SitesNotIndexedError: A target site is not in INDEXED status.
    """
    if query is None or not query.strip():
        raise InvalidQueryError("Search query is empty")

    sites = _target_sites(conn, site_url)
    if not all(site.status is SiteStatus.INDEXED for site in sites):
        raise SitesNotIndexedError("The requested sites are not fully indexed")

    extractor = extractor or get_extractor()
    lemma_texts = set(extractor.parse_lemmas(query))
    logger.info(
        "Searching %r in %s (offset=%d, limit=%d)",
        query, [site.url for site in sites], offset, limit,
    )

    scores: dict[int, float] = {}
    site_of_page: dict[int, Site] = {}
    for site in sites:
        for page_id, score in rank_site(conn, site, lemma_texts).items():
            scores[page_id] = score
            site_of_page[page_id] = site

    if not scores:
        return SearchResult(count=0)

    max_score = max(scores.values())
    ranked = sorted(
        ((page_id, score / max_score) for page_id, score in scores.items()),
        key=lambda item: item[1],
        reverse=True,
    )

    start = min(max(offset, 0), len(ranked))
    end = min(start + max(limit, 0), len(ranked))
    window = ranked[start:end]

    pages = {page.id: page for page in get_pages(conn, [page_id for page_id, _ in window])}
    hits = [
        _to_hit(query, pages[page_id], site_of_page[page_id], relevance, extractor)
        for page_id, relevance in window
        if page_id in pages
    ]
    logger.info("Search %r matched %d page(s)", query, len(ranked))
    return SearchResult(count=len(ranked), data=hits)
