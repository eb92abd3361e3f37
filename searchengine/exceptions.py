"""Exception hierarchy for the search engine."""

from __future__ import annotations


class SearchEngineError(Exception):
    """Base class for every error raised by this package."""


# ---------------------------------------------------------------------------
# Fetch errors (swallowed per page during a crawl)
# ---------------------------------------------------------------------------

class UnsupportedContentTypeError(SearchEngineError):
    """The server answered with a body that is not an HTML/XML document."""

    def __init__(self, url: str, content_type: str) -> None:
        super().__init__(f"Unsupported content type {content_type!r} at {url}")
        self.url = url
        self.content_type = content_type


class PageFetchError(SearchEngineError):
    """The server answered with an HTTP error status (>= 400)."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"HTTP {status_code} at {url}")
        self.url = url
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Query errors (propagated to the caller)
# ---------------------------------------------------------------------------

class SearchError(SearchEngineError):
    """A search request that cannot be answered."""


class InvalidQueryError(SearchError):
    pass


class SitesNotIndexedError(SearchError):
    pass


class SiteNotFoundError(SearchError):
    pass
