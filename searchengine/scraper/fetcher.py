"""HTTP fetcher used by the crawler.

Requests carry the configured ``User-Agent`` and ``Referer`` headers and the
configured timeout.  Unlike a generic client, an HTTP error status is *not*
raised here: the crawler decides what a 404 means.
"""

from __future__ import annotations

import time

import httpx

from searchengine.config import settings
from searchengine.exceptions import UnsupportedContentTypeError
from searchengine.scraper.models import RawPage

# Content types the crawler can parse into a document.
_SUPPORTED_TYPES = ("text/", "application/xml", "application/xhtml+xml")


def _is_supported(content_type: str) -> bool:
    """Return ``True`` if *content_type* names an HTML/XML/text body.

    A missing header is accepted; servers omitting it usually send HTML.
    """
    if not content_type:
        return True
    mime = content_type.split(";", 1)[0].strip().lower()
    return any(mime.startswith(prefix) for prefix in _SUPPORTED_TYPES)


def _headers() -> dict[str, str]:
    return {
        "User-Agent": settings.user_agent,
        "Referer": settings.referrer,
    }


def fetch_page(url: str) -> RawPage:
    """Fetch *url* and return a :class:`RawPage`.

    Redirects are followed.  The returned ``status_code`` is that of the
    final response and may be >= 400.

    Raises:
        UnsupportedContentTypeError: If the body is not an HTML/XML document
            (images, PDFs, archives …).
        httpx.HTTPError: On connection failures and timeouts.
    """
    if settings.crawl_delay > 0:
        time.sleep(settings.crawl_delay)

    with httpx.Client(
        headers=_headers(),
        timeout=settings.request_timeout,
        follow_redirects=True,
    ) as client:
        response = client.get(url)

    content_type = response.headers.get("content-type", "")
    if not _is_supported(content_type):
        raise UnsupportedContentTypeError(url, content_type)

    # Links on the page resolve against where the redirects ended.
    return RawPage(
        url=str(response.url),
        html=response.text,
        status_code=response.status_code,
        content_type=content_type,
    )
