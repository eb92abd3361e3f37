"""HTML utilities: plain text, title, outbound links and URL paths."""

from __future__ import annotations

from typing import List
from urllib.parse import urldefrag, urljoin, urlsplit

from bs4 import BeautifulSoup

# Link schemes that can never point at a crawlable page.
_SKIPPED_SCHEMES = ("mailto:", "tel:", "javascript:", "data:")


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def strip_to_plain_text(html: str) -> str:
    """Return the visible text of *html* as a single whitespace-joined string.

    ``<script>``, ``<style>`` and ``<noscript>`` bodies are dropped; all other
    text nodes are kept in document order, title included.
    """
    soup = _soup(html)
    for tag in soup(["script", "style", "noscript", "template"]):
        tag.decompose()
    return " ".join(soup.get_text(separator=" ").split())


def extract_title(html: str) -> str:
    """Return the text content of the first ``<title>`` tag, or empty string."""
    soup = _soup(html)
    if soup.title is None:
        return ""
    return soup.title.get_text(strip=True)


def extract_links(html: str, base_url: str) -> List[str]:
    """Return the absolute URLs of all ``<a href>`` links in *html*.

    Relative hrefs are resolved against *base_url*, fragments are removed and
    duplicates dropped while preserving document order.
    """
    seen: set[str] = set()
    links: List[str] = []
    for anchor in _soup(html).find_all("a", href=True):
        href = anchor["href"].strip()
        if not href or href.startswith("#") or href.lower().startswith(_SKIPPED_SCHEMES):
            continue
        absolute, _fragment = urldefrag(urljoin(base_url, href))
        if absolute and absolute not in seen:
            seen.add(absolute)
            links.append(absolute)
    return links


def path_of(url: str) -> str:
    """Return the path component of *url*; the site root maps to ``/``."""
    return urlsplit(url).path or "/"
