"""Scraper package — page fetch & HTML utilities."""

from searchengine.scraper.extractor import (
    extract_links,
    extract_title,
    path_of,
    strip_to_plain_text,
)
from searchengine.scraper.fetcher import fetch_page
from searchengine.scraper.models import RawPage

__all__ = [
    "fetch_page",
    "strip_to_plain_text",
    "extract_title",
    "extract_links",
    "path_of",
    "RawPage",
]
