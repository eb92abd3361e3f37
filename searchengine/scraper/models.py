"""Data models for the scraper layer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RawPage:
    """The raw HTTP response for a single URL fetch."""

    url: str  # final URL, after redirects
    html: str
    status_code: int
    content_type: str = "text/html"
