"""Centralised settings for the search engine.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).

The crawl targets come from ``INDEXING_SITES``, a JSON list such as::

    INDEXING_SITES='[{"url": "https://example.com", "name": "Example"}]'
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from the package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/118.0.0.0 Safari/537.36"
)


@dataclass
class SiteConfig:
    """A site listed in the configuration: base URL plus display name."""

    url: str
    name: str


def _load_sites() -> list[SiteConfig]:
    """Parse ``INDEXING_SITES`` into :class:`SiteConfig` objects.

    Raises:
        ValueError: If the variable is not a JSON list of ``{url, name}``
            objects.
    """
    raw = os.environ.get("INDEXING_SITES", "").strip()
    if not raw:
        return []
    try:
        entries = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"INDEXING_SITES is not valid JSON: {exc}") from exc
    if not isinstance(entries, list):
        raise ValueError("INDEXING_SITES must be a JSON list")
    sites: list[SiteConfig] = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("url"):
            raise ValueError(f"Invalid site entry in INDEXING_SITES: {entry!r}")
        sites.append(SiteConfig(url=entry["url"], name=entry.get("name") or entry["url"]))
    return sites


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("SEARCHENGINE_WORKSPACE", Path.home() / ".searchengine_data")
        )
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite database file."""
        return self.workspace_dir / "index.db"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Sites to crawl
    # ------------------------------------------------------------------
    sites: list[SiteConfig] = field(default_factory=_load_sites)

    # ------------------------------------------------------------------
    # Crawler
    # ------------------------------------------------------------------
    user_agent: str = field(
        default_factory=lambda: os.environ.get("CRAWLER_USER_AGENT", _DEFAULT_USER_AGENT)
    )
    referrer: str = field(
        default_factory=lambda: os.environ.get("CRAWLER_REFERRER", "http://www.google.com")
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "5.0"))
    )
    crawl_delay: float = field(
        default_factory=lambda: float(os.environ.get("CRAWL_DELAY", "0.0"))
    )
    crawl_workers: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_WORKERS", "4"))
    )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    snippet_size: int = field(
        default_factory=lambda: int(os.environ.get("SNIPPET_SIZE", "200"))
    )
    exclusion_threshold: float = field(
        default_factory=lambda: float(os.environ.get("LEMMA_EXCLUSION_THRESHOLD", "0.75"))
    )
    exclusion_min_pages: int = field(
        default_factory=lambda: int(os.environ.get("LEMMA_EXCLUSION_MIN_PAGES", "3"))
    )

    # ------------------------------------------------------------------
    # Morphology
    # ------------------------------------------------------------------
    morph_min_score_ratio: float = field(
        default_factory=lambda: float(os.environ.get("MORPH_MIN_SCORE_RATIO", "0.1"))
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton — import this everywhere:
#   from searchengine.config import settings
settings = Settings()
