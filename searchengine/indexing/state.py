"""Shared mutable state of a crawl run.

Both containers are handed explicitly to every crawl task; nothing here is
module-global.
"""

from __future__ import annotations

import threading


class VisitedSet:
    """Thread-safe set of URLs already taken from the frontier."""

    def __init__(self) -> None:
        self._urls: set[str] = set()
        self._lock = threading.Lock()

    def add(self, url: str) -> bool:
        """Insert *url*; return ``True`` only if it was not present before."""
        with self._lock:
            if url in self._urls:
                return False
            self._urls.add(url)
            return True

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._urls

    def __len__(self) -> int:
        with self._lock:
            return len(self._urls)


class CrawlState:
    """Cancellation flag shared by all crawl tasks of one run."""

    def __init__(self) -> None:
        self._stop = threading.Event()

    def stop(self) -> None:
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()
