"""Logging setup shared by the CLI and the API.

Modules log through ``logging.getLogger(__name__)``; this only installs the
root handler and level once per process.
"""

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger with a timestamped, thread-aware format."""
    logging.basicConfig(level=level.upper(), format=_FORMAT)
    # httpx logs every request at INFO, which drowns out crawl progress.
    logging.getLogger("httpx").setLevel(logging.WARNING)
