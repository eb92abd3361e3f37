"""SQLite connection factory and transaction helper.

Usage::

    from searchengine.db.connection import get_connection, transaction

    conn = get_connection()
    with transaction(conn):
        conn.execute("UPDATE lemmas SET frequency = frequency + 1 WHERE id = ?", (1,))
"""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from searchengine.config import settings

# One connection is shared by the API and every crawl thread; this lock
# makes each transaction (and each multi-query read) atomic with respect to
# the others.
_lock = threading.RLock()
# Nesting depth of the open transaction, by connection id.
_depth: dict[int, int] = {}


def get_connection(db_path: Optional[Union[Path, str]] = None) -> sqlite3.Connection:
    """Open and configure a SQLite connection.

    Steps performed on every new connection:
    1. Enable ``PRAGMA foreign_keys = ON``.
    2. Switch to WAL journal mode for concurrent readers.

    Args:
        db_path: Override the DB path.  Defaults to ``settings.db_path``.

    Returns:
        A configured :class:`sqlite3.Connection` with ``row_factory`` set to
        :class:`sqlite3.Row` so columns can be accessed by name.  The
        connection may be used from several threads; wrap work in
        :func:`transaction`.
    """
    path = db_path or settings.db_path

    # Create parent directory if needed (no-op for `:memory:`)
    if str(path) != ":memory:":
        settings.ensure_workspace()

    conn = sqlite3.connect(str(path), check_same_thread=False)
    conn.row_factory = sqlite3.Row

    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA journal_mode = WAL")

    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run a block as one transaction, exclusive across threads.

    Commits on success and rolls back on error.  Re-entrant: a nested
    ``transaction`` on the same connection joins the outer one instead of
    committing early.
    """
    key = id(conn)
    with _lock:
        if _depth.get(key):
            _depth[key] += 1
            try:
                yield conn
            finally:
                _depth[key] -= 1
            return
        _depth[key] = 1
        try:
            with conn:
                yield conn
        finally:
            del _depth[key]
