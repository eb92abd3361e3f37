"""Schema creation and versioned migrations for the index database.

``init_db(conn)`` can run against a fresh or an existing database: the base
schema is ``CREATE ... IF NOT EXISTS`` only, and each entry of
:data:`MIGRATIONS` is applied at most once, recorded in ``schema_version``.
"""

from __future__ import annotations

import logging
import sqlite3

from searchengine.config import settings

logger = logging.getLogger(__name__)

# ``(version, sql)`` pairs, strictly increasing; append new ones at the end.
MIGRATIONS: list[tuple[int, str]] = [
    (1, "CREATE INDEX IF NOT EXISTS idx_pages_site ON pages(site_id)"),
]

_VERSION_TABLE = """
CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER PRIMARY KEY,
    applied_at INTEGER DEFAULT (unixepoch())
)
"""


def init_db(conn: sqlite3.Connection) -> None:
    """Create the sites/pages/lemmas/index tables and apply pending migrations.

    Args:
        conn: An open connection from
            :func:`~searchengine.db.connection.get_connection`.
    """
    # executescript() commits any pending transaction first; the script is
    # DDL only.
    conn.executescript(settings.schema_path.read_text(encoding="utf-8"))
    with conn:
        conn.execute(_VERSION_TABLE)
    migrate(conn)


def current_version(conn: sqlite3.Connection) -> int:
    """Highest migration version recorded, or 0 on a fresh database."""
    (version,) = conn.execute(
        "SELECT COALESCE(MAX(version), 0) FROM schema_version"
    ).fetchone()
    return version


def migrate(conn: sqlite3.Connection) -> None:
    """Apply every migration newer than :func:`current_version`, in order.

    Each migration commits together with its ``schema_version`` row, so an
    interrupted run resumes at the first unapplied version.
    """
    applied = current_version(conn)
    for version, sql in MIGRATIONS:
        if version <= applied:
            continue
        with conn:
            conn.execute(sql)
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (version,))
        logger.info("Applied schema migration %d", version)
