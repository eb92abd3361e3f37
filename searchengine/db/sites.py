"""CRUD operations for the ``sites`` table."""

from __future__ import annotations

import sqlite3
from time import time
from typing import Optional

from searchengine.db.connection import transaction
from searchengine.db.models import Site, SiteStatus


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_site(row: sqlite3.Row) -> Site:
    return Site(
        id=row["id"],
        url=row["url"],
        name=row["name"],
        status=SiteStatus(row["status"]),
        status_time=row["status_time"],
        last_error=row["last_error"],
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def create_site(
    conn: sqlite3.Connection,
    url: str,
    name: str,
    status: SiteStatus,
    last_error: Optional[str] = None,
) -> Site:
    """Insert a new site and return it.

    Raises:
        sqlite3.IntegrityError: If a site with the same URL already exists.
    """
    with transaction(conn):
        cursor = conn.execute(
            """
            INSERT INTO sites (url, name, status, status_time, last_error)
            VALUES (?, ?, ?, ?, ?)
            """,
            (url, name, status.value, int(time()), last_error),
        )
    return get_site(conn, cursor.lastrowid)  # type: ignore[return-value,arg-type]


def get_site(conn: sqlite3.Connection, site_id: int) -> Optional[Site]:
    """Fetch a single site by id.  Returns ``None`` if not found."""
    row = conn.execute("SELECT * FROM sites WHERE id = ?", (site_id,)).fetchone()
    return _row_to_site(row) if row else None


def get_site_by_url(conn: sqlite3.Connection, url: str) -> Optional[Site]:
    """Fetch the site registered under exactly *url*."""
    row = conn.execute("SELECT * FROM sites WHERE url = ?", (url,)).fetchone()
    return _row_to_site(row) if row else None


def find_site_for_url(conn: sqlite3.Connection, url: str) -> Optional[Site]:
    """Return the site whose base URL is the longest prefix of *url*."""
    row = conn.execute(
        """
        SELECT *
        FROM   sites
        WHERE  substr(?, 1, length(url)) = url
        ORDER  BY length(url) DESC
        LIMIT  1
        """,
        (url,),
    ).fetchone()
    return _row_to_site(row) if row else None


def list_sites(conn: sqlite3.Connection) -> list[Site]:
    rows = conn.execute("SELECT * FROM sites ORDER BY id").fetchall()
    return [_row_to_site(r) for r in rows]


def list_sites_by_status(conn: sqlite3.Connection, status: SiteStatus) -> list[Site]:
    rows = conn.execute(
        "SELECT * FROM sites WHERE status = ? ORDER BY id", (status.value,)
    ).fetchall()
    return [_row_to_site(r) for r in rows]


def any_site_indexing(conn: sqlite3.Connection) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sites WHERE status = ? LIMIT 1", (SiteStatus.INDEXING.value,)
    ).fetchone()
    return row is not None


def update_site_status(
    conn: sqlite3.Connection,
    site_id: int,
    status: SiteStatus,
    last_error: Optional[str] = None,
) -> Site:
    """Set a site's status and error message; ``status_time`` is refreshed.

    Raises:
        ValueError: If ``site_id`` does not exist.
    """
    with transaction(conn):
        cursor = conn.execute(
            "UPDATE sites SET status = ?, status_time = ?, last_error = ? WHERE id = ?",
            (status.value, int(time()), last_error, site_id),
        )
    if cursor.rowcount == 0:
        raise ValueError(f"Site not found: {site_id!r}")
    return get_site(conn, site_id)  # type: ignore[return-value]
