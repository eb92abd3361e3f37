"""Operations on the ``pages`` table.

Deleting a page is *not* offered here: it must go through
:func:`searchengine.db.index.delete_page_data` so lemma frequencies stay
consistent.
"""

from __future__ import annotations

import sqlite3
from typing import Optional

from searchengine.db.connection import transaction
from searchengine.db.models import Page


def _row_to_page(row: sqlite3.Row) -> Page:
    return Page(
        id=row["id"],
        site_id=row["site_id"],
        path=row["path"],
        code=row["code"],
        content=row["content"],
    )


def save_page(
    conn: sqlite3.Connection,
    site_id: int,
    path: str,
    code: int,
    content: str,
) -> Page:
    """Insert a fetched page and return it.

    Raises:
        sqlite3.IntegrityError: If the site already has a page at *path*.
    """
    with transaction(conn):
        cursor = conn.execute(
            "INSERT INTO pages (site_id, path, code, content) VALUES (?, ?, ?, ?)",
            (site_id, path, code, content),
        )
    return Page(id=cursor.lastrowid, site_id=site_id, path=path, code=code, content=content)  # type: ignore[arg-type]


def get_page(conn: sqlite3.Connection, page_id: int) -> Optional[Page]:
    row = conn.execute("SELECT * FROM pages WHERE id = ?", (page_id,)).fetchone()
    return _row_to_page(row) if row else None


def get_page_by_path(conn: sqlite3.Connection, site_id: int, path: str) -> Optional[Page]:
    row = conn.execute(
        "SELECT * FROM pages WHERE site_id = ? AND path = ?", (site_id, path)
    ).fetchone()
    return _row_to_page(row) if row else None


def get_pages(conn: sqlite3.Connection, page_ids: list[int]) -> list[Page]:
    """Fetch several pages at once, in no particular order."""
    if not page_ids:
        return []
    placeholders = ",".join("?" for _ in page_ids)
    rows = conn.execute(
        f"SELECT * FROM pages WHERE id IN ({placeholders})", page_ids  # noqa: S608
    ).fetchall()
    return [_row_to_page(r) for r in rows]


def count_pages(conn: sqlite3.Connection, site_id: int) -> int:
    row = conn.execute(
        "SELECT COUNT(*) FROM pages WHERE site_id = ?", (site_id,)
    ).fetchone()
    return row[0]
