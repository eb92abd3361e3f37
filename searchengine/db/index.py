"""Inverted-index maintenance: lemmas, index entries and their retraction.

Invariants kept by this module:

* ``lemmas.frequency`` equals the number of distinct pages that have an
  ``index_entries`` row for that lemma;
* there is at most one ``index_entries`` row per ``(page, lemma)``.

Every function that touches more than one row runs inside a single
:func:`~searchengine.db.connection.transaction`, so a concurrent reader never
sees a lemma counted without its index row or the other way round.
"""

from __future__ import annotations

import sqlite3
from typing import Iterable, Mapping, Optional

from searchengine.db.connection import transaction
from searchengine.db.models import IndexEntry, Lemma, Page, Site


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_lemma(row: sqlite3.Row) -> Lemma:
    return Lemma(
        id=row["id"],
        site_id=row["site_id"],
        lemma=row["lemma"],
        frequency=row["frequency"],
    )


def _row_to_entry(row: sqlite3.Row) -> IndexEntry:
    return IndexEntry(
        id=row["id"],
        page_id=row["page_id"],
        lemma_id=row["lemma_id"],
        rank=row["rank"],
    )


def _has_entry(conn: sqlite3.Connection, page_id: int, lemma_id: int) -> bool:
    row = conn.execute(
        "SELECT 1 FROM index_entries WHERE page_id = ? AND lemma_id = ?",
        (page_id, lemma_id),
    ).fetchone()
    return row is not None


def _placeholders(values: list) -> str:  # type: ignore[type-arg]
    return ",".join("?" for _ in values)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def update_lemma_and_index(
    conn: sqlite3.Connection,
    site: Site,
    page: Page,
    lemma_counts: Mapping[str, int],
) -> None:
    """Record that *page* contains each lemma of *lemma_counts*.

    For every ``(lemma, count)``:

    1. a lemma unknown to the site is created with frequency 1; a known lemma
       gains +1 only if this page has no index row for it yet;
    2. the ``(page, lemma)`` index row is created with ``rank = count`` unless
       it already exists.

    The existing index row, not the frequency, guards against double
    counting, so calling this twice for the same page is a no-op the second
    time.
    """
    with transaction(conn):
        for text, count in lemma_counts.items():
            row = conn.execute(
                "SELECT * FROM lemmas WHERE site_id = ? AND lemma = ?",
                (site.id, text),
            ).fetchone()

            if row is None:
                cursor = conn.execute(
                    "INSERT INTO lemmas (site_id, lemma, frequency) VALUES (?, ?, 1)",
                    (site.id, text),
                )
                lemma_id = cursor.lastrowid
                has_entry = False
            else:
                lemma_id = row["id"]
                has_entry = _has_entry(conn, page.id, lemma_id)
                if not has_entry:
                    conn.execute(
                        "UPDATE lemmas SET frequency = frequency + 1 WHERE id = ?",
                        (lemma_id,),
                    )

            if not has_entry:
                conn.execute(
                    "INSERT INTO index_entries (page_id, lemma_id, rank) VALUES (?, ?, ?)",
                    (page.id, lemma_id, float(count)),
                )


def delete_page_data(conn: sqlite3.Connection, page: Page) -> None:
    """Remove *page* and retract its contribution to every lemma.

    Each lemma referenced by the page loses 1 frequency; a lemma reaching
    zero is deleted together with its remaining index rows.  Then the page's
    own index rows and the page itself are deleted.  This exactly reverses one
    :func:`update_lemma_and_index` call for the page.
    """
    with transaction(conn):
        rows = conn.execute(
            """
            SELECT l.id, l.frequency
            FROM   index_entries i
            JOIN   lemmas l ON l.id = i.lemma_id
            WHERE  i.page_id = ?
            """,
            (page.id,),
        ).fetchall()

        for row in rows:
            frequency = row["frequency"] - 1
            if frequency <= 0:
                conn.execute("DELETE FROM index_entries WHERE lemma_id = ?", (row["id"],))
                conn.execute("DELETE FROM lemmas WHERE id = ?", (row["id"],))
            else:
                conn.execute(
                    "UPDATE lemmas SET frequency = ? WHERE id = ?", (frequency, row["id"])
                )

        conn.execute("DELETE FROM index_entries WHERE page_id = ?", (page.id,))
        conn.execute("DELETE FROM pages WHERE id = ?", (page.id,))


def delete_old_site_data(conn: sqlite3.Connection, site: Site) -> None:
    """Delete every page, lemma and index row of *site*, then the site row."""
    with transaction(conn):
        conn.execute(
            """
            DELETE FROM index_entries
            WHERE  page_id IN (SELECT id FROM pages WHERE site_id = ?)
            """,
            (site.id,),
        )
        conn.execute("DELETE FROM lemmas WHERE site_id = ?", (site.id,))
        conn.execute("DELETE FROM pages WHERE site_id = ?", (site.id,))
        conn.execute("DELETE FROM sites WHERE id = ?", (site.id,))


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def get_lemma(conn: sqlite3.Connection, site_id: int, text: str) -> Optional[Lemma]:
    row = conn.execute(
        "SELECT * FROM lemmas WHERE site_id = ? AND lemma = ?", (site_id, text)
    ).fetchone()
    return _row_to_lemma(row) if row else None


def count_lemmas(conn: sqlite3.Connection, site_id: int) -> int:
    row = conn.execute(
        "SELECT COUNT(*) FROM lemmas WHERE site_id = ?", (site_id,)
    ).fetchone()
    return row[0]


def list_page_entries(conn: sqlite3.Connection, page_id: int) -> list[IndexEntry]:
    rows = conn.execute(
        "SELECT * FROM index_entries WHERE page_id = ? ORDER BY id", (page_id,)
    ).fetchall()
    return [_row_to_entry(r) for r in rows]


def pages_for_lemma(conn: sqlite3.Connection, lemma_id: int) -> set[int]:
    """Ids of all pages containing the lemma."""
    rows = conn.execute(
        "SELECT page_id FROM index_entries WHERE lemma_id = ?", (lemma_id,)
    ).fetchall()
    return {r[0] for r in rows}


def filter_pages_with_lemma(
    conn: sqlite3.Connection, lemma_id: int, page_ids: Iterable[int]
) -> set[int]:
    """Subset of *page_ids* that contain the lemma."""
    candidates = set(page_ids)
    if not candidates:
        return set()
    return pages_for_lemma(conn, lemma_id) & candidates


def sum_rank(conn: sqlite3.Connection, page_id: int, lemma_ids: Iterable[int]) -> float:
    """Sum of ranks of *page_id* over the given lemmas."""
    ids = list(lemma_ids)
    if not ids:
        return 0.0
    row = conn.execute(
        f"""
        SELECT COALESCE(SUM(rank), 0)
        FROM   index_entries
        WHERE  page_id = ? AND lemma_id IN ({_placeholders(ids)})
        """,  # noqa: S608
        [page_id, *ids],
    ).fetchone()
    return float(row[0])
