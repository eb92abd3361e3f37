"""Search engine CLI — entry-point for indexing and search from a terminal.

Usage:
    searchengine --help

Command groups:
    db       → schema management
    index    → full crawl / single page
    search   → ranked query against the index
    stats    → per-site counts
    serve    → run the REST API with uvicorn
"""

from __future__ import annotations

from typing import Optional

import typer

from searchengine.config import settings
from searchengine.db import get_connection, init_db
from searchengine.exceptions import SearchError
from searchengine.logs import configure_logging

app = typer.Typer(
    name="searchengine",
    help="Site crawler, lemma index and ranked search.",
    no_args_is_help=True,
)


@app.callback()
def main(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level."),
) -> None:
    configure_logging(log_level)


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    conn = get_connection()
    init_db(conn)
    conn.close()
    typer.echo(f"[db init] Database ready at {settings.db_path}")


# ---------------------------------------------------------------------------
# Indexing commands
# ---------------------------------------------------------------------------
index_app = typer.Typer(help="Crawl and index sites.", no_args_is_help=True)
app.add_typer(index_app, name="index")


@index_app.command("start")
def index_start() -> None:
    """Re-crawl every site listed in INDEXING_SITES (blocks until done)."""
    from searchengine.indexing.service import IndexingService

    conn = get_connection()
    init_db(conn)
    typer.echo(f"[index start] Crawling {len(settings.sites)} site(s) …")
    try:
        outcome = IndexingService(conn).start_indexing()
    finally:
        conn.close()
    if not outcome.result:
        typer.echo(f"[index start] Rejected: {outcome.error}")
        raise typer.Exit(1)
    typer.echo("[index start] Done.")


@index_app.command("page")
def index_page(url: str = typer.Argument(..., help="URL of the page to re-index.")) -> None:
    """Re-index a single page of a configured site."""
    from searchengine.indexing.service import IndexingService

    conn = get_connection()
    init_db(conn)
    try:
        outcome = IndexingService(conn).index_page(url)
    finally:
        conn.close()
    if not outcome.result:
        typer.echo(f"[index page] Failed: {outcome.error}")
        raise typer.Exit(1)
    typer.echo(f"[index page] Indexed {url}")


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------
@app.command("search")
def search_cmd(
    query: str = typer.Argument(..., help="Search query."),
    site: Optional[str] = typer.Option(None, help="Restrict to one site (base URL)."),
    offset: int = typer.Option(0, min=0, help="Results to skip."),
    limit: int = typer.Option(20, min=1, help="Results to show."),
) -> None:
    """Search the index and print ranked results with snippets."""
    from searchengine.search.ranking import search

    conn = get_connection()
    init_db(conn)
    try:
        result = search(conn, query, site_url=site, offset=offset, limit=limit)
    except SearchError as exc:
        typer.echo(f"[search] {exc}")
        raise typer.Exit(1)
    finally:
        conn.close()

    if not result.data:
        typer.echo(f"[search] No results for {query!r} ({result.count} total).")
        return
    typer.echo(f"[search] {result.count} result(s) for {query!r}")
    for hit in result.data:
        typer.echo(f"  {hit.relevance:.3f}  {hit.site}{hit.uri}  {hit.title!r}")
        if hit.snippet:
            typer.echo(f"         {hit.snippet}")


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------
@app.command("stats")
def stats() -> None:
    """Print page and lemma counts per site."""
    from searchengine.db.stats import get_statistics

    conn = get_connection()
    init_db(conn)
    statistics = get_statistics(conn)
    conn.close()

    total = statistics.total
    typer.echo(f"[stats] sites={total.sites}  pages={total.pages}  lemmas={total.lemmas}")
    for item in statistics.detailed:
        error = f"  error={item.error!r}" if item.error else ""
        typer.echo(
            f"  {item.url}  [{item.status}]  pages={item.pages}  lemmas={item.lemmas}{error}"
        )


# ---------------------------------------------------------------------------
# API server
# ---------------------------------------------------------------------------
@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(8080, help="Port to listen on."),
) -> None:
    """Run the REST API."""
    import uvicorn

    uvicorn.run("searchengine.api.app:app", host=host, port=port)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
