"""Tests for the REST API.

All tests use an in-memory SQLite database via the FastAPI TestClient.
Crawls hit a ``respx``-mocked site; no network calls are made.
"""

from __future__ import annotations

import sqlite3

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from searchengine.api.app import create_app
from searchengine.config import SiteConfig, settings
from searchengine.db.index import update_lemma_and_index
from searchengine.db.models import SiteStatus
from searchengine.db.pages import save_page
from searchengine.db.sites import create_site
from searchengine.indexing.service import (
    ALREADY_RUNNING,
    NOT_RUNNING,
    OUTSIDE_SITES,
    IndexingService,
)
from searchengine.lemmas.extractor import LemmaExtractor

SITE_URL = "http://ex.com"
_PAGE_HTML = "<html><head><title>Главная</title></head><body><p>кот кот дом</p></body></html>"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def client(conn: sqlite3.Connection, extractor: LemmaExtractor, tmp_path, monkeypatch):
    """Return a TestClient backed by an isolated in-memory DB.

    The lifespan opens its own connection in a temporary workspace; once it
    has run, the app state is pointed at the test connection instead.
    """
    monkeypatch.setattr(settings, "workspace_dir", tmp_path)
    app = create_app()

    with TestClient(app, raise_server_exceptions=True) as c:
        c.app.state.db = conn
        c.app.state.extractor = extractor
        c.app.state.indexing = IndexingService(
            conn,
            sites=[SiteConfig(url=SITE_URL, name="Example")],
            extractor=extractor,
        )
        yield c


def _seed_indexed_site(conn: sqlite3.Connection, extractor: LemmaExtractor) -> None:
    site = create_site(conn, SITE_URL, "Example", SiteStatus.INDEXED)
    page = save_page(conn, site.id, "/", 200, _PAGE_HTML)
    update_lemma_and_index(conn, site, page, extractor.parse_lemmas("Главная кот кот дом"))


# ---------------------------------------------------------------------------
# Indexing
# ---------------------------------------------------------------------------

class TestIndexingEndpoints:
    def test_start_and_finish(self, client: TestClient, conn: sqlite3.Connection) -> None:
        with respx.mock(assert_all_called=False) as router:
            router.get(f"{SITE_URL}/").mock(return_value=httpx.Response(200, html=_PAGE_HTML))
            resp = client.get("/api/startIndexing")
            client.app.state.indexing.wait(timeout=10)

        assert resp.status_code == 200
        assert resp.json() == {"result": True}
        stats = client.get("/api/statistics").json()["statistics"]
        assert stats["detailed"][0]["status"] == "INDEXED"
        assert stats["total"]["pages"] == 1

    def test_start_while_running(self, client: TestClient, conn: sqlite3.Connection) -> None:
        create_site(conn, SITE_URL, "Example", SiteStatus.INDEXING)
        resp = client.get("/api/startIndexing")
        assert resp.json() == {"result": False, "error": ALREADY_RUNNING}

    def test_stop_when_idle(self, client: TestClient) -> None:
        resp = client.get("/api/stopIndexing")
        assert resp.json() == {"result": False, "error": NOT_RUNNING}

    def test_index_page_outside_sites(self, client: TestClient) -> None:
        resp = client.post("/api/indexPage", params={"url": "http://other.com/x"})
        assert resp.json() == {"result": False, "error": OUTSIDE_SITES}

    def test_index_page(self, client: TestClient) -> None:
        with respx.mock:
            respx.get(f"{SITE_URL}/about").mock(return_value=httpx.Response(200, html=_PAGE_HTML))
            resp = client.post("/api/indexPage", params={"url": f"{SITE_URL}/about"})

        assert resp.json() == {"result": True}

    def test_index_page_requires_url(self, client: TestClient) -> None:
        assert client.post("/api/indexPage").status_code == 422


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

class TestSearchEndpoint:
    def test_returns_ranked_results(self, client: TestClient, conn: sqlite3.Connection, extractor: LemmaExtractor) -> None:
        _seed_indexed_site(conn, extractor)
        resp = client.get("/api/search", params={"query": "кот"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["result"] is True
        assert body["count"] == 1
        assert body["data"] == [
            {
                "site": SITE_URL,
                "siteName": "Example",
                "uri": "/",
                "title": "Главная",
                "snippet": "Главная кот <b>кот</b> дом",
                "relevance": 1.0,
            }
        ]

    def test_empty_query_is_bad_request(self, client: TestClient) -> None:
        resp = client.get("/api/search", params={"query": " "})
        assert resp.status_code == 400
        assert resp.json()["result"] is False
        assert resp.json()["error"]

    def test_unknown_site_is_bad_request(self, client: TestClient, conn: sqlite3.Connection, extractor: LemmaExtractor) -> None:
        _seed_indexed_site(conn, extractor)
        resp = client.get("/api/search", params={"query": "кот", "site": "http://other.com"})
        assert resp.status_code == 400

    def test_negative_offset_rejected(self, client: TestClient) -> None:
        resp = client.get("/api/search", params={"query": "кот", "offset": -1})
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

class TestStatisticsEndpoint:
    def test_empty(self, client: TestClient) -> None:
        body = client.get("/api/statistics").json()
        assert body["result"] is True
        assert body["statistics"]["total"] == {
            "sites": 0,
            "pages": 0,
            "lemmas": 0,
            "indexing": False,
        }

    def test_per_site_detail(self, client: TestClient, conn: sqlite3.Connection, extractor: LemmaExtractor) -> None:
        _seed_indexed_site(conn, extractor)
        detail = client.get("/api/statistics").json()["statistics"]["detailed"][0]
        assert detail["url"] == SITE_URL
        assert detail["name"] == "Example"
        assert detail["status"] == "INDEXED"
        assert detail["error"] is None
        assert (detail["pages"], detail["lemmas"]) == (1, 3)
