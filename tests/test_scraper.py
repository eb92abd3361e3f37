"""Tests for the scraper layer — page fetch and HTML utilities.

Mocking strategy:
- ``respx`` patches ``httpx`` at the transport layer so no real network calls
  are made during ``fetch_page`` tests.
"""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest
import respx

from searchengine.config import settings
from searchengine.exceptions import UnsupportedContentTypeError
from searchengine.scraper.extractor import (
    extract_links,
    extract_title,
    path_of,
    strip_to_plain_text,
)
from searchengine.scraper.fetcher import _is_supported, fetch_page
from searchengine.scraper.models import RawPage


# ---------------------------------------------------------------------------
# Fixtures / constants
# ---------------------------------------------------------------------------

_SIMPLE_HTML = """\
<!DOCTYPE html>
<html>
<head><title>Кошачий дом</title><style>.x { color: red }</style></head>
<body>
  <script>var hidden = 1;</script>
  <p>Большой кот живёт   в доме.</p>
  <a href="/about">О нас</a>
  <a href="http://ex.com/news?page=2#top">Новости</a>
  <a href="http://other.com/x">Чужой</a>
  <a href="/about">Дубль</a>
  <a href="#fragment">Якорь</a>
  <a href="mailto:cat@ex.com">Почта</a>
</body>
</html>
"""


# ---------------------------------------------------------------------------
# fetch_page tests
# ---------------------------------------------------------------------------

class TestFetchPage:
    def test_successful_fetch_returns_raw_page(self) -> None:
        with respx.mock:
            respx.get("http://ex.com/article").mock(
                return_value=httpx.Response(200, html=_SIMPLE_HTML)
            )
            raw = fetch_page("http://ex.com/article")

        assert isinstance(raw, RawPage)
        assert raw.url == "http://ex.com/article"
        assert raw.status_code == 200
        assert "<title>Кошачий дом</title>" in raw.html

    def test_url_is_final_location_after_redirect(self) -> None:
        with respx.mock:
            respx.get("http://ex.com/").mock(
                return_value=httpx.Response(301, headers={"location": "http://ex.com/ru/"})
            )
            respx.get("http://ex.com/ru/").mock(
                return_value=httpx.Response(200, html=_SIMPLE_HTML)
            )
            raw = fetch_page("http://ex.com/")

        assert raw.url == "http://ex.com/ru/"
        assert raw.status_code == 200

    def test_error_status_is_returned_not_raised(self) -> None:
        with respx.mock:
            respx.get("http://ex.com/missing").mock(
                return_value=httpx.Response(404, html="<p>Not Found</p>")
            )
            raw = fetch_page("http://ex.com/missing")

        assert raw.status_code == 404

    def test_sends_identity_headers(self) -> None:
        with respx.mock:
            route = respx.get("http://ex.com/").mock(
                return_value=httpx.Response(200, html=_SIMPLE_HTML)
            )
            fetch_page("http://ex.com/")

        request = route.calls.last.request
        assert request.headers["User-Agent"] == settings.user_agent
        assert request.headers["Referer"] == settings.referrer

    def test_unsupported_content_type_raises(self) -> None:
        with respx.mock:
            respx.get("http://ex.com/doc.pdf").mock(
                return_value=httpx.Response(
                    200, content=b"%PDF-1.4", headers={"content-type": "application/pdf"}
                )
            )
            with pytest.raises(UnsupportedContentTypeError) as exc_info:
                fetch_page("http://ex.com/doc.pdf")

        assert exc_info.value.content_type == "application/pdf"

    def test_connection_error_propagates(self) -> None:
        with respx.mock:
            respx.get("http://ex.com/down").mock(side_effect=httpx.ConnectError("refused"))
            with pytest.raises(httpx.HTTPError):
                fetch_page("http://ex.com/down")

    def test_no_sleep_when_delay_is_zero(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "crawl_delay", 0.0)
        with respx.mock:
            respx.get("http://ex.com/").mock(return_value=httpx.Response(200, html="<p/>"))
            with patch("searchengine.scraper.fetcher.time.sleep") as mock_sleep:
                fetch_page("http://ex.com/")

        mock_sleep.assert_not_called()

    def test_sleeps_for_configured_delay(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "crawl_delay", 0.25)
        with respx.mock:
            respx.get("http://ex.com/").mock(return_value=httpx.Response(200, html="<p/>"))
            with patch("searchengine.scraper.fetcher.time.sleep") as mock_sleep:
                fetch_page("http://ex.com/")

        mock_sleep.assert_called_once_with(0.25)


class TestIsSupported:
    @pytest.mark.parametrize(
        "content_type",
        ["text/html", "text/html; charset=utf-8", "application/xhtml+xml", "text/plain", ""],
    )
    def test_documents_are_supported(self, content_type: str) -> None:
        assert _is_supported(content_type) is True

    @pytest.mark.parametrize("content_type", ["image/png", "application/pdf", "application/zip"])
    def test_binaries_are_rejected(self, content_type: str) -> None:
        assert _is_supported(content_type) is False


# ---------------------------------------------------------------------------
# HTML utilities
# ---------------------------------------------------------------------------

class TestStripToPlainText:
    def test_drops_scripts_and_styles(self) -> None:
        text = strip_to_plain_text(_SIMPLE_HTML)
        assert "hidden" not in text
        assert "color" not in text

    def test_collapses_whitespace(self) -> None:
        text = strip_to_plain_text(_SIMPLE_HTML)
        assert "Большой кот живёт в доме." in text

    def test_keeps_title_text(self) -> None:
        assert "Кошачий дом" in strip_to_plain_text(_SIMPLE_HTML)

    def test_empty_html(self) -> None:
        assert strip_to_plain_text("<html></html>") == ""


class TestExtractTitle:
    def test_extracts_title(self) -> None:
        assert extract_title(_SIMPLE_HTML) == "Кошачий дом"

    def test_missing_title_returns_empty(self) -> None:
        assert extract_title("<html><body></body></html>") == ""


class TestExtractLinks:
    def test_resolves_relative_links(self) -> None:
        links = extract_links(_SIMPLE_HTML, "http://ex.com/")
        assert "http://ex.com/about" in links

    def test_strips_fragments_keeps_query(self) -> None:
        links = extract_links(_SIMPLE_HTML, "http://ex.com/")
        assert "http://ex.com/news?page=2" in links

    def test_deduplicates_links(self) -> None:
        links = extract_links(_SIMPLE_HTML, "http://ex.com/")
        assert links.count("http://ex.com/about") == 1

    def test_skips_fragment_and_mailto(self) -> None:
        links = extract_links(_SIMPLE_HTML, "http://ex.com/")
        assert all(link.startswith("http") for link in links)

    def test_keeps_document_order(self) -> None:
        links = extract_links(_SIMPLE_HTML, "http://ex.com/")
        assert links == [
            "http://ex.com/about",
            "http://ex.com/news?page=2",
            "http://other.com/x",
        ]


class TestPathOf:
    def test_root_without_slash(self) -> None:
        assert path_of("http://ex.com") == "/"

    def test_path_without_query(self) -> None:
        assert path_of("http://ex.com/news/1?page=2#x") == "/news/1"
