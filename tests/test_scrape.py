from types import SimpleNamespace

import pytest
import requests

from style_extractor import scrape


def test_proxied_url_encodes_target(monkeypatch):
    monkeypatch.setattr(scrape, "CORS_PROXY_URL", "https://proxy.test/?")

    assert scrape.proxied_url("https://example.com/a b") == "https://proxy.test/?https%3A%2F%2Fexample.com%2Fa%20b"


def test_proxied_url_without_proxy_is_passthrough(monkeypatch):
    monkeypatch.setattr(scrape, "CORS_PROXY_URL", "")

    assert scrape.proxied_url("https://example.com") == "https://example.com"


def test_fetch_page_raises_on_error_status(monkeypatch):
    response = SimpleNamespace(ok=False, status_code=404, reason="Not Found", text="")
    monkeypatch.setattr(scrape, "_get", lambda url: response)

    with pytest.raises(scrape.PageFetchError) as excinfo:
        scrape.fetch_page("https://example.com")
    assert "status: 404" in str(excinfo.value)


def test_fetch_page_wraps_network_errors(monkeypatch):
    def fail(url):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(scrape, "_get", fail)

    with pytest.raises(scrape.PageFetchError):
        scrape.fetch_page("https://example.com")


def test_fetch_page_returns_body(monkeypatch):
    response = SimpleNamespace(ok=True, status_code=200, reason="OK", text="<html></html>")
    monkeypatch.setattr(scrape, "_get", lambda url: response)

    assert scrape.fetch_page("https://example.com") == ("https://example.com", "<html></html>")


def test_fetch_stylesheets_counts_failures_and_keeps_document_order(monkeypatch):
    def fake_fetch(url: str) -> str:
        if "broken" in url:
            raise requests.HTTPError("500 Server Error")
        return f"/* {url} */"

    monkeypatch.setattr(scrape, "_fetch_stylesheet", fake_fetch)

    batch = scrape.fetch_stylesheets(
        ["/a.css", "https://cdn.test/broken.css", "css/b.css"], "https://example.com/page/"
    )

    assert [sheet.url for sheet in batch.sheets] == [
        "https://example.com/a.css",
        "https://example.com/page/css/b.css",
    ]
    assert batch.sheets[0].content == "/* https://example.com/a.css */"
    assert batch.inaccessible == 1


def test_fetch_stylesheets_with_no_links_returns_empty_batch():
    batch = scrape.fetch_stylesheets([], "https://example.com")

    assert batch.sheets == [] and batch.inaccessible == 0


def test_env_int_falls_back_on_garbage(monkeypatch):
    monkeypatch.setenv("FETCH_TIMEOUT", "fifteen")

    assert scrape.env_int("FETCH_TIMEOUT", 15) == 15


def test_env_int_clamps_to_minimum(monkeypatch):
    monkeypatch.setenv("STYLESHEET_MAX_WORKERS", "-3")

    assert scrape.env_int("STYLESHEET_MAX_WORKERS", 8, minimum=1) == 1


def test_env_int_reads_valid_values(monkeypatch):
    monkeypatch.setenv("STYLESHEET_MAX_WORKERS", "4")

    assert scrape.env_int("STYLESHEET_MAX_WORKERS", 8, minimum=1) == 4
