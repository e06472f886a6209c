import logging
from unittest.mock import patch

import requests
from fastapi.testclient import TestClient

from main import app, resolve_log_level
from models.preview import DomMeta, FetchResult, RenderedDocument
from services.renderer import RenderError
from services.scraper import fetch_preview

client = TestClient(app)

FLIPKART_ICON = "https://static-assets-web.flixcart.com/www/promos/new/20150528-140547-favicon-retina.ico"


def fetched(html: str, url: str = "https://example.com", final_url: str = None) -> FetchResult:
    return FetchResult(url=url, final_url=final_url or url, html=html, status_code=200)


def fetch_failed(url: str = "https://example.com", error: str = "timed out") -> FetchResult:
    return FetchResult(url=url, final_url=url, error=error)


class StaticRenderer:
    def __init__(self, document: RenderedDocument):
        self.document = document
        self.calls = []

    def render(self, url, rules):
        self.calls.append(url)
        return self.document


class BrokenRenderer:
    def render(self, url, rules):
        raise RenderError("navigation timeout")


# --- fetch_preview pipeline ---

def test_fetch_preview_generic_page():
    html = "<html><head><title>Example Domain</title></head></html>"
    with patch("services.scraper.fetch_page", return_value=fetched(html)):
        result = fetch_preview("https://example.com")

    assert result.success is True
    assert result.title == "Example Domain"
    assert result.description == ""
    assert result.image == ""
    assert result.site_name == "Website"
    assert result.url == "https://example.com"


def test_fetch_preview_fails_without_document():
    with patch("services.scraper.fetch_page", return_value=fetch_failed()):
        result = fetch_preview("https://example.com")

    assert result.success is False
    assert result.error == "timed out"
    assert result.title == ""
    assert result.url == ""


def test_fetch_preview_does_not_render_generic_sites():
    renderer = StaticRenderer(RenderedDocument(url="https://example.com", html="<title>x</title>"))
    with patch("services.scraper.fetch_page", return_value=fetched("<title>Plain</title>")):
        result = fetch_preview("https://example.com", renderer=renderer)

    assert renderer.calls == []
    assert result.title == "Plain"


def test_fetch_preview_amazon_without_render():
    html = """
    <html><head><title> Echo Dot </title></head>
    <body><img src="https://m.media-amazon.com/images/I/61abc._SL1000_.jpg"></body></html>
    """
    url = "https://www.amazon.in/dp/B09B8V1LZ3"
    with patch("services.scraper.fetch_page", return_value=fetched(html, url=url)):
        result = fetch_preview(url, renderer=BrokenRenderer())

    assert result.success is True
    assert result.site_name == "Amazon"
    assert result.title == "Echo Dot"
    assert result.image == "https://m.media-amazon.com/images/I/61abc._SL1000_.jpg"
    assert result.icon == "https://www.amazon.com/favicon.ico"


def test_fetch_preview_flipkart_uses_rendered_dom():
    url = "https://www.flipkart.com/phone/p/itm123"
    rendered = RenderedDocument(
        url=url,
        html='<html><head><meta property="og:title" content="Rendered OG"></head></html>',
        dom=DomMeta(title="DOM Title", description="DOM Desc", image="//rukminim1.flixcart.com/a.jpg"),
    )
    renderer = StaticRenderer(rendered)
    with patch("services.scraper.fetch_page", return_value=fetched("<title>Static</title>", url=url)):
        result = fetch_preview(url, renderer=renderer)

    assert renderer.calls == [url]
    assert result.title == "DOM Title"
    assert result.description == "DOM Desc"
    assert result.image == "https://rukminim1.flixcart.com/a.jpg"
    assert result.icon == FLIPKART_ICON
    assert result.site_name == "Flipkart"


def test_fetch_preview_flipkart_falls_back_to_fetched_html_when_render_fails():
    url = "https://dl.flipkart.com/s/abc"
    html = '<html><head><meta property="og:title" content="Fetched Title"></head></html>'
    with patch("services.scraper.fetch_page", return_value=fetched(html, url=url)):
        result = fetch_preview(url, renderer=BrokenRenderer())

    assert result.success is True
    assert result.title == "Fetched Title"
    assert result.image == FLIPKART_ICON


def test_fetch_preview_flipkart_render_rescues_failed_fetch():
    url = "https://www.flipkart.com/p/itm1"
    renderer = StaticRenderer(RenderedDocument(url=url, html="<title>Only Rendered</title>"))
    with patch("services.scraper.fetch_page", return_value=fetch_failed(url=url)):
        result = fetch_preview(url, renderer=renderer)

    assert result.success is True
    assert result.title == "Only Rendered"


def test_fetch_preview_flipkart_fails_when_both_paths_fail():
    url = "https://www.flipkart.com/p/itm1"
    with patch("services.scraper.fetch_page", return_value=fetch_failed(url=url, error="connection refused")):
        result = fetch_preview(url, renderer=BrokenRenderer())

    assert result.success is False
    assert result.error == "connection refused"


# --- API endpoint tests ---

def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ready():
    response = client.get("/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready"}


def test_preview_missing_url():
    with patch("services.scraper.fetch_page") as fetch:
        response = client.get("/preview")

    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "No url query specified."
    assert "usage" in data
    fetch.assert_not_called()


def test_preview_blank_url():
    response = client.get("/preview?url=%20%20")
    assert response.status_code == 400
    assert response.json()["error"] == "No url query specified."


def test_preview_invalid_url():
    response = client.get("/preview?url=not-a-url")
    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert data["url"] == "not-a-url"
    assert "Invalid URL" in data["erMessage"]


def test_preview_success():
    html = "<html><head><title>Example Domain</title></head></html>"
    with patch("services.scraper.fetch_page", return_value=fetched(html)):
        response = client.get("/preview?url=https://example.com")

    assert response.status_code == 200
    data = response.json()
    assert data == {
        "success": True,
        "title": "Example Domain",
        "description": "",
        "url": "https://example.com",
        "site_name": "Website",
        "image": "",
        "icon": "",
        "keywords": "",
    }


def test_preview_fetch_timeout_returns_error_envelope():
    with patch("services.fetcher.requests.Session") as session_cls:
        session = session_cls.return_value.__enter__.return_value
        session.get.side_effect = requests.Timeout("read timed out")
        response = client.get("/preview?url=https://example.com")

    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert data["url"] == "https://example.com"
    assert data["error"]
    assert data["erMessage"] == "read timed out"


def test_preview_unexpected_error_returns_error_envelope():
    with patch("main.fetch_preview", side_effect=RuntimeError("boom")):
        response = client.get("/preview?url=https://example.com")

    assert response.status_code == 400
    assert response.json()["erMessage"] == "boom"


def test_preview_flipkart_render_fallback_through_api():
    url = "https://www.flipkart.com/p/itm1"
    html = '<meta property="og:title" content="Phone">'
    with patch("services.scraper.fetch_page", return_value=fetched(html, url=url)), \
            patch("services.scraper.get_renderer", return_value=BrokenRenderer()):
        response = client.get(f"/preview?url={url}")

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Phone"
    assert data["site_name"] == "Flipkart"



def test_resolve_log_level():
    assert resolve_log_level("debug") == logging.DEBUG
    assert resolve_log_level("WARNING") == logging.WARNING
    assert resolve_log_level("verbose") == logging.INFO
    assert resolve_log_level("") == logging.INFO
