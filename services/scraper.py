import logging
from typing import Optional

from models.preview import MetadataResult
from services.extractor import ParsedDocument, extract_metadata
from services.fetcher import fetch_page
from services.renderer import Renderer, RenderError, get_renderer
from services.sites import classify, rules_for

logger = logging.getLogger("metascrape.scraper")


def fetch_preview(url: str, renderer: Optional[Renderer] = None) -> MetadataResult:
    """
    Fetch a page and resolve its preview metadata.

    Sites whose policy asks for rendering are loaded in a browser; if that
    fails the fetched HTML is used instead. When no document can be obtained
    at all the result has success=False and an error reason.
    """
    fetched = fetch_page(url)
    policy = classify(url, fetched.final_url, fetched.html)
    rules = rules_for(policy)

    html, final_url, dom = fetched.html, fetched.final_url, None
    if rules.render:
        renderer = renderer or get_renderer()
        try:
            rendered = renderer.render(url, rules)
            html, final_url, dom = rendered.html, rendered.url, rendered.dom
        except RenderError as exc:
            logger.warning(f"Render failed for {url}, using fetched page: {exc}")

    if not html:
        return MetadataResult.failed(fetched.error or "Failed to fetch page")

    return extract_metadata(
        ParsedDocument(html),
        policy,
        request_url=url,
        final_url=final_url,
        dom=dom,
    )
