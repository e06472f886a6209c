"""Headless-browser rendering for sites whose metadata only exists after client-side rendering."""

import logging
import random
from typing import Protocol, Sequence

from config import RENDER_SETTLE_MS, RENDER_TIMEOUT, RENDERER, USER_AGENTS
from models.preview import DomMeta, RenderedDocument
from services.sites import SiteRules

logger = logging.getLogger("metascrape.renderer")

# Runs in-page; `sel` carries the site's title/image selectors.
DOM_META_SCRIPT = """
(sel) => {
  const content = (q) => document.querySelector(q)?.content || "";
  const firstOf = (selectors, read) => {
    for (const s of selectors) {
      try {
        const el = document.querySelector(s);
        const value = el ? read(el) : "";
        if (value) return value;
      } catch (e) {}
    }
    return "";
  };
  return {
    title: content('meta[property="og:title"]') || document.title ||
      firstOf(sel.title, (el) => el.textContent || ""),
    description: content('meta[property="og:description"]') ||
      content('meta[name="Description"]') || content('meta[name="description"]'),
    image: content('meta[property="og:image"]') || content('meta[name="og_image"]') ||
      content('meta[name="twitter:image"]') || firstOf(sel.image, (el) => el.src || ""),
  };
}
"""


class RenderError(Exception):
    pass


class Renderer(Protocol):
    def render(self, url: str, rules: SiteRules) -> RenderedDocument:
        ...


class PlaywrightRenderer:
    def __init__(
        self,
        timeout: float = RENDER_TIMEOUT,
        settle_ms: int = RENDER_SETTLE_MS,
        user_agents: Sequence[str] = USER_AGENTS,
    ):
        self.timeout = timeout
        self.settle_ms = settle_ms
        self.user_agents = tuple(user_agents)

    def render(self, url: str, rules: SiteRules) -> RenderedDocument:
        """
        Load `url` in a fresh Chromium session, wait for the network to go idle
        plus a short settle delay, and read the rendered HTML and DOM meta.
        The browser is closed whether or not navigation succeeds.
        """
        try:
            from playwright.sync_api import sync_playwright
        except ImportError as exc:
            raise RenderError(f"Playwright is not installed: {exc}") from exc

        try:
            with sync_playwright() as pw:
                browser = pw.chromium.launch(headless=True, args=["--no-sandbox"])
                try:
                    context = browser.new_context(
                        user_agent=random.choice(self.user_agents),
                        locale="en-US",
                    )
                    page = context.new_page()
                    page.goto(url, wait_until="networkidle", timeout=int(self.timeout * 1000))
                    page.wait_for_timeout(self.settle_ms)
                    html = page.content()
                    dom = page.evaluate(
                        DOM_META_SCRIPT,
                        {"title": list(rules.title_selectors), "image": list(rules.image_selectors)},
                    ) or {}
                    final_url = page.url or url
                finally:
                    browser.close()
        except Exception as exc:
            raise RenderError(str(exc) or exc.__class__.__name__) from exc

        return RenderedDocument(
            url=final_url,
            html=html,
            dom=DomMeta(
                title=(dom.get("title") or "").strip(),
                description=(dom.get("description") or "").strip(),
                image=(dom.get("image") or "").strip(),
            ),
        )


class NullRenderer:
    """Used where no browser is available; callers fall back to the fetched page."""

    def render(self, url: str, rules: SiteRules) -> RenderedDocument:
        raise RenderError("Browser rendering is disabled")


def get_renderer(name: str = RENDERER) -> Renderer:
    if name == "playwright":
        return PlaywrightRenderer()
    return NullRenderer()
