"""
Field resolution for link previews.

Each field is resolved from an ordered list of candidates; the first one that
is non-empty after trimming wins. Site rules contribute extra candidates
(image host patterns, CSS selectors, hardcoded names and icons).
"""
import re
from typing import Iterable, Iterator, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from models.preview import DomMeta, MetadataResult
from services.sites import SitePolicy, SiteRules, rules_for

TITLE_RE = re.compile(r"<title\b[^>]*>(?P<value>[\s\S]*?)</title>", re.IGNORECASE)
DESCRIPTION_RE = re.compile(
    r"<meta[^>]*name=['\"]description['\"][^>]*content=(?P<quote>['\"])(?P<value>.*?)(?P=quote)",
    re.IGNORECASE,
)

DEFAULT_SITE_NAME = "Website"


class ParsedDocument:
    """Read-only view over one page's HTML, shared by every resolver."""

    def __init__(self, html: str):
        self.html = html or ""
        self.soup = BeautifulSoup(self.html, "html.parser")

    def meta_property(self, prop: str) -> str:
        tag = self.soup.find("meta", attrs={"property": prop})
        return (tag.get("content") or "") if tag else ""

    def meta_name(self, name: str) -> str:
        pattern = re.compile(rf"^{re.escape(name)}$", re.IGNORECASE)
        tag = self.soup.find("meta", attrs={"name": pattern})
        return (tag.get("content") or "") if tag else ""

    def title_text(self) -> str:
        return self.soup.title.get_text() if self.soup.title else ""

    def select_attr(self, selector: str, *attrs: str) -> str:
        try:
            tag = self.soup.select_one(selector)
        except ValueError:
            return ""
        if tag is None:
            return ""
        for attr in attrs:
            value = tag.get(attr)
            if isinstance(value, list):
                value = " ".join(value)
            if value:
                return value
        return ""

    def regex_group(self, pattern: re.Pattern) -> str:
        match = pattern.search(self.html)
        return match.group("value") if match else ""


def first_nonempty(candidates: Iterable[Optional[str]]) -> str:
    for value in candidates:
        if value and value.strip():
            return value.strip()
    return ""


def normalize_asset_url(value: str, base_url: str = "") -> str:
    value = (value or "").strip().replace("amp;", "")
    if not value:
        return ""
    if value.startswith("//"):
        return "https:" + value
    if base_url:
        return urljoin(base_url, value)
    return value


def _title_candidates(doc: ParsedDocument, dom: Optional[DomMeta]) -> Iterator[str]:
    if dom:
        yield dom.title
    yield doc.meta_property("og:title")
    yield doc.title_text()
    yield doc.meta_name("title")
    yield doc.regex_group(TITLE_RE)


def _description_candidates(doc: ParsedDocument, dom: Optional[DomMeta]) -> Iterator[str]:
    if dom:
        yield dom.description
    yield doc.meta_property("og:description")
    yield doc.meta_name("description")
    yield doc.regex_group(DESCRIPTION_RE)


def _url_candidates(doc: ParsedDocument, request_url: str, final_url: str) -> Iterator[str]:
    yield doc.meta_property("og:url")
    yield doc.select_attr('link[rel="canonical"]', "href")
    yield final_url
    yield request_url


def _image_from_pattern(doc: ParsedDocument, rules: SiteRules) -> str:
    if rules.image_pattern is None:
        return ""
    for match in rules.image_pattern.finditer(doc.html):
        if "," not in match.group(0):
            return match.group(0)
    return ""


def _image_candidates(doc: ParsedDocument, rules: SiteRules, dom: Optional[DomMeta]) -> Iterator[str]:
    if dom:
        yield dom.image
    yield doc.meta_property("og:image")
    yield doc.meta_property("og:image:url")
    yield doc.meta_name("twitter:image")
    yield doc.meta_property("twitter:image")
    for name in rules.image_meta_names:
        yield doc.meta_name(name)
    yield _image_from_pattern(doc, rules)
    for selector in rules.image_selectors:
        yield doc.select_attr(selector, "src", "data-src")


def _icon_candidates(doc: ParsedDocument, rules: SiteRules) -> Iterator[str]:
    yield rules.icon
    yield doc.select_attr('link[rel="icon"]', "href")
    yield doc.select_attr('link[rel="shortcut icon"]', "href")


def resolve_title(doc: ParsedDocument, dom: Optional[DomMeta] = None) -> str:
    return first_nonempty(_title_candidates(doc, dom))


def resolve_description(doc: ParsedDocument, dom: Optional[DomMeta] = None) -> str:
    return first_nonempty(_description_candidates(doc, dom))


def resolve_url(doc: ParsedDocument, request_url: str, final_url: str = "") -> str:
    return first_nonempty(_url_candidates(doc, request_url, final_url))


def resolve_image(doc: ParsedDocument, rules: SiteRules, dom: Optional[DomMeta] = None, base_url: str = "") -> str:
    return normalize_asset_url(first_nonempty(_image_candidates(doc, rules, dom)), base_url)


def resolve_icon(doc: ParsedDocument, rules: SiteRules, base_url: str = "") -> str:
    return normalize_asset_url(first_nonempty(_icon_candidates(doc, rules)), base_url)


def resolve_site_name(doc: ParsedDocument, rules: SiteRules) -> str:
    return first_nonempty([doc.meta_property("og:site_name"), rules.site_name, DEFAULT_SITE_NAME])


def resolve_keywords(doc: ParsedDocument) -> str:
    return first_nonempty([doc.meta_property("og:keywords"), doc.meta_name("keywords")])


def extract_metadata(
    doc: ParsedDocument,
    policy: SitePolicy,
    *,
    request_url: str,
    final_url: str = "",
    dom: Optional[DomMeta] = None,
) -> MetadataResult:
    rules = rules_for(policy)
    base_url = final_url or request_url
    icon = resolve_icon(doc, rules, base_url)
    image = resolve_image(doc, rules, dom, base_url)
    return MetadataResult(
        success=True,
        title=resolve_title(doc, dom),
        description=resolve_description(doc, dom),
        url=resolve_url(doc, request_url, final_url),
        site_name=resolve_site_name(doc, rules),
        image=image or icon,
        icon=icon,
        keywords=resolve_keywords(doc),
    )
