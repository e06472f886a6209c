import enum
import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger("metascrape.sites")


class SitePolicy(str, enum.Enum):
    AMAZON = "amazon"
    FLIPKART = "flipkart"
    GENERIC = "generic"


@dataclass(frozen=True)
class SiteRules:
    """Extraction overrides for one site policy."""

    policy: SitePolicy
    site_name: str = ""
    icon: str = ""
    image_pattern: Optional[re.Pattern] = None
    image_meta_names: Tuple[str, ...] = ()
    image_selectors: Tuple[str, ...] = ()
    title_selectors: Tuple[str, ...] = ()
    render: bool = False


SITE_RULES = {
    SitePolicy.AMAZON: SiteRules(
        policy=SitePolicy.AMAZON,
        site_name="Amazon",
        icon="https://www.amazon.com/favicon.ico",
        image_pattern=re.compile(r"https://m\.media-amazon\.com/images/I/[^;\"']*_.jpg", re.IGNORECASE),
    ),
    SitePolicy.FLIPKART: SiteRules(
        policy=SitePolicy.FLIPKART,
        site_name="Flipkart",
        icon="https://static-assets-web.flixcart.com/www/promos/new/20150528-140547-favicon-retina.ico",
        image_meta_names=("og_image",),
        image_selectors=("img._396cs4", "img._2r_T1I", "img._3exPp9"),
        title_selectors=("span.B_NuCI",),
        render=True,
    ),
    SitePolicy.GENERIC: SiteRules(policy=SitePolicy.GENERIC),
}

_URL_MARKERS = (
    (SitePolicy.AMAZON, ("amazon.", "amzn.")),
    (
        SitePolicy.FLIPKART,
        ("flipkart.", "fkrt.to", "fkrt.it", "fktr.in", "dl.flipkart.com/s/", "fkrt.site"),
    ),
)

# (image host seen in the page, product URL shape of the final url)
_HTML_MARKERS = (
    (SitePolicy.AMAZON, "m.media-amazon.com", re.compile(r"/(?:dp|gp/product)/[A-Z0-9]{10}", re.IGNORECASE)),
    (SitePolicy.FLIPKART, "flixcart.com", re.compile(r"/p/itm[a-z0-9]+", re.IGNORECASE)),
)


def _match_url(url: str) -> Optional[SitePolicy]:
    lowered = (url or "").lower()
    for policy, markers in _URL_MARKERS:
        if any(marker in lowered for marker in markers):
            return policy
    return None


def classify(request_url: str, final_url: str = "", html: str = "") -> SitePolicy:
    policy = _match_url(request_url) or _match_url(final_url)
    if policy is None and html and final_url:
        for candidate, host, product_path in _HTML_MARKERS:
            if host in html and product_path.search(final_url):
                policy = candidate
                break
    policy = policy or SitePolicy.GENERIC
    logger.debug(f"Classified {request_url} as {policy.value}")
    return policy


def rules_for(policy: SitePolicy) -> SiteRules:
    return SITE_RULES.get(policy, SITE_RULES[SitePolicy.GENERIC])
