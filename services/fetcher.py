import logging
import random
from typing import Sequence

import requests

from config import MAX_REDIRECTS, REQUEST_TIMEOUT, USER_AGENTS
from models.preview import FetchResult

logger = logging.getLogger("metascrape.fetcher")

ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8"


def browser_headers(user_agents: Sequence[str] = USER_AGENTS) -> dict:
    return {
        "User-Agent": random.choice(user_agents),
        "Accept": ACCEPT,
        "Accept-Language": "en-US,en;q=0.9",
        "Connection": "keep-alive",
    }


def fetch_page(
    url: str,
    *,
    user_agents: Sequence[str] = USER_AGENTS,
    timeout: float = REQUEST_TIMEOUT,
    max_redirects: int = MAX_REDIRECTS,
) -> FetchResult:
    """
    GET a page once, following redirects. Network errors, timeouts and
    error statuses come back as a FetchResult with `error` set and no html.
    """
    try:
        with requests.Session() as session:
            session.max_redirects = max_redirects
            response = session.get(
                url,
                headers=browser_headers(user_agents),
                timeout=timeout,
                allow_redirects=True,
            )
            response.raise_for_status()
    except requests.RequestException as exc:
        logger.warning(f"Fetch failed for {url}: {exc}")
        return FetchResult(url=url, final_url=url, error=str(exc) or exc.__class__.__name__)

    return FetchResult(
        url=url,
        final_url=response.url or url,
        html=response.text or "",
        status_code=response.status_code,
    )
