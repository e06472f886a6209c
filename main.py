import logging
from typing import Optional
from urllib.parse import urlparse

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import LOG_LEVEL, USAGE_URL
from models.preview import ErrorResponse
from services.scraper import fetch_preview


def resolve_log_level(name: str) -> int:
    level = logging.getLevelName((name or "").upper())
    return level if isinstance(level, int) else logging.INFO


logging.basicConfig(level=resolve_log_level(LOG_LEVEL))
logger = logging.getLogger("metascrape")

MISSING_URL_ERROR = "No url query specified."
PROCESSING_ERROR = "The server encountered an error. You may have inputted an invalid query."
INVALID_URL_ERROR = "Invalid URL. Must be a valid HTTP or HTTPS URL."


app = FastAPI(title="Metascrape Preview Service", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


def _is_valid_url(url: str) -> bool:
    try:
        result = urlparse(url)
        return result.scheme in ("http", "https") and bool(result.netloc)
    except ValueError:
        return False


def _error(url: Optional[str], error: str, detail: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(url=url, error=error, er_message=detail, usage=USAGE_URL)
    return JSONResponse(status_code=400, content=body.model_dump(by_alias=True, exclude_none=True))


@app.get("/preview")
def get_preview(url: Optional[str] = Query(None, description="The URL to fetch metadata for")):
    if not url or not url.strip():
        return _error(None, MISSING_URL_ERROR)

    url = url.strip()
    if not _is_valid_url(url):
        return _error(url, PROCESSING_ERROR, INVALID_URL_ERROR)

    try:
        meta = fetch_preview(url)
    except Exception as exc:
        logger.exception(f"Preview failed for {url}")
        return _error(url, PROCESSING_ERROR, str(exc))

    if not meta.success:
        return _error(url, PROCESSING_ERROR, meta.error)

    return meta.model_dump(exclude_none=True)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/ready")
def ready():
    return {"status": "ready"}
