from dotenv import load_dotenv
import os

load_dotenv()

REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "30"))
MAX_REDIRECTS = int(os.getenv("MAX_REDIRECTS", "5"))
RENDER_TIMEOUT = int(os.getenv("RENDER_TIMEOUT", "30"))
RENDER_SETTLE_MS = int(os.getenv("RENDER_SETTLE_MS", "300"))
RENDERER = os.getenv("RENDERER", "playwright").lower()
USAGE_URL = os.getenv("USAGE_URL", "http://localhost:8000/preview?url=https://google.com")
LOG_LEVEL = os.getenv("LOG_LEVEL", "info")

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.6167.85 Safari/537.36",
)
