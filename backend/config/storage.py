import os
from typing import Optional


def get_redis_url() -> Optional[str]:
    """Service-side accessor for the watchlist key-value store URL.

    Priority:
    1) REDIS_URL
    2) KV_URL (the redis:// URL hosted KV providers expose next to their REST endpoint)
    3) REDIS_HOST/REDIS_PORT/REDIS_PASSWORD/REDIS_DB

    Returns None when nothing is configured; callers then fall back to the
    in-process list store.
    """

    url = (os.getenv("REDIS_URL") or os.getenv("KV_URL") or "").strip()
    if url:
        return url

    host = (os.getenv("REDIS_HOST") or "").strip()
    if not host:
        return None

    port = os.getenv("REDIS_PORT", "6379").strip() or "6379"
    password = os.getenv("REDIS_PASSWORD", "")
    db = os.getenv("REDIS_DB", "0").strip() or "0"
    auth = f":{password}@" if password else ""
    return f"redis://{auth}{host}:{port}/{db}"
