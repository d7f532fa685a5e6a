import os

from dotenv import load_dotenv

# Service-side settings: focus on HTTP/runtime switches.
# Infrastructure env settings (TMDb, Gemini, local paths) live under
# `backend/infrastructure/config/`.
load_dotenv(override=True)


def _get_env_int(key: str, default: int) -> int:
    """Read an integer env var; fall back to default when unset."""
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"env var {key} must be an integer, got {raw}") from exc


def _get_env_bool(key: str, default: bool) -> bool:
    """Read a boolean env var (true/false/1/0/yes/no/on/off)."""
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    return raw.lower() in {"1", "true", "y", "yes", "on"}


def _get_env_float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"env var {key} must be a number, got {raw}") from exc


# ===== FastAPI / Uvicorn =====

SERVER_HOST = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT = _get_env_int("SERVER_PORT", 8000)
SERVER_RELOAD = _get_env_bool("SERVER_RELOAD", False)
SERVER_LOG_LEVEL = os.getenv("SERVER_LOG_LEVEL", "info")

DEFAULT_SERVER_WORKERS = _get_env_int("FASTAPI_WORKERS", 2) or 2
SERVER_WORKERS = _get_env_int("SERVER_WORKERS", DEFAULT_SERVER_WORKERS) or DEFAULT_SERVER_WORKERS

UVICORN_CONFIG = {
    "host": SERVER_HOST,
    "port": SERVER_PORT,
    "reload": SERVER_RELOAD,
    "log_level": SERVER_LOG_LEVEL,
    "workers": SERVER_WORKERS,
}

# ===== Watchlist (server-side store) =====

# One list for the whole deployment unless callers pass an explicit watchlist id.
WATCHLIST_KEY = os.getenv("WATCHLIST_KEY", "user:main_watchlist").strip() or "user:main_watchlist"

# Serialize read-modify-write (add/remove) per watchlist with a Redis lock.
# Off: concurrent adds of one id may both pass the duplicate scan.
WATCHLIST_WRITE_LOCK = _get_env_bool("WATCHLIST_WRITE_LOCK", True)
WATCHLIST_LOCK_TIMEOUT_S = _get_env_float("WATCHLIST_LOCK_TIMEOUT_S", 5.0) or 5.0
WATCHLIST_LOCK_WAIT_S = _get_env_float("WATCHLIST_LOCK_WAIT_S", 3.0) or 3.0

# Fill title/poster/rating from TMDb when a POST carries only id + media_type.
WATCHLIST_ENRICH_ON_ADD = _get_env_bool("WATCHLIST_ENRICH_ON_ADD", True)
