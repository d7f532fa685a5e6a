import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load the project-root .env first so it wins over stale shell exports.
load_dotenv(override=True)


def _get_env_int(key: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"env var {key} must be an integer, got {raw}") from exc


def _get_env_float(key: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"env var {key} must be a number, got {raw}") from exc


def _get_env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    return raw.lower() in {"1", "true", "yes", "y", "on"}


# ===== Paths =====
#
# All backend code lives under `<repo>/backend/`; runtime artifacts go under
# `<repo>/files/`, never under `backend/`.

INFRASTRUCTURE_DIR = Path(__file__).resolve().parent.parent  # backend/infrastructure/
_BACKEND_DIR = INFRASTRUCTURE_DIR.parent  # backend/

if _BACKEND_DIR.name == "backend":
    PROJECT_ROOT = _BACKEND_DIR.parent
else:
    PROJECT_ROOT = Path.cwd()

RUNTIME_ROOT = Path(os.getenv("RUNTIME_ROOT", PROJECT_ROOT / "files")).expanduser()


# ===== TMDb (metadata gateway) =====

TMDB_BASE_URL = os.getenv("TMDB_BASE_URL", "https://api.themoviedb.org/3").strip()
TMDB_API_TOKEN = os.getenv("TMDB_API_TOKEN", "").strip()
TMDB_API_KEY = os.getenv("TMDB_API_KEY", "").strip()
TMDB_TIMEOUT_S = _get_env_float("TMDB_TIMEOUT_S", 5.0) or 5.0
TMDB_LANGUAGE = os.getenv("TMDB_LANGUAGE", "en-US").strip() or "en-US"
TMDB_IMAGE_BASE = os.getenv("TMDB_IMAGE_BASE", "https://image.tmdb.org/t/p").strip().rstrip("/")

# RatingPosterDB: posters with rating overlays, keyed by IMDb id.
RPDB_API_KEY = os.getenv("RPDB_API_KEY", "").strip()
RPDB_BASE_URL = os.getenv("RPDB_BASE_URL", "https://api.ratingposterdb.com").strip().rstrip("/")
POSTER_PLACEHOLDER_URL = "https://via.placeholder.com/500x750.png?text=No+Image"
POSTER_ERROR_URL = "https://via.placeholder.com/500x750.png?text=Error"


# ===== Gemini =====

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "").strip()
GEMINI_BASE_URL = (
    os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta").strip().rstrip("/")
)
GEMINI_LLM_MODEL = os.getenv("GEMINI_LLM_MODEL", "gemini-1.5-flash").strip() or "gemini-1.5-flash"
GEMINI_TIMEOUT_S = _get_env_float("GEMINI_TIMEOUT_S", 30.0) or 30.0
GEMINI_TEMPERATURE = _get_env_float("GEMINI_TEMPERATURE", None)
GEMINI_MAX_TOKENS = _get_env_int("GEMINI_MAX_TOKENS", None)


# ===== Local watchlist (single-device store) =====

LOCAL_WATCHLIST_PATH = Path(
    os.getenv("LOCAL_WATCHLIST_PATH", RUNTIME_ROOT / "local_storage.json")
).expanduser()
LOCAL_WATCHLIST_KEY = os.getenv("LOCAL_WATCHLIST_KEY", "cinexp_watchlist_v2").strip() or "cinexp_watchlist_v2"
