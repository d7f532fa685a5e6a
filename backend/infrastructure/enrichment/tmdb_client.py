"""
TMDB API HTTP client (the media metadata gateway).

Async aiohttp client with a lazily created shared session. Every request
method logs and returns None on upstream failure instead of raising, so
callers can degrade (store a bare watchlist reference, render "no poster").
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, timedelta
from typing import Any, Optional, Union

import aiohttp

from domain.watchlist import MediaSummary, MediaType, ValidationError, coerce_media_type, summarize_media
from infrastructure.config.settings import (
    POSTER_PLACEHOLDER_URL,
    RPDB_API_KEY,
    RPDB_BASE_URL,
    TMDB_API_KEY,
    TMDB_API_TOKEN,
    TMDB_BASE_URL,
    TMDB_IMAGE_BASE,
    TMDB_LANGUAGE,
    TMDB_TIMEOUT_S,
)
from infrastructure.utils import format_kv

logger = logging.getLogger(__name__)


def image_url(path: Any, *, size: str = "w500") -> Optional[str]:
    """Absolute TMDb image URL, or None when the item has no image."""
    p = str(path or "").strip()
    if not p:
        return None
    if not p.startswith("/"):
        p = "/" + p
    return f"{TMDB_IMAGE_BASE}/{size}{p}"


def best_poster_url(details: Optional[dict[str, Any]], *, rpdb_api_key: Optional[str] = None) -> str:
    """RatingPosterDB poster when an IMDb id is known, else TMDb, else a placeholder."""
    details = details or {}
    key = RPDB_API_KEY if rpdb_api_key is None else rpdb_api_key
    imdb_id = str(details.get("imdb_id") or "").strip()
    if imdb_id and key:
        return f"{RPDB_BASE_URL}/{key}/imdb/{imdb_id}.jpg"
    return image_url(details.get("poster_path"), size="w500") or POSTER_PLACEHOLDER_URL


class TMDBClient:
    """Async HTTP client for TMDB API.

    Attributes:
        _base_url: TMDB API base URL
        _api_token: TMDB v4 bearer token
        _api_key: TMDB v3 api key (used when no bearer token is set)
        _timeout_s: Request timeout in seconds
        _session: aiohttp ClientSession (lazily initialized)
        _lock: Async lock guarding session creation
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_token: str | None = None,
        api_key: str | None = None,
        timeout_s: float | None = None,
        language: str | None = None,
    ) -> None:
        self._base_url = (base_url or TMDB_BASE_URL or "").rstrip("/")
        self._api_token = (api_token or TMDB_API_TOKEN or "").strip()
        self._api_key = (api_key or TMDB_API_KEY or "").strip()
        self._timeout_s = float(timeout_s or TMDB_TIMEOUT_S or 10.0)
        self._language = (language or TMDB_LANGUAGE or "en-US").strip()
        self._session: aiohttp.ClientSession | None = None
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self._base_url and (self._api_token or self._api_key))

    def _headers(self) -> dict[str, str]:
        headers = {"accept": "application/json"}
        # Prefer v4 bearer token auth when available.
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        return headers

    def _auth_params(self) -> dict[str, str]:
        """v3 auth via api_key query param (used when bearer token is absent)."""
        if self._api_token:
            return {}
        if self._api_key:
            return {"api_key": self._api_key}
        return {}

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session (double-checked under the lock)."""
        if self._session is not None and not self._session.closed:
            return self._session

        async with self._lock:
            if self._session is not None and not self._session.closed:
                return self._session

            timeout = aiohttp.ClientTimeout(total=self._timeout_s)
            self._session = aiohttp.ClientSession(timeout=timeout)
            return self._session

    async def _get_json(self, path: str, params: dict[str, Any], *, what: str) -> dict[str, Any] | None:
        if not self.configured:
            logger.warning("TMDB client not configured (missing base_url or auth)")
            return None

        try:
            session = await self._get_session()
            # Direct concatenation keeps the /3 prefix of the base url.
            url = f"{self._base_url}{path}"
            query = {k: v for k, v in params.items() if v is not None}
            query.update(self._auth_params())

            logger.debug("TMDB %s url=%s", what, url)

            async with session.get(url, params=query, headers=self._headers()) as resp:
                if resp.status >= 400:
                    error_text = await resp.text()
                    logger.error(
                        "TMDB request failed %s",
                        format_kv(what=what, status=resp.status, body=error_text[:200]),
                    )
                    return None

                data = await resp.json(content_type=None)

            return data if isinstance(data, dict) else None

        except asyncio.TimeoutError:
            logger.error("TMDB %s timeout after %ss", what, self._timeout_s)
            return None
        except Exception as e:
            logger.exception("TMDB %s failed: %s", what, e)
            return None

    async def get_media_details(
        self,
        media_type: Union[str, MediaType],
        media_id: int,
        *,
        language: str | None = None,
    ) -> dict[str, Any] | None:
        """Fetch `/movie/{id}` or `/tv/{id}`; None on failure or unknown kind."""
        try:
            kind = coerce_media_type(media_type)
        except ValidationError:
            logger.warning("TMDB details requested for unknown media_type=%r", media_type)
            return None
        return await self._get_json(
            f"/{kind.value}/{int(media_id)}",
            {"language": language or self._language},
            what=f"{kind.value} details id={media_id}",
        )

    async def get_media_summary(
        self,
        media_type: Union[str, MediaType],
        media_id: int,
        *,
        language: str | None = None,
    ) -> MediaSummary | None:
        details = await self.get_media_details(media_type, media_id, language=language)
        if not details:
            return None
        try:
            return summarize_media(details, media_type)
        except ValidationError:
            logger.warning("TMDB details without a usable id: media_type=%s id=%s", media_type, media_id)
            return None

    async def search_movies_raw(self, *, query: str, language: str | None = None, page: int = 1) -> dict[str, Any] | None:
        return await self._get_json(
            "/search/movie",
            {
                "query": query,
                "language": language or self._language,
                "page": int(page),
                "include_adult": "false",
            },
            what="movie search",
        )

    async def popular_movies_raw(self, *, language: str | None = None, page: int = 1) -> dict[str, Any] | None:
        return await self._get_json(
            "/movie/popular",
            {"language": language or self._language, "page": int(page)},
            what="popular movies",
        )

    async def discover_recent_tv_raw(
        self,
        *,
        language: str | None = None,
        page: int = 1,
        since: date | None = None,
    ) -> dict[str, Any] | None:
        """Popular TV first aired on/after `since` (default: two years ago)."""
        if since is None:
            today = date.today()
            try:
                since = today.replace(year=today.year - 2)
            except ValueError:
                # Feb 29
                since = today - timedelta(days=365 * 2)
        return await self._get_json(
            "/discover/tv",
            {
                "language": language or self._language,
                "sort_by": "popularity.desc",
                "first_air_date.gte": since.isoformat(),
                "page": int(page),
            },
            what="discover tv",
        )

    async def close(self) -> None:
        """Close the HTTP session and release resources."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
