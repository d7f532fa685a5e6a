from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import Optional

from fastapi import Depends

from application.insights.service import MediaInsightsService
from application.ports.media_metadata_port import MediaMetadataPort
from application.ports.text_generation_port import TextGenerationPort
from application.ports.watchlist_store_port import WatchlistStorePort
from application.watchlist.service import WatchlistService
from config.settings import (
    WATCHLIST_ENRICH_ON_ADD,
    WATCHLIST_KEY,
    WATCHLIST_LOCK_TIMEOUT_S,
    WATCHLIST_LOCK_WAIT_S,
    WATCHLIST_WRITE_LOCK,
)


@lru_cache(maxsize=1)
def _build_watchlist_store():
    from config.storage import get_redis_url
    from infrastructure.persistence.redis.watchlist_store import (
        InMemoryListClient,
        RedisListWatchlistStore,
        build_redis_client,
    )

    url = get_redis_url()
    if url:
        client, backend = build_redis_client(url), "redis"
    else:
        client, backend = InMemoryListClient(), "memory"
    return RedisListWatchlistStore(
        client=client,
        key=WATCHLIST_KEY,
        write_lock=WATCHLIST_WRITE_LOCK,
        lock_timeout_s=WATCHLIST_LOCK_TIMEOUT_S,
        lock_wait_s=WATCHLIST_LOCK_WAIT_S,
        backend_name=backend,
    )


def get_watchlist_store() -> WatchlistStorePort:
    return _build_watchlist_store()


@lru_cache(maxsize=1)
def _build_media_metadata():
    from infrastructure.enrichment import get_tmdb_client

    return get_tmdb_client()


def get_media_metadata() -> Optional[MediaMetadataPort]:
    """TMDb client, or None when TMDB_API_TOKEN/TMDB_API_KEY are unset."""
    return _build_media_metadata()


def get_watchlist_service(
    store: WatchlistStorePort = Depends(get_watchlist_store),
    metadata: Optional[MediaMetadataPort] = Depends(get_media_metadata),
) -> WatchlistService:
    return WatchlistService(store=store, metadata=metadata, enrich_on_add=WATCHLIST_ENRICH_ON_ADD)


@lru_cache(maxsize=1)
def _build_text_generator():
    from infrastructure.config.settings import GEMINI_API_KEY

    if not GEMINI_API_KEY:
        return None

    from infrastructure.llm import GeminiClient

    return GeminiClient(api_key=GEMINI_API_KEY)


def get_text_generator() -> Optional[TextGenerationPort]:
    """Gemini client, or None when GEMINI_API_KEY is unset."""
    return _build_text_generator()


def get_insights_service(
    generator: Optional[TextGenerationPort] = Depends(get_text_generator),
) -> Optional[MediaInsightsService]:
    if generator is None:
        return None
    return MediaInsightsService(generator=generator)


async def _close_resource(resource: object) -> None:
    close = getattr(resource, "close", None)
    if callable(close):
        result = close()
        if asyncio.iscoroutine(result):
            await result


async def shutdown_dependencies() -> None:
    """Shutdown hooks for long-lived adapters (connection pools, HTTP sessions).

    Only adapters that were actually built are closed.
    """
    for builder in (_build_watchlist_store, _build_media_metadata, _build_text_generator):
        if builder.cache_info().currsize:
            resource = builder()
            if resource is not None:
                await _close_resource(resource)
