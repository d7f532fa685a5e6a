from __future__ import annotations

from fastapi import APIRouter

import server.api.rest.v1.insights as insights_v1
import server.api.rest.v1.media as media_v1
import server.api.rest.v1.watchlist as watchlist_v1

# Canonical API router aggregator.
api_router = APIRouter()
api_router.include_router(watchlist_v1.router)
api_router.include_router(media_v1.router)
api_router.include_router(insights_v1.router)

__all__ = ["api_router"]
