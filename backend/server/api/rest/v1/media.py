from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, RedirectResponse

from domain.watchlist import MediaType, ValidationError, coerce_media_id, coerce_media_type
from infrastructure.config.settings import POSTER_ERROR_URL
from infrastructure.enrichment.tmdb_client import TMDBClient, best_poster_url
from server.api.rest.dependencies import get_media_metadata

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["media"])


@router.get("/tmdb")
async def tmdb_proxy(
    id: Optional[str] = Query(default=None, description="Media id: returns details"),
    query: Optional[str] = Query(default=None, description="Movie search text"),
    media_type: Optional[str] = Query(default=None, description="movie | tv"),
    client: Optional[TMDBClient] = Depends(get_media_metadata),
) -> Any:
    """Details by id, movie search by query, else a popular feed (movie or recent TV)."""
    if client is None:
        logger.error("TMDB proxy called without TMDB_API_KEY/TMDB_API_TOKEN")
        return JSONResponse(status_code=500, content={"message": "Server configuration error: TMDB_API_KEY is missing."})

    try:
        kind = coerce_media_type(media_type)
        media_id = coerce_media_id(id) if id else None
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"message": str(e)})

    if media_id is not None:
        data = await client.get_media_details(kind, media_id)
    elif query and query.strip():
        data = await client.search_movies_raw(query=query.strip())
    elif kind == MediaType.TV:
        data = await client.discover_recent_tv_raw()
    else:
        data = await client.popular_movies_raw()

    if data is None:
        return JSONResponse(status_code=500, content={"message": "Failed to fetch data from TMDb."})
    return data


@router.get("/poster")
async def poster_redirect(
    id: Optional[str] = Query(default=None, description="TMDb movie id"),
    client: Optional[TMDBClient] = Depends(get_media_metadata),
) -> Any:
    """Redirect to the best poster image for a movie."""
    if not id:
        return JSONResponse(status_code=400, content={"message": "Movie ID is required."})
    try:
        movie_id = coerce_media_id(id)
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"message": str(e)})

    details = await client.get_media_details(MediaType.MOVIE, movie_id) if client is not None else None
    if not details:
        logger.warning("poster lookup failed for id=%s", movie_id)
        return RedirectResponse(POSTER_ERROR_URL, status_code=302)
    return RedirectResponse(best_poster_url(details), status_code=302)
