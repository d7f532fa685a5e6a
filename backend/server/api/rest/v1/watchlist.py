from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from application.watchlist.service import WatchlistService
from domain.watchlist import ConflictError, StorageError, ValidationError
from server.api.rest.dependencies import get_watchlist_service
from server.models.schemas import (
    MessageResponse,
    WatchlistAddRequest,
    WatchlistEntryResponse,
    WatchlistDiagnosticResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["watchlist"])

WATCHLIST_PATH = "/api/watchlist"
ALLOWED_METHODS = ("GET", "POST", "DELETE")

# Storage failures are reported generically; details stay in the server log.
_STORAGE_FAILURE = "Internal Server Error"


def _message(status_code: int, message: str, *, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message}, headers=headers)


def method_not_allowed() -> JSONResponse:
    """405 for every method other than GET, POST and DELETE on the watchlist path."""
    return _message(405, "Method Not Allowed", headers={"Allow": ", ".join(ALLOWED_METHODS)})


@router.get("/watchlist", response_model=List[WatchlistEntryResponse])
async def list_watchlist(
    service: WatchlistService = Depends(get_watchlist_service),
) -> Any:
    try:
        entries = await service.list_entries()
    except StorageError:
        return _message(500, _STORAGE_FAILURE)
    return [e.to_dict() for e in entries]


@router.post("/watchlist", status_code=201, response_model=MessageResponse)
async def add_watchlist_entry(
    req: WatchlistAddRequest,
    service: WatchlistService = Depends(get_watchlist_service),
) -> Any:
    try:
        await service.add(req.to_payload())
    except ValidationError as e:
        return _message(400, str(e))
    except ConflictError:
        return _message(409, "Item already in watchlist")
    except StorageError:
        return _message(500, _STORAGE_FAILURE)
    return _message(201, "Added to watchlist")


@router.delete("/watchlist", response_model=MessageResponse)
async def remove_watchlist_entry(
    id: Optional[str] = Query(default=None, description="TMDb media id to remove"),
    service: WatchlistService = Depends(get_watchlist_service),
) -> Any:
    try:
        await service.remove(id)
    except ValidationError as e:
        return _message(400, str(e))
    except StorageError:
        return _message(500, _STORAGE_FAILURE)
    return _message(200, "Removed from watchlist")


@router.post("/clear-watchlist", response_model=MessageResponse, tags=["admin"])
async def clear_watchlist(
    service: WatchlistService = Depends(get_watchlist_service),
) -> Any:
    """Administrative reset: drops every entry, no confirmation."""
    try:
        await service.clear()
    except StorageError:
        return _message(500, "Failed to clear watchlist.")
    return _message(200, "Watchlist has been cleared successfully.")


@router.get("/test-watchlist", response_model=WatchlistDiagnosticResponse, tags=["admin"])
async def diagnose_watchlist(
    service: WatchlistService = Depends(get_watchlist_service),
) -> Any:
    """Diagnostic read of the watchlist backend."""
    backend = getattr(service.store, "backend_name", None)
    try:
        entries = await service.list_entries()
    except StorageError:
        return JSONResponse(
            status_code=500,
            content={
                "step": "db_read",
                "success": False,
                "backend": backend,
                "message": "Failed to read from database.",
            },
        )
    return {
        "step": "db_read",
        "success": True,
        "backend": backend,
        "data": [e.to_dict() for e in entries],
    }
