from __future__ import annotations

import logging
from typing import Any, List, Optional

from application.ports.media_metadata_port import MediaMetadataPort
from application.ports.watchlist_store_port import WatchlistStorePort
from domain.watchlist import (
    ConflictError,
    StorageError,
    ValidationError,
    WatchlistEntry,
    entry_from_payload,
    entry_from_summary,
)
from infrastructure.utils import format_kv

logger = logging.getLogger(__name__)


class WatchlistService:
    """Caller of the server-side watchlist store.

    Normalizes raw request payloads, fills missing display fields from the
    metadata gateway, and logs outcomes. Store errors are re-raised untouched
    so the HTTP layer can map them to status codes.
    """

    def __init__(
        self,
        *,
        store: WatchlistStorePort,
        metadata: Optional[MediaMetadataPort] = None,
        enrich_on_add: bool = True,
    ) -> None:
        self._store = store
        self._metadata = metadata
        self._enrich_on_add = bool(enrich_on_add)

    @property
    def store(self) -> WatchlistStorePort:
        return self._store

    async def list_entries(self) -> List[WatchlistEntry]:
        try:
            return await self._store.list_entries()
        except StorageError:
            logger.exception("watchlist list failed")
            raise

    async def add(self, payload: Any) -> WatchlistEntry:
        entry = entry_from_payload(payload)
        entry = await self._maybe_enrich(entry)
        try:
            stored = await self._store.add_entry(entry)
        except ConflictError:
            logger.info("watchlist add skipped (duplicate) %s", format_kv(id=entry.id, media_type=entry.media_type))
            raise
        except StorageError:
            logger.exception("watchlist add failed %s", format_kv(id=entry.id))
            raise
        logger.info(
            "watchlist add %s",
            format_kv(id=stored.id, media_type=stored.media_type, title=stored.title),
        )
        return stored

    async def remove(self, raw_id: Any) -> int:
        if raw_id is None or (isinstance(raw_id, str) and not raw_id.strip()):
            raise ValidationError("id is required")
        try:
            removed = await self._store.remove_entry(raw_id)
        except StorageError:
            logger.exception("watchlist remove failed %s", format_kv(id=raw_id))
            raise
        logger.info("watchlist remove %s", format_kv(id=raw_id, removed=removed))
        return removed

    async def clear(self) -> None:
        try:
            await self._store.clear()
        except StorageError:
            logger.exception("watchlist clear failed")
            raise
        logger.warning("watchlist cleared")

    async def _maybe_enrich(self, entry: WatchlistEntry) -> WatchlistEntry:
        if entry.title or not self._enrich_on_add or self._metadata is None:
            return entry
        summary = await self._metadata.get_media_summary(entry.media_type, entry.id)
        if summary is None:
            # Gateway down or unknown id: store the bare reference.
            logger.warning("watchlist enrich miss %s", format_kv(id=entry.id, media_type=entry.media_type))
            return entry
        return entry_from_summary(summary)
