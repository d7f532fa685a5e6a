from __future__ import annotations

import json
from typing import Any, List, Optional, Union

from application.ports.watchlist_store_port import LocalWatchlistStorePort
from domain.watchlist import (
    MediaType,
    StorageError,
    ValidationError,
    WatchlistEntry,
    coerce_media_id,
    coerce_media_type,
)
from infrastructure.persistence.local.slot_storage import SlotStorage


class LocalWatchlistStore(LocalWatchlistStorePort):
    """Watchlist persisted in a single slot as a JSON array of `{type, id}`.

    Identity is `(media_type, id)` and entries keep insertion order (oldest
    first), unlike the server-side list. Reads never raise: a missing slot,
    malformed JSON or an unreadable backend all read as an empty list.
    Failed writes raise StorageError.
    """

    def __init__(self, storage: SlotStorage, *, key: str = "cinexp_watchlist_v2") -> None:
        self._storage = storage
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def _load_pairs(self) -> List[dict]:
        try:
            raw = self._storage.get_item(self._key)
        except (OSError, ValueError):
            return []
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError):
            return []
        if not isinstance(data, list):
            return []
        pairs: List[dict] = []
        for item in data:
            pair = self._parse_pair(item)
            if pair is not None:
                pairs.append(pair)
        return pairs

    @staticmethod
    def _parse_pair(item: Any) -> Optional[dict]:
        if not isinstance(item, dict):
            return None
        try:
            return {
                "type": coerce_media_type(item.get("type"), default=None).value,
                "id": coerce_media_id(item.get("id")),
            }
        except ValidationError:
            return None

    def _save_pairs(self, pairs: List[dict]) -> None:
        try:
            self._storage.set_item(self._key, json.dumps(pairs))
        except (OSError, ValueError) as exc:
            raise StorageError(f"failed to save local watchlist: {exc}") from exc

    def list_entries(self) -> List[WatchlistEntry]:
        return [WatchlistEntry(id=p["id"], media_type=MediaType(p["type"])) for p in self._load_pairs()]

    def contains(self, media_type: Union[str, MediaType], media_id: Union[int, str]) -> bool:
        kind = coerce_media_type(media_type, default=None).value
        target = coerce_media_id(media_id)
        return any(p["type"] == kind and p["id"] == target for p in self._load_pairs())

    def add(self, media_type: Union[str, MediaType], media_id: Union[int, str]) -> bool:
        kind = coerce_media_type(media_type, default=None).value
        target = coerce_media_id(media_id)
        pairs = self._load_pairs()
        if any(p["type"] == kind and p["id"] == target for p in pairs):
            return False
        pairs.append({"type": kind, "id": target})
        self._save_pairs(pairs)
        return True

    def remove(self, media_type: Union[str, MediaType], media_id: Union[int, str]) -> bool:
        kind = coerce_media_type(media_type, default=None).value
        target = coerce_media_id(media_id)
        pairs = self._load_pairs()
        survivors = [p for p in pairs if not (p["type"] == kind and p["id"] == target)]
        if len(survivors) == len(pairs):
            return False
        self._save_pairs(survivors)
        return True

    def clear(self) -> None:
        try:
            self._storage.remove_item(self._key)
        except (OSError, ValueError) as exc:
            raise StorageError(f"failed to clear local watchlist: {exc}") from exc
