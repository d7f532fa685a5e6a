from __future__ import annotations

from typing import List, Optional, Protocol, Union

from domain.watchlist import MediaType, WatchlistEntry


class WatchlistStorePort(Protocol):
    """Server-side watchlist persistence (async, shared across request workers).

    Order is most-recently-added-first. Identity is `id` alone.
    `watchlist_id=None` addresses the deployment-wide default list.
    """

    async def list_entries(self, *, watchlist_id: Optional[str] = None) -> List[WatchlistEntry]:
        ...

    async def add_entry(self, entry: WatchlistEntry, *, watchlist_id: Optional[str] = None) -> WatchlistEntry:
        """Raises ValidationError, ConflictError or StorageError."""
        ...

    async def remove_entry(self, media_id: Union[int, str], *, watchlist_id: Optional[str] = None) -> int:
        """Idempotent: returns how many entries were removed (possibly 0)."""
        ...

    async def clear(self, *, watchlist_id: Optional[str] = None) -> None:
        ...

    async def close(self) -> None:
        ...


class LocalWatchlistStorePort(Protocol):
    """Single-process watchlist persistence (sync, single writer).

    Order is insertion order. Identity is `(media_type, id)`.
    """

    def list_entries(self) -> List[WatchlistEntry]:
        ...

    def add(self, media_type: Union[str, MediaType], media_id: Union[int, str]) -> bool:
        ...

    def remove(self, media_type: Union[str, MediaType], media_id: Union[int, str]) -> bool:
        ...

    def contains(self, media_type: Union[str, MediaType], media_id: Union[int, str]) -> bool:
        ...

    def clear(self) -> None:
        ...
