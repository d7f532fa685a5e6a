from __future__ import annotations

import asyncio
import json
import time
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple, Union

from redis.exceptions import RedisError

from application.ports.watchlist_store_port import WatchlistStorePort
from domain.watchlist import (
    ConflictError,
    StorageError,
    ValidationError,
    WatchlistEntry,
    coerce_media_id,
    coerce_media_type,
)


def build_redis_client(redis_url: str) -> Any:
    """Create a `redis.asyncio` client for the watchlist list key."""
    import redis.asyncio as redis_asyncio

    return redis_asyncio.from_url(
        redis_url,
        decode_responses=True,  # return str, not bytes
        socket_connect_timeout=5,
        socket_timeout=5,
    )


def _entry_from_stored(raw: Any) -> WatchlistEntry:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    try:
        data = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as exc:
        raise StorageError(f"malformed watchlist member: {str(raw)[:80]!r}") from exc
    if not isinstance(data, dict):
        raise StorageError(f"malformed watchlist member: {str(raw)[:80]!r}")
    try:
        media_id = coerce_media_id(data.get("id"))
        media_type = coerce_media_type(data.get("media_type"))
    except ValidationError as exc:
        raise StorageError(f"malformed watchlist member: {exc}") from exc
    rating = data.get("rating")
    added_at = data.get("added_at")
    return WatchlistEntry(
        id=media_id,
        media_type=media_type,
        title=data.get("title") or None,
        poster_path=data.get("poster_path") or None,
        rating=float(rating) if isinstance(rating, (int, float)) and not isinstance(rating, bool) else None,
        added_at=int(added_at) if isinstance(added_at, (int, float)) and not isinstance(added_at, bool) else None,
    )


class RedisListWatchlistStore(WatchlistStorePort):
    """Watchlist kept as a JSON-member Redis list at one fixed key.

    New entries are LPUSHed, so LRANGE returns most-recent-first.

    Add (read, scan, push) and remove (read, filter, delete, re-push) are
    read-modify-write sequences. With `write_lock=True` they run under a
    Redis lock named `<key>:lock`, which serializes writers across worker
    processes. With `write_lock=False` two concurrent adds of one id can both
    pass the duplicate scan, and an add racing a remove can be lost in the
    delete/re-push window; callers then assume a single writer.
    """

    def __init__(
        self,
        *,
        client: Any,
        key: str = "user:main_watchlist",
        write_lock: bool = True,
        lock_timeout_s: float = 5.0,
        lock_wait_s: float = 3.0,
        backend_name: str = "redis",
    ) -> None:
        self._client = client
        self._default_key = key
        self._write_lock = bool(write_lock)
        self._lock_timeout_s = float(lock_timeout_s)
        self._lock_wait_s = float(lock_wait_s)
        self._backend_name = backend_name

    @property
    def backend_name(self) -> str:
        return self._backend_name

    def key_for(self, watchlist_id: Optional[str] = None) -> str:
        ident = (watchlist_id or "").strip()
        if not ident:
            return self._default_key
        return f"watchlist:{ident}"

    @asynccontextmanager
    async def _guard(self, key: str) -> AsyncIterator[None]:
        if not self._write_lock:
            yield
            return
        lock = self._client.lock(
            f"{key}:lock",
            timeout=self._lock_timeout_s,
            blocking_timeout=self._lock_wait_s,
        )
        async with lock:
            yield

    async def _read(self, key: str) -> List[Tuple[Any, WatchlistEntry]]:
        members = await self._client.lrange(key, 0, -1)
        return [(m, _entry_from_stored(m)) for m in (members or [])]

    async def list_entries(self, *, watchlist_id: Optional[str] = None) -> List[WatchlistEntry]:
        try:
            return [entry for _, entry in await self._read(self.key_for(watchlist_id))]
        except (RedisError, OSError) as exc:
            raise StorageError(f"failed to read watchlist: {exc}") from exc

    async def add_entry(self, entry: WatchlistEntry, *, watchlist_id: Optional[str] = None) -> WatchlistEntry:
        if entry is None or getattr(entry, "id", None) is None:
            raise ValidationError("id is required")
        media_id = coerce_media_id(entry.id)
        key = self.key_for(watchlist_id)
        try:
            async with self._guard(key):
                existing = await self._read(key)
                if any(e.id == media_id for _, e in existing):
                    raise ConflictError(media_id)
                stored = replace(entry, id=media_id, added_at=int(time.time() * 1000))
                await self._client.lpush(key, json.dumps(stored.to_dict(), ensure_ascii=False))
                return stored
        except (RedisError, OSError) as exc:
            raise StorageError(f"failed to add to watchlist: {exc}") from exc

    async def remove_entry(self, media_id: Union[int, str], *, watchlist_id: Optional[str] = None) -> int:
        target = coerce_media_id(media_id)
        key = self.key_for(watchlist_id)
        try:
            async with self._guard(key):
                existing = await self._read(key)
                survivors = [raw for raw, e in existing if e.id != target]
                removed = len(existing) - len(survivors)
                if removed:
                    await self._client.delete(key)
                    if survivors:
                        await self._client.rpush(key, *survivors)
                return removed
        except (RedisError, OSError) as exc:
            raise StorageError(f"failed to remove from watchlist: {exc}") from exc

    async def clear(self, *, watchlist_id: Optional[str] = None) -> None:
        key = self.key_for(watchlist_id)
        try:
            async with self._guard(key):
                await self._client.delete(key)
        except (RedisError, OSError) as exc:
            raise StorageError(f"failed to clear watchlist: {exc}") from exc

    async def close(self) -> None:
        close = getattr(self._client, "aclose", None) or getattr(self._client, "close", None)
        if callable(close):
            result = close()
            if asyncio.iscoroutine(result):
                await result


class InMemoryListClient:
    """In-process stand-in for the `redis.asyncio` list/lock subset used above.

    Used when no Redis URL is configured. State is per process, so multiple
    uvicorn workers each see their own list.
    """

    def __init__(self) -> None:
        self._lists: Dict[str, List[str]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    async def lrange(self, key: str, start: int, end: int) -> List[str]:
        items = self._lists.get(key, [])
        size = len(items)
        if start < 0:
            start = max(size + start, 0)
        if end < 0:
            end = size + end
        return list(items[start : end + 1])

    async def lpush(self, key: str, *values: str) -> int:
        items = self._lists.setdefault(key, [])
        for v in values:
            items.insert(0, v)
        return len(items)

    async def rpush(self, key: str, *values: str) -> int:
        items = self._lists.setdefault(key, [])
        items.extend(values)
        return len(items)

    async def delete(self, *keys: str) -> int:
        return sum(1 for k in keys if self._lists.pop(k, None) is not None)

    async def ping(self) -> bool:
        return True

    def lock(self, name: str, timeout: Optional[float] = None, blocking_timeout: Optional[float] = None) -> asyncio.Lock:
        _ = (timeout, blocking_timeout)
        return self._locks.setdefault(name, asyncio.Lock())

    async def aclose(self) -> None:
        return None
