import asyncio
import json
import sys
import unittest
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

from redis.exceptions import ConnectionError as RedisConnectionError

from domain.watchlist import ConflictError, MediaType, StorageError, ValidationError, WatchlistEntry
from infrastructure.persistence.redis.watchlist_store import InMemoryListClient, RedisListWatchlistStore


class _YieldingListClient(InMemoryListClient):
    """Gives the event loop a turn inside every command, like a network round-trip."""

    async def lrange(self, key, start, end):
        await asyncio.sleep(0)
        return await super().lrange(key, start, end)

    async def lpush(self, key, *values):
        await asyncio.sleep(0)
        return await super().lpush(key, *values)

    async def rpush(self, key, *values):
        await asyncio.sleep(0)
        return await super().rpush(key, *values)

    async def delete(self, *keys):
        await asyncio.sleep(0)
        return await super().delete(*keys)


class _BrokenClient:
    async def lrange(self, key, start, end):
        raise RedisConnectionError("connection refused")

    async def lpush(self, key, *values):
        raise RedisConnectionError("connection refused")

    async def delete(self, *keys):
        raise RedisConnectionError("connection refused")

    def lock(self, name, timeout=None, blocking_timeout=None):
        return asyncio.Lock()


def _entry(media_id, title=None, media_type=MediaType.MOVIE) -> WatchlistEntry:
    return WatchlistEntry(id=media_id, media_type=media_type, title=title)


class TestRedisListWatchlistStore(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.client = InMemoryListClient()
        self.store = RedisListWatchlistStore(client=self.client, backend_name="memory")

    async def test_empty_state_lists_nothing(self) -> None:
        self.assertEqual(await self.store.list_entries(), [])

    async def test_add_then_list_round_trip(self) -> None:
        stored = await self.store.add_entry(_entry(550, "Fight Club"))
        self.assertIsNotNone(stored.added_at)

        entries = await self.store.list_entries()
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].id, 550)
        self.assertEqual(entries[0].title, "Fight Club")
        self.assertEqual(entries[0].media_type, MediaType.MOVIE)
        self.assertEqual(entries[0].added_at, stored.added_at)

    async def test_most_recent_first(self) -> None:
        await self.store.add_entry(_entry(1, "a"))
        await self.store.add_entry(_entry(2, "b"))
        self.assertEqual([e.title for e in await self.store.list_entries()], ["b", "a"])

    async def test_duplicate_id_conflicts(self) -> None:
        await self.store.add_entry(_entry(550, "Fight Club"))
        with self.assertRaises(ConflictError) as ctx:
            await self.store.add_entry(_entry(550, "Fight Club again"))
        self.assertEqual(ctx.exception.media_id, 550)
        self.assertEqual(len(await self.store.list_entries()), 1)

    async def test_identity_is_id_only(self) -> None:
        await self.store.add_entry(_entry(1399, media_type=MediaType.MOVIE))
        with self.assertRaises(ConflictError):
            await self.store.add_entry(_entry(1399, media_type=MediaType.TV))

    async def test_missing_id_is_validation_error(self) -> None:
        with self.assertRaises(ValidationError):
            await self.store.add_entry(_entry(None))

    async def test_remove_coerces_string_id(self) -> None:
        await self.store.add_entry(_entry(42, "x"))
        await self.store.add_entry(_entry(7, "y"))
        removed = await self.store.remove_entry("42")
        self.assertEqual(removed, 1)
        self.assertEqual([e.id for e in await self.store.list_entries()], [7])

    async def test_remove_keeps_survivor_order(self) -> None:
        for media_id in (1, 2, 3):
            await self.store.add_entry(_entry(media_id))
        await self.store.remove_entry(2)
        self.assertEqual([e.id for e in await self.store.list_entries()], [3, 1])

    async def test_remove_is_idempotent(self) -> None:
        await self.store.add_entry(_entry(1))
        self.assertEqual(await self.store.remove_entry(99), 0)
        self.assertEqual(await self.store.remove_entry(1), 1)
        self.assertEqual(await self.store.remove_entry(1), 0)
        self.assertEqual(await self.store.list_entries(), [])

    async def test_remove_bad_id_is_validation_error(self) -> None:
        with self.assertRaises(ValidationError):
            await self.store.remove_entry("abc")

    async def test_clear(self) -> None:
        await self.store.add_entry(_entry(1))
        await self.store.add_entry(_entry(2))
        await self.store.clear()
        self.assertEqual(await self.store.list_entries(), [])
        await self.store.add_entry(_entry(1))
        self.assertEqual(len(await self.store.list_entries()), 1)

    async def test_watchlist_ids_are_isolated(self) -> None:
        await self.store.add_entry(_entry(1))
        await self.store.add_entry(_entry(1), watchlist_id="alice")
        await self.store.add_entry(_entry(2), watchlist_id="alice")

        self.assertEqual([e.id for e in await self.store.list_entries()], [1])
        self.assertEqual([e.id for e in await self.store.list_entries(watchlist_id="alice")], [2, 1])
        self.assertEqual(self.store.key_for(None), "user:main_watchlist")
        self.assertEqual(self.store.key_for("alice"), "watchlist:alice")

        await self.store.clear(watchlist_id="alice")
        self.assertEqual(len(await self.store.list_entries()), 1)

    async def test_members_are_json_objects(self) -> None:
        await self.store.add_entry(_entry(550, "Fight Club"))
        raw = await self.client.lrange("user:main_watchlist", 0, -1)
        data = json.loads(raw[0])
        self.assertEqual(data["id"], 550)
        self.assertEqual(data["media_type"], "movie")
        self.assertEqual(data["title"], "Fight Club")

    async def test_malformed_member_is_storage_error(self) -> None:
        await self.client.lpush("user:main_watchlist", "{not json")
        with self.assertRaises(StorageError):
            await self.store.list_entries()

    async def test_deeply_nested_member_is_storage_error(self) -> None:
        await self.client.lpush("user:main_watchlist", "[" * 100000 + "]" * 100000)
        with self.assertRaises(StorageError):
            await self.store.list_entries()

    async def test_oversized_id_is_validation_error(self) -> None:
        with self.assertRaises(ValidationError):
            await self.store.remove_entry("1" * 5000)

    async def test_unreachable_backend_is_storage_error(self) -> None:
        store = RedisListWatchlistStore(client=_BrokenClient())
        with self.assertRaises(StorageError):
            await store.list_entries()
        with self.assertRaises(StorageError):
            await store.add_entry(_entry(1))
        with self.assertRaises(StorageError):
            await store.clear()


class TestConcurrentWriters(unittest.IsolatedAsyncioTestCase):
    async def test_locked_concurrent_adds_store_once(self) -> None:
        store = RedisListWatchlistStore(client=_YieldingListClient(), write_lock=True)
        results = await asyncio.gather(
            store.add_entry(_entry(550)),
            store.add_entry(_entry(550)),
            return_exceptions=True,
        )
        conflicts = [r for r in results if isinstance(r, ConflictError)]
        self.assertEqual(len(conflicts), 1)
        self.assertEqual([e.id for e in await store.list_entries()], [550])

    async def test_unlocked_concurrent_adds_can_duplicate(self) -> None:
        store = RedisListWatchlistStore(client=_YieldingListClient(), write_lock=False)
        await asyncio.gather(store.add_entry(_entry(550)), store.add_entry(_entry(550)))
        self.assertEqual([e.id for e in await store.list_entries()], [550, 550])

    async def test_locked_add_and_remove_do_not_lose_entries(self) -> None:
        store = RedisListWatchlistStore(client=_YieldingListClient(), write_lock=True)
        await store.add_entry(_entry(1))
        await store.add_entry(_entry(2))
        await asyncio.gather(store.remove_entry(1), store.add_entry(_entry(3)))
        self.assertEqual(sorted(e.id for e in await store.list_entries()), [2, 3])


if __name__ == "__main__":
    unittest.main()
