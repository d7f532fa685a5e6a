import sys
import unittest
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

from application.watchlist.service import WatchlistService
from domain.watchlist import ConflictError, MediaSummary, MediaType, ValidationError
from infrastructure.persistence.redis.watchlist_store import InMemoryListClient, RedisListWatchlistStore


class _StubMetadata:
    def __init__(self, summaries=None) -> None:
        self.summaries = dict(summaries or {})
        self.calls: list[tuple[str, int]] = []

    async def get_media_details(self, media_type, media_id, *, language=None):
        return None

    async def get_media_summary(self, media_type, media_id, *, language=None):
        self.calls.append((MediaType(media_type).value, int(media_id)))
        return self.summaries.get(int(media_id))

    async def close(self) -> None:
        return None


class TestWatchlistService(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.store = RedisListWatchlistStore(client=InMemoryListClient())
        self.metadata = _StubMetadata(
            {
                550: MediaSummary(
                    id=550,
                    media_type=MediaType.MOVIE,
                    title="Fight Club",
                    poster_path="/fc.jpg",
                    vote_average=8.4,
                )
            }
        )
        self.service = WatchlistService(store=self.store, metadata=self.metadata)

    async def test_add_keeps_caller_display_fields(self) -> None:
        stored = await self.service.add({"id": "550", "title": "My Title", "rating": 7})
        self.assertEqual(stored.title, "My Title")
        self.assertEqual(stored.rating, 7.0)
        self.assertEqual(self.metadata.calls, [])

    async def test_add_enriches_bare_reference(self) -> None:
        stored = await self.service.add({"id": 550})
        self.assertEqual(stored.title, "Fight Club")
        self.assertEqual(stored.poster_path, "/fc.jpg")
        self.assertEqual(stored.rating, 8.4)
        self.assertEqual(self.metadata.calls, [("movie", 550)])

    async def test_enrich_miss_stores_bare_reference(self) -> None:
        stored = await self.service.add({"id": 13, "media_type": "tv"})
        self.assertIsNone(stored.title)
        self.assertEqual(stored.media_type, MediaType.TV)
        self.assertEqual(self.metadata.calls, [("tv", 13)])

    async def test_enrichment_can_be_disabled(self) -> None:
        service = WatchlistService(store=self.store, metadata=self.metadata, enrich_on_add=False)
        stored = await service.add({"id": 550})
        self.assertIsNone(stored.title)
        self.assertEqual(self.metadata.calls, [])

    async def test_works_without_gateway(self) -> None:
        service = WatchlistService(store=self.store)
        stored = await service.add({"id": 1})
        self.assertEqual(stored.id, 1)

    async def test_add_duplicate_propagates_conflict(self) -> None:
        await self.service.add({"id": 1, "title": "a"})
        with self.assertRaises(ConflictError):
            await self.service.add({"id": "1", "title": "a"})

    async def test_add_requires_id(self) -> None:
        with self.assertRaises(ValidationError):
            await self.service.add({"title": "no id"})

    async def test_remove_requires_id(self) -> None:
        for raw in (None, "", "  "):
            with self.assertRaises(ValidationError):
                await self.service.remove(raw)

    async def test_outcomes_are_logged_as_key_value_lines(self) -> None:
        with self.assertLogs("application.watchlist.service", level="INFO") as logs:
            await self.service.add({"id": 550})
            await self.service.remove("550")
        self.assertTrue(any('id=550 media_type="movie" title="Fight Club"' in line for line in logs.output), logs.output)
        self.assertTrue(any('id="550" removed=1' in line for line in logs.output), logs.output)

    async def test_remove_and_clear(self) -> None:
        await self.service.add({"id": 1, "title": "a"})
        await self.service.add({"id": 2, "title": "b"})
        self.assertEqual(await self.service.remove("1"), 1)
        self.assertEqual([e.id for e in await self.service.list_entries()], [2])
        await self.service.clear()
        self.assertEqual(await self.service.list_entries(), [])


if __name__ == "__main__":
    unittest.main()
