import json
import sys
import tempfile
import unittest
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

from domain.watchlist import MediaType, StorageError, ValidationError
from infrastructure.persistence.local.slot_storage import JsonFileSlotStorage, MemorySlotStorage
from infrastructure.persistence.local.watchlist_store import LocalWatchlistStore

_KEY = "cinexp_watchlist_v2"


class _UnreadableStorage(MemorySlotStorage):
    def get_item(self, key):
        raise OSError("storage disabled")


class TestLocalWatchlistStore(unittest.TestCase):
    def setUp(self) -> None:
        self.slots = MemorySlotStorage()
        self.store = LocalWatchlistStore(self.slots)

    def test_empty_state(self) -> None:
        self.assertEqual(self.store.list_entries(), [])
        self.assertFalse(self.store.contains("movie", 1))

    def test_insertion_order(self) -> None:
        self.store.add("movie", 1)
        self.store.add("tv", 2)
        self.assertEqual([e.identity for e in self.store.list_entries()], [("movie", 1), ("tv", 2)])

    def test_identity_is_type_and_id(self) -> None:
        self.assertTrue(self.store.add("movie", 1399))
        self.assertTrue(self.store.add("tv", 1399))
        self.assertFalse(self.store.add("movie", "1399"))
        self.assertEqual(len(self.store.list_entries()), 2)
        self.assertTrue(self.store.contains(MediaType.TV, "1399"))

    def test_remove_only_matching_kind(self) -> None:
        self.store.add("movie", 1399)
        self.store.add("tv", 1399)
        self.assertTrue(self.store.remove("tv", 1399))
        self.assertFalse(self.store.remove("tv", 1399))
        self.assertEqual([e.identity for e in self.store.list_entries()], [("movie", 1399)])

    def test_wire_format_is_type_id_pairs(self) -> None:
        self.store.add("tv", 2)
        self.assertEqual(json.loads(self.slots.get_item(_KEY)), [{"type": "tv", "id": 2}])

    def test_malformed_slot_reads_as_empty(self) -> None:
        self.slots.set_item(_KEY, "{definitely not json")
        self.assertEqual(self.store.list_entries(), [])
        # the next write starts over
        self.assertTrue(self.store.add("movie", 5))
        self.assertEqual([e.id for e in self.store.list_entries()], [5])

    def test_non_list_payload_reads_as_empty(self) -> None:
        self.slots.set_item(_KEY, json.dumps({"type": "movie", "id": 1}))
        self.assertEqual(self.store.list_entries(), [])

    def test_bad_elements_are_skipped(self) -> None:
        self.slots.set_item(
            _KEY,
            json.dumps([{"type": "movie", "id": 1}, {"type": "person", "id": 2}, {"id": 3}, "x", {"type": "tv", "id": "4"}]),
        )
        self.assertEqual([e.identity for e in self.store.list_entries()], [("movie", 1), ("tv", 4)])

    def test_oversized_id_element_is_skipped(self) -> None:
        self.slots.set_item(_KEY, json.dumps([{"type": "movie", "id": "1" * 5000}, {"type": "tv", "id": 7}]))
        self.assertEqual([e.identity for e in self.store.list_entries()], [("tv", 7)])

    def test_deeply_nested_slot_reads_as_empty(self) -> None:
        self.slots.set_item(_KEY, "[" * 100000 + "]" * 100000)
        self.assertEqual(self.store.list_entries(), [])
        self.assertFalse(self.store.contains("movie", 1))
        self.assertTrue(self.store.add("movie", 1))
        self.assertEqual([e.identity for e in self.store.list_entries()], [("movie", 1)])

    def test_unreadable_storage_reads_as_empty(self) -> None:
        store = LocalWatchlistStore(_UnreadableStorage())
        self.assertEqual(store.list_entries(), [])

    def test_quota_exceeded_is_storage_error(self) -> None:
        store = LocalWatchlistStore(MemorySlotStorage(quota_bytes=len(_KEY) + 30))
        self.assertTrue(store.add("movie", 1))
        with self.assertRaises(StorageError):
            store.add("movie", 2)
        self.assertEqual([e.id for e in store.list_entries()], [1])

    def test_invalid_input_is_validation_error(self) -> None:
        with self.assertRaises(ValidationError):
            self.store.add("person", 1)
        with self.assertRaises(ValidationError):
            self.store.add("movie", "abc")

    def test_clear(self) -> None:
        self.store.add("movie", 1)
        self.store.clear()
        self.assertEqual(self.store.list_entries(), [])
        self.assertIsNone(self.slots.get_item(_KEY))


class TestJsonFileSlotStorage(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "nested" / "local_storage.json"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_persists_across_instances(self) -> None:
        LocalWatchlistStore(JsonFileSlotStorage(self.path)).add("movie", 550)
        reopened = LocalWatchlistStore(JsonFileSlotStorage(self.path))
        self.assertEqual([e.identity for e in reopened.list_entries()], [("movie", 550)])

    def test_other_slots_survive(self) -> None:
        storage = JsonFileSlotStorage(self.path)
        storage.set_item("theme", "dark")
        store = LocalWatchlistStore(storage)
        store.add("tv", 1)
        store.clear()
        self.assertEqual(storage.get_item("theme"), "dark")
        self.assertIsNone(storage.get_item(_KEY))

    def test_corrupt_file_reads_empty_and_recovers(self) -> None:
        self.path.parent.mkdir(parents=True)
        self.path.write_text("[1, 2", encoding="utf-8")
        store = LocalWatchlistStore(JsonFileSlotStorage(self.path))
        self.assertEqual(store.list_entries(), [])
        self.assertTrue(store.add("movie", 1))
        self.assertEqual([e.id for e in store.list_entries()], [1])

    def test_deeply_nested_file_reads_empty_and_recovers(self) -> None:
        self.path.parent.mkdir(parents=True)
        self.path.write_text("[" * 100000 + "]" * 100000, encoding="utf-8")
        store = LocalWatchlistStore(JsonFileSlotStorage(self.path))
        self.assertEqual(store.list_entries(), [])
        self.assertTrue(store.add("tv", 2))
        self.assertEqual([e.identity for e in store.list_entries()], [("tv", 2)])


if __name__ == "__main__":
    unittest.main()
