"""
Unit Tests for the Post Cache
=============================

Snapshot storage, expiry, validation of stored entries and the
key-value backends.
"""

import json
from unittest.mock import Mock

import pytest

from sheetblog.ingestion.post_parser import parse_batch
from sheetblog.storage.kv_store import MemoryKeyValueStore, SQLiteKeyValueStore
from sheetblog.storage.post_cache import CACHE_KEY, CACHE_TTL_SECONDS, PostCache
from sheetblog.utils.exceptions import CacheError

from tests.conftest import make_row


@pytest.fixture
def posts():
    return parse_batch([make_row(1), make_row(2, categories="CSS"), make_row(3, featured="TRUE")])


class TestSnapshot:
    """Storing and reading back the published post set."""

    def test_round_trip(self, memory_cache, posts):
        memory_cache.set(posts)

        assert memory_cache.get() == posts

    def test_empty_cache_is_a_miss(self, memory_cache):
        assert memory_cache.get() is None

    def test_empty_post_list_is_a_hit(self, memory_cache):
        memory_cache.set([])

        assert memory_cache.get() == []

    def test_stored_payload_format(self, memory_cache, posts):
        memory_cache.set(posts)

        payload = json.loads(memory_cache.store.get(CACHE_KEY))
        assert payload["timestamp"] == 1_700_000_000_000
        assert isinstance(payload["timestamp"], int)
        assert payload["data"][0]["readTime"] == "1 min read"
        assert payload["data"][0]["featuredImage"] == "/images/post-1.jpg"
        assert "read_time" not in payload["data"][0]

    def test_default_key_and_ttl(self):
        assert CACHE_KEY == "templates"
        assert CACHE_TTL_SECONDS == 300

    def test_non_list_input_is_ignored(self, memory_cache):
        memory_cache.set("not a list")
        memory_cache.set(None)

        assert memory_cache.store.get(CACHE_KEY) is None

    def test_clear(self, memory_cache, posts):
        memory_cache.set(posts)
        memory_cache.clear()

        assert memory_cache.get() is None


class TestExpiry:
    """Snapshots older than the TTL are discarded."""

    def test_fresh_at_ttl_boundary(self, memory_cache, posts):
        memory_cache.set(posts)
        memory_cache.test_clock.advance(300)

        assert memory_cache.get() == posts

    def test_expired_after_ttl(self, memory_cache, posts):
        memory_cache.set(posts)
        memory_cache.test_clock.advance(301)

        assert memory_cache.get() is None
        assert memory_cache.store.get(CACHE_KEY) is None

    def test_custom_ttl(self, posts):
        now = [1000.0]
        cache = PostCache(MemoryKeyValueStore(), ttl_seconds=10, clock=lambda: now[0])
        cache.set(posts)

        now[0] += 11

        assert cache.get() is None


class TestCorruptEntries:
    """Anything that is not a valid snapshot is a miss and gets deleted."""

    @pytest.mark.parametrize(
        "raw",
        [
            "{not json",
            "[]",
            "null",
            '"text"',
            json.dumps({"data": [], "timestamp": "yesterday"}),
            json.dumps({"data": [], "timestamp": True}),
            json.dumps({"data": {"id": "1"}, "timestamp": 1_700_000_000_000}),
            json.dumps({"timestamp": 1_700_000_000_000}),
            json.dumps({"data": [{"title": ["not", "a", "string"]}], "timestamp": 1_700_000_000_000}),
        ],
    )
    def test_invalid_entry_is_discarded(self, memory_cache, raw):
        memory_cache.store.set(CACHE_KEY, raw)

        assert memory_cache.get() is None
        assert memory_cache.store.get(CACHE_KEY) is None

    @pytest.mark.parametrize(
        "timestamp",
        [float("inf"), float("-inf"), float("nan"), 1e308, 1_700_000_060_000],
        ids=["infinity", "negative-infinity", "nan", "huge", "one-minute-ahead"],
    )
    def test_unusable_timestamp_is_discarded(self, memory_cache, posts, timestamp):
        memory_cache.set(posts)
        payload = json.loads(memory_cache.store.get(CACHE_KEY))
        payload["timestamp"] = timestamp
        memory_cache.store.set(CACHE_KEY, json.dumps(payload))

        assert memory_cache.get() is None
        assert memory_cache.store.get(CACHE_KEY) is None

    def test_timestamp_equal_to_now_is_fresh(self, memory_cache, posts):
        memory_cache.set(posts)
        payload = json.loads(memory_cache.store.get(CACHE_KEY))
        payload["timestamp"] = 1_700_000_000_000.0
        memory_cache.store.set(CACHE_KEY, json.dumps(payload))

        assert memory_cache.get() == posts


class TestFailingStore:
    """Storage errors are logged, never raised."""

    def test_read_error_is_a_miss(self):
        store = Mock()
        store.get.side_effect = CacheError("disk I/O error")
        cache = PostCache(store)

        assert cache.get() is None
        store.delete.assert_called_once_with(CACHE_KEY)

    def test_write_error_is_swallowed(self, posts):
        store = Mock()
        store.set.side_effect = CacheError("database is locked")
        store.delete.side_effect = CacheError("database is locked")
        cache = PostCache(store)

        cache.set(posts)

        store.set.assert_called_once()


class TestSQLiteStore:
    """SQLite backend behaviour."""

    def test_get_set_delete(self, tmp_path):
        store = SQLiteKeyValueStore(str(tmp_path / "cache.db"))

        assert store.get("templates") is None
        store.set("templates", "one")
        store.set("templates", "two")
        assert store.get("templates") == "two"
        store.delete("templates")
        store.delete("templates")
        assert store.get("templates") is None

    def test_snapshot_survives_new_instance(self, tmp_path, posts):
        db_path = str(tmp_path / "nested" / "cache.db")
        PostCache(SQLiteKeyValueStore(db_path), clock=lambda: 1000.0).set(posts)

        reopened = PostCache(SQLiteKeyValueStore(db_path), clock=lambda: 1060.0)

        assert reopened.get() == posts

    def test_unopenable_database_raises_cache_error(self, tmp_path):
        directory = tmp_path / "is_a_directory"
        directory.mkdir()

        with pytest.raises(CacheError):
            SQLiteKeyValueStore(str(directory))
