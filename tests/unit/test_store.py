"""Unit tests for the key/value store."""

import sqlite3

import pytest

from src.data.store import KeyValueStore, chunked


@pytest.fixture
def store(settings):
    kv = KeyValueStore(settings, table="test")
    yield kv
    kv.close()


class TestChunked:
    """Tests for chunked."""

    def test_chunks(self):
        assert chunked([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]

    def test_empty(self):
        assert chunked([], 5) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            chunked([1], 0)


class TestKeyValueStore:
    """Tests for KeyValueStore."""

    @pytest.mark.asyncio
    async def test_batch_set_and_get(self, store):
        items = [(f"0x{i:040x}", {"index": i}) for i in range(12)]

        written = await store.batch_set(items)
        values = await store.batch_get([key for key, _ in items], batch_size=5)

        assert written == 12
        assert values == [{"index": i} for i in range(12)]

    @pytest.mark.asyncio
    async def test_missing_keys_are_omitted(self, store):
        await store.batch_set([("a", 1), ("c", 3)])

        assert await store.batch_get(["a", "b", "c"]) == [1, 3]

    @pytest.mark.asyncio
    async def test_failed_chunk_is_skipped(self, store, caplog):
        cache = store._get_cache()
        real_set = cache.set

        def failing_set(key, value, *args, **kwargs):
            if key == "bad":
                raise sqlite3.OperationalError("disk I/O error")
            return real_set(key, value, *args, **kwargs)

        cache.set = failing_set
        items = [("a", 1), ("b", 2), ("bad", 3), ("c", 4), ("d", 5)]

        written = await store.batch_set(items, batch_size=2)

        assert written == 3
        assert await store.batch_get(["a", "b", "c", "d"]) == [1, 2, 5]
        assert "Failed to write" in caplog.text

    @pytest.mark.asyncio
    async def test_scan_and_remove(self, store):
        await store.batch_set([("a", 1), ("b", 2)])

        assert sorted(await store.scan()) == [1, 2]
        assert await store.remove("a") is True
        assert await store.scan() == [2]
        assert await store.remove("a") is False
