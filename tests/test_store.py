"""Tests for the in-memory key-value store."""

import pytest

from apaddicto.store import MemoryStore, close_store, get_store, set_store


class Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestMemoryStore:
    async def test_set_get_delete(self):
        store = MemoryStore()
        await store.set("k", "v")
        assert await store.get("k") == "v"
        await store.delete("k")
        assert await store.get("k") is None

    async def test_delete_missing_key_is_a_noop(self):
        await MemoryStore().delete("missing")

    async def test_ttl_expires_lazily(self):
        clock = Clock()
        store = MemoryStore(clock=clock)
        await store.set("k", "v", ttl_seconds=10)
        clock.now = 9.5
        assert await store.get("k") == "v"
        clock.now = 10
        assert await store.get("k") is None
        assert len(store) == 0

    async def test_expire_resets_ttl(self):
        clock = Clock()
        store = MemoryStore(clock=clock)
        await store.set("k", "v")
        await store.expire("k", 5)
        clock.now = 6
        assert await store.get("k") is None

    async def test_purge_expired_respects_prefix(self):
        clock = Clock()
        store = MemoryStore(clock=clock)
        await store.set("a:1", "x", ttl_seconds=1)
        await store.set("b:1", "x", ttl_seconds=1)
        await store.set("a:2", "x")
        clock.now = 2

        assert await store.purge_expired("a:") == 1
        assert len(store) == 2
        assert await store.purge_expired() == 1
        assert len(store) == 1


class TestStoreLifecycle:
    async def test_close_uninstalls_an_empty_store(self):
        store = MemoryStore()
        set_store(store)
        assert len(store) == 0

        await close_store()

        with pytest.raises(RuntimeError):
            get_store()

    async def test_close_without_store_is_a_noop(self):
        await close_store()
        await close_store()
