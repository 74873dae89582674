"""Key-value store for ephemeral state (sessions, rate-limit windows).

Two backends share one small interface: ``get/set/delete/expire``.
The memory backend is process-local; the Redis backend is shared across
processes and lets Redis expire keys itself.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol

import redis.asyncio as redis


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl_seconds: float | None = None) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def expire(self, key: str, ttl_seconds: float) -> None: ...

    async def purge_expired(self, prefix: str = "") -> int: ...

    async def close(self) -> None: ...


class MemoryStore:
    """Dict-backed store with lazy expiry. Safe within a single event loop."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._data: dict[str, tuple[str, float | None]] = {}

    def _expired(self, expires_at: float | None) -> bool:
        return expires_at is not None and self._clock() >= expires_at

    async def get(self, key: str) -> str | None:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if self._expired(expires_at):
            del self._data[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: float | None = None) -> None:
        expires_at = self._clock() + ttl_seconds if ttl_seconds is not None else None
        self._data[key] = (value, expires_at)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def expire(self, key: str, ttl_seconds: float) -> None:
        item = self._data.get(key)
        if item is not None:
            self._data[key] = (item[0], self._clock() + ttl_seconds)

    async def purge_expired(self, prefix: str = "") -> int:
        stale = [
            key for key, (_, expires_at) in self._data.items()
            if key.startswith(prefix) and self._expired(expires_at)
        ]
        for key in stale:
            del self._data[key]
        return len(stale)

    async def close(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


class RedisStore:
    """Redis-backed store. Expiry is handled server-side."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    async def set(self, key: str, value: str, ttl_seconds: float | None = None) -> None:
        px = int(ttl_seconds * 1000) if ttl_seconds is not None else None
        await self._client.set(key, value, px=px)

    async def delete(self, key: str) -> None:
        await self._client.delete(key)

    async def expire(self, key: str, ttl_seconds: float) -> None:
        await self._client.pexpire(key, int(ttl_seconds * 1000))

    async def purge_expired(self, prefix: str = "") -> int:
        return 0

    async def close(self) -> None:
        await self._client.aclose()


_store: KeyValueStore | None = None


async def init_store(backend: str, redis_url: str = "") -> KeyValueStore:
    """Initialize the process-wide store."""
    global _store  # noqa: PLW0603
    if backend == "redis":
        client = redis.from_url(  # type: ignore[no-untyped-call]
            redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
        )
        _store = RedisStore(client)
    elif backend == "memory":
        _store = MemoryStore()
    else:
        msg = f"Unknown key-value backend: {backend}"
        raise ValueError(msg)
    return _store


def set_store(store: KeyValueStore) -> None:
    """Install a specific store instance (used by tests with a fake clock)."""
    global _store  # noqa: PLW0603
    _store = store


async def close_store() -> None:
    """Close the store."""
    global _store  # noqa: PLW0603
    if _store is not None:
        await _store.close()
        _store = None


def get_store() -> KeyValueStore:
    """Get the store (FastAPI dependency)."""
    if _store is None:
        msg = "Key-value store not initialized. Call init_store() first."
        raise RuntimeError(msg)
    return _store
