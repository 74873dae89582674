"""Fixed-window attempt limiter keyed by an arbitrary identifier.

Per identifier the entry moves Clean -> Active -> Blocked -> Clean:
no entry, attempts below the maximum, attempts at or above the maximum,
and back to no entry once the reset time has passed (deleted lazily).

State lives in the configured key-value store. With the memory backend the
limit is advisory per process; with Redis it is shared across instances.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable

import structlog

from apaddicto.config import get_settings
from apaddicto.store import KeyValueStore, get_store

logger = structlog.get_logger()

AUTH_NAMESPACE = "ratelimit:auth"
GENERAL_NAMESPACE = "ratelimit:general"


class RateLimiter:
    """Count attempts per identifier inside a fixed window."""

    def __init__(
        self,
        store: KeyValueStore,
        max_attempts: int = 5,
        window_seconds: float = 15 * 60,
        *,
        namespace: str = "ratelimit",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.namespace = namespace
        self._clock = clock

    def _key(self, identifier: str) -> str:
        return f"{self.namespace}:{identifier}"

    async def _load(self, identifier: str) -> dict | None:
        """Return the live entry, dropping it if its window has elapsed."""
        raw = await self.store.get(self._key(identifier))
        if raw is None:
            return None
        entry = json.loads(raw)
        if self._clock() > entry["reset_time"]:
            await self.store.delete(self._key(identifier))
            return None
        return entry

    async def is_rate_limited(self, identifier: str) -> bool:
        entry = await self._load(identifier)
        if entry is None:
            return False
        return entry["attempts"] >= self.max_attempts

    async def record_attempt(self, identifier: str) -> int:
        """Record one attempt. Returns the attempt count in the current window."""
        now = self._clock()
        entry = await self._load(identifier)
        if entry is None:
            entry = {"attempts": 1, "reset_time": now + self.window_seconds}
        else:
            entry["attempts"] += 1

        ttl = max(entry["reset_time"] - now, 0.001)
        await self.store.set(self._key(identifier), json.dumps(entry), ttl_seconds=ttl)

        if entry["attempts"] == self.max_attempts:
            logger.warning("rate_limit_reached", identifier=identifier, namespace=self.namespace)
        return entry["attempts"]

    async def get_remaining_time(self, identifier: str) -> float:
        """Seconds until the window resets, 0 if there is no entry."""
        raw = await self.store.get(self._key(identifier))
        if raw is None:
            return 0.0
        entry = json.loads(raw)
        return max(0.0, entry["reset_time"] - self._clock())

    async def reset(self, identifier: str) -> None:
        await self.store.delete(self._key(identifier))

    async def cleanup(self) -> int:
        """Purge expired entries. Returns how many were removed."""
        return await self.store.purge_expired(f"{self.namespace}:")


def get_auth_rate_limiter() -> RateLimiter:
    """Limiter for credential actions (FastAPI dependency)."""
    settings = get_settings()
    return RateLimiter(
        get_store(),
        max_attempts=settings.auth_rate_limit_attempts,
        window_seconds=settings.auth_rate_limit_window_seconds,
        namespace=AUTH_NAMESPACE,
    )


def get_general_rate_limiter() -> RateLimiter:
    """Limiter for general API traffic."""
    settings = get_settings()
    return RateLimiter(
        get_store(),
        max_attempts=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
        namespace=GENERAL_NAMESPACE,
    )
