"""Idempotency stores for consumer side effects.

A handler claims a key with ``add`` before acting and gives it back
with ``remove`` if the side effect fails, so only completed side
effects stay recorded.
"""

from __future__ import annotations

import asyncio
import logging

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


class MemoryIdempotencyStore:
    """Process-local set of handled keys."""

    def __init__(self) -> None:
        self._keys: set[str] = set()
        self._lock = asyncio.Lock()

    async def contains(self, key: str) -> bool:
        return key in self._keys

    async def add(self, key: str) -> bool:
        """Claim *key*; ``False`` if it was already claimed."""
        async with self._lock:
            if key in self._keys:
                return False
            self._keys.add(key)
            return True

    async def remove(self, key: str) -> None:
        async with self._lock:
            self._keys.discard(key)

    def __len__(self) -> int:
        return len(self._keys)


class RedisIdempotencyStore:
    """Shared key set in Redis, so consumers in separate processes agree.

    ``add`` is a single ``SET NX EX``, atomic across processes.  Keys
    expire after ``ttl_seconds`` (default: the longest queue TTL, 7 days).
    """

    def __init__(
        self,
        client: aioredis.Redis,
        prefix: str = "gamification:handled",
        ttl_seconds: int = 7 * 24 * 3600,
    ) -> None:
        self._redis = client
        self._prefix = prefix
        self._ttl = ttl_seconds

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def contains(self, key: str) -> bool:
        return bool(await self._redis.exists(self._key(key)))

    async def add(self, key: str) -> bool:
        """Claim *key*; ``False`` if another delivery already holds it."""
        result = await self._redis.set(self._key(key), "1", nx=True, ex=self._ttl)
        is_new = result is not None
        if not is_new:
            logger.debug("Idempotency key already held: %s", key)
        return is_new

    async def remove(self, key: str) -> None:
        await self._redis.delete(self._key(key))
