"""
Key/value stores used by the weather caches.

Values are JSON strings; callers own (de)serialisation. Both stores are
safe for concurrent use from one event loop: a race on the same key is
last-write-wins.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable

from loguru import logger
from redis.asyncio import Redis


class CacheStore(ABC):
    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None on miss/expiry."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: float) -> None:
        """Store ``value`` for ``ttl_seconds`` (nothing is stored if <= 0)."""

    async def close(self) -> None:
        pass


class RedisCacheStore(CacheStore):
    """Redis-backed store (``redis.asyncio``)."""

    def __init__(self, redis: Redis):
        self.redis = redis

    @classmethod
    def from_url(cls, redis_url: str) -> "RedisCacheStore":
        logger.info(f"Connecting cache store to Redis at {redis_url}")
        return cls(Redis.from_url(redis_url, decode_responses=True))

    async def get(self, key: str) -> str | None:
        value = await self.redis.get(key)
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str, ttl_seconds: float) -> None:
        ttl_ms = int(ttl_seconds * 1000)
        if ttl_ms <= 0:
            return
        await self.redis.set(key, value, px=ttl_ms)

    async def close(self) -> None:
        await self.redis.aclose()
        logger.info("Redis cache store closed")


class InMemoryCacheStore(CacheStore):
    """A lightweight in-process TTL store emulating Redis behaviour."""

    def __init__(self, time_func: Callable[[], float] = time.monotonic):
        self._time_func = time_func
        self._storage: dict[str, tuple[float, str]] = {}

    async def get(self, key: str) -> str | None:
        item = self._storage.get(key)
        if not item:
            return None
        expires_at, value = item
        if expires_at <= self._time_func():
            self._storage.pop(key, None)
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: float) -> None:
        if ttl_seconds <= 0:
            return
        self._storage[key] = (self._time_func() + ttl_seconds, value)

    def clear(self) -> None:
        self._storage.clear()

    def __len__(self) -> int:
        return len(self._storage)
