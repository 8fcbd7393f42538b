"""Record cache interface and implementations.

A key/value store with a TTL per key. Values are pydantic models kept as
their JSON text, so every read hands back a fresh instance regardless of the
backend. The interface offers no pattern or prefix deletion.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from user_service.core.exceptions import CacheUnavailableError

T = TypeVar("T", bound=BaseModel)


class RecordCache(ABC):
    """Abstract interface for cache backends."""

    @abstractmethod
    async def get(self, key: str, model_class: type[T]) -> T | None:
        """Retrieve a cached value.

        Args:
            key: Cache key
            model_class: Pydantic model class to deserialize to

        Returns:
            The cached value, or None if absent or expired
        """

    @abstractmethod
    async def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        """Store a value with TTL.

        Args:
            key: Cache key
            value: Value to cache (Pydantic model)
            ttl_seconds: Time to live in seconds
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key. Removing an absent key is not an error."""

    @abstractmethod
    async def ping(self) -> bool:
        """Check that the backend answers."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the last operation against the backend succeeded."""


class InMemoryRecordCache(RecordCache):
    """Process-local cache.

    Expired entries are dropped when read and swept on every write, so keys
    that are never read again do not accumulate.
    """

    def __init__(self) -> None:
        self._data: dict[str, tuple[str, float]] = {}

    async def get(self, key: str, model_class: type[T]) -> T | None:
        entry = self._data.get(key)
        if entry is None:
            return None

        payload, expires_at = entry
        if time.monotonic() >= expires_at:
            del self._data[key]
            return None

        try:
            return model_class.model_validate_json(payload)
        except ValidationError:
            logger.warning("Dropping undecodable cache entry {}", key)
            del self._data[key]
            return None

    async def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        await self.cleanup_expired()
        self._data[key] = (value.model_dump_json(), time.monotonic() + ttl_seconds)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def ping(self) -> bool:
        return True

    def is_available(self) -> bool:
        """In-memory storage is always available."""
        return True

    async def cleanup_expired(self) -> int:
        """Drop every expired entry, read or not. Returns the number removed."""
        now = time.monotonic()
        expired_keys = [
            key for key, (_, expires_at) in self._data.items() if now >= expires_at
        ]

        for key in expired_keys:
            del self._data[key]

        return len(expired_keys)

    def keys(self) -> list[str]:
        """Live keys, for diagnostics and tests."""
        now = time.monotonic()
        return [key for key, (_, expires_at) in self._data.items() if now < expires_at]

    def clear(self) -> None:
        self._data.clear()


class RedisRecordCache(RecordCache):
    """Redis-backed cache. Client failures surface as CacheUnavailableError."""

    def __init__(self, redis_client) -> None:
        self._redis = redis_client
        self._available = True

    async def get(self, key: str, model_class: type[T]) -> T | None:
        try:
            data = await self._redis.get(key)
        except Exception as e:
            self._available = False
            raise CacheUnavailableError("get", str(e)) from e
        self._available = True

        if data is None:
            return None
        if isinstance(data, bytes):
            data = data.decode("utf-8")

        try:
            return model_class.model_validate_json(data)
        except ValidationError:
            logger.warning("Ignoring undecodable cache entry {}", key)
            return None

    async def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        try:
            await self._redis.setex(key, ttl_seconds, value.model_dump_json())
        except Exception as e:
            self._available = False
            raise CacheUnavailableError("set", str(e)) from e
        self._available = True

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(key)
        except Exception as e:
            self._available = False
            raise CacheUnavailableError("delete", str(e)) from e
        self._available = True

    async def ping(self) -> bool:
        try:
            await self._redis.ping()
        except Exception:
            self._available = False
            return False
        self._available = True
        return True

    def is_available(self) -> bool:
        return self._available


async def build_record_cache(redis_client, *, require_redis: bool = False) -> RecordCache:
    """Pick the cache backend for this process.

    Uses Redis when a client is supplied and answers a ping, otherwise falls
    back to process-local storage. With `require_redis` the fallback is an
    error instead.
    """
    if redis_client is not None:
        cache = RedisRecordCache(redis_client)
        if await cache.ping():
            logger.info("Record cache: Redis connected")
            return cache
        logger.warning("Record cache: Redis ping failed")
    else:
        logger.info("Record cache: Redis not configured")

    if require_redis:
        raise CacheUnavailableError("connect", "Redis is required but not reachable")

    logger.warning("Record cache: using in-memory storage")
    return InMemoryRecordCache()
