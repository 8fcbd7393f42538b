"""Tests for record cache implementations."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel
from redis.exceptions import ConnectionError as RedisConnectionError

from user_service.core.exceptions import CacheUnavailableError
from user_service.core.storage import (
    InMemoryRecordCache,
    RedisRecordCache,
    build_record_cache,
)


class CachedThing(BaseModel):
    """Small model for cache round trips."""

    id: int
    name: str


class OtherThing(BaseModel):
    label: str


class TestInMemoryRecordCache:
    """Test in-memory cache implementation."""

    def setup_method(self):
        self.cache = InMemoryRecordCache()

    @pytest.mark.asyncio
    async def test_set_and_get(self):
        await self.cache.set("thing:1", CachedThing(id=1, name="one"), 60)

        result = await self.cache.get("thing:1", CachedThing)

        assert result == CachedThing(id=1, name="one")

    @pytest.mark.asyncio
    async def test_get_missing_key(self):
        assert await self.cache.get("missing", CachedThing) is None

    @pytest.mark.asyncio
    async def test_returns_fresh_instances(self):
        original = CachedThing(id=1, name="one")
        await self.cache.set("thing:1", original, 60)

        original.name = "changed"
        first = await self.cache.get("thing:1", CachedThing)
        second = await self.cache.get("thing:1", CachedThing)

        assert first.name == "one"
        assert first is not second

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self):
        await self.cache.set("short", CachedThing(id=1, name="one"), 1)
        assert await self.cache.get("short", CachedThing) is not None

        await asyncio.sleep(1.1)

        assert await self.cache.get("short", CachedThing) is None
        assert "short" not in self.cache.keys()

    @pytest.mark.asyncio
    async def test_expired_keys_never_read_are_swept_on_write(self):
        for i in range(1000):
            await self.cache.set(f"users:page:{i}:20:asc", CachedThing(id=i, name="page"), 0)

        await self.cache.set("thing:1", CachedThing(id=1, name="one"), 60)

        assert len(self.cache._data) == 1
        assert self.cache.keys() == ["thing:1"]

    @pytest.mark.asyncio
    async def test_cleanup_expired(self):
        await self.cache.set("fresh", CachedThing(id=2, name="two"), 60)
        self.cache._data["stale"] = (CachedThing(id=1, name="one").model_dump_json(), 0.0)

        assert await self.cache.cleanup_expired() == 1
        assert "stale" not in self.cache._data
        assert "fresh" in self.cache._data

    @pytest.mark.asyncio
    async def test_set_overwrites(self):
        await self.cache.set("thing:1", CachedThing(id=1, name="one"), 60)
        await self.cache.set("thing:1", CachedThing(id=1, name="uno"), 60)

        assert (await self.cache.get("thing:1", CachedThing)).name == "uno"

    @pytest.mark.asyncio
    async def test_delete(self):
        await self.cache.set("thing:1", CachedThing(id=1, name="one"), 60)

        await self.cache.delete("thing:1")

        assert await self.cache.get("thing:1", CachedThing) is None

    @pytest.mark.asyncio
    async def test_delete_missing_key_is_not_an_error(self):
        await self.cache.delete("never-set")

    @pytest.mark.asyncio
    async def test_undecodable_entry_is_dropped(self):
        await self.cache.set("thing:1", CachedThing(id=1, name="one"), 60)

        assert await self.cache.get("thing:1", OtherThing) is None
        assert "thing:1" not in self.cache.keys()

    @pytest.mark.asyncio
    async def test_ping_and_availability(self):
        assert await self.cache.ping() is True
        assert self.cache.is_available() is True


class TestRedisRecordCache:
    """Test Redis cache implementation against a mocked client."""

    def setup_method(self):
        self.redis = AsyncMock()
        self.cache = RedisRecordCache(self.redis)

    @pytest.mark.asyncio
    async def test_set_uses_setex_with_ttl(self):
        thing = CachedThing(id=1, name="one")

        await self.cache.set("thing:1", thing, 300)

        self.redis.setex.assert_awaited_once_with("thing:1", 300, thing.model_dump_json())

    @pytest.mark.asyncio
    async def test_get_decodes_string_payload(self):
        self.redis.get.return_value = '{"id": 1, "name": "one"}'

        result = await self.cache.get("thing:1", CachedThing)

        assert result == CachedThing(id=1, name="one")
        self.redis.get.assert_awaited_once_with("thing:1")

    @pytest.mark.asyncio
    async def test_get_decodes_bytes_payload(self):
        self.redis.get.return_value = b'{"id": 2, "name": "two"}'

        result = await self.cache.get("thing:2", CachedThing)

        assert result == CachedThing(id=2, name="two")

    @pytest.mark.asyncio
    async def test_get_missing_key(self):
        self.redis.get.return_value = None

        assert await self.cache.get("missing", CachedThing) is None

    @pytest.mark.asyncio
    async def test_get_undecodable_payload(self):
        self.redis.get.return_value = "not json"

        assert await self.cache.get("thing:1", CachedThing) is None

    @pytest.mark.asyncio
    async def test_delete(self):
        await self.cache.delete("thing:1")

        self.redis.delete.assert_awaited_once_with("thing:1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["get", "set", "delete"])
    async def test_client_errors_become_cache_unavailable(self, operation):
        failure = RedisConnectionError("Connection refused")
        self.redis.get.side_effect = failure
        self.redis.setex.side_effect = failure
        self.redis.delete.side_effect = failure

        calls = {
            "get": lambda: self.cache.get("k", CachedThing),
            "set": lambda: self.cache.set("k", CachedThing(id=1, name="one"), 60),
            "delete": lambda: self.cache.delete("k"),
        }
        with pytest.raises(CacheUnavailableError) as exc_info:
            await calls[operation]()

        assert exc_info.value.operation == operation
        assert exc_info.value.dependency == "cache"
        assert self.cache.is_available() is False

    @pytest.mark.asyncio
    async def test_availability_recovers(self):
        self.redis.get.side_effect = [RedisConnectionError("down"), None]

        with pytest.raises(CacheUnavailableError):
            await self.cache.get("k", CachedThing)
        assert self.cache.is_available() is False

        await self.cache.get("k", CachedThing)
        assert self.cache.is_available() is True

    @pytest.mark.asyncio
    async def test_ping(self):
        assert await self.cache.ping() is True

        self.redis.ping.side_effect = RedisConnectionError("down")
        assert await self.cache.ping() is False


class TestBuildRecordCache:
    """Test backend selection."""

    @pytest.mark.asyncio
    async def test_no_client_uses_memory(self):
        cache = await build_record_cache(None)

        assert isinstance(cache, InMemoryRecordCache)

    @pytest.mark.asyncio
    async def test_reachable_redis_is_used(self):
        client = AsyncMock()

        cache = await build_record_cache(client)

        assert isinstance(cache, RedisRecordCache)
        client.ping.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unreachable_redis_falls_back_to_memory(self):
        client = AsyncMock()
        client.ping.side_effect = RedisConnectionError("down")

        cache = await build_record_cache(client)

        assert isinstance(cache, InMemoryRecordCache)

    @pytest.mark.asyncio
    async def test_unreachable_redis_when_required(self):
        client = AsyncMock()
        client.ping.side_effect = RedisConnectionError("down")

        with pytest.raises(CacheUnavailableError):
            await build_record_cache(client, require_redis=True)

    @pytest.mark.asyncio
    async def test_missing_client_when_required(self):
        with pytest.raises(CacheUnavailableError):
            await build_record_cache(None, require_redis=True)
