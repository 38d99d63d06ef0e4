"""Tests for the Redis cache adapter."""

import pytest
from unittest.mock import AsyncMock
from redis.exceptions import ConnectionError as RedisConnectionError

from permstore.core.exceptions import CacheConnectionError, CacheError
from permstore.features.cache.adapters.redis_adapter import RedisCache


@pytest.fixture
def redis_client():
    return AsyncMock()


@pytest.fixture
def cache(redis_client):
    return RedisCache(redis_client=redis_client, default_ttl=86400)


class TestRedisCache:
    """Redis adapter behaviour against a mocked client."""

    def test_requires_client_or_url(self):
        with pytest.raises(CacheConnectionError):
            RedisCache()

    @pytest.mark.asyncio
    async def test_get(self, cache, redis_client):
        redis_client.get.return_value = b"payload"

        assert await cache.get("perm_sql2a") == "payload"
        redis_client.get.assert_awaited_once_with("perm_sql2a")

    @pytest.mark.asyncio
    async def test_set_uses_default_lifetime(self, cache, redis_client):
        await cache.set("perm_sql2a", "payload")

        redis_client.set.assert_awaited_once_with("perm_sql2a", "payload", ex=86400)

    @pytest.mark.asyncio
    async def test_set_with_explicit_ttl(self, cache, redis_client):
        await cache.set("perm_sql2a", "payload", ttl=60)

        redis_client.set.assert_awaited_once_with("perm_sql2a", "payload", ex=60)

    @pytest.mark.asyncio
    async def test_expire_deletes(self, cache, redis_client):
        await cache.expire("perm_sql2a")

        redis_client.delete.assert_awaited_once_with("perm_sql2a")

    @pytest.mark.asyncio
    async def test_errors_become_cache_errors(self, cache, redis_client):
        redis_client.get.side_effect = RedisConnectionError("refused")

        with pytest.raises(CacheError):
            await cache.get("perm_sql2a")

    @pytest.mark.asyncio
    async def test_health_check(self, cache, redis_client):
        redis_client.ping.return_value = True
        assert await cache.health_check() is True

        redis_client.ping.side_effect = RedisConnectionError("refused")
        assert await cache.health_check() is False

    @pytest.mark.asyncio
    async def test_disconnect(self, cache, redis_client):
        await cache.disconnect()

        redis_client.aclose.assert_awaited_once()
        assert cache.redis_client is None

    def test_lazy_pool_from_url(self):
        cache = RedisCache(redis_url="redis://localhost:6379/0", pool_size=4)

        assert cache.pool is None
        client = cache._client()

        assert cache.pool is not None
        assert cache.pool.max_connections == 4
        assert cache._client() is client
