"""Tests for the cache layer."""

import pytest
from unittest.mock import AsyncMock

from permstore.core.exceptions import CacheError, CacheSerializationError
from permstore.features.cache.adapters.memory_adapter import MemoryCache
from permstore.features.cache.entities.keys import PermissionCacheKeys
from permstore.features.cache.services.fail_open_cache import FailOpenCache
from permstore.features.cache.services.layered_cache import LayeredCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _layered(remote, version=2):
    def deserialize(raw):
        if raw == "garbage":
            raise CacheSerializationError("bad payload")
        return raw.upper()

    return LayeredCache(
        remote,
        PermissionCacheKeys(version=version),
        serialize=lambda value: value.lower(),
        deserialize=deserialize,
    )


class TestPermissionCacheKeys:
    """Versioned key layout."""

    def test_keys_embed_version(self):
        keys = PermissionCacheKeys(version=2)

        assert keys.permission("app:x") == "perm_sql2app:x"
        assert keys.exists("app:x") == "perm_sql_exists_2app:x"

    def test_prefix(self):
        keys = PermissionCacheKeys(version=5, prefix="tenant1:")

        assert keys.all_for("a") == ["tenant1:perm_sql5a", "tenant1:perm_sql_exists_5a"]


class TestMemoryCache:
    """In-process cache backend."""

    @pytest.mark.asyncio
    async def test_set_get_expire(self):
        cache = MemoryCache()

        await cache.set("k", "v")
        assert await cache.get("k") == "v"

        await cache.expire("k")
        assert await cache.get("k") is None
        assert cache.stats() == {"hits": 1, "misses": 1, "sets": 1, "expires": 1, "size": 0}

    @pytest.mark.asyncio
    async def test_expiry_on_set(self):
        clock = FakeClock()
        cache = MemoryCache(default_ttl=60, clock=clock)
        await cache.set("k", "v")

        clock.now += 61

        assert await cache.get("k") is None
        assert "k" not in cache

    @pytest.mark.asyncio
    async def test_max_age_on_get(self):
        clock = FakeClock()
        cache = MemoryCache(clock=clock)
        await cache.set("k", "v")
        clock.now += 30

        assert await cache.get("k", ttl=60) == "v"
        assert await cache.get("k", ttl=10) is None

    @pytest.mark.asyncio
    async def test_clear(self):
        cache = MemoryCache()
        await cache.set("a", "1")
        await cache.set("b", "2")

        await cache.clear()

        assert len(cache) == 0


class TestFailOpenCache:
    """Backend failures never reach the caller."""

    @pytest.mark.asyncio
    async def test_failures_are_swallowed(self):
        backend = AsyncMock()
        backend.get.side_effect = CacheError("down")
        backend.set.side_effect = CacheError("down")
        backend.expire.side_effect = ConnectionError("down")
        cache = FailOpenCache(backend)

        assert await cache.get("k") is None
        await cache.set("k", "v")
        await cache.expire("k")

        assert cache.failures == 3

    @pytest.mark.asyncio
    async def test_passes_through(self):
        backend = MemoryCache()
        cache = FailOpenCache(backend)

        await cache.set("k", "v")

        assert await cache.get("k") == "v"
        assert cache.failures == 0


class TestLayeredCache:
    """Memo, remote cache and loader in turn."""

    @pytest.mark.asyncio
    async def test_loader_result_fills_both_layers(self):
        remote = MemoryCache()
        cache = _layered(remote)
        loader = AsyncMock(return_value="VALUE")

        assert await cache.get("a", loader) == "VALUE"
        assert await cache.get("a", loader) == "VALUE"

        loader.assert_awaited_once()
        assert await remote.get("perm_sql2a") == "value"
        assert cache.peek_local("a") == "VALUE"

    @pytest.mark.asyncio
    async def test_remote_hit_skips_loader(self):
        remote = MemoryCache()
        await remote.set("perm_sql2a", "cached")
        cache = _layered(remote)
        loader = AsyncMock()

        assert await cache.get("a", loader) == "CACHED"
        loader.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unreadable_entry_is_discarded(self):
        remote = MemoryCache()
        await remote.set("perm_sql2a", "garbage")
        cache = _layered(remote)

        assert await cache.get("a", AsyncMock(return_value="FRESH")) == "FRESH"
        assert await remote.get("perm_sql2a") == "fresh"

    @pytest.mark.asyncio
    async def test_loader_error_caches_nothing(self):
        remote = MemoryCache()
        cache = _layered(remote)

        with pytest.raises(LookupError):
            await cache.get("a", AsyncMock(side_effect=LookupError("missing")))

        assert len(remote) == 0
        assert cache.peek_local("a") is None

    @pytest.mark.asyncio
    async def test_versions_do_not_share_entries(self):
        remote = MemoryCache()
        await _layered(remote, version=2).get("a", AsyncMock(return_value="OLD"))

        loader = AsyncMock(return_value="NEW")
        assert await _layered(remote, version=3).get("a", loader) == "NEW"
        loader.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_exists_entries(self):
        cache = _layered(MemoryCache())

        assert await cache.get_exists("a") is None
        await cache.set_exists("a", 1)
        assert await cache.get_exists("a") == "1"

    @pytest.mark.asyncio
    async def test_invalidate_clears_every_layer(self):
        remote = MemoryCache()
        cache = _layered(remote)
        await cache.get("a", AsyncMock(return_value="VALUE"))
        await cache.set_exists("a", 1)

        await cache.invalidate("a")

        assert cache.peek_local("a") is None
        assert len(remote) == 0

    @pytest.mark.asyncio
    async def test_clear_local_keeps_remote(self):
        remote = MemoryCache()
        cache = _layered(remote)
        await cache.get("a", AsyncMock(return_value="VALUE"))

        cache.clear_local()

        assert cache.peek_local("a") is None
        assert len(remote) == 1
