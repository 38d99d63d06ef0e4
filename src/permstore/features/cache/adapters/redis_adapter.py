"""Redis cache backend adapter for permstore."""

import logging
from typing import Optional

from redis.asyncio import Redis, ConnectionPool
from redis.exceptions import RedisError

from ....core.exceptions.infrastructure import CacheError, CacheConnectionError

logger = logging.getLogger(__name__)


class RedisCache:
    """Redis implementation of the cache port.

    Entries expire at write time: ``set`` applies the given ttl or the
    configured default lifetime, so the ``ttl`` argument of ``get`` is
    accepted for protocol compatibility and not re-checked. Backend
    failures are raised as ``CacheError``; the fail-open policy belongs to
    the caller.
    """

    def __init__(
        self,
        redis_client: Optional[Redis] = None,
        redis_url: Optional[str] = None,
        default_ttl: Optional[int] = None,
        pool_size: int = 10
    ):
        if redis_client is None and not redis_url:
            raise CacheConnectionError("RedisCache needs a client or a redis_url")

        self.redis_url = redis_url
        self.default_ttl = default_ttl
        self.pool_size = pool_size
        self.pool: Optional[ConnectionPool] = None
        self.redis_client: Optional[Redis] = redis_client

    def _client(self) -> Redis:
        """Return the client, building the pool on first use."""
        if self.redis_client is None:
            logger.info("Creating Redis connection pool...")
            self.pool = ConnectionPool.from_url(
                self.redis_url,
                max_connections=self.pool_size,
                decode_responses=True,
                health_check_interval=30
            )
            self.redis_client = Redis(connection_pool=self.pool)
        return self.redis_client

    async def get(self, key: str, ttl: Optional[int] = None) -> Optional[str]:
        """Get value from cache."""
        try:
            value = await self._client().get(key)
        except RedisError as e:
            raise CacheError(f"Cache get failed for key {key}: {e}") from e

        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Set value in cache."""
        ttl = ttl if ttl is not None else self.default_ttl
        try:
            await self._client().set(key, value, ex=ttl or None)
        except RedisError as e:
            raise CacheError(f"Cache set failed for key {key}: {e}") from e

    async def expire(self, key: str) -> None:
        """Delete key from cache."""
        try:
            await self._client().delete(key)
        except RedisError as e:
            raise CacheError(f"Cache expire failed for key {key}: {e}") from e

    async def health_check(self) -> bool:
        """Check cache service health."""
        try:
            return bool(await self._client().ping())
        except RedisError as e:
            logger.warning(f"Redis health check failed: {e}")
            return False

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self.redis_client is not None:
            await self.redis_client.aclose()
            if self.pool:
                await self.pool.disconnect()
            self.redis_client = None
            self.pool = None
            logger.info("Redis connection closed")
