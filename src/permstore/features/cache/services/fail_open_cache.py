"""Fail-open wrapper around a cache backend."""

import logging
from typing import Optional

from ..entities.protocols import Cache

logger = logging.getLogger(__name__)


class FailOpenCache:
    """Cache wrapper that never lets a backend failure reach the caller.

    A failed ``get`` is reported as a miss and failed ``set``/``expire``
    calls are dropped, so permission reads keep working, straight from
    the database, while the cache backend is unavailable.
    """

    def __init__(self, backend: Cache):
        self.backend = backend
        self.failures = 0

    async def get(self, key: str, ttl: Optional[int] = None) -> Optional[str]:
        try:
            return await self.backend.get(key, ttl)
        except Exception as e:
            self.failures += 1
            logger.warning(f"Cache get error for key {key}, treating as miss: {e}")
            return None

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        try:
            await self.backend.set(key, value, ttl)
        except Exception as e:
            self.failures += 1
            logger.warning(f"Cache set error for key {key}, skipping: {e}")

    async def expire(self, key: str) -> None:
        try:
            await self.backend.expire(key)
        except Exception as e:
            self.failures += 1
            logger.warning(f"Cache expire error for key {key}, skipping: {e}")
