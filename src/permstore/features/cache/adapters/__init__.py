"""Cache backend adapters."""

from .memory_adapter import MemoryCache, MemoryCacheEntry
from .redis_adapter import RedisCache

__all__ = [
    "MemoryCache",
    "MemoryCacheEntry",
    "RedisCache",
]
