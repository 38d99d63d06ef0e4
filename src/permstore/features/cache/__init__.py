"""Cache feature for permstore.

Feature-First layout for caching:
- entities/: the cache port and the versioned key builder
- adapters/: Redis and in-memory backends
- services/: fail-open policy and the layered memo/cache/loader lookup
"""

from .entities import Cache, PermissionCacheKeys
from .adapters import MemoryCache, RedisCache
from .services import FailOpenCache, LayeredCache

__all__ = [
    "Cache",
    "PermissionCacheKeys",
    "MemoryCache",
    "RedisCache",
    "FailOpenCache",
    "LayeredCache",
]
