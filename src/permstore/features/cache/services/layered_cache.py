"""Three-tier lookup: request-scoped memo, remote cache, source of truth."""

import logging
from typing import Awaitable, Callable, Dict, Generic, Optional, TypeVar

from ..entities.keys import PermissionCacheKeys
from ..entities.protocols import Cache
from .fail_open_cache import FailOpenCache
from ....core.exceptions.infrastructure import CacheSerializationError

logger = logging.getLogger(__name__)
T = TypeVar('T')


class LayeredCache(Generic[T]):
    """Memo map in front of a remote cache in front of a loader.

    A miss in one layer is filled from the layer below and written back
    into every layer above it. :meth:`invalidate` is the single entry
    point that clears all layers for a name; entries are never updated in
    place.
    """

    def __init__(
        self,
        remote: Cache,
        keys: PermissionCacheKeys,
        serialize: Callable[[T], str],
        deserialize: Callable[[str], T],
        lifetime: Optional[int] = None
    ):
        self.remote = remote if isinstance(remote, FailOpenCache) else FailOpenCache(remote)
        self.keys = keys
        self.lifetime = lifetime
        self._serialize = serialize
        self._deserialize = deserialize
        self._local: Dict[str, T] = {}

    async def get(self, name: str, loader: Callable[[], Awaitable[T]]) -> T:
        """Resolve ``name`` through memo, remote cache and ``loader`` in turn.

        Exceptions raised by ``loader`` propagate and nothing is cached.
        """
        if name in self._local:
            logger.debug(f"Memo hit for {name}")
            return self._local[name]

        key = self.keys.permission(name)
        raw = await self.remote.get(key, self.lifetime)
        if raw is not None:
            try:
                value = self._deserialize(raw)
            except CacheSerializationError as e:
                logger.warning(f"Discarding unreadable cache entry {key}: {e}")
                await self.remote.expire(key)
            else:
                logger.debug(f"Cache hit for {key}")
                self._local[name] = value
                return value

        logger.debug(f"Cache miss for {key}")
        value = await loader()
        await self.remote.set(key, self._serialize(value))
        self._local[name] = value
        return value

    async def get_exists(self, name: str) -> Optional[str]:
        """Cached existence count for ``name``, or None on a miss."""
        return await self.remote.get(self.keys.exists(name), self.lifetime)

    async def set_exists(self, name: str, count: int) -> None:
        """Cache the existence count for ``name`` as a string."""
        await self.remote.set(self.keys.exists(name), str(count))

    async def invalidate(self, name: str) -> None:
        """Drop every cached entry about ``name`` from every layer."""
        self._local.pop(name, None)
        for key in self.keys.all_for(name):
            await self.remote.expire(key)

    def peek_local(self, name: str) -> Optional[T]:
        """Memoized value for ``name`` without touching lower layers."""
        return self._local.get(name)

    def clear_local(self) -> None:
        """Forget the request-scoped memo."""
        self._local.clear()
