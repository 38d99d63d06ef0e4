"""Memory cache backend adapter for permstore."""

import time
import logging
from typing import Dict, Optional, Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class MemoryCacheEntry:
    """Memory cache entry with metadata."""
    value: str
    created_at: float
    expires_at: Optional[float] = None
    access_count: int = 0
    last_accessed: float = field(default_factory=time.time)

    def is_expired(self, now: float) -> bool:
        """Check if entry is expired."""
        if self.expires_at is None:
            return False
        return now > self.expires_at

    def is_older_than(self, max_age: int, now: float) -> bool:
        """Check if entry was written more than ``max_age`` seconds ago."""
        return now - self.created_at > max_age

    def access(self, now: float) -> None:
        """Record access to this entry."""
        self.access_count += 1
        self.last_accessed = now


class MemoryCache:
    """In-process cache keeping string values in a dict.

    A ``ttl`` passed to :meth:`get` is treated as the maximum age of the
    entry, and a ``ttl`` passed to :meth:`set` as its expiry. The clock is
    injectable for tests.
    """

    def __init__(self, default_ttl: Optional[int] = None, clock: Callable[[], float] = time.time):
        self.default_ttl = default_ttl
        self._clock = clock
        self._store: Dict[str, MemoryCacheEntry] = {}
        self._stats = {"hits": 0, "misses": 0, "sets": 0, "expires": 0}

    async def get(self, key: str, ttl: Optional[int] = None) -> Optional[str]:
        """Get value from cache."""
        now = self._clock()
        entry = self._store.get(key)
        if entry is None:
            self._stats["misses"] += 1
            return None

        if entry.is_expired(now) or (ttl and entry.is_older_than(ttl, now)):
            del self._store[key]
            self._stats["misses"] += 1
            return None

        entry.access(now)
        self._stats["hits"] += 1
        return entry.value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Set value in cache."""
        now = self._clock()
        ttl = ttl if ttl is not None else self.default_ttl
        self._store[key] = MemoryCacheEntry(
            value=value,
            created_at=now,
            expires_at=now + ttl if ttl else None,
        )
        self._stats["sets"] += 1

    async def expire(self, key: str) -> None:
        """Remove key from cache."""
        if self._store.pop(key, None) is not None:
            self._stats["expires"] += 1

    async def clear(self) -> None:
        """Drop every entry."""
        self._store.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)

    def stats(self) -> Dict[str, int]:
        """Get cache statistics."""
        return {**self._stats, "size": len(self._store)}
