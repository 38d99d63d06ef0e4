"""Cache protocols for permstore.

The store consumes only get / set / expire from its cache backend. Values
are opaque strings; ``None`` is the miss sentinel, so a stored ``"0"`` is
always distinguishable from a miss.
"""

from abc import abstractmethod
from typing import Protocol, runtime_checkable, Optional


@runtime_checkable
class Cache(Protocol):
    """Protocol for the key/value cache backing permission lookups."""

    @abstractmethod
    async def get(self, key: str, ttl: Optional[int] = None) -> Optional[str]:
        """Get a value, or None on a miss.

        ``ttl`` is the maximum acceptable age in seconds; backends that
        expire entries at write time may ignore it.
        """
        ...

    @abstractmethod
    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Store a value, optionally with an expiry in seconds."""
        ...

    @abstractmethod
    async def expire(self, key: str) -> None:
        """Remove a key so the next get misses."""
        ...
