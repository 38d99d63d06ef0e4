"""Infrastructure-specific exceptions for permstore.

This module defines exceptions raised by cache backends. They never reach
store callers because the cache façade fails open.
"""

from .base import PermStoreError


class CacheError(PermStoreError):
    """Base class for cache-related errors."""
    pass


class CacheConnectionError(CacheError):
    """Raised when cache connection fails."""
    pass


class CacheSerializationError(CacheError):
    """Raised when a cached value cannot be serialized or deserialized."""
    pass
