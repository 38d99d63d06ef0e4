"""Cache entities - protocols and key builders."""

from .protocols import Cache
from .keys import PermissionCacheKeys

__all__ = [
    "Cache",
    "PermissionCacheKeys",
]
