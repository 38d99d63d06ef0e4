"""Versioned cache key builder for permission entries."""

from dataclasses import dataclass
from typing import List

from ....config.constants import CacheKeys


@dataclass(frozen=True)
class PermissionCacheKeys:
    """Builds the cache keys for one cache version.

    Every key embeds ``version``, so bumping it moves all lookups into a
    fresh namespace and entries written under the old version simply miss.
    """

    version: int
    prefix: str = ""

    def permission(self, name: str) -> str:
        """Key of the serialized permission record."""
        return f"{self.prefix}{CacheKeys.PERMISSION}{self.version}{name}"

    def exists(self, name: str) -> str:
        """Key of the cached existence count."""
        return f"{self.prefix}{CacheKeys.EXISTS}{self.version}{name}"

    def all_for(self, name: str) -> List[str]:
        """Every key that caches something about ``name``."""
        return [self.permission(name), self.exists(name)]
