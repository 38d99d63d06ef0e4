"""Constants and enums for permstore.

This module defines the constants, enums, and default values shared by
the permission hierarchy, the cache layer and the SQL storage layer.
"""

from enum import Enum
from typing import Final


# Hierarchy sentinels
ROOT: Final[int] = -1
ROOT_NAME: Final[str] = "ROOT"
PATH_SEPARATOR: Final[str] = ":"

DEFAULT_PERMISSION_TYPE: Final[str] = "matrix"


class PermissionBits:
    """ACL bitmask values stored in permission payloads."""

    NONE: Final[int] = 0
    SHOW: Final[int] = 2
    READ: Final[int] = 4
    EDIT: Final[int] = 8
    DELETE: Final[int] = 16
    ALL: Final[int] = SHOW | READ | EDIT | DELETE


class CacheKeys:
    """Cache key namespaces for permission entries.

    The cache version is appended directly to the namespace, followed by
    the permission name.
    """

    PERMISSION: Final[str] = "perm_sql"
    EXISTS: Final[str] = "perm_sql_exists_"


class CacheTTL:
    """Cache TTL values in seconds."""

    DEFAULT_LIFETIME: Final[int] = 86400     # 1 day


class StorageDefaults:
    """Defaults for the permissions table."""

    TABLE: Final[str] = "horde_perms"
    CACHE_VERSION: Final[int] = 2
    ADD_MAX_RETRIES: Final[int] = 3


class MissingParentPolicy(str, Enum):
    """What ``add`` does when the named parent of a permission has no row."""

    ATTACH_TO_ROOT = "attach_to_root"
    RAISE = "raise"


class TypeResolutionStatus(str, Enum):
    """Outcome of resolving a permission's type from its application."""

    RESOLVED = "resolved"
    DEFAULTED = "defaulted"
