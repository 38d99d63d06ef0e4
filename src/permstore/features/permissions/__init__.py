"""Permissions feature for permstore.

Feature-First layout for the permission hierarchy:
- entities/: the permission record, the type resolution result and the
  application registry port
- repositories/: the SQL-backed store and an in-memory registry
- utils/: encoding of colon-delimited names and parent chains
"""

from .entities import PermissionRecord, ApplicationPermissionRegistry, TypeResolution
from .repositories import PermissionStore, StaticPermissionRegistry

__all__ = [
    "PermissionRecord",
    "ApplicationPermissionRegistry",
    "TypeResolution",
    "PermissionStore",
    "StaticPermissionRegistry",
]
