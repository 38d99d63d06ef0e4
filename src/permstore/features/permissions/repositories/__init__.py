"""Permission repositories."""

from .permission_store import PermissionStore
from .application_registry import StaticPermissionRegistry

__all__ = [
    "PermissionStore",
    "StaticPermissionRegistry",
]
