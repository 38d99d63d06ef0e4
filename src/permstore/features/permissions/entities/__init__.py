"""Permission entities - records, ports and result types."""

from .permission import PermissionRecord
from .protocols import ApplicationPermissionRegistry
from .type_resolution import TypeResolution

__all__ = [
    "PermissionRecord",
    "ApplicationPermissionRegistry",
    "TypeResolution",
]
