"""Domain-specific exceptions for permstore.

This module defines exceptions that relate to the permission hierarchy
itself rather than to the infrastructure below it.
"""

from typing import Any, Optional

from .base import PermStoreError


class ConfigurationError(PermStoreError):
    """Raised when the store is configured inconsistently."""
    pass


class InvalidArgumentError(PermStoreError):
    """Raised when an operation receives an unusable argument."""
    pass


class PermissionNotFoundError(PermStoreError):
    """Raised when a permission row does not exist."""

    def __init__(self, identifier: Any, message: Optional[str] = None):
        self.identifier = identifier
        super().__init__(
            message or f"Permission '{identifier}' does not exist",
            details={"identifier": identifier}
        )


class ParentNotFoundError(PermissionNotFoundError):
    """Raised when a permission's named parent has no row."""

    def __init__(self, child_name: str, parent_name: str):
        self.child_name = child_name
        self.parent_name = parent_name
        super().__init__(
            parent_name,
            f"Parent '{parent_name}' of permission '{child_name}' does not exist"
        )
