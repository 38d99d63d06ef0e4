"""Exceptions module for permstore.

Typed exception hierarchy: lookup failures, storage failures and invalid
arguments are distinguished by class rather than by message text.
"""

from .base import PermStoreError, create_error_response

from .domain import (
    ConfigurationError,
    InvalidArgumentError,
    PermissionNotFoundError,
    ParentNotFoundError,
)

from .database import (
    StorageError,
    PermissionAlreadyExistsError,
    TransactionConflictError,
)

from .infrastructure import (
    CacheError,
    CacheConnectionError,
    CacheSerializationError,
)

# Short aliases matching the error kinds of the store contract
NotFound = PermissionNotFoundError
InvalidArgument = InvalidArgumentError

__all__ = [
    "PermStoreError",
    "create_error_response",
    "ConfigurationError",
    "InvalidArgumentError",
    "PermissionNotFoundError",
    "ParentNotFoundError",
    "StorageError",
    "PermissionAlreadyExistsError",
    "TransactionConflictError",
    "CacheError",
    "CacheConnectionError",
    "CacheSerializationError",
    "NotFound",
    "InvalidArgument",
]
