"""Standardized error handling utilities for storage operations."""

import logging
import functools
from typing import Callable, Any

from ....core.exceptions import PermStoreError, StorageError

logger = logging.getLogger(__name__)


def storage_error_handler(operation_name: str, log_level: int = logging.ERROR):
    """Decorator translating unexpected failures into ``StorageError``.

    Errors already belonging to the permstore hierarchy propagate
    unchanged so lookups can still raise their own typed failures.

    Usage:
        @storage_error_handler("fetch permission by name")
        async def fetch_by_name(self, name):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            try:
                return await func(*args, **kwargs)
            except PermStoreError:
                raise
            except Exception as e:
                logger.log(log_level, f"Failed to {operation_name}: {e}")
                raise StorageError(
                    f"Failed to {operation_name}: {e}",
                    details={"operation": operation_name}
                ) from e

        return wrapper
    return decorator
