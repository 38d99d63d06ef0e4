"""Base exceptions for permstore.

This module defines the root of the permstore exception hierarchy. All
exceptions inherit from PermStoreError and carry an error code and a
details mapping alongside the message.
"""

from typing import Any, Dict, Optional


class PermStoreError(Exception):
    """Base exception for all permstore errors.

    All exceptions raised by the store inherit from this base class and
    include structured error information for callers that need more than
    the message text.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


def create_error_response(exception: PermStoreError) -> Dict[str, Any]:
    """Create standardized error response from exception.

    Args:
        exception: The permstore exception

    Returns:
        Error response dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
