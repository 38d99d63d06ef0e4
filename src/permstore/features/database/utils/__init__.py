"""Database utilities: identifier validation and query templates."""

from .validation import validate_identifier, validate_pool_configuration
from . import queries

__all__ = [
    "validate_identifier",
    "validate_pool_configuration",
    "queries",
]
