"""Database validation utilities."""

import re
from typing import Optional

_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


def validate_identifier(identifier: str, kind: Optional[str] = None) -> None:
    """Validate that a table or sequence name is a plain SQL identifier.

    Identifiers are interpolated into query text, so anything other than
    letters, digits and underscores is rejected.

    Args:
        identifier: The identifier to check
        kind: What the identifier names, for the error message (optional)

    Raises:
        ValueError: If validation fails
    """
    label = kind or "identifier"
    if not identifier or not identifier.strip():
        raise ValueError(f"{label} cannot be empty")

    if not _IDENTIFIER_PATTERN.match(identifier):
        raise ValueError(f"{label} '{identifier}' is not a valid SQL identifier")


def validate_pool_configuration(pool_min_size: int, pool_max_size: int) -> None:
    """Validate pool configuration parameters.

    Raises:
        ValueError: If validation fails
    """
    if pool_min_size < 0:
        raise ValueError("pool_min_size must be >= 0")

    if pool_max_size < pool_min_size:
        raise ValueError("pool_max_size must be >= pool_min_size")
