"""Cache services - fail-open wrapper and layered lookup."""

from .fail_open_cache import FailOpenCache
from .layered_cache import LayeredCache

__all__ = [
    "FailOpenCache",
    "LayeredCache",
]
