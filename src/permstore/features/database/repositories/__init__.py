"""Database repositories package.

Concrete implementation of the storage port using AsyncPG.
"""

from .connection_manager import DatabaseManager

__all__ = [
    "DatabaseManager",
]
