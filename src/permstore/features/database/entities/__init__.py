"""Database entities - storage protocols."""

from .database_protocols import QueryExecutor, Database

__all__ = [
    "QueryExecutor",
    "Database",
]
