"""Database feature for permstore.

Feature-First layout for SQL access:
- entities/: the storage port protocols
- repositories/: the asyncpg connection manager
- utils/: query templates, identifier validation and error handling
"""

from .entities import QueryExecutor, Database
from .repositories import DatabaseManager
from .utils import queries, validate_identifier

__all__ = [
    "QueryExecutor",
    "Database",
    "DatabaseManager",
    "queries",
    "validate_identifier",
]
