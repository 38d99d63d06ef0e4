"""
Database connection management using asyncpg for permstore.
"""
import asyncio
import logging
from typing import Optional, Dict, Any, List, AsyncIterator
from contextlib import asynccontextmanager

import asyncpg
from asyncpg import Pool, Connection, Record

from ..utils.queries import CREATE_SEQUENCE, NEXT_ID, sequence_name
from ..utils.validation import validate_identifier, validate_pool_configuration
from ....core.exceptions import StorageError

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manages an asyncpg connection pool for one database."""

    def __init__(self, database_url: str, name: str = "default", **pool_config):
        """Initialize DatabaseManager.

        Args:
            database_url: Database URL
            name: Label used in log messages (e.g. "read" or "write")
            **pool_config: Additional pool configuration options
        """
        self.name = name
        self.pool: Optional[Pool] = None
        self.dsn = database_url
        if "+asyncpg" in self.dsn:
            self.dsn = self.dsn.replace("+asyncpg", "")

        self.pool_config = {
            "min_size": 2,
            "max_size": 10,
            "max_inactive_connection_lifetime": 300,
            "command_timeout": 60,
            **pool_config
        }
        validate_pool_configuration(self.pool_config["min_size"], self.pool_config["max_size"])
        self._lock = asyncio.Lock()

    async def create_pool(self) -> Pool:
        """Create and return a connection pool."""
        if self.pool is None:
            async with self._lock:
                if self.pool is None:
                    logger.info(f"Creating {self.name} database pool with size {self.pool_config['max_size']}")
                    try:
                        self.pool = await asyncpg.create_pool(
                            self.dsn,
                            server_settings={"application_name": "permstore"},
                            **self.pool_config
                        )
                    except Exception as e:
                        logger.error(f"Failed to create {self.name} database pool: {e}")
                        raise StorageError(f"Failed to create connection pool: {e}") from e
                    logger.info(f"{self.name.capitalize()} database pool created successfully")
        return self.pool

    async def close_pool(self):
        """Close the connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info(f"{self.name.capitalize()} database pool closed")

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[Connection]:
        """Acquire a connection from the pool."""
        if not self.pool:
            await self.create_pool()

        async with self.pool.acquire() as connection:
            yield connection

    @asynccontextmanager
    async def transaction(self, isolation: Optional[str] = None) -> AsyncIterator[Connection]:
        """Create a transaction context on a single connection.

        Args:
            isolation: asyncpg isolation level ("serializable",
                "repeatable_read", "read_committed"), or None for the
                server default
        """
        async with self.acquire() as connection:
            async with connection.transaction(isolation=isolation):
                yield connection

    async def execute(self, query: str, *args, timeout: float = None) -> str:
        """Execute a query without returning results."""
        async with self.acquire() as connection:
            return await connection.execute(query, *args, timeout=timeout)

    async def fetch(self, query: str, *args, timeout: float = None) -> List[Record]:
        """Fetch multiple rows."""
        async with self.acquire() as connection:
            return await connection.fetch(query, *args, timeout=timeout)

    async def fetchrow(self, query: str, *args, timeout: float = None) -> Optional[Record]:
        """Fetch a single row."""
        async with self.acquire() as connection:
            return await connection.fetchrow(query, *args, timeout=timeout)

    async def fetchval(self, query: str, *args, column: int = 0, timeout: float = None) -> Any:
        """Fetch a single value."""
        async with self.acquire() as connection:
            return await connection.fetchval(query, *args, column=column, timeout=timeout)

    async def next_id(self, table: str) -> int:
        """Allocate the next id for ``table`` from its sequence.

        The sequence is created on first use. Sequence values are never
        rolled back, so ids skipped by failed inserts leave gaps.
        """
        validate_identifier(table, "table")
        sequence = sequence_name(table)
        try:
            return await self.fetchval(NEXT_ID.format(sequence=sequence))
        except asyncpg.UndefinedTableError:
            logger.info(f"Creating id sequence {sequence}")
            await self.execute(CREATE_SEQUENCE.format(sequence=sequence))
            return await self.fetchval(NEXT_ID.format(sequence=sequence))

    async def health_check(self) -> bool:
        """Check database health."""
        try:
            async with self.acquire() as connection:
                result = await connection.fetchval("SELECT 1")
                return result == 1
        except Exception as e:
            logger.error(f"{self.name.capitalize()} database health check failed: {e}")
            return False

    def get_pool_stats(self) -> Dict[str, Any]:
        """Get pool statistics."""
        if not self.pool:
            return {"status": "not_initialized"}

        return {
            "name": self.name,
            "size": self.pool.get_size(),
            "idle": self.pool.get_idle_size(),
            "min_size": self.pool.get_min_size(),
            "max_size": self.pool.get_max_size(),
        }
