"""Storage port for permstore.

The permission store talks to SQL only through this protocol, so the read
and write sides can be served by different pools (a replica and a
primary) or by the same one.
"""

from abc import abstractmethod
from typing import Protocol, runtime_checkable, Optional, List, Any, AsyncContextManager


@runtime_checkable
class QueryExecutor(Protocol):
    """Anything that can run parameterized queries.

    Both a pooled manager and a single connection inside a transaction
    satisfy this protocol.
    """

    @abstractmethod
    async def fetch(self, query: str, *args) -> List[Any]:
        """Fetch multiple rows."""
        ...

    @abstractmethod
    async def fetchrow(self, query: str, *args) -> Optional[Any]:
        """Fetch a single row, or None."""
        ...

    @abstractmethod
    async def fetchval(self, query: str, *args) -> Any:
        """Fetch the first column of the first row, or None."""
        ...

    @abstractmethod
    async def execute(self, query: str, *args) -> str:
        """Execute a statement and return its status string."""
        ...


@runtime_checkable
class Database(QueryExecutor, Protocol):
    """Pooled database handle used by the permission store."""

    @abstractmethod
    async def next_id(self, table: str) -> int:
        """Allocate the next unique id from the sequence scoped to ``table``."""
        ...

    @abstractmethod
    def transaction(self, isolation: Optional[str] = None) -> AsyncContextManager[QueryExecutor]:
        """Run statements on one connection inside a transaction."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Check database health."""
        ...
