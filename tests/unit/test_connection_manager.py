"""Tests for the asyncpg connection manager."""

import asyncpg
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from permstore.core.exceptions import StorageError
from permstore.features.database.repositories.connection_manager import DatabaseManager

CREATE_POOL = "permstore.features.database.repositories.connection_manager.asyncpg.create_pool"


def _async_cm(value):
    cm = MagicMock()
    cm.__aenter__ = AsyncMock(return_value=value)
    cm.__aexit__ = AsyncMock(return_value=False)
    return cm


@pytest.fixture
def connection():
    conn = AsyncMock()
    conn.transaction = MagicMock(return_value=_async_cm(None))
    return conn


@pytest.fixture
def pool(connection):
    pool = MagicMock()
    pool.acquire.return_value = _async_cm(connection)
    pool.close = AsyncMock()
    return pool


@pytest.fixture
def manager():
    return DatabaseManager("postgresql+asyncpg://user@db/horde", name="write", min_size=1, max_size=4)


class TestDatabaseManager:
    """Pool lifecycle and query helpers."""

    def test_dsn_and_pool_config(self, manager):
        assert manager.dsn == "postgresql://user@db/horde"
        assert manager.pool_config["min_size"] == 1
        assert manager.pool_config["max_size"] == 4
        assert manager.get_pool_stats() == {"status": "not_initialized"}

    def test_invalid_pool_sizes(self):
        with pytest.raises(ValueError):
            DatabaseManager("postgresql://db/horde", min_size=5, max_size=2)

    @pytest.mark.asyncio
    async def test_pool_created_once(self, manager, pool):
        with patch(CREATE_POOL, AsyncMock(return_value=pool)) as create_pool:
            await manager.create_pool()
            await manager.create_pool()

        create_pool.assert_awaited_once()
        await manager.close_pool()
        pool.close.assert_awaited_once()
        assert manager.pool is None

    @pytest.mark.asyncio
    async def test_pool_failure(self, manager):
        with patch(CREATE_POOL, AsyncMock(side_effect=OSError("refused"))):
            with pytest.raises(StorageError):
                await manager.create_pool()

    @pytest.mark.asyncio
    async def test_queries_acquire_connection(self, manager, pool, connection):
        connection.fetchval.return_value = 3
        with patch(CREATE_POOL, AsyncMock(return_value=pool)):
            result = await manager.fetchval("SELECT COUNT(*) FROM horde_perms WHERE perm_name = $1", "a")

        assert result == 3
        connection.fetchval.assert_awaited_once_with(
            "SELECT COUNT(*) FROM horde_perms WHERE perm_name = $1", "a", column=0, timeout=None
        )

    @pytest.mark.asyncio
    async def test_transaction_passes_isolation(self, manager, pool, connection):
        with patch(CREATE_POOL, AsyncMock(return_value=pool)):
            async with manager.transaction(isolation="serializable") as conn:
                assert conn is connection

        connection.transaction.assert_called_once_with(isolation="serializable")

    @pytest.mark.asyncio
    async def test_next_id(self, manager, pool, connection):
        connection.fetchval.return_value = 42
        with patch(CREATE_POOL, AsyncMock(return_value=pool)):
            assert await manager.next_id("horde_perms") == 42

        assert connection.fetchval.call_args[0][0] == "SELECT nextval('horde_perms_seq')"

    @pytest.mark.asyncio
    async def test_next_id_creates_missing_sequence(self, manager, pool, connection):
        connection.fetchval.side_effect = [asyncpg.UndefinedTableError("relation does not exist"), 1]
        with patch(CREATE_POOL, AsyncMock(return_value=pool)):
            assert await manager.next_id("horde_perms") == 1

        connection.execute.assert_awaited_once()
        assert connection.execute.call_args[0][0] == "CREATE SEQUENCE IF NOT EXISTS horde_perms_seq"

    @pytest.mark.asyncio
    async def test_next_id_rejects_unsafe_table(self, manager):
        with pytest.raises(ValueError):
            await manager.next_id("perms; DROP TABLE x")

    @pytest.mark.asyncio
    async def test_health_check(self, manager, pool, connection):
        connection.fetchval.return_value = 1
        with patch(CREATE_POOL, AsyncMock(return_value=pool)):
            assert await manager.health_check() is True

        connection.fetchval.side_effect = OSError("gone")
        assert await manager.health_check() is False
