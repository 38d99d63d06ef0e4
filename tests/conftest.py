"""Pytest configuration and fixtures for permstore tests."""

import copy
import re
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import asyncpg
import pytest

from permstore.config.constants import StorageDefaults
from permstore.features.cache.adapters.memory_adapter import MemoryCache
from permstore.features.database.utils.queries import render_queries
from permstore.features.permissions.repositories.application_registry import StaticPermissionRegistry
from permstore.features.permissions.repositories.permission_store import PermissionStore


def like_to_regex(pattern: str) -> "re.Pattern[str]":
    """Translate a SQL LIKE pattern with backslash escapes into a regex."""
    parts = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\" and i + 1 < len(pattern):
            parts.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
        i += 1
    return re.compile("^" + "".join(parts) + "$", re.DOTALL)


class FakeDatabase:
    """In-memory permissions table answering the store's rendered queries.

    Every query is recorded by its template key in ``executed``. Errors can
    be queued per key with :meth:`fail` and are raised on the next calls.
    """

    def __init__(self, table: str = StorageDefaults.TABLE):
        self.table = table
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.executed: List[str] = []
        self.transactions: List[Optional[str]] = []
        self.sequence = 0
        self._failures: Dict[str, List[BaseException]] = {}
        self._keys = {sql: key for key, sql in render_queries(table).items()}

    def fail(self, key: str, *errors: BaseException) -> None:
        self._failures.setdefault(key, []).extend(errors)

    def count(self, key: str) -> int:
        return self.executed.count(key)

    def insert_row(self, perm_id: int, name: str, parents: str = "", data: Optional[str] = None) -> None:
        self.rows[name] = {
            "perm_id": perm_id,
            "perm_name": name,
            "perm_parents": parents,
            "perm_data": data,
        }

    def _run(self, query: str, args: tuple) -> Any:
        key = self._keys.get(query, query)
        self.executed.append(key)
        if self._failures.get(key):
            raise self._failures[key].pop(0)

        if key == "select_by_name":
            row = self.rows.get(args[0])
            return [{"perm_id": row["perm_id"], "perm_data": row["perm_data"]}] if row else []
        if key == "select_by_id":
            return [
                {"perm_name": row["perm_name"], "perm_data": row["perm_data"]}
                for row in self.rows.values() if row["perm_id"] == args[0]
            ]
        if key == "select_id_by_name":
            row = self.rows.get(args[0])
            return [{"perm_id": row["perm_id"]}] if row else []
        if key == "select_parent_row":
            row = self.rows.get(args[0])
            return [{"perm_id": row["perm_id"], "perm_parents": row["perm_parents"]}] if row else []
        if key == "select_parents":
            row = self.rows.get(args[0])
            return [{"perm_parents": row["perm_parents"]}] if row else []
        if key == "count_by_name":
            return [{"count": 1 if args[0] in self.rows else 0}]
        if key == "select_tree":
            return [
                {"perm_id": row["perm_id"], "perm_name": row["perm_name"]}
                for name, row in sorted(self.rows.items())
            ]
        if key == "select_children":
            regex = like_to_regex(args[0])
            return [
                {"perm_id": row["perm_id"], "perm_name": row["perm_name"]}
                for name, row in sorted(self.rows.items()) if regex.match(name)
            ]
        if key == "insert_permission":
            perm_id, name, parents = args
            if name in self.rows or any(row["perm_id"] == perm_id for row in self.rows.values()):
                raise asyncpg.UniqueViolationError("duplicate key value violates unique constraint")
            self.insert_row(perm_id, name, parents)
            return "INSERT 0 1"
        if key == "update_data":
            data, perm_id = args
            updated = 0
            for row in self.rows.values():
                if row["perm_id"] == perm_id:
                    row["perm_data"] = data
                    updated += 1
            return f"UPDATE {updated}"
        if key == "delete_by_name":
            return f"DELETE {1 if self.rows.pop(args[0], None) else 0}"
        if key == "delete_children":
            regex = like_to_regex(args[0])
            doomed = [name for name in self.rows if regex.match(name)]
            for name in doomed:
                del self.rows[name]
            return f"DELETE {len(doomed)}"
        return "OK"

    async def execute(self, query: str, *args) -> str:
        return self._run(query, args)

    async def fetch(self, query: str, *args) -> List[Dict[str, Any]]:
        return self._run(query, args)

    async def fetchrow(self, query: str, *args) -> Optional[Dict[str, Any]]:
        rows = self._run(query, args)
        return rows[0] if rows else None

    async def fetchval(self, query: str, *args) -> Any:
        rows = self._run(query, args)
        return next(iter(rows[0].values())) if rows else None

    async def next_id(self, table: str) -> int:
        self.executed.append("next_id")
        if self._failures.get("next_id"):
            raise self._failures["next_id"].pop(0)
        self.sequence += 1
        return self.sequence

    @asynccontextmanager
    async def transaction(self, isolation: Optional[str] = None):
        self.transactions.append(isolation)
        snapshot = copy.deepcopy(self.rows)
        try:
            yield self
        except BaseException:
            self.rows = snapshot
            raise

    async def health_check(self) -> bool:
        return True


@pytest.fixture
def fake_db():
    """In-memory permissions table."""
    return FakeDatabase()


@pytest.fixture
def memory_cache():
    """Shared in-process cache backend."""
    return MemoryCache()


@pytest.fixture
def registry():
    """Registry declaring a few non-default application permissions."""
    return StaticPermissionRegistry({
        "calendar": {
            "type": {"calendar:max_events": "int"},
            "params": {"calendar:max_events": {"min": 0}},
        },
    })


@pytest.fixture
def store(fake_db, memory_cache, registry):
    """Permission store over the fake table and the memory cache."""
    return PermissionStore(fake_db, memory_cache, registry=registry)


@pytest.fixture
def add_permission(store):
    """Create and add a permission by name, returning its id."""
    async def _add(name: str) -> int:
        record = await store.create_new(name)
        return await store.add(record)

    return _add


@pytest.fixture
def replica_db():
    """Second, initially empty table standing in for a read replica."""
    return FakeDatabase()
