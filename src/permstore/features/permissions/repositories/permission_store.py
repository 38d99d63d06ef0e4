"""SQL-backed hierarchical permission store.

Permissions live in one table, one row per node. A node's place in the
hierarchy is encoded twice: in its colon-delimited name and in
``perm_parents``, the chain of its ancestors' ids. The implicit root node
is never stored.

Reads go through a request-scoped memo and the external cache; every
mutation invalidates the affected cache entries rather than updating them.
"""

import logging
from typing import Any, Dict, List, Optional

import asyncpg

from ..entities.permission import PermissionRecord
from ..entities.protocols import ApplicationPermissionRegistry
from ..entities.type_resolution import TypeResolution
from ..utils import path_codec
from ...cache.adapters.memory_adapter import MemoryCache
from ...cache.adapters.redis_adapter import RedisCache
from ...cache.entities.keys import PermissionCacheKeys
from ...cache.entities.protocols import Cache
from ...cache.services.layered_cache import LayeredCache
from ...database.entities.database_protocols import Database, QueryExecutor
from ...database.repositories.connection_manager import DatabaseManager
from ...database.utils.error_handling import storage_error_handler
from ...database.utils.queries import CREATE_SEQUENCE, render_queries, sequence_name
from ...database.utils.validation import validate_identifier
from ....config.constants import (
    ROOT,
    ROOT_NAME,
    PATH_SEPARATOR,
    DEFAULT_PERMISSION_TYPE,
    CacheTTL,
    StorageDefaults,
    MissingParentPolicy,
    TypeResolutionStatus,
)
from ....config.settings import PermStoreSettings, get_settings
from ....core.exceptions import (
    PermStoreError,
    ConfigurationError,
    InvalidArgumentError,
    PermissionNotFoundError,
    ParentNotFoundError,
    StorageError,
    PermissionAlreadyExistsError,
    TransactionConflictError,
)

logger = logging.getLogger(__name__)


def _affected_rows(status: Any) -> int:
    """Row count from a command status such as ``"DELETE 3"``."""
    try:
        return int(str(status).split()[-1])
    except (ValueError, IndexError):
        return 0


class PermissionStore:
    """Hierarchical permission store over a SQL table and a cache.

    One store is meant to serve one request or session: the memo it keeps
    is never shared, and nothing inside the store is locked.

    Reads normally use the write connection as well
    (``read_your_writes=True``). With ``read_your_writes=False`` and a
    distinct ``read_db``, reads go to the replica and a row written through
    this store may not be visible to the next read until the replica
    catches up.
    """

    def __init__(
        self,
        db: Database,
        cache: Optional[Cache] = None,
        *,
        read_db: Optional[Database] = None,
        registry: Optional[ApplicationPermissionRegistry] = None,
        table: str = StorageDefaults.TABLE,
        cache_version: int = StorageDefaults.CACHE_VERSION,
        cache_key_prefix: str = "",
        cache_lifetime: Optional[int] = CacheTTL.DEFAULT_LIFETIME,
        read_your_writes: bool = True,
        missing_parent_policy: MissingParentPolicy = MissingParentPolicy.RAISE,
        add_max_retries: int = StorageDefaults.ADD_MAX_RETRIES
    ):
        try:
            validate_identifier(table, "table")
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        if add_max_retries < 1:
            raise ConfigurationError("add_max_retries must be >= 1")

        self.table = table
        self.cache_version = cache_version
        self.registry = registry
        self.missing_parent_policy = MissingParentPolicy(missing_parent_policy)
        self.add_max_retries = add_max_retries
        self.read_your_writes = read_your_writes

        self._write_db = db
        self._read_db = db if read_your_writes or read_db is None else read_db
        self._queries = render_queries(table)
        self._owned_resources: List[Any] = []

        self.cache_keys = PermissionCacheKeys(version=cache_version, prefix=cache_key_prefix)
        self._cache: LayeredCache[PermissionRecord] = LayeredCache(
            cache if cache is not None else MemoryCache(),
            self.cache_keys,
            serialize=lambda record: record.to_cache(),
            deserialize=lambda raw: PermissionRecord.from_cache(raw, cache_version),
            lifetime=cache_lifetime,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[PermStoreSettings] = None,
        registry: Optional[ApplicationPermissionRegistry] = None
    ) -> "PermissionStore":
        """Build a store with asyncpg pools and a Redis (or in-memory) cache."""
        settings = settings or get_settings()
        pool_config = settings.get_pool_config()

        write_db = DatabaseManager(settings.database_url, name="write", **pool_config)
        owned: List[Any] = [write_db]
        read_db = write_db
        if settings.has_read_replica and not settings.read_your_writes:
            read_db = DatabaseManager(settings.read_database_url, name="read", **pool_config)
            owned.append(read_db)

        if settings.is_cache_enabled:
            cache = RedisCache(
                redis_url=settings.redis_url,
                default_ttl=settings.cache_default_lifetime,
                pool_size=settings.redis_pool_size,
            )
            owned.append(cache)
        else:
            logger.info("Redis URL not configured, caching permissions in process memory only")
            cache = MemoryCache(default_ttl=settings.cache_default_lifetime)

        store = cls(
            write_db,
            cache,
            read_db=read_db,
            registry=registry,
            table=settings.table,
            cache_version=settings.cache_version,
            cache_key_prefix=settings.cache_key_prefix,
            cache_lifetime=settings.cache_default_lifetime,
            read_your_writes=settings.read_your_writes,
            missing_parent_policy=settings.missing_parent_policy,
            add_max_retries=settings.add_max_retries,
        )
        store._owned_resources = owned
        return store

    async def close(self) -> None:
        """Release pools and cache clients created by :meth:`from_settings`."""
        for resource in self._owned_resources:
            if isinstance(resource, DatabaseManager):
                await resource.close_pool()
            elif isinstance(resource, RedisCache):
                await resource.disconnect()
        self._owned_resources = []

    @property
    def cache(self) -> LayeredCache[PermissionRecord]:
        return self._cache

    def clear_memo(self) -> None:
        """Forget records memoized during this request."""
        self._cache.clear_local()

    def _bind(self, record: PermissionRecord) -> PermissionRecord:
        return record.bind(self._write_db, self.table, self._cache)

    # Schema

    @storage_error_handler("create permissions schema")
    async def ensure_schema(self) -> None:
        """Create the permissions table and its id sequence when missing."""
        await self._write_db.execute(self._queries["create_table"])
        await self._write_db.execute(CREATE_SEQUENCE.format(sequence=sequence_name(self.table)))
        logger.info(f"Permissions schema ready in table {self.table}")

    # Creation

    async def resolve_type(self, name: str) -> TypeResolution:
        """Find the declared type and params for ``name``.

        Only names with an application segment (``app:...``) are looked
        up. Registry failures are swallowed and reported as a defaulted
        resolution carrying the error.
        """
        pos = name.find(PATH_SEPARATOR)
        if pos <= 0 or self.registry is None:
            return TypeResolution()

        app = name[:pos]
        try:
            info = await self.registry.get_application_permissions(app)
        except Exception as e:
            logger.debug(f"Permission registry lookup for {app} failed, using default type: {e}")
            return TypeResolution(error=e)

        types = (info or {}).get("type") or {}
        params = (info or {}).get("params") or {}
        if name not in types and name not in params:
            return TypeResolution()

        return TypeResolution(
            perm_type=types.get(name, DEFAULT_PERMISSION_TYPE),
            params=params.get(name),
            status=TypeResolutionStatus.RESOLVED,
        )

    async def create_new(self, name: str) -> PermissionRecord:
        """Build an unsaved record for ``name`` with its resolved type."""
        resolution = await self.resolve_type(name)
        return PermissionRecord.new(
            name,
            cache_version=self.cache_version,
            perm_type=resolution.perm_type,
            params=resolution.params,
        )

    # Lookups

    async def fetch_by_name(self, name: str) -> PermissionRecord:
        """Get the permission called ``name``.

        Raises:
            PermissionNotFoundError: If no row has that name
            StorageError: If the query fails
        """
        if name == ROOT_NAME:
            return await self.create_new(ROOT_NAME)

        record = await self._cache.get(name, lambda: self._load_by_name(name))
        # Memoized and cached records may carry a handle from an earlier request
        return self._bind(record)

    @storage_error_handler("fetch permission by name")
    async def _load_by_name(self, name: str) -> PermissionRecord:
        row = await self._read_db.fetchrow(self._queries["select_by_name"], name)
        if not row:
            raise PermissionNotFoundError(name)

        return PermissionRecord(
            name=name,
            cache_version=self.cache_version,
            data=PermissionRecord.deserialize_data(row["perm_data"]),
            id=row["perm_id"],
        )

    @storage_error_handler("fetch permission by id")
    async def fetch_by_id(self, perm_id: Optional[int]) -> PermissionRecord:
        """Get the permission with ``perm_id``; ROOT or empty gives the root node.

        Lookups by id bypass the memo and the external cache.
        """
        if not perm_id or perm_id == ROOT:
            return await self.create_new(ROOT_NAME)

        row = await self._read_db.fetchrow(self._queries["select_by_id"], perm_id)
        if not row:
            raise PermissionNotFoundError(perm_id)

        record = PermissionRecord(
            name=row["perm_name"],
            cache_version=self.cache_version,
            data=PermissionRecord.deserialize_data(row["perm_data"]),
            id=perm_id,
        )
        return self._bind(record)

    @storage_error_handler("look up permission id")
    async def id_of(self, record: PermissionRecord) -> Optional[int]:
        """Stored id of ``record``'s name; None when there is no such row."""
        if record.name == ROOT_NAME:
            return ROOT
        return await self._read_db.fetchval(self._queries["select_id_by_name"], record.name)

    async def exists(self, name: str) -> bool:
        """Whether a permission called ``name`` is stored; the root always exists."""
        if name == ROOT_NAME:
            return True

        cached = await self._cache.get_exists(name)
        if cached is not None and cached.isdigit():
            return bool(int(cached))

        count = await self._count(name)
        await self._cache.set_exists(name, count)
        return bool(count)

    @storage_error_handler("check permission existence")
    async def _count(self, name: str) -> int:
        return int(await self._read_db.fetchval(self._queries["count_by_name"], name) or 0)

    @storage_error_handler("look up permission parent")
    async def parent_of(self, child_name: str) -> int:
        """Id of the immediate parent of ``child_name``; ROOT for top-level or unknown names."""
        chain = await self._read_db.fetchval(self._queries["select_parents"], child_name)
        return path_codec.last_ancestor_id(chain)

    @storage_error_handler("look up permission parents")
    async def parents_of(self, child_name: str) -> Dict[int, Any]:
        """Nested ancestor map of ``child_name``, immediate parent outermost.

        A stored top-level permission has an empty chain and yields
        ``{ROOT: True}``; it does not raise.

        Raises:
            PermissionNotFoundError: If no row has that name
        """
        row = await self._read_db.fetchrow(self._queries["select_parents"], child_name)
        if not row:
            raise PermissionNotFoundError(child_name)
        return path_codec.ancestor_tree(row["perm_parents"])

    @storage_error_handler("load permission tree")
    async def tree(self) -> Dict[int, str]:
        """Every stored ``{id: name}`` ordered by name, plus ``{ROOT: ROOT_NAME}``."""
        rows = await self._read_db.fetch(self._queries["select_tree"])
        tree = {row["perm_id"]: row["perm_name"] for row in rows}
        tree[ROOT] = ROOT_NAME
        return tree

    @storage_error_handler("load permission descendants")
    async def children_of(self, name: str) -> Dict[int, str]:
        """Every stored descendant of ``name`` as ``{id: name}``, ordered by name."""
        pattern = path_codec.build_child_wildcard(path_codec.escape_like(name))
        rows = await self._read_db.fetch(self._queries["select_children"], pattern)
        return {row["perm_id"]: row["perm_name"] for row in rows}

    # Mutations

    async def add(self, record: PermissionRecord) -> int:
        """Store a new permission and its payload; returns the new id.

        The parent lookup and the insert run in one serializable
        transaction on the write connection and are retried on
        serialization conflicts.

        Raises:
            InvalidArgumentError: If the record has no name or names
                the root
            ParentNotFoundError: If the named parent is missing and the
                policy is ``MissingParentPolicy.RAISE``
            PermissionAlreadyExistsError: If the name is already stored
            StorageError: If a query fails
        """
        if not record.name:
            raise InvalidArgumentError("Permission name must be non-empty.")

        name = path_codec.strip_root_prefix(record.name)
        if not name or name == ROOT_NAME:
            raise InvalidArgumentError("The root permission is implicit and cannot be stored.")

        await self._cache.invalidate(record.name)
        if name != record.name:
            await self._cache.invalidate(name)

        perm_id = await self._allocate_id()
        chain = await self._insert(perm_id, name)

        record.name = name
        record.id = perm_id
        record.parent_chain = chain
        self._bind(record)
        await record.save()

        logger.info(f"Added permission {name} with id {perm_id}")
        return perm_id

    @storage_error_handler("allocate permission id")
    async def _allocate_id(self) -> int:
        return await self._write_db.next_id(self.table)

    async def _insert(self, perm_id: int, name: str) -> str:
        for attempt in range(1, self.add_max_retries + 1):
            try:
                async with self._write_db.transaction(isolation="serializable") as conn:
                    chain = await self._parent_chain_for(conn, name)
                    await conn.execute(self._queries["insert_permission"], perm_id, name, chain)
                return chain
            except asyncpg.SerializationError as e:
                logger.warning(f"Serialization conflict adding {name} (attempt {attempt}): {e}")
                if attempt == self.add_max_retries:
                    raise TransactionConflictError("add permission", attempt) from e
            except asyncpg.UniqueViolationError as e:
                raise PermissionAlreadyExistsError(name) from e
            except PermStoreError:
                raise
            except Exception as e:
                logger.error(f"Failed to add permission {name}: {e}")
                raise StorageError(f"Failed to add permission: {e}") from e

    async def _parent_chain_for(self, conn: QueryExecutor, name: str) -> str:
        parent = path_codec.parent_name(name)
        if parent is None:
            return ""

        row = await conn.fetchrow(self._queries["select_parent_row"], parent)
        if row:
            return path_codec.extend_chain(row["perm_parents"], row["perm_id"])

        if self.missing_parent_policy == MissingParentPolicy.RAISE:
            raise ParentNotFoundError(name, parent)

        logger.info(f"Parent {parent} of {name} is not stored, attaching {name} to the root")
        return ""

    async def remove(self, record: PermissionRecord, force: bool = False) -> int:
        """Delete ``record`` and, unless ``force``, all of its descendants.

        ``force=True`` deletes only the exact row and leaves descendants in
        place without a stored parent. Returns the number of rows deleted.
        """
        name = record.name
        await self._cache.invalidate(name)

        descendants: List[str] = []
        try:
            async with self._write_db.transaction() as conn:
                deleted = _affected_rows(await conn.execute(self._queries["delete_by_name"], name))
                if not force:
                    pattern = path_codec.build_child_wildcard(path_codec.escape_like(name))
                    rows = await conn.fetch(self._queries["select_children"], pattern)
                    descendants = [row["perm_name"] for row in rows]
                    deleted += _affected_rows(await conn.execute(self._queries["delete_children"], pattern))
        except PermStoreError:
            raise
        except Exception as e:
            logger.error(f"Failed to remove permission {name}: {e}")
            raise StorageError(f"Failed to remove permission: {e}") from e

        for child in descendants:
            await self._cache.invalidate(child)

        logger.info(f"Removed permission {name} ({deleted} rows, force={force})")
        return deleted
