"""Permission record entity for the permission hierarchy.

A record is one node of the hierarchy: its colon-delimited name, the id
assigned when it was stored, and the ACL payload that is persisted in the
``perm_data`` column. Records fetched through the store are bound to the
writable database handle so they can save their own payload.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, TYPE_CHECKING

from ..utils import path_codec
from ...database.utils.queries import UPDATE_DATA
from ....config.constants import ROOT, ROOT_NAME, DEFAULT_PERMISSION_TYPE, StorageDefaults
from ....core.exceptions import (
    PermStoreError,
    InvalidArgumentError,
    StorageError,
    CacheSerializationError,
)

if TYPE_CHECKING:
    from ...cache.services.layered_cache import LayeredCache
    from ...database.entities.database_protocols import QueryExecutor

logger = logging.getLogger(__name__)

# Keys of the ACL payload
USERS = "users"
GROUPS = "groups"
DEFAULT = "default"
GUEST = "guest"
CREATOR = "creator"
TYPE = "type"
PARAMS = "params"


@dataclass
class PermissionRecord:
    """One node of the permission hierarchy."""

    name: str
    cache_version: int = StorageDefaults.CACHE_VERSION
    data: Dict[str, Any] = field(default_factory=dict)
    id: Optional[int] = None
    parent_chain: Optional[str] = None

    _db: Optional["QueryExecutor"] = field(default=None, init=False, repr=False, compare=False)
    _table: str = field(default=StorageDefaults.TABLE, init=False, repr=False, compare=False)
    _cache: Optional["LayeredCache"] = field(default=None, init=False, repr=False, compare=False)

    @classmethod
    def new(
        cls,
        name: str,
        cache_version: int = StorageDefaults.CACHE_VERSION,
        perm_type: str = DEFAULT_PERMISSION_TYPE,
        params: Optional[Any] = None
    ) -> "PermissionRecord":
        """Build an unsaved record carrying its type and optional params."""
        data: Dict[str, Any] = {TYPE: perm_type}
        if params is not None:
            data[PARAMS] = params
        return cls(name=name, cache_version=cache_version, data=data)

    # Hierarchy

    @property
    def is_root(self) -> bool:
        return self.name == ROOT_NAME or self.id == ROOT

    @property
    def parent_name(self) -> Optional[str]:
        """Name of the immediate parent, or None when the parent is root."""
        return path_codec.parent_name(path_codec.strip_root_prefix(self.name))

    @property
    def short_name(self) -> str:
        """Last segment of the name."""
        return self.name.rsplit(":", 1)[-1]

    # Binding

    def bind(
        self,
        db: "QueryExecutor",
        table: str = StorageDefaults.TABLE,
        cache: Optional["LayeredCache"] = None
    ) -> "PermissionRecord":
        """Attach the writable handle (and cache to invalidate) used by save()."""
        self._db = db
        self._table = table
        self._cache = cache
        return self

    @property
    def is_bound(self) -> bool:
        return self._db is not None

    async def save(self) -> None:
        """Persist the ACL payload and invalidate cached copies."""
        if self._db is None:
            raise InvalidArgumentError(f"Permission '{self.name}' is not bound to a database")
        if self.id is None or self.id == ROOT:
            raise InvalidArgumentError(f"Permission '{self.name}' has not been stored yet")

        try:
            await self._db.execute(UPDATE_DATA.format(table=self._table), self.serialize_data(), self.id)
        except PermStoreError:
            raise
        except Exception as e:
            logger.error(f"Failed to save permission {self.name}: {e}")
            raise StorageError(f"Failed to save permission: {e}") from e

        if self._cache is not None:
            await self._cache.invalidate(self.name)

    # Serialization

    def serialize_data(self) -> str:
        """Encode the ACL payload for the ``perm_data`` column."""
        return json.dumps(self.data, sort_keys=True)

    @staticmethod
    def deserialize_data(raw: Optional[str]) -> Dict[str, Any]:
        """Decode a ``perm_data`` value; NULL means an empty payload."""
        if not raw:
            return {}
        return json.loads(raw)

    def to_cache(self) -> str:
        """Serialize for the external cache."""
        return json.dumps({
            "id": self.id,
            "name": self.name,
            "data": self.data,
            "cache_version": self.cache_version,
        }, sort_keys=True)

    @classmethod
    def from_cache(cls, raw: str, cache_version: int) -> "PermissionRecord":
        """Rebuild a record from :meth:`to_cache` output.

        Raises:
            CacheSerializationError: If the payload is unreadable or was
                written under a different cache version
        """
        try:
            payload = json.loads(raw)
            version = payload["cache_version"]
            record = cls(
                name=payload["name"],
                cache_version=version,
                data=payload.get("data") or {},
                id=payload.get("id"),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise CacheSerializationError(f"Unreadable cached permission: {e}") from e

        if version != cache_version:
            raise CacheSerializationError(
                f"Cached permission {record.name} has version {version}, expected {cache_version}"
            )
        return record

    # Type and params

    def get_type(self) -> str:
        return self.data.get(TYPE, DEFAULT_PERMISSION_TYPE)

    def get_params(self) -> Optional[Any]:
        return self.data.get(PARAMS)

    def _combine(self, current: Optional[int], bits: int) -> int:
        # Matrix permissions accumulate bits; other types hold a plain value
        if self.get_type() == DEFAULT_PERMISSION_TYPE:
            return (current or 0) | bits
        return bits

    # User and group entries

    def add_user_permission(self, user: str, bits: int) -> None:
        users = self.data.setdefault(USERS, {})
        users[user] = self._combine(users.get(user), bits)

    def remove_user_permission(self, user: str, bits: Optional[int] = None) -> None:
        """Clear ``bits`` for ``user``, or drop the user entirely."""
        self._remove_entry(USERS, user, bits)

    def get_user_permissions(self, bits: Optional[int] = None) -> Dict[str, int]:
        """Users with their masks, optionally only those holding ``bits``."""
        return self._filter_entries(USERS, bits)

    def add_group_permission(self, group: str, bits: int) -> None:
        groups = self.data.setdefault(GROUPS, {})
        groups[str(group)] = self._combine(groups.get(str(group)), bits)

    def remove_group_permission(self, group: str, bits: Optional[int] = None) -> None:
        self._remove_entry(GROUPS, str(group), bits)

    def get_group_permissions(self, bits: Optional[int] = None) -> Dict[str, int]:
        return self._filter_entries(GROUPS, bits)

    def _remove_entry(self, section: str, key: str, bits: Optional[int]) -> None:
        entries = self.data.get(section)
        if not entries or key not in entries:
            return
        if bits is None or self.get_type() != DEFAULT_PERMISSION_TYPE:
            del entries[key]
        else:
            entries[key] &= ~bits
            if not entries[key]:
                del entries[key]
        if not entries:
            del self.data[section]

    def _filter_entries(self, section: str, bits: Optional[int]) -> Dict[str, int]:
        entries = self.data.get(section, {})
        if bits is None:
            return dict(entries)
        return {key: mask for key, mask in entries.items() if mask & bits}

    # Default, guest and creator masks

    def add_default_permission(self, bits: int) -> None:
        self.data[DEFAULT] = self._combine(self.data.get(DEFAULT), bits)

    def remove_default_permission(self, bits: Optional[int] = None) -> None:
        self._remove_scalar(DEFAULT, bits)

    def get_default_permissions(self) -> Optional[int]:
        return self.data.get(DEFAULT)

    def add_guest_permission(self, bits: int) -> None:
        self.data[GUEST] = self._combine(self.data.get(GUEST), bits)

    def remove_guest_permission(self, bits: Optional[int] = None) -> None:
        self._remove_scalar(GUEST, bits)

    def get_guest_permissions(self) -> Optional[int]:
        return self.data.get(GUEST)

    def add_creator_permission(self, bits: int) -> None:
        self.data[CREATOR] = self._combine(self.data.get(CREATOR), bits)

    def remove_creator_permission(self, bits: Optional[int] = None) -> None:
        self._remove_scalar(CREATOR, bits)

    def get_creator_permissions(self) -> Optional[int]:
        return self.data.get(CREATOR)

    def _remove_scalar(self, key: str, bits: Optional[int]) -> None:
        if key not in self.data:
            return
        if bits is None or self.get_type() != DEFAULT_PERMISSION_TYPE:
            del self.data[key]
        else:
            self.data[key] &= ~bits

    def __str__(self) -> str:
        return f"PermissionRecord({self.name})"
