"""permstore - hierarchical permission storage over SQL with a versioned cache.

Permissions form a tree addressed by colon-delimited names
(``app:feature:action``). Each node is one row of a SQL table carrying its
ancestor chain and a JSON ACL payload; reads are served through a
request-scoped memo and an external cache.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .config import (
    ROOT,
    ROOT_NAME,
    PATH_SEPARATOR,
    DEFAULT_PERMISSION_TYPE,
    PermissionBits,
    MissingParentPolicy,
    TypeResolutionStatus,
    PermStoreSettings,
    get_settings,
)

from .core.exceptions import (
    PermStoreError,
    ConfigurationError,
    InvalidArgumentError,
    PermissionNotFoundError,
    ParentNotFoundError,
    StorageError,
    PermissionAlreadyExistsError,
    TransactionConflictError,
    CacheError,
    CacheSerializationError,
    NotFound,
    InvalidArgument,
)

from .features.database import Database, QueryExecutor, DatabaseManager

from .features.cache import (
    Cache,
    PermissionCacheKeys,
    MemoryCache,
    RedisCache,
    FailOpenCache,
    LayeredCache,
)

from .features.permissions import (
    PermissionRecord,
    ApplicationPermissionRegistry,
    TypeResolution,
    PermissionStore,
    StaticPermissionRegistry,
)

__all__ = [
    "__version__",

    # Hierarchy constants
    "ROOT",
    "ROOT_NAME",
    "PATH_SEPARATOR",
    "DEFAULT_PERMISSION_TYPE",
    "PermissionBits",
    "MissingParentPolicy",
    "TypeResolutionStatus",

    # Settings
    "PermStoreSettings",
    "get_settings",

    # Exceptions
    "PermStoreError",
    "ConfigurationError",
    "InvalidArgumentError",
    "PermissionNotFoundError",
    "ParentNotFoundError",
    "StorageError",
    "PermissionAlreadyExistsError",
    "TransactionConflictError",
    "CacheError",
    "CacheSerializationError",
    "NotFound",
    "InvalidArgument",

    # Storage
    "Database",
    "QueryExecutor",
    "DatabaseManager",

    # Cache
    "Cache",
    "PermissionCacheKeys",
    "MemoryCache",
    "RedisCache",
    "FailOpenCache",
    "LayeredCache",

    # Permissions
    "PermissionRecord",
    "ApplicationPermissionRegistry",
    "TypeResolution",
    "PermissionStore",
    "StaticPermissionRegistry",
]
