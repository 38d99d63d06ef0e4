"""Configuration module for permstore.

Constants for the permission hierarchy, environment-driven settings and
logging configuration.
"""

from .constants import (
    ROOT,
    ROOT_NAME,
    PATH_SEPARATOR,
    DEFAULT_PERMISSION_TYPE,
    PermissionBits,
    CacheKeys,
    CacheTTL,
    StorageDefaults,
    MissingParentPolicy,
    TypeResolutionStatus,
)

from .settings import PermStoreSettings, get_settings

from .logging_config import (
    setup_logging,
    get_logger,
    LogVerbosity,
    LogFormat,
    LoggingConfig,
)

__all__ = [
    # Constants
    "ROOT",
    "ROOT_NAME",
    "PATH_SEPARATOR",
    "DEFAULT_PERMISSION_TYPE",
    "PermissionBits",
    "CacheKeys",
    "CacheTTL",
    "StorageDefaults",
    "MissingParentPolicy",
    "TypeResolutionStatus",

    # Settings
    "PermStoreSettings",
    "get_settings",

    # Logging
    "setup_logging",
    "get_logger",
    "LogVerbosity",
    "LogFormat",
    "LoggingConfig",
]
