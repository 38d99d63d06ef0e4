"""
Configuration management for permstore.

Settings are read from ``PERMSTORE_*`` environment variables or a ``.env``
file and drive the storage, cache and hierarchy behaviour of the store.
"""
from typing import Optional, Dict, Any
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

from .constants import CacheTTL, StorageDefaults, MissingParentPolicy
from ..features.database.utils.validation import validate_identifier


class PermStoreSettings(BaseSettings):
    """Settings for a permission store instance."""

    model_config = SettingsConfigDict(
        env_prefix="PERMSTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database Configuration
    database_url: str = Field(default="postgresql://localhost:5432/horde")
    read_database_url: Optional[str] = Field(default=None)
    db_pool_min_size: int = Field(default=2, ge=0)
    db_pool_max_size: int = Field(default=10, ge=1)
    db_command_timeout: float = Field(default=60.0, gt=0)
    table: str = Field(default=StorageDefaults.TABLE)

    # Redis Cache Configuration
    redis_url: Optional[str] = Field(default=None)
    redis_pool_size: int = Field(default=10, ge=1)
    cache_key_prefix: str = Field(default="")
    cache_version: int = Field(default=StorageDefaults.CACHE_VERSION, ge=0)
    cache_default_lifetime: int = Field(default=CacheTTL.DEFAULT_LIFETIME, ge=0)

    # Hierarchy behaviour
    read_your_writes: bool = Field(default=True)
    missing_parent_policy: MissingParentPolicy = Field(default=MissingParentPolicy.RAISE)
    add_max_retries: int = Field(default=StorageDefaults.ADD_MAX_RETRIES, ge=1)

    @field_validator("table")
    @classmethod
    def _validate_table(cls, value: str) -> str:
        validate_identifier(value, "table")
        return value

    @property
    def is_cache_enabled(self) -> bool:
        """Whether an external Redis cache is configured."""
        return bool(self.redis_url)

    @property
    def has_read_replica(self) -> bool:
        """Whether reads may go to a separate connection."""
        return bool(self.read_database_url) and self.read_database_url != self.database_url

    def get_pool_config(self) -> Dict[str, Any]:
        """Pool keyword arguments for the asyncpg connection manager."""
        return {
            "min_size": self.db_pool_min_size,
            "max_size": self.db_pool_max_size,
            "command_timeout": self.db_command_timeout,
        }


@lru_cache()
def get_settings() -> PermStoreSettings:
    """Get cached settings instance."""
    return PermStoreSettings()
