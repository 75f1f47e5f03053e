"""Cache hook settings.

This module provides a centralized CacheSettings class using Pydantic
BaseSettings for loading and validating the hook's options.

All options are read from ``HOOKCACHE_*`` environment variables or a
``.env`` file:
    from hookcache.config.settings import get_settings
    settings = get_settings()
"""

from functools import lru_cache
from typing import Dict, List, Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> List[str]:
    """Split a comma-separated string into a list."""
    return [item.strip() for item in value.split(",") if item.strip()]


class CacheSettings(BaseSettings):
    """Options recognized by the cache hook and the store it uses.

    Environment variables can be set in .env file or system environment,
    e.g. ``HOOKCACHE_TTL=300`` or ``HOOKCACHE_STRATEGIES='{"users": 60}'``.
    """

    model_config = SettingsConfigDict(
        env_prefix="HOOKCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==================== Hook Options ====================
    enabled: bool = Field(
        default=True,
        description="Global kill switch; when false the hook does nothing",
    )
    id_field: str = Field(
        default="id",
        description="Field name holding an item's own identifier",
    )
    key_prefix: str = Field(
        default="hookcache:",
        description="Namespace prepended to every key written to the store",
    )
    headers: str = Field(
        default="",
        description="Comma-separated allow-list of request headers folded into query keys",
    )
    per_user: bool = Field(
        default=False,
        description="Fold the acting user id into query keys",
    )
    ttl: int = Field(
        default=600,
        gt=0,
        description="Default TTL in seconds for cached values",
    )
    strategies: Dict[str, int] = Field(
        default_factory=dict,
        description="Per-service TTL overrides in seconds",
    )
    store_name: Optional[str] = Field(
        default=None,
        description="Name under which the store is registered",
    )

    # ==================== Store Options ====================
    store_backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Backend built for the registered store",
    )
    store_max_entries: int = Field(
        default=500,
        gt=0,
        description="Maximum number of entries kept by the in-memory store",
    )
    store_max_age: int = Field(
        default=600,
        gt=0,
        description="Default entry age in seconds for the in-memory store",
    )
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL (e.g., redis://localhost:6379/0)",
    )

    @field_validator("strategies")
    @classmethod
    def check_strategy_ttls(cls, v: Dict[str, int]) -> Dict[str, int]:
        """Reject non-positive per-service TTL overrides."""
        for service, ttl in v.items():
            if ttl <= 0:
                raise ValueError(f"TTL for service '{service}' must be positive, got {ttl}")
        return v

    @model_validator(mode="after")
    def check_redis_url(self) -> "CacheSettings":
        if self.store_backend == "redis" and not self.redis_url:
            raise ValueError("redis_url is required when store_backend is 'redis'")
        return self

    # ==================== Computed Properties ====================

    @property
    def headers_list(self) -> List[str]:
        """Get the header allow-list as lower-cased names."""
        return [name.lower() for name in _split_csv(self.headers)]

    @property
    def watermark_ttl(self) -> int:
        """TTL for watermark entries: the longest TTL any value entry can get."""
        return max([self.ttl, *self.strategies.values()])

    def ttl_for(self, service_name: Optional[str]) -> int:
        """Resolve the TTL for values cached on behalf of a service."""
        if service_name and service_name in self.strategies:
            return self.strategies[service_name]
        return self.ttl


@lru_cache()
def get_settings() -> CacheSettings:
    """Get cached settings instance (singleton pattern).

    Returns:
        CacheSettings instance loaded from environment variables.
    """
    return CacheSettings()
