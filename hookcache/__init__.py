"""Request-scoped caching hook with watermark-based invalidation."""

from hookcache.cache import (
    CacheHook,
    Envelope,
    Operation,
    Phase,
    Raw,
    RequestContext,
    cached_operation,
)
from hookcache.config.settings import CacheSettings, get_settings
from hookcache.exceptions import CacheError, ConfigurationError, SerializationError, StoreUnavailable
from hookcache.stores import MemoryStore, RedisStore, StoreRegistry

__all__ = [
    "CacheError",
    "CacheHook",
    "CacheSettings",
    "ConfigurationError",
    "Envelope",
    "MemoryStore",
    "Operation",
    "Phase",
    "Raw",
    "RedisStore",
    "RequestContext",
    "SerializationError",
    "StoreRegistry",
    "StoreUnavailable",
    "cached_operation",
    "get_settings",
]
