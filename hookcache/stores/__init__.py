"""Key-value stores the cache hook can run against."""

from .base import CacheStore
from .memory import MemoryStore
from .redis import RedisStore
from .registry import StoreRegistry, build_store

__all__ = ["CacheStore", "MemoryStore", "RedisStore", "StoreRegistry", "build_store"]
