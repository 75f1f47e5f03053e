"""Configuration module for the cache hook.

This module provides:
- Settings management with environment variables
- Redis connection lifecycle
"""

from .settings import CacheSettings, get_settings
from .redis import close_redis, init_redis

__all__ = [
    # Settings
    "CacheSettings",
    "get_settings",
    # Redis
    "init_redis",
    "close_redis",
]
