"""Named store registration and backend construction."""

from typing import Dict

from hookcache.config.settings import CacheSettings
from hookcache.exceptions import ConfigurationError
from hookcache.logging_config import get_logger

from .base import CacheStore
from .memory import MemoryStore
from .redis import RedisStore

logger = get_logger(name=__name__)


class StoreRegistry:
    """Maps store names to store instances for lookup by the hook."""

    def __init__(self):
        self._stores: Dict[str, CacheStore] = {}

    def register(self, name: str, store: CacheStore) -> None:
        self._stores[name] = store
        logger.debug("Registered store '{}' ({})", name, type(store).__name__)

    def get(self, name: str) -> CacheStore:
        """Look up a store. An unknown name is a configuration error, not a miss."""
        store = self._stores.get(name)
        if store is None:
            raise ConfigurationError(f"store '{name}' must be registered before the cache hook runs")
        return store

    def __contains__(self, name: str) -> bool:
        return name in self._stores


async def build_store(settings: CacheSettings) -> CacheStore:
    """Construct the backend selected by ``settings.store_backend``."""
    if settings.store_backend == "redis":
        from hookcache.config.redis import init_redis

        client = await init_redis(settings.redis_url)
        return RedisStore(client, prefix=settings.key_prefix, default_ttl=settings.store_max_age)

    return MemoryStore(
        max_entries=settings.store_max_entries,
        max_age=settings.store_max_age,
    )
