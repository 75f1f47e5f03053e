"""Redis-backed store.

Wraps a ``redis.asyncio.Redis`` client created with ``decode_responses=True``.
Clearing uses SCAN over the store's key prefix (cursor-based, non-blocking),
so other users of the same Redis database are not affected.
"""

from typing import List, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from hookcache.exceptions import StoreUnavailable
from hookcache.logging_config import get_logger

from .base import CacheStore

logger = get_logger(name=__name__)

SCAN_BATCH_SIZE = 100


class RedisStore(CacheStore):
    """Store backed by a shared Redis instance."""

    def __init__(self, client: Redis, prefix: str, default_ttl: Optional[int] = None):
        self.client = client
        self.prefix = prefix
        self.default_ttl = default_ttl

    async def get(self, key: Optional[str]) -> Optional[str]:
        if not key:
            return None
        try:
            return await self.client.get(key)
        except RedisError as e:
            raise StoreUnavailable("get", str(e)) from e

    async def multi(self, *keys: Optional[str]) -> List[Optional[str]]:
        present = [key for key in keys if key]
        if not present:
            return [None] * len(keys)
        try:
            values = await self.client.mget(present)
        except RedisError as e:
            raise StoreUnavailable("mget", str(e)) from e

        found = dict(zip(present, values))
        return [found.get(key) if key else None for key in keys]

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        try:
            await self.client.set(key, value, ex=ttl or self.default_ttl)
        except RedisError as e:
            raise StoreUnavailable("set", str(e)) from e

    async def delete(self, key: str) -> None:
        try:
            await self.client.delete(key)
        except RedisError as e:
            raise StoreUnavailable("delete", str(e)) from e

    async def clear(self) -> None:
        pattern = f"{self.prefix}*"
        deleted = 0

        try:
            cursor = 0
            while True:
                cursor, keys = await self.client.scan(cursor=cursor, match=pattern, count=SCAN_BATCH_SIZE)
                if keys:
                    await self.client.delete(*keys)
                    deleted += len(keys)
                if cursor == 0:
                    break
        except RedisError as e:
            raise StoreUnavailable("clear", str(e)) from e

        logger.info("Cleared {} keys matching '{}'", deleted, pattern)
