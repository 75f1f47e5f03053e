"""In-process LRU store with per-entry TTL, built on cachetools."""

import time
from typing import Callable, List, Optional, Tuple

from cachetools import TLRUCache

from hookcache.logging_config import get_logger

from .base import CacheStore

logger = get_logger(name=__name__)

DEFAULT_MAX_ENTRIES = 500
DEFAULT_MAX_AGE_SECONDS = 600


class MemoryStore(CacheStore):
    """Bounded LRU map where each entry carries its own time-to-use.

    Values are kept as ``(value, ttl)`` pairs so the TLRU ``ttu`` callback can
    honour a per-entry TTL and fall back to ``max_age`` otherwise.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        max_age: int = DEFAULT_MAX_AGE_SECONDS,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.max_entries = max_entries
        self.max_age = max_age
        self._cache = TLRUCache(maxsize=max_entries, ttu=self._ttu, timer=timer)

    def _ttu(self, _key: str, entry: Tuple[str, Optional[int]], now: float) -> float:
        ttl = entry[1]
        return now + (ttl if ttl is not None else self.max_age)

    async def get(self, key: Optional[str]) -> Optional[str]:
        if not key:
            return None
        entry = self._cache.get(key)
        return entry[0] if entry is not None else None

    async def multi(self, *keys: Optional[str]) -> List[Optional[str]]:
        return [await self.get(key) for key in keys]

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        self._cache[key] = (value, ttl)

    async def delete(self, key: str) -> None:
        self._cache.pop(key, None)

    async def clear(self) -> None:
        self._cache.clear()
        logger.debug("Memory store cleared")

    def __len__(self) -> int:
        return len(self._cache)
