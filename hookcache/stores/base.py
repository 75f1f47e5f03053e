"""Store interface consumed by the cache hook."""

from abc import ABC, abstractmethod
from typing import List, Optional


class CacheStore(ABC):
    """Async, size- and age-bounded map from string key to string value.

    Implementations raise ``StoreUnavailable`` when the backend fails. Expiry
    and eviction are the store's own business; the hook never relies on
    either for correctness.
    """

    @abstractmethod
    async def get(self, key: Optional[str]) -> Optional[str]:
        """Return the value for ``key``, or None if absent, expired or key is None."""

    @abstractmethod
    async def multi(self, *keys: Optional[str]) -> List[Optional[str]]:
        """Batched get. Results preserve input order; None keys yield None."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Store ``value`` under ``key``; ``ttl`` in seconds overrides the store default."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove one key. Used for administrative clears only."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry owned by this store."""
