"""Lazy invalidation over a key-value store using watermarks.

A watermark records when a scope (a whole service, or one item id) was
last mutated. A cached value is fresh only while it is at least as recent
as every watermark covering it; invalidation is therefore a single
watermark write and nothing is ever deleted.

All store faults are absorbed here: reads degrade to a miss and writes are
logged and skipped, so caching can never fail the operation it serves.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from hookcache.exceptions import SerializationError, StoreUnavailable
from hookcache.logging_config import get_logger
from hookcache.stores.base import CacheStore

from .context import Payload
from .serialization import (
    CacheEntry,
    WatermarkEntry,
    decode_entry,
    decode_watermark,
    encode_entry,
    encode_watermark,
)

logger = get_logger(name=__name__)


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


def is_outdated(
    entry: CacheEntry,
    service_mark: Optional[WatermarkEntry],
    id_mark: Optional[WatermarkEntry],
) -> bool:
    """Decide whether a cached entry predates a mutation covering it.

    Equal timestamps count as fresh. The third clause reports staleness
    whenever the id watermark is older than the service watermark, even if
    the entry looks fresh against both; it errs towards a miss when writes
    to the two scopes are skewed.
    """
    stale_for_service = service_mark is not None and entry.last_write < service_mark.last_write
    stale_for_id = id_mark is not None and entry.last_write < id_mark.last_write
    id_behind_service = (
        service_mark is not None
        and id_mark is not None
        and id_mark.last_write < service_mark.last_write
    )
    return stale_for_service or stale_for_id or id_behind_service


class WatermarkCache:
    """Reads and writes value and watermark entries on one store."""

    def __init__(self, store: CacheStore, clock: Callable[[], int] = wall_clock_ms):
        self.store = store
        self.clock = clock

    async def fetch_if_fresh(
        self,
        service_key: str,
        id_key: Optional[str],
        query_key: str,
    ) -> Optional[Payload]:
        """Return the cached result for ``query_key``, or None on a miss.

        Watermarks and value are read in one batched call so they reflect
        the store at (nearly) the same instant.
        """
        try:
            raw_service, raw_id, raw_value = await self.store.multi(service_key, id_key, query_key)
        except StoreUnavailable as e:
            logger.warning("<< {} read failed, treating as miss: {}", service_key, e)
            return None

        try:
            entry = decode_entry(query_key, raw_value)
            if entry is None:
                logger.debug("<< {} miss cache: {}", service_key, query_key)
                return None
            service_mark = decode_watermark(service_key, raw_service)
            id_mark = decode_watermark(id_key, raw_id) if id_key else None
        except SerializationError as e:
            logger.warning("<< {} undecodable entry, treating as miss: {}", service_key, e)
            return None

        if is_outdated(entry, service_mark, id_mark):
            logger.debug("<< {} out of date: {}", service_key, query_key)
            return None

        logger.debug("<< {} hit cache: {}", service_key, query_key)
        return entry.to_payload()

    async def store_value(self, query_key: str, payload: Payload, ttl: Optional[int] = None) -> bool:
        """Write a freshly computed result. Returns False if the write was skipped."""
        entry = CacheEntry.from_payload(payload, last_write=self.clock())
        try:
            await self.store.set(query_key, encode_entry(query_key, entry), ttl)
        except (SerializationError, StoreUnavailable) as e:
            logger.warning(">> set cache skipped for {}: {}", query_key, e)
            return False

        logger.debug(">> set cache: {} (ttl={})", query_key, ttl)
        return True

    async def touch_scope(self, scope_key: str, ttl: Optional[int] = None) -> bool:
        """Advance a scope's watermark to now, invalidating older values under it."""
        watermark = WatermarkEntry(last_write=self.clock())
        try:
            await self.store.set(scope_key, encode_watermark(watermark), ttl)
        except StoreUnavailable as e:
            logger.warning(">> touch skipped for {}: {}", scope_key, e)
            return False

        logger.debug(">> touched {}: {}", scope_key, watermark.last_write)
        return True
