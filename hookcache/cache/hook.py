"""Request-phase orchestration of the cache hook.

Usage:
    from hookcache.cache import CacheHook

    hook = CacheHook(settings, registry)
    await hook(ctx)          # Pre phase: may substitute ctx.result
    ...run the operation unless ctx.served_from_cache...
    ctx.phase = Phase.POST
    await hook(ctx)          # Post phase: persists result / advances watermarks

Cache structure in the store:
    - service
      - lastWrite: time
    - service:id
      - lastWrite: time
    - queryKey: value (metadata.lastWrite: time)
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any, Callable, List, Optional

from hookcache.config.settings import CacheSettings
from hookcache.exceptions import ConfigurationError, SerializationError
from hookcache.logging_config import get_logger
from hookcache.stores.registry import StoreRegistry

from .context import Operation, Payload, Phase, Raw, RequestContext, payload_data
from .keys import derive_query_key, id_key, service_key
from .watermarks import WatermarkCache, wall_clock_ms

logger = get_logger(name=__name__)


class CacheHook:
    """Serves reads from cache and invalidates on writes, one call per phase."""

    def __init__(
        self,
        settings: CacheSettings,
        registry: StoreRegistry,
        clock: Callable[[], int] = wall_clock_ms,
    ):
        if not settings.store_name:
            raise ConfigurationError(
                "store_name is not configured, check the HOOKCACHE_STORE_NAME setting"
            )
        self.settings = settings
        self.registry = registry
        self.clock = clock
        self._cache: Optional[WatermarkCache] = None

    @property
    def cache(self) -> WatermarkCache:
        """Watermark cache over the named store, resolved on first use."""
        if self._cache is None:
            store = self.registry.get(self.settings.store_name)
            self._cache = WatermarkCache(store, clock=self.clock)
        return self._cache

    async def __call__(self, ctx: RequestContext) -> RequestContext:
        if not self.settings.enabled:
            return ctx

        cache = self.cache
        try:
            if ctx.phase == Phase.PRE:
                await self._before(cache, ctx)
            else:
                await self._after(cache, ctx)
        except SerializationError as e:
            logger.warning(
                "Skipping cache for {} {} ({}): {}", ctx.operation.value, ctx.resource_path, ctx.phase.value, e
            )
        return ctx

    # ==================== Keys ====================

    def query_key(self, ctx: RequestContext, explicit_id: Any = None) -> str:
        return derive_query_key(
            ctx,
            prefix=self.settings.key_prefix,
            headers=self.settings.headers_list,
            per_user=self.settings.per_user,
            explicit_id=explicit_id,
        )

    def service_key_for(self, service_name: str) -> str:
        return service_key(self.settings.key_prefix, service_name)

    def id_key_for(self, service_name: str, resource_id: Any) -> str:
        return id_key(self.settings.key_prefix, service_name, resource_id)

    # ==================== Pre phase ====================

    async def _before(self, cache: WatermarkCache, ctx: RequestContext) -> None:
        svc_key = self.service_key_for(ctx.service_name)
        watermark_ttl = self.settings.watermark_ttl

        if ctx.operation == Operation.LIST:
            query_key = self.query_key(ctx)
            cached = await cache.fetch_if_fresh(svc_key, None, query_key)
            if cached is not None:
                ctx.record_cache_hit(query_key, cached)

        elif ctx.operation == Operation.READ:
            if not _has_id(ctx.resource_id):
                return
            query_key = self.query_key(ctx, ctx.resource_id)
            item_key = self.id_key_for(ctx.service_name, ctx.resource_id)
            cached = await cache.fetch_if_fresh(svc_key, item_key, query_key)
            if cached is not None:
                ctx.record_cache_hit(query_key, Raw(payload_data(cached)))

        elif ctx.operation.is_mutation:
            # Advance watermarks before the mutation runs so a racing read
            # can at worst miss, never cache the pre-mutation value as fresh.
            if _has_id(ctx.resource_id):
                await asyncio.gather(
                    cache.touch_scope(svc_key, watermark_ttl),
                    cache.touch_scope(self.id_key_for(ctx.service_name, ctx.resource_id), watermark_ttl),
                )
            else:
                await cache.touch_scope(svc_key, watermark_ttl)

    # ==================== Post phase ====================

    async def _after(self, cache: WatermarkCache, ctx: RequestContext) -> None:
        ttl = self.settings.ttl_for(ctx.service_name)

        if ctx.operation == Operation.LIST:
            if ctx.result is not None:
                await self._save(cache, ctx, None, ctx.result, ttl)

        elif ctx.operation == Operation.READ:
            if not _has_id(ctx.resource_id) or ctx.result is None:
                return
            item = payload_data(ctx.result)
            if item is None:
                return
            # Keyed by the id that was asked for, which differs from the item's
            # own id when it was looked up by an alternate identifier (username, slug, ...).
            await self._save(cache, ctx, ctx.resource_id, Raw(item), ttl)

        elif ctx.operation.is_mutation:
            watermark_ttl = self.settings.watermark_ttl
            id_field = self._id_field(ctx)
            for item in _items(ctx):
                item_id = _item_id(item, id_field)
                if item_id is not None:
                    await cache.touch_scope(self.id_key_for(ctx.service_name, item_id), watermark_ttl)

    async def _save(
        self,
        cache: WatermarkCache,
        ctx: RequestContext,
        explicit_id: Any,
        payload: Payload,
        ttl: int,
    ) -> None:
        query_key = self.query_key(ctx, explicit_id)
        if ctx.was_served(query_key):
            return
        await cache.store_value(query_key, payload, ttl)

    def _id_field(self, ctx: RequestContext) -> str:
        return self.settings.id_field or ctx.service_id_field or "id"


def _has_id(resource_id: Any) -> bool:
    return resource_id is not None and resource_id != ""


def _item_id(item: Any, id_field: str) -> Any:
    """Extract an item's own identifier from a mapping or an object."""
    if item is None:
        return None
    if isinstance(item, Mapping):
        return item.get(id_field)
    return getattr(item, id_field, None)


def _items(ctx: RequestContext) -> List[Any]:
    """Items affected by an operation, as a list."""
    data = payload_data(ctx.result)
    if data is None:
        return []
    if isinstance(data, (list, tuple)):
        return list(data)
    return [data]
