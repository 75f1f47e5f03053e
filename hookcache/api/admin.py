"""Administrative cache endpoints: health, manual invalidation and clears."""

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from hookcache.cache import CacheHook
from hookcache.exceptions import ConfigurationError, StoreUnavailable
from hookcache.logging_config import get_logger

logger = get_logger(name=__name__)

router = APIRouter(prefix="/v1/cache", tags=["Cache"])


class CacheHealth(BaseModel):
    status: str  # "healthy" or "unhealthy"
    enabled: bool
    store_name: str
    store_connected: bool


class TouchResponse(BaseModel):
    key: str
    touched: bool


class ClearResponse(BaseModel):
    cleared: bool
    key: str | None = None


def get_hook(request: Request) -> CacheHook:
    """Dependency returning the hook created by the application lifespan."""
    hook = getattr(request.app.state, "cache_hook", None)
    if hook is None:
        raise HTTPException(status_code=503, detail="Cache hook is not initialized")
    return hook


@router.get("/health", response_model=CacheHealth)
async def cache_health(hook: CacheHook = Depends(get_hook)):
    """Check that the configured store is registered and answers a read."""
    connected = False
    try:
        await hook.cache.store.get(hook.service_key_for("__health__"))
        connected = True
    except (ConfigurationError, StoreUnavailable) as e:
        logger.warning("Cache store health check failed: {}", e)

    return CacheHealth(
        status="healthy" if connected else "unhealthy",
        enabled=hook.settings.enabled,
        store_name=hook.settings.store_name,
        store_connected=connected,
    )


@router.post("/touch/{service}", response_model=TouchResponse)
async def touch_service(service: str, hook: CacheHook = Depends(get_hook)):
    """Invalidate every cached value of a service."""
    key = hook.service_key_for(service)
    touched = await hook.cache.touch_scope(key, hook.settings.watermark_ttl)
    logger.info("Manually touched service '{}' (touched={})", service, touched)
    return TouchResponse(key=key, touched=touched)


@router.post("/touch/{service}/{resource_id}", response_model=TouchResponse)
async def touch_item(service: str, resource_id: str, hook: CacheHook = Depends(get_hook)):
    """Invalidate every cached value of one item of a service."""
    key = hook.id_key_for(service, resource_id)
    touched = await hook.cache.touch_scope(key, hook.settings.watermark_ttl)
    logger.info("Manually touched '{}' id '{}' (touched={})", service, resource_id, touched)
    return TouchResponse(key=key, touched=touched)


@router.delete("/keys/{key:path}", response_model=ClearResponse)
async def delete_key(key: str, hook: CacheHook = Depends(get_hook)):
    """Remove one key from the store."""
    try:
        await hook.cache.store.delete(key)
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    logger.info("Deleted cache key {}", key)
    return ClearResponse(cleared=True, key=key)


@router.post("/clear", response_model=ClearResponse)
async def clear_cache(hook: CacheHook = Depends(get_hook)):
    """Remove every entry from the store."""
    try:
        await hook.cache.store.clear()
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    logger.info("Cleared cache store '{}'", hook.settings.store_name)
    return ClearResponse(cleared=True)
