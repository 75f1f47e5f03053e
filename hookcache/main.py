"""FastAPI application exposing the cache administration endpoints."""

import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from hookcache.api import api_router
from hookcache.cache import CacheHook
from hookcache.config.redis import close_redis
from hookcache.config.settings import CacheSettings, get_settings
from hookcache.logging_config import configure_logging, get_logger
from hookcache.stores import StoreRegistry, build_store

logger = get_logger(name=__name__)


def create_app(settings: Optional[CacheSettings] = None) -> FastAPI:
    """Build the application; the store and hook are created on startup."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        # Fails fast on a missing store name before any store is built.
        registry = StoreRegistry()
        hook = CacheHook(settings, registry)

        registry.register(settings.store_name, await build_store(settings))
        app.state.store_registry = registry
        app.state.cache_hook = hook
        logger.info(
            "Cache hook ready (store='{}', backend={}, enabled={})",
            settings.store_name,
            settings.store_backend,
            settings.enabled,
        )
        try:
            yield
        finally:
            if settings.store_backend == "redis":
                await close_redis()

    app = FastAPI(title="hookcache", lifespan=lifespan)
    app.include_router(api_router)
    return app


if __name__ == "__main__":
    import uvicorn
    host = os.getenv("UVICORN_HOST", "0.0.0.0")
    port = int(os.getenv("UVICORN_PORT", "8000"))
    uvicorn.run(create_app(), host=host, port=port)
