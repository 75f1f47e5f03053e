"""Operation decorator that runs the cache hook around a service call.

Usage:
    from hookcache.cache import cached_operation

    @cached_operation(hook)
    async def get_user(ctx: RequestContext) -> Payload:
        ...
"""

from __future__ import annotations

import functools
from typing import Awaitable, Callable, Optional

from hookcache.logging_config import get_logger

from .context import Payload, Phase, RequestContext
from .hook import CacheHook

logger = get_logger(name=__name__)


def cached_operation(
    hook: CacheHook,
) -> Callable[[Callable[[RequestContext], Awaitable[Optional[Payload]]]], Callable]:
    """Decorator wrapping an async operation with the Pre and Post hook phases.

    Args:
        hook: Cache hook to run before and after the operation.

    Notes:
        - The operation receives the request context and returns an
          ``Envelope`` or ``Raw`` result (or None).
        - When the Pre phase serves the result from cache, the operation is
          not called at all.
        - Exceptions from the operation propagate; the Post phase is skipped,
          but watermarks advanced in the Pre phase stay advanced.
    """
    def decorator(func: Callable[[RequestContext], Awaitable[Optional[Payload]]]) -> Callable:
        @functools.wraps(func)
        async def wrapper(ctx: RequestContext) -> Optional[Payload]:
            ctx.phase = Phase.PRE
            await hook(ctx)

            if ctx.served_from_cache:
                logger.debug("Served {} {} from cache", ctx.operation.value, ctx.resource_path)
            else:
                ctx.result = await func(ctx)

            ctx.phase = Phase.POST
            await hook(ctx)
            return ctx.result

        wrapper._cache_hook = hook
        return wrapper
    return decorator
