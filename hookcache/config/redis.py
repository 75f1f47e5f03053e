"""Redis async connection management.

Provides the async Redis client backing ``RedisStore`` via redis-py.
"""

from redis.asyncio import Redis

from hookcache.logging_config import get_logger

logger = get_logger(name=__name__)

_client: Redis | None = None


async def init_redis(url: str) -> Redis:
    """Initialize the global async Redis client and verify connectivity.

    Args:
        url: Redis connection URL (e.g., redis://localhost:6379)
    """
    global _client
    _client = Redis.from_url(
        url,
        decode_responses=True,
    )
    await _client.ping()
    logger.info("Redis client initialized and connected: {}", url)
    return _client


async def close_redis() -> None:
    """Close the Redis client connection."""
    global _client
    if _client is not None:
        await _client.aclose()
        logger.info("Redis client closed")
    _client = None
