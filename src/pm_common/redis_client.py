"""Redis client factory: used for domain event fan-out only.

Market state and balances live in-process; Redis carries a JSON copy of each
committed event on settings.EVENTS_CHANNEL for indexers and dashboards.
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config.settings import settings

logger = logging.getLogger(__name__)

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Get or create the Redis connection pool."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            health_check_interval=30,
        )
    return _redis_pool


async def ping_redis(client: aioredis.Redis) -> bool:
    """True if Redis answers. Events keep queueing in the outbox while it does not."""
    try:
        await client.ping()
    except RedisError as exc:
        logger.warning("Redis unreachable at %s: %s", settings.REDIS_URL, exc)
        return False
    return True


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
