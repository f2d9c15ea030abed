"""Redis client, configured from REDIS_URL.

Redis backs the shared rate-limit buckets so every API instance sees the
same counters.  When REDIS_URL is unset, redis_pool is None and the rate
limiter keeps its buckets in process memory instead.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis

from edustats.core.config import SETTINGS

logger = logging.getLogger(__name__)

if SETTINGS.redis_url:
    redis_pool: aioredis.Redis | None = aioredis.from_url(  # type: ignore[type-arg]
        SETTINGS.redis_url,
        decode_responses=True,
        max_connections=20,
    )
else:
    redis_pool = None


async def ping_redis() -> bool:
    if redis_pool is None:
        return False
    try:
        await redis_pool.ping()  # type: ignore[misc]
    except Exception:
        logger.warning("Redis ping failed", exc_info=True)
        return False
    return True


@asynccontextmanager
async def lifespan_redis():
    """Check connectivity at startup and close the pool at shutdown.

    An unreachable Redis is logged but does not stop the app from starting.
    """
    if redis_pool is None:
        logger.info("No REDIS_URL configured; rate limiting is per-process")
        yield
        return

    if await ping_redis():
        logger.info("Redis connected")
    else:
        logger.error("Redis unreachable on startup; requests may fail")

    yield

    await redis_pool.aclose()
    logger.info("Redis connection pool closed")
