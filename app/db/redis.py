"""Redis client for the authorization session store.

Built only when REDIS_URL is set.  Without it ``redis_pool`` is None and
pending authorizations live in InMemorySessionStore, which is enough for
a single process but not for several instances behind a load balancer:
Exact's callback may land on an instance that never saw the init-auth.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from app.core.config import SETTINGS

logger = logging.getLogger(__name__)

redis_pool: aioredis.Redis | None = (  # type: ignore[type-arg]
    aioredis.from_url(SETTINGS.redis_url, decode_responses=True, max_connections=20)
    if SETTINGS.redis_url
    else None
)


@asynccontextmanager
async def lifespan_redis() -> AsyncGenerator[None, None]:
    """Ping Redis on startup, close the pool on shutdown."""
    if redis_pool is None:
        logger.info("No REDIS_URL configured; authorization sessions kept in memory")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]
    except RedisError:
        # Start anyway; /ready reports the outage until Redis is back.
        logger.exception("Redis unreachable on startup")
    else:
        logger.info("Redis connected")

    try:
        yield
    finally:
        await redis_pool.aclose()
        logger.info("Redis connection pool closed")
