"""Redis client construction and connection checks for briefly."""
from __future__ import annotations

import logging

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from briefly.core.settings import Settings

logger = logging.getLogger(__name__)


def create_redis_client(settings: Settings) -> redis.Redis:
    """Build a pooled Redis client owned by whoever calls this (API lifespan or worker runtime)."""
    pool = ConnectionPool.from_url(
        settings.redis_url,
        decode_responses=True,
        max_connections=20,
        retry_on_timeout=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    logger.info(f"Created Redis connection pool: {settings.redis_url}")
    return redis.Redis(connection_pool=pool)


async def ping_redis(client: redis.Redis) -> bool:
    """Test Redis connection and return True if successful."""
    try:
        result = await client.ping()
        return result is True
    except Exception as e:
        logger.error(f"Redis connection test failed: {e}")
        return False


async def close_redis_client(client: redis.Redis) -> None:
    """Close the client and disconnect its pool."""
    await client.aclose()
    await client.connection_pool.disconnect()
    logger.info("Redis connection pool closed")
