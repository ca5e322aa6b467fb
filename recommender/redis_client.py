"""Async Redis connection pool for the similarity index.

Neighbor lists are stored as Redis lists under ``{index_name}:{id}`` and read
concurrently by many in-flight lookups, so one pooled ``redis.asyncio``
client is shared by the whole process.

Usage:
    await init_redis_pool()

    redis = get_redis_pool()
    neighbors = await redis.lrange("songs_collab_v1:20001", 0, 9)

    await close_redis_pool()
"""

import os
import logging
from typing import Optional

from redis import asyncio as aioredis
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


class RedisConfig:
    """Configuration for Redis connection pool.

    Loads settings from environment variables with sensible defaults.
    """

    def __init__(self):
        self.host = os.getenv("REDIS_HOST", "localhost")
        self.port = int(os.getenv("REDIS_PORT", "6379"))
        self.db = int(os.getenv("REDIS_DB", "0"))
        self.password = os.getenv("REDIS_PASSWORD", None)
        self.max_connections = int(os.getenv("REDIS_MAX_CONNECTIONS", "50"))
        self.socket_timeout = int(os.getenv("REDIS_SOCKET_TIMEOUT", "5"))
        self.socket_connect_timeout = int(os.getenv("REDIS_SOCKET_CONNECT_TIMEOUT", "5"))
        self.retry_on_timeout = os.getenv("REDIS_RETRY_ON_TIMEOUT", "true").lower() == "true"

    def get_url(self) -> str:
        credentials = f":{self.password}@" if self.password else ""
        return f"redis://{credentials}{self.host}:{self.port}/{self.db}"

    def __repr__(self) -> str:
        """String representation (safe - no password)."""
        return (
            f"RedisConfig("
            f"host={self.host}, "
            f"port={self.port}, "
            f"db={self.db}, "
            f"max_connections={self.max_connections})"
        )


# Global async Redis pool singleton
_redis_pool: Optional[aioredis.Redis] = None
_redis_config: Optional[RedisConfig] = None


async def init_redis_pool() -> aioredis.Redis:
    """Initialize the global async Redis connection pool.

    Returns:
        aioredis.Redis: Client backed by a connection pool

    Notes:
        - Safe to call multiple times (returns existing pool if already initialized)
        - Responses are decoded to str
    """
    global _redis_pool, _redis_config

    if _redis_pool is not None:
        logger.info("Redis pool already initialized, returning existing pool")
        return _redis_pool

    _redis_config = RedisConfig()
    logger.info(f"Initializing Redis pool with config: {_redis_config}")

    try:
        _redis_pool = aioredis.from_url(
            _redis_config.get_url(),
            max_connections=_redis_config.max_connections,
            socket_timeout=_redis_config.socket_timeout,
            socket_connect_timeout=_redis_config.socket_connect_timeout,
            retry_on_timeout=_redis_config.retry_on_timeout,
            decode_responses=True,
        )

        await _redis_pool.ping()
        logger.info(f"✓ Redis pool initialized ({_redis_config.host}:{_redis_config.port})")

        return _redis_pool

    except Exception as e:
        logger.error(f"✗ Failed to initialize Redis pool: {e}", exc_info=True)
        _redis_pool = None
        _redis_config = None
        raise


def get_redis_pool() -> aioredis.Redis:
    """Get the global async Redis client.

    Raises:
        RuntimeError: If pool has not been initialized (call init_redis_pool() first)
    """
    if _redis_pool is None:
        raise RuntimeError(
            "Redis pool has not been initialized. "
            "Call init_redis_pool() during application startup."
        )
    return _redis_pool


async def close_redis_pool():
    """Close the global async Redis connection pool (no-op if not initialized)."""
    global _redis_pool, _redis_config

    if _redis_pool is None:
        logger.info("Redis pool is not initialized, nothing to close")
        return

    try:
        await _redis_pool.aclose()
        logger.info("✓ Redis pool closed successfully")
    except Exception as e:
        logger.error(f"Error closing Redis pool: {e}", exc_info=True)
    finally:
        _redis_pool = None
        _redis_config = None


async def check_redis_health() -> dict:
    """
    Check the health of the Redis connection pool.

    Returns:
        dict: status ("healthy", "degraded" or "unavailable"), with an
        error message when unhealthy
    """
    if _redis_pool is None:
        return {
            "status": "unavailable",
            "error": "Pool not initialized"
        }

    try:
        await _redis_pool.ping()

        return {"status": "healthy"}

    except Exception as e:
        logger.error(f"Redis health check failed: {e}", exc_info=True)
        return {"status": "degraded", "error": str(e)}
