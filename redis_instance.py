"""
Redis Client Singleton

Provides a single shared Redis client for the entire application
(rate limiting, realtime presence and pub/sub fan-out).

Usage:
    from redis_instance import get_redis
    redis = get_redis()
    await redis.incr(key)

Note: The client is created lazily when first accessed.
"""

from redis.asyncio import Redis

import config

_redis_instance = None


def get_redis() -> Redis:
    """
    Get the singleton Redis client.

    Returns:
        Redis: The shared client
    """
    global _redis_instance
    if _redis_instance is None:
        _redis_instance = Redis(
            host=config.REDIS_HOST,
            port=config.REDIS_PORT,
            password=config.REDIS_PASSWORD,
            decode_responses=True
        )
    return _redis_instance


async def close_redis():
    """
    Close the Redis connection pool.

    Should be called during application shutdown.
    """
    global _redis_instance
    if _redis_instance is not None:
        await _redis_instance.aclose()
        _redis_instance = None
