"""
Rate Limiting

Protects the API from abuse using Redis-based fixed-window counters.

Features:
- Per-user limits for order creation, refund requests, shipping estimates
  and payment initiation/status checks
- Configurable limits via environment variables
- Automatic expiry using Redis TTL
- Fails open when Redis is unavailable

Configuration:
- MAX_ORDERS_PER_USER_PER_HOUR
- MAX_REFUND_REQUESTS_PER_WINDOW / REFUND_REQUEST_WINDOW_SECONDS
- MAX_SHIPPING_ESTIMATES_PER_WINDOW / SHIPPING_ESTIMATE_WINDOW_SECONDS
- MAX_PAYMENT_INITIATIONS_PER_WINDOW / PAYMENT_INITIATION_WINDOW_SECONDS
- MAX_PAYMENT_CHECKS_PER_MINUTE
"""

import logging

from redis.asyncio import Redis
from redis.exceptions import RedisError

import config
from enums.rate_limit_operation import RateLimitOperation
from exceptions.base import RateLimitExceededException

logger = logging.getLogger(__name__)


def get_operation_limit(operation: RateLimitOperation) -> tuple[int, int]:
    """(max_count, window_seconds) for an operation, read from config at call time."""
    limits = {
        RateLimitOperation.ORDER_CREATE: (config.MAX_ORDERS_PER_USER_PER_HOUR, 3600),
        RateLimitOperation.REFUND_REQUEST: (config.MAX_REFUND_REQUESTS_PER_WINDOW, config.REFUND_REQUEST_WINDOW_SECONDS),
        RateLimitOperation.SHIPPING_ESTIMATE: (config.MAX_SHIPPING_ESTIMATES_PER_WINDOW, config.SHIPPING_ESTIMATE_WINDOW_SECONDS),
        RateLimitOperation.PAYMENT_INITIATE: (config.MAX_PAYMENT_INITIATIONS_PER_WINDOW, config.PAYMENT_INITIATION_WINDOW_SECONDS),
        RateLimitOperation.PAYMENT_CHECK: (config.MAX_PAYMENT_CHECKS_PER_MINUTE, 60),
    }
    return limits[operation]


class RateLimiter:
    """
    Redis-based rate limiter for specific operations.

    Usage:
        limiter = RateLimiter(redis)
        await limiter.check(RateLimitOperation.REFUND_REQUEST, user_id)
    """

    def __init__(self, redis: Redis):
        self.redis = redis

    async def is_rate_limited(
        self,
        operation: str,
        key: int | str,
        max_count: int,
        window_seconds: int
    ) -> tuple[bool, int, int]:
        """
        Check if the key has exceeded rate limit for an operation.

        Args:
            operation: Operation name (e.g., "ORDER_CREATE")
            key: User ID (or client IP for anonymous calls)
            max_count: Maximum allowed operations in time window
            window_seconds: Time window in seconds

        Returns:
            Tuple of (is_limited, current_count, remaining_count)
        """
        redis_key = f"rate_limit:{operation}:{key}"

        try:
            current_count = await self.redis.incr(redis_key)

            # Set expiry on first increment
            if current_count == 1:
                await self.redis.expire(redis_key, window_seconds)

            is_limited = current_count > max_count
            remaining = max(0, max_count - current_count)

            if is_limited:
                ttl = await self.redis.ttl(redis_key)
                logger.warning(
                    f"Rate limit exceeded: key={key}, operation={operation}, "
                    f"count={current_count}/{max_count}, resets_in={ttl}s"
                )

            return is_limited, current_count, remaining

        except (RedisError, OSError) as e:
            # If Redis fails, don't block the operation (fail open)
            logger.error(f"Rate limiter error: {e}")
            return False, 0, max_count

    async def check(self, operation: RateLimitOperation, key: int | str) -> int:
        """
        Count one call of the operation and raise when over the limit.

        Returns:
            Remaining calls in the current window

        Raises:
            RateLimitExceededException
        """
        max_count, window_seconds = get_operation_limit(operation)
        is_limited, _, remaining = await self.is_rate_limited(operation.value, key, max_count, window_seconds)
        if is_limited:
            retry_after = await self.get_remaining_time(operation.value, key)
            raise RateLimitExceededException(operation.value, retry_after or window_seconds)
        return remaining

    async def reset_limit(self, operation: str, key: int | str):
        redis_key = f"rate_limit:{operation}:{key}"
        await self.redis.delete(redis_key)
        logger.info(f"Rate limit reset: key={key}, operation={operation}")

    async def get_remaining_time(self, operation: str, key: int | str) -> int:
        """Remaining seconds until reset (0 if not rate limited)."""
        redis_key = f"rate_limit:{operation}:{key}"
        try:
            ttl = await self.redis.ttl(redis_key)
        except (RedisError, OSError) as e:
            logger.error(f"Rate limiter error: {e}")
            return 0
        return ttl if ttl > 0 else 0
