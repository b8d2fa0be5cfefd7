"""
Unit Tests: RateLimiter (middleware/rate_limit.py)

Fixed-window counters in Redis, tested with fakeredis.
"""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

import config
from enums.rate_limit_operation import RateLimitOperation
from exceptions.base import RateLimitExceededException
from middleware.rate_limit import RateLimiter, get_operation_limit


class TestRateLimiter:

    @pytest.mark.asyncio
    async def test_allows_up_to_limit(self, redis_client):
        limiter = RateLimiter(redis_client)

        remaining = [await limiter.check(RateLimitOperation.REFUND_REQUEST, 1)
                     for _ in range(config.MAX_REFUND_REQUESTS_PER_WINDOW)]

        assert remaining == [4, 3, 2, 1, 0]

    @pytest.mark.asyncio
    async def test_raises_over_limit_with_retry_after(self, redis_client):
        limiter = RateLimiter(redis_client)
        for _ in range(config.MAX_REFUND_REQUESTS_PER_WINDOW):
            await limiter.check(RateLimitOperation.REFUND_REQUEST, 1)

        with pytest.raises(RateLimitExceededException) as exc_info:
            await limiter.check(RateLimitOperation.REFUND_REQUEST, 1)

        assert 0 < exc_info.value.retry_after_seconds <= config.REFUND_REQUEST_WINDOW_SECONDS
        assert exc_info.value.operation == "refund_request"

    @pytest.mark.asyncio
    async def test_window_expiry_is_set_once(self, redis_client):
        limiter = RateLimiter(redis_client)

        await limiter.check(RateLimitOperation.SHIPPING_ESTIMATE, 3)
        await limiter.check(RateLimitOperation.SHIPPING_ESTIMATE, 3)

        ttl = await redis_client.ttl("rate_limit:shipping_estimate:3")
        assert 0 < ttl <= config.SHIPPING_ESTIMATE_WINDOW_SECONDS
        assert await redis_client.get("rate_limit:shipping_estimate:3") == "2"

    @pytest.mark.asyncio
    async def test_keys_and_operations_are_independent(self, redis_client):
        limiter = RateLimiter(redis_client)
        for _ in range(config.MAX_PAYMENT_INITIATIONS_PER_WINDOW):
            await limiter.check(RateLimitOperation.PAYMENT_INITIATE, 1)

        await limiter.check(RateLimitOperation.PAYMENT_INITIATE, 2)
        await limiter.check(RateLimitOperation.PAYMENT_CHECK, 1)

    @pytest.mark.asyncio
    async def test_reset(self, redis_client):
        limiter = RateLimiter(redis_client)
        for _ in range(config.MAX_REFUND_REQUESTS_PER_WINDOW):
            await limiter.check(RateLimitOperation.REFUND_REQUEST, 1)

        await limiter.reset_limit(RateLimitOperation.REFUND_REQUEST.value, 1)

        assert await limiter.check(RateLimitOperation.REFUND_REQUEST, 1) == 4
        assert await limiter.get_remaining_time("order_create", 1) == 0

    @pytest.mark.asyncio
    async def test_fails_open_when_redis_is_down(self):
        redis = AsyncMock()
        redis.incr.side_effect = RedisConnectionError("Connection refused")
        limiter = RateLimiter(redis)

        for _ in range(50):
            await limiter.check(RateLimitOperation.ORDER_CREATE, 1)

    def test_limits_follow_config(self):
        assert get_operation_limit(RateLimitOperation.ORDER_CREATE) == (config.MAX_ORDERS_PER_USER_PER_HOUR, 3600)
        assert get_operation_limit(RateLimitOperation.PAYMENT_CHECK) == (config.MAX_PAYMENT_CHECKS_PER_MINUTE, 60)
