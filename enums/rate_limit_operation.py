from enum import Enum


class RateLimitOperation(str, Enum):
    """
    Rate limit operation types.

    Each operation has its own independent rate limit counter.
    """

    # Order operations
    ORDER_CREATE = "order_create"
    """
    Rate limit for order creation and cart checkout.
    Config: MAX_ORDERS_PER_USER_PER_HOUR
    """

    REFUND_REQUEST = "refund_request"
    """
    Rate limit for refund requests.
    Config: MAX_REFUND_REQUESTS_PER_WINDOW / REFUND_REQUEST_WINDOW_SECONDS
    Default: 5 requests per 15 minutes
    """

    SHIPPING_ESTIMATE = "shipping_estimate"
    """
    Rate limit for shipping estimates.
    Config: MAX_SHIPPING_ESTIMATES_PER_WINDOW / SHIPPING_ESTIMATE_WINDOW_SECONDS
    Default: 10 requests per 10 minutes
    """

    # Payment operations
    PAYMENT_INITIATE = "payment_initiate"
    """
    Rate limit for M-Pesa STK push initiation.
    Prevents spamming the buyer's phone with payment prompts.
    """

    PAYMENT_CHECK = "payment_check"
    """
    Rate limit for payment status polling.
    Config: MAX_PAYMENT_CHECKS_PER_MINUTE
    """
