"""
Coupon exceptions.
"""

from .base import MarketplaceException


class CouponException(MarketplaceException):
    """Base exception for coupon errors."""
    pass


class CouponNotFoundException(CouponException):

    def __init__(self, code: str | int):
        super().__init__(
            "Invalid coupon code",
            details={'code': code}
        )
        self.code = code


class DuplicateCouponException(CouponException):

    def __init__(self, code: str):
        super().__init__(
            f"Coupon {code} already exists",
            details={'code': code}
        )
        self.code = code


class CouponNotApplicableException(CouponException):
    """Raised when coupon is inactive, expired, exhausted or below its minimum."""

    def __init__(self, code: str, reason: str):
        super().__init__(
            reason,
            details={'code': code}
        )
        self.code = code
        self.reason = reason
