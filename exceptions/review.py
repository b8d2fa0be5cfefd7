"""
Review-related exceptions.
"""

from .base import MarketplaceException


class ReviewException(MarketplaceException):
    """Base exception for review-related errors."""
    pass


class ReviewNotFoundException(ReviewException):

    def __init__(self, review_id: int):
        super().__init__(
            f"Review {review_id} not found",
            details={'review_id': review_id}
        )
        self.review_id = review_id


class DuplicateReviewException(ReviewException):
    """Raised when the user already reviewed this product for this order."""

    def __init__(self, order_id: int, product_id: int):
        super().__init__(
            "You have already reviewed this product for this order",
            details={'order_id': order_id, 'product_id': product_id}
        )
        self.order_id = order_id
        self.product_id = product_id


class ReviewNotAllowedException(ReviewException):
    """Raised when the order isn't delivered yet."""

    def __init__(self, order_id: int, order_status: str):
        super().__init__(
            "You can only review delivered orders",
            details={'order_id': order_id, 'order_status': order_status}
        )
        self.order_id = order_id
        self.order_status = order_status
