"""
Dispute-related exceptions.
"""

from .base import MarketplaceException


class DisputeException(MarketplaceException):
    """Base exception for dispute-related errors."""
    pass


class DisputeNotFoundException(DisputeException):

    def __init__(self, dispute_id: int):
        super().__init__(
            f"Dispute {dispute_id} not found",
            details={'dispute_id': dispute_id}
        )
        self.dispute_id = dispute_id


class DisputeAlreadyOpenException(DisputeException):
    """Raised when an order already has an unresolved dispute."""

    def __init__(self, order_id: int, dispute_id: int):
        super().__init__(
            f"Order {order_id} already has an open dispute",
            details={'order_id': order_id, 'dispute_id': dispute_id}
        )
        self.order_id = order_id
        self.dispute_id = dispute_id


class DisputeNotAllowedException(DisputeException):
    """Raised when the order can't be disputed in its current state."""

    def __init__(self, order_id: int, order_status: str):
        super().__init__(
            f"Cannot open a dispute for order {order_id} in status '{order_status}'",
            details={'order_id': order_id, 'order_status': order_status}
        )
        self.order_id = order_id
        self.order_status = order_status


class InvalidDisputeTransitionException(DisputeException):

    def __init__(self, dispute_id: int | None, from_status: str, to_status: str):
        super().__init__(
            f"Cannot change dispute status from '{from_status}' to '{to_status}'",
            details={'dispute_id': dispute_id, 'from_status': from_status, 'to_status': to_status}
        )
        self.dispute_id = dispute_id
        self.from_status = from_status
        self.to_status = to_status
