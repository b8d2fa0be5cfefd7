"""
Order-related exceptions.
"""

from .base import MarketplaceException


class OrderException(MarketplaceException):
    """Base exception for order-related errors."""
    pass


class OrderNotFoundException(OrderException):
    """Raised when order is not found in database."""

    def __init__(self, order_id: int):
        super().__init__(
            f"Order {order_id} not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class EmptyOrderException(OrderException):
    """Raised when an order is created without items."""

    def __init__(self):
        super().__init__("No order items provided")


class InvalidOrderStateException(OrderException):
    """Raised when order is in invalid state for requested operation."""

    def __init__(self, order_id: int, current_state: str, required_state: str):
        super().__init__(
            f"Order {order_id} is in state '{current_state}', required '{required_state}'",
            details={'order_id': order_id, 'current_state': current_state, 'required_state': required_state}
        )
        self.order_id = order_id
        self.current_state = current_state
        self.required_state = required_state


class InvalidOrderTransitionException(OrderException):
    """Raised when the order state machine rejects a status change."""

    def __init__(self, order_id: int | None, from_status: str, to_status: str, actor: str):
        super().__init__(
            f"Cannot change order status from '{from_status}' to '{to_status}' as {actor}",
            details={'order_id': order_id, 'from_status': from_status, 'to_status': to_status, 'actor': actor}
        )
        self.order_id = order_id
        self.from_status = from_status
        self.to_status = to_status
        self.actor = actor


class OrderOwnershipException(OrderException):
    """Raised when user attempts to access/modify order they don't own."""

    def __init__(self, order_id: int, user_id: int):
        super().__init__(
            f"User {user_id} does not have permission to access order {order_id}",
            details={'order_id': order_id, 'user_id': user_id}
        )
        self.order_id = order_id
        self.user_id = user_id


class ProductNotInOrderException(OrderException):
    """Raised when a product referenced for review/dispute is not part of the order."""

    def __init__(self, order_id: int, product_id: int):
        super().__init__(
            f"Product {product_id} is not part of order {order_id}",
            details={'order_id': order_id, 'product_id': product_id}
        )
        self.order_id = order_id
        self.product_id = product_id


class ProductSupplierMismatchException(OrderException):
    """Raised when an ordered product does not belong to the order's supplier."""

    def __init__(self, product_id: int, supplier_id: int):
        super().__init__(
            f"Product {product_id} is not sold by supplier {supplier_id}",
            details={'product_id': product_id, 'supplier_id': supplier_id}
        )
        self.product_id = product_id
        self.supplier_id = supplier_id


class RefundNotAllowedException(OrderException):
    """Raised when a refund request or decision is not possible for the order."""

    def __init__(self, order_id: int, reason: str):
        super().__init__(
            f"Refund not allowed for order {order_id}: {reason}",
            details={'order_id': order_id, 'reason': reason}
        )
        self.order_id = order_id
        self.reason = reason


class EscrowReleaseException(OrderException):
    """Raised when escrow of an order cannot be released."""

    def __init__(self, order_id: int, reason: str):
        super().__init__(
            f"Cannot release escrow for order {order_id}: {reason}",
            details={'order_id': order_id, 'reason': reason}
        )
        self.order_id = order_id
        self.reason = reason
