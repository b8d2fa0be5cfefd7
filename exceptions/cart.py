"""
Cart and wishlist exceptions.
"""

from .base import MarketplaceException


class CartException(MarketplaceException):
    """Base exception for cart-related errors."""
    pass


class EmptyCartException(CartException):
    """Raised when checking out an empty cart."""

    def __init__(self, user_id: int):
        super().__init__(
            "Cart is empty",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class CartItemNotFoundException(CartException):
    """Raised when cart item is not found."""

    def __init__(self, product_id: int, user_id: int | None = None):
        super().__init__(
            f"Product {product_id} is not in the cart",
            details={'product_id': product_id, 'user_id': user_id}
        )
        self.product_id = product_id
        self.user_id = user_id


class InvalidQuantityException(CartException):

    def __init__(self, quantity: int):
        super().__init__(
            f"Invalid quantity: {quantity}",
            details={'quantity': quantity}
        )
        self.quantity = quantity


class WishlistItemNotFoundException(CartException):

    def __init__(self, product_id: int):
        super().__init__(
            f"Product {product_id} is not in the wishlist",
            details={'product_id': product_id}
        )
        self.product_id = product_id
