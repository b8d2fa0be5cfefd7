"""
Wallet exceptions.
"""

from .base import MarketplaceException


class WalletException(MarketplaceException):
    """Base exception for wallet errors."""
    pass


class WalletNotFoundException(WalletException):

    def __init__(self, user_id: int):
        super().__init__(
            f"Wallet for user {user_id} not found",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class InsufficientBalanceException(WalletException):
    """Raised when a withdrawal exceeds the wallet balance."""

    def __init__(self, user_id: int, required: float, available: float):
        super().__init__(
            f"Insufficient balance: required {required:.2f}, available {available:.2f}",
            details={'user_id': user_id, 'required': required, 'available': available}
        )
        self.user_id = user_id
        self.required = required
        self.available = available
