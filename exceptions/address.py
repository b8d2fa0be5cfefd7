"""
Address book exceptions.
"""

from .base import MarketplaceException


class AddressException(MarketplaceException):
    """Base exception for address errors."""
    pass


class AddressNotFoundException(AddressException):
    """Raised when address is missing or owned by another user."""

    def __init__(self, address_id: int):
        super().__init__(
            f"Address {address_id} not found",
            details={'address_id': address_id}
        )
        self.address_id = address_id
