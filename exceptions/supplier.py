"""
Supplier onboarding exceptions.
"""

from .base import MarketplaceException


class SupplierException(MarketplaceException):
    """Base exception for supplier-related errors."""
    pass


class SupplierNotFoundException(SupplierException):
    """Raised when supplier profile is not found."""

    def __init__(self, supplier_id: int | None = None, user_id: int | None = None):
        if supplier_id:
            message = f"Supplier {supplier_id} not found"
            details = {'supplier_id': supplier_id}
        elif user_id:
            message = f"Supplier profile for user {user_id} not found"
            details = {'user_id': user_id}
        else:
            message = "Supplier not found"
            details = {}
        super().__init__(message, details)
        self.supplier_id = supplier_id
        self.user_id = user_id


class SupplierAlreadyRegisteredException(SupplierException):
    """Raised when a user applies for a second supplier profile."""

    def __init__(self, user_id: int):
        super().__init__(
            f"User {user_id} already has a supplier profile",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class SupplierNotApprovedException(SupplierException):
    """Raised when a supplier that is not approved tries to log in or sell."""

    def __init__(self, supplier_id: int, status: str):
        super().__init__(
            "Your supplier account is awaiting admin approval",
            details={'supplier_id': supplier_id, 'status': status}
        )
        self.supplier_id = supplier_id
        self.status = status
