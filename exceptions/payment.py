"""
Payment-related exceptions.
"""

from .base import MarketplaceException


class PaymentException(MarketplaceException):
    """Base exception for payment-related errors."""
    pass


class PaymentNotFoundException(PaymentException):
    """Raised when payment record is not found."""

    def __init__(self, payment_id: int | None = None, checkout_request_id: str | None = None):
        if payment_id:
            message = f"Payment {payment_id} not found"
            details = {'payment_id': payment_id}
        elif checkout_request_id:
            message = f"Pending payment {checkout_request_id} not found"
            details = {'checkout_request_id': checkout_request_id}
        else:
            message = "Payment not found"
            details = {}
        super().__init__(message, details)
        self.payment_id = payment_id
        self.checkout_request_id = checkout_request_id


class InvalidPaymentMethodException(PaymentException):
    """Raised when the order's payment method doesn't fit the requested operation."""

    def __init__(self, order_id: int, method: str, expected: str):
        super().__init__(
            f"Order {order_id} uses payment method '{method}', expected '{expected}'",
            details={'order_id': order_id, 'method': method, 'expected': expected}
        )
        self.order_id = order_id
        self.method = method
        self.expected = expected


class PaymentAlreadyProcessedException(PaymentException):
    """Raised when trying to pay an order that is already paid or refunded."""

    def __init__(self, order_id: int, payment_status: str):
        super().__init__(
            f"Payment for order {order_id} is already '{payment_status}'",
            details={'order_id': order_id, 'payment_status': payment_status}
        )
        self.order_id = order_id
        self.payment_status = payment_status


class InvalidPaymentTransitionException(PaymentException):
    """Raised when the payment status machine rejects a change."""

    def __init__(self, order_id: int | None, from_status: str, to_status: str):
        super().__init__(
            f"Cannot change payment status from '{from_status}' to '{to_status}'",
            details={'order_id': order_id, 'from_status': from_status, 'to_status': to_status}
        )
        self.order_id = order_id
        self.from_status = from_status
        self.to_status = to_status


class InvalidPhoneNumberException(PaymentException):
    """Raised when a phone number can't be normalised to 2547XXXXXXXX."""

    def __init__(self, phone: str):
        super().__init__(
            "Invalid phone number format",
            details={'phone': phone}
        )
        self.phone = phone


class PaymentGatewayException(PaymentException):
    """Raised when the M-Pesa gateway rejects or fails a request."""

    def __init__(self, reason: str, response: dict | None = None):
        super().__init__(
            f"Payment gateway error: {reason}",
            details={'reason': reason, 'response': response or {}}
        )
        self.reason = reason
        self.response = response or {}


class InvalidCallbackSignatureException(PaymentException):
    """Raised when a gateway callback carries a bad HMAC signature."""

    def __init__(self):
        super().__init__("Invalid callback signature")
