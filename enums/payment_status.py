from enum import Enum


class PaymentStatus(str, Enum):
    """Payment state of an order."""
    UNPAID = "unpaid"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    """Payment method chosen at checkout."""
    MPESA = "mpesa"
    STRIPE = "stripe"
    PAYPAL = "paypal"
    COD = "cod"


class PaymentRecordMethod(str, Enum):
    """Method recorded on a settled payment."""
    CARD = "card"
    PAYPAL = "paypal"
    MPESA = "mpesa"
    BANK_TRANSFER = "bank_transfer"
    CASH_ON_DELIVERY = "cash_on_delivery"


class PaymentRecordStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PendingPaymentStatus(str, Enum):
    """State of an M-Pesa STK push awaiting its callback."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
