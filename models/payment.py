from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Float, CheckConstraint
from sqlalchemy import Enum as SQLEnum

import config
from enums.payment_status import PaymentRecordMethod, PaymentRecordStatus
from models.base import Base


def _get_callback_url() -> str:
    """
    Get callback URL for M-Pesa STK push results.

    Uses lazy evaluation so the value is read from config at request time.
    """
    if not config.MPESA_CALLBACK_URL:
        raise ValueError("MPESA_CALLBACK_URL is not configured")
    return config.MPESA_CALLBACK_URL


class Payment(Base):
    """Settled (or refunded) payment of an order. One row per provider transaction."""
    __tablename__ = 'payments'

    id = Column(Integer, primary_key=True, unique=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    method = Column(SQLEnum(PaymentRecordMethod), nullable=False)
    amount = Column(Float, nullable=False)
    status = Column(SQLEnum(PaymentRecordStatus), nullable=False, default=PaymentRecordStatus.PENDING)
    transaction_id = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (
        CheckConstraint('amount >= 0', name='check_payment_amount_positive'),
    )


class PaymentDTO(BaseModel):
    id: int | None = None
    order_id: int | None = None
    user_id: int | None = None
    method: PaymentRecordMethod | None = None
    amount: float | None = None
    status: PaymentRecordStatus | None = None
    transaction_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StkPushRequestDTO(BaseModel):
    """Lipa Na M-Pesa Online (STK push) request body."""
    BusinessShortCode: str
    Password: str
    Timestamp: str
    TransactionType: str = "CustomerPayBillOnline"
    Amount: int
    PartyA: str
    PartyB: str
    PhoneNumber: str
    CallBackURL: str = Field(default_factory=_get_callback_url)
    AccountReference: str
    TransactionDesc: str


class StkPushResponseDTO(BaseModel):
    MerchantRequestID: str | None = None
    CheckoutRequestID: str | None = None
    ResponseCode: str | None = None
    ResponseDescription: str | None = None
    CustomerMessage: str | None = None


class PaymentStatusDTO(BaseModel):
    """Answer to the buyer's payment status poll."""
    order_id: int
    order_status: str
    payment_status: str
    payment_method: str
    transaction_id: str | None = None
    paid_at: datetime | None = None
    pending_payment_status: str | None = None
    failed_reason: str | None = None


class MpesaPaymentRequest(BaseModel):
    order_id: int
    phone: str = Field(min_length=9)


class MpesaPaymentInitiatedDTO(BaseModel):
    order_id: int
    checkout_request_id: str
    merchant_request_id: str | None = None
    customer_message: str | None = None


class CallbackMetadataItemDTO(BaseModel):
    Name: str
    Value: str | int | float | None = None


class CallbackMetadataDTO(BaseModel):
    Item: list[CallbackMetadataItemDTO] = []


class StkCallback(BaseModel):
    MerchantRequestID: str | None = None
    CheckoutRequestID: str
    ResultCode: int
    ResultDesc: str | None = None
    CallbackMetadata: CallbackMetadataDTO | None = None

    def metadata_value(self, name: str):
        if self.CallbackMetadata is None:
            return None
        for item in self.CallbackMetadata.Item:
            if item.Name == name:
                return item.Value
        return None


class StkCallbackBody(BaseModel):
    stkCallback: StkCallback


class MpesaCallbackDTO(BaseModel):
    """Daraja STK push result: {"Body": {"stkCallback": {...}}}"""
    Body: StkCallbackBody
