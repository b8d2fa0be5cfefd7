from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Float
from sqlalchemy import Enum as SQLEnum

from enums.payment_status import PendingPaymentStatus
from models.base import Base


class PendingPayment(Base):
    __tablename__ = 'pending_payments'

    id = Column(Integer, primary_key=True)
    checkout_request_id = Column(String, nullable=False, unique=True)
    merchant_request_id = Column(String, nullable=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete="CASCADE"), nullable=False, index=True)
    phone_number = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    status = Column(SQLEnum(PendingPaymentStatus), nullable=False, default=PendingPaymentStatus.PENDING)
    failed_reason = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class PendingPaymentDTO(BaseModel):
    id: int | None = None
    checkout_request_id: str | None = None
    merchant_request_id: str | None = None
    order_id: int | None = None
    phone_number: str | None = None
    amount: float | None = None
    status: PendingPaymentStatus | None = None
    failed_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
