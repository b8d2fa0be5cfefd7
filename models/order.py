from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, String, CheckConstraint, Enum as SQLEnum, Text
from sqlalchemy.orm import relationship

from enums.escrow_status import EscrowStatus
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus, PaymentMethod
from enums.refund_status import RefundStatus
from enums.shipping_method import ShippingMethod
from models.base import Base
from models.orderItem import OrderItemDTO


class Order(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True, unique=True)
    buyer_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    supplier_id = Column(Integer, ForeignKey('suppliers.id'), nullable=False, index=True)
    status = Column(SQLEnum(OrderStatus), nullable=False, default=OrderStatus.PENDING)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Totals
    subtotal = Column(Float, nullable=False)
    discount_amount = Column(Float, nullable=False, default=0.0)
    coupon_code = Column(String, nullable=True)
    shipping_method = Column(SQLEnum(ShippingMethod), nullable=False, default=ShippingMethod.STANDARD)
    shipping_cost = Column(Float, nullable=False, default=0.0)
    total_amount = Column(Float, nullable=False)
    total_commission = Column(Float, nullable=False, default=0.0)
    total_escrow_held = Column(Float, nullable=False, default=0.0)

    # Delivery details
    delivery_address = Column(String, nullable=False)
    delivery_city = Column(String, nullable=False)
    delivery_phone = Column(String, nullable=False)
    delivery_provider = Column(String, nullable=False, default="manual")
    shipped_at = Column(DateTime, nullable=True)
    delivered_at = Column(DateTime, nullable=True)

    # Payment
    payment_method = Column(SQLEnum(PaymentMethod), nullable=False)
    payment_status = Column(SQLEnum(PaymentStatus), nullable=False, default=PaymentStatus.UNPAID)
    transaction_id = Column(String, nullable=True)
    paid_at = Column(DateTime, nullable=True)

    # Cancellation
    cancelled_at = Column(DateTime, nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    # Refund request (buyer initiated, admin processed)
    refund_status = Column(SQLEnum(RefundStatus), nullable=True)
    refund_reason = Column(Text, nullable=True)
    refund_requested_at = Column(DateTime, nullable=True)
    refund_processed_at = Column(DateTime, nullable=True)
    refund_processed_by = Column(Integer, nullable=True)
    refunded_at = Column(DateTime, nullable=True)

    # Escrow release (supplier payout)
    escrow_status = Column(SQLEnum(EscrowStatus), nullable=False, default=EscrowStatus.HELD)
    released_at = Column(DateTime, nullable=True)
    released_by = Column(Integer, nullable=True)  # Admin user id, NULL for automatic release

    items = relationship('OrderItem', back_populates='order', lazy='selectin', cascade='all, delete-orphan')

    __table_args__ = (
        CheckConstraint('total_amount >= 0', name='check_order_total_amount_positive'),
        CheckConstraint('subtotal >= 0', name='check_order_subtotal_positive'),
    )


class OrderDTO(BaseModel):
    id: int | None = None
    buyer_id: int | None = None
    supplier_id: int | None = None
    status: OrderStatus | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    subtotal: float | None = None
    discount_amount: float | None = None
    coupon_code: str | None = None
    shipping_method: ShippingMethod | None = None
    shipping_cost: float | None = None
    total_amount: float | None = None
    total_commission: float | None = None
    total_escrow_held: float | None = None
    delivery_address: str | None = None
    delivery_city: str | None = None
    delivery_phone: str | None = None
    delivery_provider: str | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    payment_method: PaymentMethod | None = None
    payment_status: PaymentStatus | None = None
    transaction_id: str | None = None
    paid_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    refund_status: RefundStatus | None = None
    refund_reason: str | None = None
    refund_requested_at: datetime | None = None
    refund_processed_at: datetime | None = None
    refunded_at: datetime | None = None
    escrow_status: EscrowStatus | None = None
    released_at: datetime | None = None
    released_by: int | None = None
    items: list[OrderItemDTO] = []


class OrderItemRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)


class DeliveryDetails(BaseModel):
    delivery_address: str = Field(min_length=1)
    delivery_city: str = Field(min_length=1)
    delivery_phone: str = Field(min_length=1)
    delivery_provider: str = "manual"


class CheckoutRequest(DeliveryDetails):
    payment_method: PaymentMethod
    shipping_method: ShippingMethod = ShippingMethod.STANDARD
    distance_km: float = Field(default=0.0, ge=0)
    coupon_code: str | None = None


class OrderCreateRequest(CheckoutRequest):
    supplier_id: int
    items: list[OrderItemRequest]


class OrderStatusUpdateRequest(BaseModel):
    status: OrderStatus


class OrderCancelRequest(BaseModel):
    reason: str | None = None


class RefundRequest(BaseModel):
    reason: str = Field(min_length=5)


class RefundDecisionRequest(BaseModel):
    approve: bool
    note: str | None = None


class ShippingEstimateRequest(BaseModel):
    method: ShippingMethod = ShippingMethod.STANDARD
    distance_km: float = Field(ge=0)
    subtotal: float = Field(default=0.0, ge=0)


class ShippingEstimateDTO(BaseModel):
    method: ShippingMethod
    cost: float
    free_shipping: bool
    estimated_days: int
    estimated_delivery_date: datetime
