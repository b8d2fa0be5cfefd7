from pydantic import BaseModel
from sqlalchemy import Column, Integer, Float, ForeignKey, CheckConstraint, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.escrow_status import EscrowStatus
from models.base import Base


class OrderItem(Base):
    __tablename__ = 'order_items'

    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_order_item_positive_quantity'),
        CheckConstraint('price >= 0', name='ck_order_item_positive_price'),
        Index('ix_order_items_order_id', 'order_id'),
        Index('ix_order_items_product_id', 'product_id'),
        # One line per product in an order
        Index('ix_order_items_unique', 'order_id', 'product_id', unique=True),
    )

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    product_id = Column(Integer, ForeignKey('products.id'), nullable=False)
    seller_id = Column(Integer, ForeignKey('users.id'), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Float, nullable=False)  # Unit price at purchase (flash sale aware)

    # Escrow split per line
    commission_percentage = Column(Float, nullable=False, default=10.0)
    escrow_amount = Column(Float, nullable=False)
    escrow_status = Column(SQLEnum(EscrowStatus), nullable=False, default=EscrowStatus.HELD)

    order = relationship("Order", back_populates="items")


class OrderItemDTO(BaseModel):
    id: int | None = None
    order_id: int | None = None
    product_id: int | None = None
    seller_id: int | None = None
    quantity: int | None = None
    price: float | None = None
    commission_percentage: float | None = None
    escrow_amount: float | None = None
    escrow_status: EscrowStatus | None = None
