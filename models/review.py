from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, ForeignKey, DateTime, Text, CheckConstraint, UniqueConstraint

from models.base import Base


class Review(Base):
    __tablename__ = 'reviews'

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey('products.id', ondelete="CASCADE"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (
        CheckConstraint('rating >= 1 AND rating <= 5', name='check_review_rating_range'),
        UniqueConstraint('order_id', 'user_id', 'product_id', name='uq_review_order_user_product'),
    )


class ReviewDTO(BaseModel):
    id: int | None = None
    product_id: int | None = None
    order_id: int | None = None
    user_id: int | None = None
    rating: int | None = None
    comment: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ReviewCreateRequest(BaseModel):
    order_id: int
    product_id: int
    rating: int = Field(ge=1, le=5)
    comment: str = Field(min_length=1)


class ReviewUpdateRequest(BaseModel):
    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, min_length=1)
