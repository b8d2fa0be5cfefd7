from datetime import datetime

from pydantic import BaseModel, Field, field_validator
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, CheckConstraint
from sqlalchemy import Enum as SQLEnum

from enums.coupon_discount_type import CouponDiscountType
from models.base import Base


class Coupon(Base):
    __tablename__ = 'coupons'

    id = Column(Integer, primary_key=True)
    code = Column(String, nullable=False, unique=True, index=True)  # Always upper case
    discount_type = Column(SQLEnum(CouponDiscountType), nullable=False)
    discount_value = Column(Float, nullable=False)
    min_order_value = Column(Float, nullable=False, default=0.0)
    expiry_date = Column(DateTime, nullable=False)
    usage_limit = Column(Integer, nullable=False, default=1)
    used_count = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.now)

    __table_args__ = (
        CheckConstraint('discount_value > 0', name='check_coupon_discount_positive'),
        CheckConstraint('used_count >= 0', name='check_coupon_used_count_positive'),
        CheckConstraint('usage_limit > 0', name='check_coupon_usage_limit_positive'),
    )


class CouponDTO(BaseModel):
    id: int | None = None
    code: str | None = None
    discount_type: CouponDiscountType | None = None
    discount_value: float | None = None
    min_order_value: float | None = None
    expiry_date: datetime | None = None
    usage_limit: int | None = None
    used_count: int | None = None
    active: bool | None = None
    created_at: datetime | None = None


class CouponApplicationDTO(BaseModel):
    code: str
    discount: float
    final_amount: float


class CouponCreateRequest(BaseModel):
    code: str = Field(min_length=3, max_length=32)
    discount_type: CouponDiscountType
    discount_value: float = Field(gt=0)
    min_order_value: float = Field(default=0.0, ge=0)
    expiry_date: datetime
    usage_limit: int = Field(default=1, ge=1)
    active: bool = True

    @field_validator('code')
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return value.strip().upper()


class CouponApplyRequest(BaseModel):
    code: str
    total: float = Field(ge=0)


class OffersDTO(BaseModel):
    coupons: list[CouponDTO] = []
    reward_points: float = 0.0
