from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, DateTime, String, Boolean, Float, ForeignKey, CheckConstraint
from sqlalchemy import Enum as SQLEnum

from enums.supplier_status import SupplierStatus, BusinessType
from models.base import Base


class Supplier(Base):
    __tablename__ = 'suppliers'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), nullable=False, unique=True)
    full_name = Column(String, nullable=False)
    phone_number = Column(String, nullable=False)
    address = Column(String, nullable=False)
    id_number = Column(String, nullable=False)
    tax_number = Column(String, nullable=True)
    shop_name = Column(String, nullable=False)
    business_type = Column(SQLEnum(BusinessType), nullable=False, default=BusinessType.RETAILER)
    website = Column(String, nullable=True)

    # Onboarding (admin controlled)
    status = Column(SQLEnum(SupplierStatus), nullable=False, default=SupplierStatus.PENDING)
    verified = Column(Boolean, nullable=False, default=False)
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by_admin_id = Column(Integer, nullable=True)
    rejection_reason = Column(String, nullable=True)

    rating = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, default=datetime.now)

    __table_args__ = (
        CheckConstraint('rating >= 0 AND rating <= 5', name='check_supplier_rating_range'),
    )


class SupplierDTO(BaseModel):
    id: int | None = None
    user_id: int | None = None
    full_name: str | None = None
    phone_number: str | None = None
    address: str | None = None
    id_number: str | None = None
    tax_number: str | None = None
    shop_name: str | None = None
    business_type: BusinessType | None = None
    website: str | None = None
    status: SupplierStatus | None = None
    verified: bool | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None
    rating: float | None = None
    created_at: datetime | None = None


class SupplierRegisterRequest(BaseModel):
    full_name: str = Field(min_length=1)
    phone_number: str = Field(min_length=1)
    address: str = Field(min_length=1)
    id_number: str = Field(min_length=1)
    tax_number: str | None = None
    shop_name: str = Field(min_length=1)
    business_type: BusinessType = BusinessType.RETAILER
    website: str | None = None


class SupplierUpdateRequest(BaseModel):
    full_name: str | None = None
    phone_number: str | None = None
    address: str | None = None
    id_number: str | None = None
    tax_number: str | None = None
    shop_name: str | None = None
    business_type: BusinessType | None = None
    website: str | None = None


class SupplierStatusUpdateRequest(BaseModel):
    status: SupplierStatus
    reason: str | None = None
