from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, ForeignKey, DateTime, Text, JSON
from sqlalchemy import Enum as SQLEnum

from enums.dispute import DisputeStatus, DisputeType
from models.base import Base


class Dispute(Base):
    __tablename__ = 'disputes'

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), nullable=False, index=True)
    seller_id = Column(Integer, ForeignKey('suppliers.id'), nullable=False)
    product_id = Column(Integer, ForeignKey('products.id'), nullable=True)
    type = Column(SQLEnum(DisputeType), nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(SQLEnum(DisputeStatus), nullable=False, default=DisputeStatus.PENDING)
    # List of evidence URLs supplied by the buyer
    evidence = Column(JSON, nullable=False, default=list)
    resolution_notes = Column(Text, nullable=True)
    resolved_by = Column(Integer, ForeignKey('users.id'), nullable=True)
    resolved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class DisputeDTO(BaseModel):
    id: int | None = None
    order_id: int | None = None
    user_id: int | None = None
    seller_id: int | None = None
    product_id: int | None = None
    type: DisputeType | None = None
    reason: str | None = None
    status: DisputeStatus | None = None
    evidence: list[str] | None = None
    resolution_notes: str | None = None
    resolved_by: int | None = None
    resolved_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DisputeCreateRequest(BaseModel):
    order_id: int
    product_id: int | None = None
    type: DisputeType
    reason: str = Field(min_length=5)
    evidence: list[str] = []


class DisputeStatusUpdateRequest(BaseModel):
    status: DisputeStatus
    resolution_notes: str | None = None
