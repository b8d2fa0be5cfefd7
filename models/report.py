from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, ForeignKey, DateTime, Text
from sqlalchemy import Enum as SQLEnum

from enums.report import ReportEntityType, ReportType, ReportStatus
from models.base import Base


class Report(Base):
    __tablename__ = 'reports'

    id = Column(Integer, primary_key=True)
    reporter_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), nullable=False)
    # Polymorphic reference: users.id or products.id depending on entity_type
    reported_entity_id = Column(Integer, nullable=False)
    entity_type = Column(SQLEnum(ReportEntityType), nullable=False)
    type = Column(SQLEnum(ReportType), nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(SQLEnum(ReportStatus), nullable=False, default=ReportStatus.PENDING)
    handled_by = Column(Integer, nullable=True)
    handled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.now)


class ReportDTO(BaseModel):
    id: int | None = None
    reporter_id: int | None = None
    reported_entity_id: int | None = None
    entity_type: ReportEntityType | None = None
    type: ReportType | None = None
    reason: str | None = None
    status: ReportStatus | None = None
    handled_by: int | None = None
    handled_at: datetime | None = None
    created_at: datetime | None = None


class ReportCreateRequest(BaseModel):
    reported_entity_id: int
    entity_type: ReportEntityType
    type: ReportType
    reason: str = Field(min_length=5)


class ReportStatusUpdateRequest(BaseModel):
    status: ReportStatus
