from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Table, UniqueConstraint

from models.base import Base

# Membership of products in merchandising sections (many-to-many)
section_products = Table(
    'section_products',
    Base.metadata,
    Column('section_id', Integer, ForeignKey('sections.id', ondelete="CASCADE"), primary_key=True),
    Column('product_id', Integer, ForeignKey('products.id', ondelete="CASCADE"), primary_key=True),
    Column('added_at', DateTime, default=datetime.now),
)


class Section(Base):
    __tablename__ = 'sections'

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.now)

    __table_args__ = (
        UniqueConstraint('name', name='uq_section_name'),
    )


class SectionDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    title: str | None = None
    description: str | None = None
    display_order: int | None = None
    created_at: datetime | None = None
    product_ids: list[int] | None = None


class SectionCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=50, pattern=r'^[A-Za-z0-9_-]+$')
    title: str = Field(min_length=1)
    description: str | None = None
    display_order: int = 0


class SectionProductRequest(BaseModel):
    product_id: int
