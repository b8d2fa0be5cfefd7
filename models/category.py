from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Integer, Column, String, ForeignKey, DateTime

from models.base import Base


class Category(Base):
    __tablename__ = 'categories'

    id = Column(Integer, primary_key=True, unique=True)
    name = Column(String, nullable=False, unique=True)
    slug = Column(String, nullable=False, unique=True, index=True)
    parent_category_id = Column(Integer, ForeignKey('categories.id'), nullable=True)
    created_at = Column(DateTime, default=datetime.now)


class CategoryDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    slug: str | None = None
    parent_category_id: int | None = None
    created_at: datetime | None = None


class CategoryCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    parent_category_id: int | None = None


class CategoryUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    parent_category_id: int | None = None
