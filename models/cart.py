from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, ForeignKey, DateTime

from models.base import Base


class Cart(Base):
    __tablename__ = 'carts'

    id = Column(Integer, primary_key=True, unique=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), nullable=False, unique=True)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class CartDTO(BaseModel):
    id: int | None = None
    user_id: int | None = None
    updated_at: datetime | None = None
