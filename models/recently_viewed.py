from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint

from models.base import Base


class RecentlyViewed(Base):
    __tablename__ = 'recently_viewed'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey('products.id', ondelete="CASCADE"), nullable=False)
    viewed_at = Column(DateTime, default=datetime.now, nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'product_id', name='uq_recently_viewed_user_product'),
    )


class RecentlyViewedDTO(BaseModel):
    product_id: int | None = None
    viewed_at: datetime | None = None
