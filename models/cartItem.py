from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, ForeignKey, CheckConstraint, UniqueConstraint

from models.base import Base


class CartItem(Base):
    __tablename__ = 'cart_items'

    id = Column(Integer, primary_key=True, unique=True)
    cart_id = Column(Integer, ForeignKey('carts.id', ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey('products.id', ondelete="CASCADE"), nullable=False)
    quantity = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_cart_item_quantity_positive'),
        UniqueConstraint('cart_id', 'product_id', name='uq_cart_item_product'),
    )


class CartItemDTO(BaseModel):
    id: int | None = None
    cart_id: int | None = None
    product_id: int | None = None
    quantity: int | None = None


class CartLineDTO(BaseModel):
    """Cart item enriched with current product data for display."""
    product_id: int
    name: str
    supplier_id: int
    unit_price: float
    quantity: int
    line_total: float
    stock: int | None = None


class CartViewDTO(BaseModel):
    items: list[CartLineDTO] = []
    subtotal: float = 0.0
    item_count: int = 0


class CartItemRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)


class CartQuantityRequest(BaseModel):
    # 0 removes the line
    quantity: int = Field(ge=0)
