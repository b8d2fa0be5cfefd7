from datetime import datetime

from pydantic import BaseModel, Field, model_validator
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, JSON, Text, CheckConstraint
from sqlalchemy import Enum as SQLEnum

from enums.product_status import ProductStatus, ProductVisibility
from models.base import Base


class Product(Base):
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    category_id = Column(Integer, ForeignKey('categories.id'), nullable=False)
    supplier_id = Column(Integer, ForeignKey('suppliers.id', ondelete="CASCADE"), nullable=False)
    brand = Column(String, nullable=True)
    price = Column(Float, nullable=False)
    old_price = Column(Float, nullable=True)
    # NULL stock means made to order (no stock tracking)
    stock = Column(Integer, nullable=True)
    images = Column(JSON, nullable=False, default=list)

    # Moderation
    status = Column(SQLEnum(ProductStatus), nullable=False, default=ProductStatus.PENDING)
    visibility = Column(SQLEnum(ProductVisibility), nullable=False, default=ProductVisibility.PRIVATE)

    # Flash sale window
    flash_sale_active = Column(Boolean, nullable=False, default=False)
    flash_sale_discount_percentage = Column(Float, nullable=False, default=0.0)
    flash_sale_start = Column(DateTime, nullable=True)
    flash_sale_end = Column(DateTime, nullable=True)

    # Shipping attributes
    weight = Column(Float, nullable=True)
    # Format: {"length": 10, "width": 5, "height": 2} (cm)
    dimensions = Column(JSON, nullable=True)
    free_shipping = Column(Boolean, nullable=False, default=False)

    # Denormalised review aggregate, recomputed on review changes
    rating = Column(Float, nullable=False, default=0.0)
    num_reviews = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_product_price_positive'),
        CheckConstraint('stock IS NULL OR stock >= 0', name='check_product_stock_positive'),
        CheckConstraint('flash_sale_discount_percentage >= 0 AND flash_sale_discount_percentage <= 100',
                        name='check_flash_sale_discount_range'),
    )

    def is_flash_sale_running(self, now: datetime | None = None) -> bool:
        if not self.flash_sale_active:
            return False
        now = now or datetime.now()
        if self.flash_sale_start is not None and now < self.flash_sale_start:
            return False
        if self.flash_sale_end is not None and now > self.flash_sale_end:
            return False
        return True

    def price_at(self, now: datetime | None = None) -> float:
        if self.is_flash_sale_running(now):
            return round(self.price * (1 - self.flash_sale_discount_percentage / 100), 2)
        return self.price


class ProductDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    description: str | None = None
    category_id: int | None = None
    supplier_id: int | None = None
    brand: str | None = None
    price: float | None = None
    old_price: float | None = None
    stock: int | None = None
    images: list[str] | None = None
    status: ProductStatus | None = None
    visibility: ProductVisibility | None = None
    flash_sale_active: bool | None = None
    flash_sale_discount_percentage: float | None = None
    flash_sale_start: datetime | None = None
    flash_sale_end: datetime | None = None
    weight: float | None = None
    dimensions: dict | None = None
    free_shipping: bool | None = None
    rating: float | None = None
    num_reviews: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    # Computed by ProductService (flash sale aware)
    effective_price: float | None = None
    sections: list[str] | None = None


class FlashSaleFields(BaseModel):
    flash_sale_active: bool | None = None
    flash_sale_discount_percentage: float | None = Field(default=None, ge=0, le=100)
    flash_sale_start: datetime | None = None
    flash_sale_end: datetime | None = None


class ProductCreateRequest(FlashSaleFields):
    name: str = Field(min_length=1, max_length=200)
    description: str = ""
    category_id: int
    brand: str | None = None
    price: float = Field(ge=0)
    old_price: float | None = Field(default=None, ge=0)
    stock: int | None = Field(default=None, ge=0)
    images: list[str] = []
    sections: list[str] = []
    weight: float | None = Field(default=None, ge=0)
    dimensions: dict | None = None
    free_shipping: bool = False

    @model_validator(mode="after")
    def check_prices(self):
        if self.old_price is not None and self.old_price < self.price:
            raise ValueError("old_price must be greater than or equal to price")
        if self.flash_sale_start and self.flash_sale_end and self.flash_sale_end <= self.flash_sale_start:
            raise ValueError("flash_sale_end must be after flash_sale_start")
        return self


class ProductUpdateRequest(FlashSaleFields):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    category_id: int | None = None
    brand: str | None = None
    price: float | None = Field(default=None, ge=0)
    old_price: float | None = Field(default=None, ge=0)
    stock: int | None = Field(default=None, ge=0)
    images: list[str] | None = None
    sections: list[str] | None = None
    weight: float | None = Field(default=None, ge=0)
    dimensions: dict | None = None
    free_shipping: bool | None = None


class HomepageSectionDTO(BaseModel):
    name: str
    title: str
    products: list[ProductDTO]
