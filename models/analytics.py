from pydantic import BaseModel

from models.product import ProductDTO
from models.review import ReviewDTO
from models.supplier import SupplierDTO


class RevenuePointDTO(BaseModel):
    label: str
    revenue: float


class TopProductDTO(BaseModel):
    product_id: int
    name: str | None = None
    units_sold: int
    revenue: float


class DashboardStatsDTO(BaseModel):
    total_orders: int
    pending_orders: int
    delivered_orders: int
    total_users: int
    total_suppliers: int
    total_products: int
    pending_payments: int
    paid_payments: int
    pending_refunds: int
    approved_refunds: int
    refunded_amount: float
    revenue: float
    average_order_value: float
    weekly_revenue: list[RevenuePointDTO]
    monthly_revenue: list[RevenuePointDTO]
    open_disputes: int
    pending_reports: int


class DashboardDTO(BaseModel):
    stats: DashboardStatsDTO
    latest_suppliers: list[SupplierDTO]
    top_products: list[TopProductDTO]
    latest_reviews: list[ReviewDTO]


class AdminAnalyticsDTO(BaseModel):
    revenue: float
    monthly_revenue: list[RevenuePointDTO]
    orders_by_status: dict[str, int]
    total_users: int
    new_users_last_30_days: int
    total_suppliers: int
    pending_suppliers: int
    top_products: list[TopProductDTO]


class SupplierAnalyticsDTO(BaseModel):
    supplier_id: int
    revenue: float
    monthly_revenue: list[RevenuePointDTO]
    orders_by_status: dict[str, int]
    top_products: list[TopProductDTO]


class CustomerAnalyticsDTO(BaseModel):
    total_spent: float
    orders_by_status: dict[str, int]
    favourite_products: list[ProductDTO]
