"""
Analytics Service - dashboard figures for admins, suppliers and customers

Everything is computed on demand from orders, order items and payments;
revenue only counts orders whose payment_status is paid.
"""

from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from enums.dispute import DisputeStatus
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from enums.refund_status import RefundStatus
from enums.report import ReportStatus
from enums.supplier_status import SupplierStatus
from exceptions.supplier import SupplierNotFoundException
from models.analytics import (
    RevenuePointDTO,
    TopProductDTO,
    DashboardStatsDTO,
    DashboardDTO,
    AdminAnalyticsDTO,
    SupplierAnalyticsDTO,
    CustomerAnalyticsDTO,
)
from models.user import UserDTO
from repositories.dispute import DisputeRepository
from repositories.order import OrderRepository
from repositories.orderItem import OrderItemRepository
from repositories.product import ProductRepository
from repositories.report import ReportRepository
from repositories.review import ReviewRepository
from repositories.supplier import SupplierRepository
from repositories.user import UserRepository
from services.product import ProductService

DASHBOARD_LIST_SIZE = 5
DAILY_BUCKET = '%Y-%m-%d'
MONTHLY_BUCKET = '%Y-%m'
OPEN_DISPUTE_STATUSES = [DisputeStatus.PENDING, DisputeStatus.IN_REVIEW, DisputeStatus.ESCALATED]


class AnalyticsService:

    @staticmethod
    async def _series(days: int, bucket_format: str, session: AsyncSession,
                      supplier_id: int | None = None) -> list[RevenuePointDTO]:
        since = datetime.now() - timedelta(days=days)
        rows = await OrderRepository.revenue_series(since, bucket_format, session, supplier_id=supplier_id)
        return [RevenuePointDTO(label=label, revenue=round(revenue, 2)) for label, revenue in rows]

    @staticmethod
    async def _top_products(session: AsyncSession, limit: int = DASHBOARD_LIST_SIZE,
                            **filters) -> list[TopProductDTO]:
        rows = await OrderItemRepository.top_products(limit, session, **filters)
        products = await ProductRepository.get_by_ids([product_id for product_id, _, _ in rows], session)
        return [
            TopProductDTO(
                product_id=product_id,
                name=products[product_id].name if product_id in products else None,
                units_sold=units,
                revenue=round(revenue, 2),
            )
            for product_id, units, revenue in rows
        ]

    @staticmethod
    async def get_dashboard_stats(session: AsyncSession) -> DashboardStatsDTO:
        orders_by_status = await OrderRepository.count_by_status(session)
        paid_orders = await OrderRepository.count(session, payment_status=PaymentStatus.PAID)
        revenue = await OrderRepository.sum_total_amount(session, payment_status=PaymentStatus.PAID)
        return DashboardStatsDTO(
            total_orders=sum(orders_by_status.values()),
            pending_orders=orders_by_status[OrderStatus.PENDING.value],
            delivered_orders=orders_by_status[OrderStatus.DELIVERED.value],
            total_users=await UserRepository.count(session),
            total_suppliers=await SupplierRepository.count(session),
            total_products=await ProductRepository.count(session),
            pending_payments=await OrderRepository.count(session, payment_status=PaymentStatus.UNPAID),
            paid_payments=paid_orders,
            pending_refunds=await OrderRepository.count(session, refund_status=RefundStatus.PENDING),
            approved_refunds=await OrderRepository.count(session, refund_status=RefundStatus.APPROVED),
            refunded_amount=round(await OrderRepository.sum_total_amount(
                session, payment_status=PaymentStatus.REFUNDED), 2),
            revenue=round(revenue, 2),
            average_order_value=round(revenue / paid_orders, 2) if paid_orders else 0.0,
            weekly_revenue=await AnalyticsService._series(7, DAILY_BUCKET, session),
            monthly_revenue=await AnalyticsService._series(365, MONTHLY_BUCKET, session),
            open_disputes=await DisputeRepository.count(session, statuses=OPEN_DISPUTE_STATUSES),
            pending_reports=await ReportRepository.count(session, status=ReportStatus.PENDING),
        )

    @staticmethod
    async def get_dashboard(session: AsyncSession) -> DashboardDTO:
        return DashboardDTO(
            stats=await AnalyticsService.get_dashboard_stats(session),
            latest_suppliers=await SupplierRepository.get_latest(DASHBOARD_LIST_SIZE, session),
            top_products=await AnalyticsService._top_products(session),
            latest_reviews=await ReviewRepository.get_latest(DASHBOARD_LIST_SIZE, session),
        )

    @staticmethod
    async def get_admin_analytics(session: AsyncSession) -> AdminAnalyticsDTO:
        return AdminAnalyticsDTO(
            revenue=round(await OrderRepository.sum_total_amount(session, payment_status=PaymentStatus.PAID), 2),
            monthly_revenue=await AnalyticsService._series(365, MONTHLY_BUCKET, session),
            orders_by_status=await OrderRepository.count_by_status(session),
            total_users=await UserRepository.count(session),
            new_users_last_30_days=await UserRepository.count(session, since=datetime.now() - timedelta(days=30)),
            total_suppliers=await SupplierRepository.count(session),
            pending_suppliers=await SupplierRepository.count(session, status=SupplierStatus.PENDING),
            top_products=await AnalyticsService._top_products(session, limit=10),
        )

    @staticmethod
    async def get_supplier_analytics(current_user: UserDTO, session: AsyncSession) -> SupplierAnalyticsDTO:
        supplier = await SupplierRepository.get_by_user_id(current_user.id, session)
        if supplier is None:
            raise SupplierNotFoundException(user_id=current_user.id)
        return SupplierAnalyticsDTO(
            supplier_id=supplier.id,
            revenue=round(await OrderRepository.sum_total_amount(
                session, supplier_id=supplier.id, payment_status=PaymentStatus.PAID), 2),
            monthly_revenue=await AnalyticsService._series(365, MONTHLY_BUCKET, session, supplier_id=supplier.id),
            orders_by_status=await OrderRepository.count_by_status(session, supplier_id=supplier.id),
            top_products=await AnalyticsService._top_products(session, supplier_id=supplier.id),
        )

    @staticmethod
    async def get_customer_analytics(current_user: UserDTO, session: AsyncSession) -> CustomerAnalyticsDTO:
        rows = await OrderItemRepository.top_products(DASHBOARD_LIST_SIZE, session, buyer_id=current_user.id)
        products = await ProductRepository.get_by_ids([product_id for product_id, _, _ in rows], session)
        favourites = [products[product_id] for product_id, _, _ in rows if product_id in products]
        return CustomerAnalyticsDTO(
            total_spent=round(await OrderRepository.sum_total_amount(
                session, buyer_id=current_user.id, payment_status=PaymentStatus.PAID), 2),
            orders_by_status=await OrderRepository.count_by_status(session, buyer_id=current_user.id),
            favourite_products=await ProductService.to_dtos(favourites, session),
        )
