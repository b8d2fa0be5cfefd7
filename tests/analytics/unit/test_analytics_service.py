"""
Unit Tests: AnalyticsService

Dashboard figures only count paid orders as revenue.
"""

from datetime import datetime

import pytest

from conftest import as_dto, set_order_state
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from enums.supplier_status import SupplierStatus
from exceptions.supplier import SupplierNotFoundException
from repositories.user import UserRepository
from services.analytics import AnalyticsService


@pytest.fixture
def sales(test_session, make_user, make_supplier, make_product, make_order):
    """One paid order (2 x 1000 + 100 shipping) and one unpaid order (1 x 500 + 100)."""

    async def _setup():
        buyer = await make_user()
        supplier = await make_supplier()
        phone = await make_product(supplier, price=1000.0, name="Phone")
        cable = await make_product(supplier, price=500.0, name="Cable")
        paid = await make_order(buyer, supplier, [(phone, 2)])
        unpaid = await make_order(buyer, supplier, [(cable, 1)])
        await set_order_state(test_session, paid.id, OrderStatus.PROCESSING, PaymentStatus.PAID)
        return buyer, supplier, phone, paid, unpaid

    return _setup


class TestDashboard:

    @pytest.mark.asyncio
    async def test_stats(self, test_session, sales, make_supplier):
        await sales()
        await make_supplier(status=SupplierStatus.PENDING)

        stats = await AnalyticsService.get_dashboard_stats(test_session)

        assert stats.total_orders == 2
        assert stats.pending_orders == 1
        assert stats.paid_payments == 1
        assert stats.pending_payments == 1
        assert stats.revenue == 2100.0
        assert stats.average_order_value == 2100.0
        assert stats.total_suppliers == 2
        assert stats.open_disputes == 0
        assert stats.weekly_revenue[-1].label == datetime.now().strftime("%Y-%m-%d")
        assert stats.weekly_revenue[-1].revenue == 2100.0

    @pytest.mark.asyncio
    async def test_empty_dashboard(self, test_session):
        dashboard = await AnalyticsService.get_dashboard(test_session)

        assert dashboard.stats.total_orders == 0
        assert dashboard.stats.average_order_value == 0.0
        assert dashboard.top_products == []

    @pytest.mark.asyncio
    async def test_top_products_only_count_paid_orders(self, test_session, sales):
        _, _, phone, _, _ = await sales()

        analytics = await AnalyticsService.get_admin_analytics(test_session)

        assert [(p.product_id, p.name, p.units_sold, p.revenue) for p in analytics.top_products] == [
            (phone.id, "Phone", 2, 2000.0)
        ]
        assert analytics.orders_by_status[OrderStatus.PROCESSING.value] == 1
        assert analytics.pending_suppliers == 0


class TestScopedAnalytics:

    @pytest.mark.asyncio
    async def test_supplier_sees_own_revenue(self, test_session, sales):
        _, supplier, _, _, _ = await sales()
        supplier_user = await UserRepository.get_by_id(supplier.user_id, test_session)

        analytics = await AnalyticsService.get_supplier_analytics(as_dto(supplier_user), test_session)

        assert analytics.supplier_id == supplier.id
        assert analytics.revenue == 2100.0
        assert analytics.orders_by_status[OrderStatus.PENDING.value] == 1

    @pytest.mark.asyncio
    async def test_non_supplier_has_no_supplier_analytics(self, test_session, make_user):
        user = await make_user()

        with pytest.raises(SupplierNotFoundException):
            await AnalyticsService.get_supplier_analytics(as_dto(user), test_session)

    @pytest.mark.asyncio
    async def test_customer_spending(self, test_session, sales):
        buyer, _, phone, _, _ = await sales()

        analytics = await AnalyticsService.get_customer_analytics(as_dto(buyer), test_session)

        assert analytics.total_spent == 2100.0
        assert [p.id for p in analytics.favourite_products] == [phone.id]
