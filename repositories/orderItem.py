from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute
from enums.payment_status import PaymentStatus
from models.order import Order
from models.orderItem import OrderItem


class OrderItemRepository:
    @staticmethod
    async def top_products(limit: int, session: AsyncSession,
                           supplier_id: int | None = None,
                           buyer_id: int | None = None) -> list[tuple[int, int, float]]:
        """
        Best selling products of paid orders.

        Returns:
            [(product_id, units_sold, revenue)] ordered by revenue
        """
        revenue = func.sum(OrderItem.price * OrderItem.quantity)
        conditions = [Order.payment_status == PaymentStatus.PAID]
        if supplier_id is not None:
            conditions.append(Order.supplier_id == supplier_id)
        if buyer_id is not None:
            conditions.append(Order.buyer_id == buyer_id)
        stmt = (select(OrderItem.product_id, func.sum(OrderItem.quantity), revenue)
                .join(Order, Order.id == OrderItem.order_id)
                .where(*conditions)
                .group_by(OrderItem.product_id)
                .order_by(revenue.desc())
                .limit(limit))
        rows = await session_execute(stmt, session)
        return [(product_id, int(units), float(total)) for product_id, units, total in rows.all()]
