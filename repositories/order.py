from datetime import datetime
import logging

from sqlalchemy import select, func, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.escrow_status import EscrowStatus
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from enums.refund_status import RefundStatus
from models.order import Order, OrderDTO
from utils.pagination import page_offset

logger = logging.getLogger(__name__)


class OrderRepository:
    @staticmethod
    async def create(order: Order, session: AsyncSession) -> Order:
        session.add(order)
        await session_flush(session)
        return order

    @staticmethod
    async def get_by_id(order_id: int, session: AsyncSession) -> Order | None:
        stmt = select(Order).where(Order.id == order_id)
        order = await session_execute(stmt, session)
        return order.scalar()

    @staticmethod
    def _filters(buyer_id: int | None = None,
                 supplier_id: int | None = None,
                 status: OrderStatus | None = None,
                 payment_status: PaymentStatus | None = None,
                 refund_status: RefundStatus | None = None,
                 since: datetime | None = None) -> list:
        conditions = []
        if buyer_id is not None:
            conditions.append(Order.buyer_id == buyer_id)
        if supplier_id is not None:
            conditions.append(Order.supplier_id == supplier_id)
        if status is not None:
            conditions.append(Order.status == status)
        if payment_status is not None:
            conditions.append(Order.payment_status == payment_status)
        if refund_status is not None:
            conditions.append(Order.refund_status == refund_status)
        if since is not None:
            conditions.append(Order.created_at >= since)
        return conditions

    @staticmethod
    async def get_paginated(page: int, limit: int, session: AsyncSession, **filters) -> list[OrderDTO]:
        stmt = (select(Order)
                .where(*OrderRepository._filters(**filters))
                .order_by(Order.created_at.desc(), Order.id.desc())
                .limit(limit)
                .offset(page_offset(page, limit)))
        orders = await session_execute(stmt, session)
        return [OrderDTO.model_validate(order, from_attributes=True) for order in orders.scalars().all()]

    @staticmethod
    async def count(session: AsyncSession, **filters) -> int:
        stmt = select(func.count(Order.id)).where(*OrderRepository._filters(**filters))
        count = await session_execute(stmt, session)
        return count.scalar_one()

    @staticmethod
    async def get_delivered_for_buyer(buyer_id: int, session: AsyncSession) -> list[OrderDTO]:
        stmt = (select(Order)
                .where(Order.buyer_id == buyer_id, Order.status == OrderStatus.DELIVERED)
                .order_by(Order.delivered_at.desc()))
        orders = await session_execute(stmt, session)
        return [OrderDTO.model_validate(order, from_attributes=True) for order in orders.scalars().all()]

    @staticmethod
    async def get_escrow_release_candidates(delivered_before: datetime, session: AsyncSession) -> list[Order]:
        """Delivered and paid orders whose escrow is still held, with no refund in flight."""
        stmt = select(Order).where(
            Order.status == OrderStatus.DELIVERED,
            Order.payment_status == PaymentStatus.PAID,
            Order.escrow_status == EscrowStatus.HELD,
            Order.delivered_at.is_not(None),
            Order.delivered_at <= delivered_before,
            or_(Order.refund_status.is_(None), Order.refund_status == RefundStatus.REJECTED),
        )
        orders = await session_execute(stmt, session)
        return list(orders.scalars().all())

    @staticmethod
    async def delete(order_id: int, session: AsyncSession) -> None:
        stmt = delete(Order).where(Order.id == order_id)
        await session_execute(stmt, session)

    # === Aggregates for dashboard / analytics ===

    @staticmethod
    async def sum_total_amount(session: AsyncSession, **filters) -> float:
        stmt = select(func.coalesce(func.sum(Order.total_amount), 0.0)).where(*OrderRepository._filters(**filters))
        total = await session_execute(stmt, session)
        return float(total.scalar_one())

    @staticmethod
    async def count_by_status(session: AsyncSession, **filters) -> dict[str, int]:
        stmt = (select(Order.status, func.count(Order.id))
                .where(*OrderRepository._filters(**filters))
                .group_by(Order.status))
        rows = await session_execute(stmt, session)
        counts = {status.value: 0 for status in OrderStatus}
        for status, count in rows.all():
            counts[status.value] = count
        return counts

    @staticmethod
    async def revenue_series(since: datetime, bucket_format: str, session: AsyncSession,
                             supplier_id: int | None = None) -> list[tuple[str, float]]:
        """
        Paid revenue grouped by strftime bucket of paid_at (e.g. '%Y-%m-%d' or '%Y-%m').
        """
        bucket = func.strftime(bucket_format, Order.paid_at)
        conditions = [Order.payment_status == PaymentStatus.PAID, Order.paid_at >= since]
        if supplier_id is not None:
            conditions.append(Order.supplier_id == supplier_id)
        stmt = (select(bucket, func.sum(Order.total_amount))
                .where(*conditions)
                .group_by(bucket)
                .order_by(bucket))
        rows = await session_execute(stmt, session)
        return [(label, float(total)) for label, total in rows.all()]
