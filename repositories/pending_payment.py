from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.payment_status import PendingPaymentStatus
from models.pending_payment import PendingPayment


class PendingPaymentRepository:
    @staticmethod
    async def create(pending_payment: PendingPayment, session: AsyncSession) -> PendingPayment:
        session.add(pending_payment)
        await session_flush(session)
        return pending_payment

    @staticmethod
    async def get_by_checkout_request_id(checkout_request_id: str, session: AsyncSession) -> PendingPayment | None:
        stmt = select(PendingPayment).where(PendingPayment.checkout_request_id == checkout_request_id)
        pending_payment = await session_execute(stmt, session)
        return pending_payment.scalar()

    @staticmethod
    async def get_latest_by_order_id(order_id: int, session: AsyncSession) -> PendingPayment | None:
        stmt = (select(PendingPayment)
                .where(PendingPayment.order_id == order_id)
                .order_by(PendingPayment.created_at.desc(), PendingPayment.id.desc())
                .limit(1))
        pending_payment = await session_execute(stmt, session)
        return pending_payment.scalar()

    @staticmethod
    async def get_stale(created_before: datetime, session: AsyncSession,
                        order_id: int | None = None) -> list[PendingPayment]:
        stmt = select(PendingPayment).where(PendingPayment.status == PendingPaymentStatus.PENDING,
                                            PendingPayment.created_at < created_before)
        if order_id is not None:
            stmt = stmt.where(PendingPayment.order_id == order_id)
        pending_payments = await session_execute(stmt, session)
        return list(pending_payments.scalars().all())
