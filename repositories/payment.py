from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.payment_status import PaymentRecordStatus
from models.payment import Payment, PaymentDTO


class PaymentRepository:
    @staticmethod
    async def create(payment: Payment, session: AsyncSession) -> Payment:
        session.add(payment)
        await session_flush(session)
        return payment

    @staticmethod
    async def get_by_transaction_id(transaction_id: str, session: AsyncSession) -> Payment | None:
        stmt = select(Payment).where(Payment.transaction_id == transaction_id)
        payment = await session_execute(stmt, session)
        return payment.scalar()

    @staticmethod
    async def get_by_order_id(order_id: int, session: AsyncSession) -> list[Payment]:
        stmt = select(Payment).where(Payment.order_id == order_id).order_by(Payment.created_at.desc())
        payments = await session_execute(stmt, session)
        return list(payments.scalars().all())

    @staticmethod
    async def get_by_user_id(user_id: int, session: AsyncSession) -> list[PaymentDTO]:
        stmt = select(Payment).where(Payment.user_id == user_id).order_by(Payment.created_at.desc())
        payments = await session_execute(stmt, session)
        return [PaymentDTO.model_validate(p, from_attributes=True) for p in payments.scalars().all()]

    @staticmethod
    async def sum_amount(status: PaymentRecordStatus, session: AsyncSession) -> float:
        stmt = select(func.coalesce(func.sum(Payment.amount), 0.0)).where(Payment.status == status)
        total = await session_execute(stmt, session)
        return float(total.scalar_one())
