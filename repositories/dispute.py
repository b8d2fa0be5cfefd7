from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.dispute import DisputeStatus
from models.dispute import Dispute, DisputeDTO
from utils.dispute_state_machine import DisputeStateMachine
from utils.pagination import page_offset


class DisputeRepository:
    @staticmethod
    async def create(dispute: Dispute, session: AsyncSession) -> Dispute:
        session.add(dispute)
        await session_flush(session)
        return dispute

    @staticmethod
    async def get_by_id(dispute_id: int, session: AsyncSession) -> Dispute | None:
        stmt = select(Dispute).where(Dispute.id == dispute_id)
        dispute = await session_execute(stmt, session)
        return dispute.scalar()

    @staticmethod
    async def get_open_by_order_id(order_id: int, session: AsyncSession) -> Dispute | None:
        open_statuses = [DisputeStatus(s) for s in DisputeStateMachine.OPEN_STATUSES]
        stmt = select(Dispute).where(Dispute.order_id == order_id, Dispute.status.in_(open_statuses)).limit(1)
        dispute = await session_execute(stmt, session)
        return dispute.scalar()

    @staticmethod
    async def get_by_user_id(user_id: int, session: AsyncSession) -> list[DisputeDTO]:
        stmt = select(Dispute).where(Dispute.user_id == user_id).order_by(Dispute.created_at.desc())
        disputes = await session_execute(stmt, session)
        return [DisputeDTO.model_validate(d, from_attributes=True) for d in disputes.scalars().all()]

    @staticmethod
    async def get_paginated(page: int, limit: int, status: DisputeStatus | None,
                            session: AsyncSession) -> list[DisputeDTO]:
        stmt = select(Dispute)
        if status is not None:
            stmt = stmt.where(Dispute.status == status)
        stmt = stmt.order_by(Dispute.created_at.desc()).limit(limit).offset(page_offset(page, limit))
        disputes = await session_execute(stmt, session)
        return [DisputeDTO.model_validate(d, from_attributes=True) for d in disputes.scalars().all()]

    @staticmethod
    async def count(session: AsyncSession, statuses: list[DisputeStatus] | None = None) -> int:
        stmt = select(func.count(Dispute.id))
        if statuses:
            stmt = stmt.where(Dispute.status.in_(statuses))
        count = await session_execute(stmt, session)
        return count.scalar_one()

    @staticmethod
    async def delete(dispute_id: int, session: AsyncSession) -> None:
        stmt = delete(Dispute).where(Dispute.id == dispute_id)
        await session_execute(stmt, session)
