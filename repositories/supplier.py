from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.supplier_status import SupplierStatus
from models.supplier import Supplier, SupplierDTO
from utils.pagination import page_offset


class SupplierRepository:
    @staticmethod
    async def get_by_id(supplier_id: int, session: AsyncSession) -> Supplier | None:
        stmt = select(Supplier).where(Supplier.id == supplier_id)
        supplier = await session_execute(stmt, session)
        return supplier.scalar()

    @staticmethod
    async def get_by_user_id(user_id: int, session: AsyncSession) -> Supplier | None:
        stmt = select(Supplier).where(Supplier.user_id == user_id)
        supplier = await session_execute(stmt, session)
        return supplier.scalar()

    @staticmethod
    async def create(supplier: Supplier, session: AsyncSession) -> Supplier:
        session.add(supplier)
        await session_flush(session)
        return supplier

    @staticmethod
    def _filtered(stmt, status: SupplierStatus | None, verified: bool | None):
        if status is not None:
            stmt = stmt.where(Supplier.status == status)
        if verified is not None:
            stmt = stmt.where(Supplier.verified == verified)
        return stmt

    @staticmethod
    async def get_paginated(page: int, limit: int, status: SupplierStatus | None, verified: bool | None,
                            session: AsyncSession) -> list[SupplierDTO]:
        stmt = SupplierRepository._filtered(select(Supplier), status, verified)
        stmt = stmt.order_by(Supplier.created_at.desc()).limit(limit).offset(page_offset(page, limit))
        suppliers = await session_execute(stmt, session)
        return [SupplierDTO.model_validate(s, from_attributes=True) for s in suppliers.scalars().all()]

    @staticmethod
    async def count(session: AsyncSession, status: SupplierStatus | None = None, verified: bool | None = None) -> int:
        stmt = SupplierRepository._filtered(select(func.count(Supplier.id)), status, verified)
        count = await session_execute(stmt, session)
        return count.scalar_one()

    @staticmethod
    async def get_latest(limit: int, session: AsyncSession) -> list[SupplierDTO]:
        stmt = select(Supplier).order_by(Supplier.created_at.desc(), Supplier.id.desc()).limit(limit)
        suppliers = await session_execute(stmt, session)
        return [SupplierDTO.model_validate(s, from_attributes=True) for s in suppliers.scalars().all()]

    @staticmethod
    async def delete(supplier_id: int, session: AsyncSession) -> None:
        stmt = delete(Supplier).where(Supplier.id == supplier_id)
        await session_execute(stmt, session)
