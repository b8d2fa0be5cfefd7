from datetime import datetime

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.coupon import Coupon


class CouponRepository:
    @staticmethod
    async def create(coupon: Coupon, session: AsyncSession) -> Coupon:
        session.add(coupon)
        await session_flush(session)
        return coupon

    @staticmethod
    async def get_by_id(coupon_id: int, session: AsyncSession) -> Coupon | None:
        stmt = select(Coupon).where(Coupon.id == coupon_id)
        coupon = await session_execute(stmt, session)
        return coupon.scalar()

    @staticmethod
    async def get_by_code(code: str, session: AsyncSession) -> Coupon | None:
        stmt = select(Coupon).where(Coupon.code == code.strip().upper())
        coupon = await session_execute(stmt, session)
        return coupon.scalar()

    @staticmethod
    async def get_all(session: AsyncSession) -> list[Coupon]:
        stmt = select(Coupon).order_by(Coupon.created_at.desc())
        coupons = await session_execute(stmt, session)
        return list(coupons.scalars().all())

    @staticmethod
    async def get_available(now: datetime, session: AsyncSession) -> list[Coupon]:
        """Active, unexpired and not exhausted."""
        stmt = (select(Coupon)
                .where(Coupon.active.is_(True),
                       Coupon.expiry_date > now,
                       Coupon.used_count < Coupon.usage_limit)
                .order_by(Coupon.expiry_date))
        coupons = await session_execute(stmt, session)
        return list(coupons.scalars().all())

    @staticmethod
    async def delete(coupon_id: int, session: AsyncSession) -> None:
        stmt = delete(Coupon).where(Coupon.id == coupon_id)
        await session_execute(stmt, session)
