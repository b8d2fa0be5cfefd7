from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.recently_viewed import RecentlyViewed


class RecentlyViewedRepository:
    @staticmethod
    async def get(user_id: int, product_id: int, session: AsyncSession) -> RecentlyViewed | None:
        stmt = select(RecentlyViewed).where(RecentlyViewed.user_id == user_id,
                                            RecentlyViewed.product_id == product_id)
        entry = await session_execute(stmt, session)
        return entry.scalar()

    @staticmethod
    async def get_by_user_id(user_id: int, session: AsyncSession, limit: int | None = None) -> list[RecentlyViewed]:
        stmt = (select(RecentlyViewed)
                .where(RecentlyViewed.user_id == user_id)
                .order_by(RecentlyViewed.viewed_at.desc(), RecentlyViewed.id.desc()))
        if limit is not None:
            stmt = stmt.limit(limit)
        entries = await session_execute(stmt, session)
        return list(entries.scalars().all())

    @staticmethod
    async def create(entry: RecentlyViewed, session: AsyncSession) -> RecentlyViewed:
        session.add(entry)
        await session_flush(session)
        return entry

    @staticmethod
    async def delete_by_ids(entry_ids: list[int], session: AsyncSession) -> None:
        if not entry_ids:
            return
        stmt = delete(RecentlyViewed).where(RecentlyViewed.id.in_(entry_ids))
        await session_execute(stmt, session)
