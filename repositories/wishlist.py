from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.wishlist import WishlistItem


class WishlistRepository:
    @staticmethod
    async def get(user_id: int, product_id: int, session: AsyncSession) -> WishlistItem | None:
        stmt = select(WishlistItem).where(WishlistItem.user_id == user_id, WishlistItem.product_id == product_id)
        item = await session_execute(stmt, session)
        return item.scalar()

    @staticmethod
    async def get_by_user_id(user_id: int, session: AsyncSession) -> list[WishlistItem]:
        stmt = select(WishlistItem).where(WishlistItem.user_id == user_id).order_by(WishlistItem.added_at.desc())
        items = await session_execute(stmt, session)
        return list(items.scalars().all())

    @staticmethod
    async def create(item: WishlistItem, session: AsyncSession) -> WishlistItem:
        session.add(item)
        await session_flush(session)
        return item

    @staticmethod
    async def delete(user_id: int, product_id: int, session: AsyncSession) -> None:
        stmt = delete(WishlistItem).where(WishlistItem.user_id == user_id, WishlistItem.product_id == product_id)
        await session_execute(stmt, session)
