from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.cart import Cart
from models.cartItem import CartItem


class CartRepository:
    @staticmethod
    async def get_or_create(user_id: int, session: AsyncSession) -> Cart:
        stmt = select(Cart).where(Cart.user_id == user_id)
        cart = await session_execute(stmt, session)
        cart = cart.scalar()
        if cart is None:
            cart = Cart(user_id=user_id)
            session.add(cart)
            await session_flush(session)
        return cart

    @staticmethod
    async def get_items(cart_id: int, session: AsyncSession) -> list[CartItem]:
        stmt = select(CartItem).where(CartItem.cart_id == cart_id).order_by(CartItem.id)
        items = await session_execute(stmt, session)
        return list(items.scalars().all())

    @staticmethod
    async def get_item(cart_id: int, product_id: int, session: AsyncSession) -> CartItem | None:
        stmt = select(CartItem).where(CartItem.cart_id == cart_id, CartItem.product_id == product_id)
        item = await session_execute(stmt, session)
        return item.scalar()

    @staticmethod
    async def add_item(cart_item: CartItem, session: AsyncSession) -> CartItem:
        session.add(cart_item)
        await session_flush(session)
        return cart_item

    @staticmethod
    async def remove_item(cart_id: int, product_id: int, session: AsyncSession) -> None:
        stmt = delete(CartItem).where(CartItem.cart_id == cart_id, CartItem.product_id == product_id)
        await session_execute(stmt, session)

    @staticmethod
    async def clear(cart_id: int, session: AsyncSession) -> None:
        stmt = delete(CartItem).where(CartItem.cart_id == cart_id)
        await session_execute(stmt, session)
