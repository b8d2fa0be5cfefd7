from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.address import Address


class AddressRepository:
    @staticmethod
    async def get_by_id(address_id: int, user_id: int, session: AsyncSession) -> Address | None:
        stmt = select(Address).where(Address.id == address_id, Address.user_id == user_id)
        address = await session_execute(stmt, session)
        return address.scalar()

    @staticmethod
    async def get_by_user_id(user_id: int, session: AsyncSession) -> list[Address]:
        stmt = (select(Address)
                .where(Address.user_id == user_id)
                .order_by(Address.is_default.desc(), Address.created_at.desc()))
        addresses = await session_execute(stmt, session)
        return list(addresses.scalars().all())

    @staticmethod
    async def create(address: Address, session: AsyncSession) -> Address:
        session.add(address)
        await session_flush(session)
        return address

    @staticmethod
    async def delete(address_id: int, session: AsyncSession) -> None:
        stmt = delete(Address).where(Address.id == address_id)
        await session_execute(stmt, session)
