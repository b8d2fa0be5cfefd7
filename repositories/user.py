import datetime

from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.role import Role
from models.user import UserDTO, User
from utils.pagination import page_offset


class UserRepository:
    @staticmethod
    async def get_by_id(user_id: int, session: AsyncSession) -> User | None:
        stmt = select(User).where(User.id == user_id)
        user = await session_execute(stmt, session)
        return user.scalar()

    @staticmethod
    async def get_by_email(email: str, session: AsyncSession) -> User | None:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        user = await session_execute(stmt, session)
        return user.scalar()

    @staticmethod
    async def create(user: User, session: AsyncSession) -> User:
        session.add(user)
        await session_flush(session)
        return user

    @staticmethod
    async def get_paginated(page: int, limit: int, role: Role | None, session: AsyncSession) -> list[UserDTO]:
        stmt = select(User)
        if role is not None:
            stmt = stmt.where(User.role == role)
        stmt = stmt.order_by(User.registered_at.desc()).limit(limit).offset(page_offset(page, limit))
        users = await session_execute(stmt, session)
        return [UserDTO.model_validate(user, from_attributes=True) for user in users.scalars().all()]

    @staticmethod
    async def count(session: AsyncSession, role: Role | None = None,
                    since: datetime.datetime | None = None) -> int:
        stmt = select(func.count(User.id))
        if role is not None:
            stmt = stmt.where(User.role == role)
        if since is not None:
            stmt = stmt.where(User.registered_at >= since)
        count = await session_execute(stmt, session)
        return count.scalar_one()

    @staticmethod
    async def get_by_ids(user_ids: list[int], session: AsyncSession) -> list[UserDTO]:
        if not user_ids:
            return []
        stmt = select(User).where(User.id.in_(user_ids))
        users = await session_execute(stmt, session)
        return [UserDTO.model_validate(user, from_attributes=True) for user in users.scalars().all()]

    @staticmethod
    async def delete(user_id: int, session: AsyncSession) -> None:
        stmt = delete(User).where(User.id == user_id)
        await session_execute(stmt, session)

    @staticmethod
    async def get_by_reset_token_hash(token_hash: str, session: AsyncSession) -> User | None:
        stmt = select(User).where(User.reset_password_token_hash == token_hash)
        user = await session_execute(stmt, session)
        return user.scalar()

    @staticmethod
    async def delete_unverified(registered_before: datetime.datetime, session: AsyncSession) -> int:
        stmt = delete(User).where(User.account_verified.is_(False), User.registered_at < registered_before)
        result = await session_execute(stmt, session)
        return result.rowcount
