import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from enums.role import Role
from exceptions.base import PermissionDeniedException
from exceptions.user import UserNotFoundException
from models.user import UserDTO, RegisterRequest, ProfileUpdateRequest
from repositories.user import UserRepository
from services.auth import AuthService
from utils.pagination import build_page, PageDTO


class UserService:

    @staticmethod
    async def get_users(page: int, limit: int, role: Role | None, session: AsyncSession) -> PageDTO:
        users = await UserRepository.get_paginated(page, limit, role, session)
        count = await UserRepository.count(session, role=role)
        return build_page(users, page, limit, count)

    @staticmethod
    async def get_user(user_id: int, session: AsyncSession) -> UserDTO:
        user = await UserRepository.get_by_id(user_id, session)
        if user is None:
            raise UserNotFoundException(user_id=user_id)
        return UserDTO.model_validate(user, from_attributes=True)

    @staticmethod
    async def update_profile(request: ProfileUpdateRequest, current_user: UserDTO, session: AsyncSession) -> UserDTO:
        user = await UserRepository.get_by_id(current_user.id, session)
        if user is None:
            raise UserNotFoundException(user_id=current_user.id)
        if request.name is not None:
            user.name = request.name.strip()
        if request.phone is not None:
            user.phone = request.phone.strip() or None
        await session_commit(session)
        return UserDTO.model_validate(user, from_attributes=True)

    @staticmethod
    async def update_role(user_id: int, role: Role, current_user: UserDTO, session: AsyncSession) -> UserDTO:
        user = await UserRepository.get_by_id(user_id, session)
        if user is None:
            raise UserNotFoundException(user_id=user_id)
        if user.id == current_user.id and role != Role.ADMIN:
            raise PermissionDeniedException(current_user.id, "demote own admin account")
        user.role = role
        await session_commit(session)
        logging.info(f"User {user.id} role set to {role.value} by admin {current_user.id}")
        return UserDTO.model_validate(user, from_attributes=True)

    @staticmethod
    async def delete_user(user_id: int, current_user: UserDTO, session: AsyncSession) -> None:
        user = await UserRepository.get_by_id(user_id, session)
        match user:
            case None:
                raise UserNotFoundException(user_id=user_id)
            case _ if user.id == current_user.id:
                raise PermissionDeniedException(current_user.id, "delete own account")
            case _:
                await UserRepository.delete(user_id, session)
                await session_commit(session)
                logging.info(f"🗑️ User {user_id} deleted by admin {current_user.id}")

    @staticmethod
    async def register_admin(request: RegisterRequest, current_user: UserDTO, session: AsyncSession) -> UserDTO:
        admin = await AuthService.register(request, session, role=Role.ADMIN)
        logging.info(f"Admin {admin.id} registered by admin {current_user.id}")
        return admin
