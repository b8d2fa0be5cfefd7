import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from enums.role import Role
from enums.supplier_status import SupplierStatus
from exceptions.base import PermissionDeniedException, ValidationException
from exceptions.supplier import SupplierNotFoundException, SupplierAlreadyRegisteredException
from exceptions.user import UserNotFoundException
from models.supplier import (
    Supplier,
    SupplierDTO,
    SupplierRegisterRequest,
    SupplierUpdateRequest,
    SupplierStatusUpdateRequest,
)
from models.user import UserDTO
from repositories.order import OrderRepository
from repositories.supplier import SupplierRepository
from repositories.user import UserRepository
from services.notification import NotificationService
from utils.pagination import build_page, PageDTO

logger = logging.getLogger(__name__)


class SupplierService:

    @staticmethod
    async def get_entity(supplier_id: int, session: AsyncSession) -> Supplier:
        supplier = await SupplierRepository.get_by_id(supplier_id, session)
        if supplier is None:
            raise SupplierNotFoundException(supplier_id=supplier_id)
        return supplier

    @staticmethod
    async def register(request: SupplierRegisterRequest, current_user: UserDTO, session: AsyncSession) -> SupplierDTO:
        """One supplier profile per user. Starts Pending and unverified until an admin reviews it."""
        if await SupplierRepository.get_by_user_id(current_user.id, session) is not None:
            raise SupplierAlreadyRegisteredException(current_user.id)
        supplier = await SupplierRepository.create(Supplier(
            user_id=current_user.id,
            **request.model_dump(),
            status=SupplierStatus.PENDING,
            verified=False,
        ), session)
        await session_commit(session)
        logger.info(f"🏪 Supplier application {supplier.id} ({supplier.shop_name}) submitted by user {current_user.id}")
        return SupplierDTO.model_validate(supplier, from_attributes=True)

    @staticmethod
    async def get_suppliers(page: int, limit: int, status: SupplierStatus | None, verified: bool | None,
                            session: AsyncSession) -> PageDTO:
        suppliers = await SupplierRepository.get_paginated(page, limit, status, verified, session)
        count = await SupplierRepository.count(session, status=status, verified=verified)
        return build_page(suppliers, page, limit, count)

    @staticmethod
    async def get_supplier(supplier_id: int, session: AsyncSession) -> SupplierDTO:
        supplier = await SupplierService.get_entity(supplier_id, session)
        return SupplierDTO.model_validate(supplier, from_attributes=True)

    @staticmethod
    async def get_my_profile(current_user: UserDTO, session: AsyncSession) -> SupplierDTO:
        supplier = await SupplierRepository.get_by_user_id(current_user.id, session)
        if supplier is None:
            raise SupplierNotFoundException(user_id=current_user.id)
        return SupplierDTO.model_validate(supplier, from_attributes=True)

    @staticmethod
    async def update(supplier_id: int, request: SupplierUpdateRequest, current_user: UserDTO,
                     session: AsyncSession) -> SupplierDTO:
        supplier = await SupplierService.get_entity(supplier_id, session)
        if current_user.role != Role.ADMIN and supplier.user_id != current_user.id:
            raise PermissionDeniedException(current_user.id, f"update supplier {supplier_id}")
        for field, value in request.model_dump(exclude_unset=True).items():
            setattr(supplier, field, value)
        await session_commit(session)
        return SupplierDTO.model_validate(supplier, from_attributes=True)

    @staticmethod
    async def update_status(supplier_id: int, request: SupplierStatusUpdateRequest, current_user: UserDTO,
                            session: AsyncSession) -> SupplierDTO:
        """
        Admin review of a supplier application.

        Approving promotes the user to Supplier. Rejecting a supplier that was
        approved before demotes the user back to User and clears verification.
        """
        supplier = await SupplierService.get_entity(supplier_id, session)
        user = await UserRepository.get_by_id(supplier.user_id, session)
        if user is None:
            raise UserNotFoundException(user_id=supplier.user_id)

        previous_status = supplier.status
        supplier.status = request.status
        supplier.reviewed_at = datetime.now()
        supplier.reviewed_by_admin_id = current_user.id
        match request.status:
            case SupplierStatus.APPROVED:
                supplier.rejection_reason = None
                if user.role == Role.USER:
                    user.role = Role.SUPPLIER
            case SupplierStatus.REJECTED:
                supplier.rejection_reason = request.reason
                supplier.verified = False
                if previous_status == SupplierStatus.APPROVED and user.role == Role.SUPPLIER:
                    user.role = Role.USER
            case SupplierStatus.PENDING:
                supplier.verified = False
        await session_commit(session)

        logger.info(f"Supplier {supplier.id} {previous_status.value} -> {supplier.status.value} by admin {current_user.id}")
        await NotificationService.send_to_user(
            supplier.user_id,
            "Supplier application",
            f"Your supplier application is now {supplier.status.value}",
            {"supplier_id": supplier.id, "status": supplier.status.value}
        )
        return SupplierDTO.model_validate(supplier, from_attributes=True)

    @staticmethod
    async def verify(supplier_id: int, current_user: UserDTO, session: AsyncSession) -> SupplierDTO:
        supplier = await SupplierService.get_entity(supplier_id, session)
        if supplier.status != SupplierStatus.APPROVED:
            raise ValidationException("status", "Only approved suppliers can be verified")
        supplier.verified = True
        await session_commit(session)
        logger.info(f"✅ Supplier {supplier.id} verified by admin {current_user.id}")
        return SupplierDTO.model_validate(supplier, from_attributes=True)

    @staticmethod
    async def delete(supplier_id: int, current_user: UserDTO, session: AsyncSession) -> None:
        supplier = await SupplierService.get_entity(supplier_id, session)
        if await OrderRepository.count(session, supplier_id=supplier.id) > 0:
            raise ValidationException("supplier", "Supplier has orders and cannot be deleted")
        user = await UserRepository.get_by_id(supplier.user_id, session)
        if user is not None and user.role == Role.SUPPLIER:
            user.role = Role.USER
        await SupplierRepository.delete(supplier.id, session)
        await session_commit(session)
        logger.info(f"🗑️ Supplier {supplier_id} deleted by admin {current_user.id}")
