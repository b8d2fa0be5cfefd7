import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from enums.role import Role
from enums.supplier_status import SupplierStatus
from models.supplier import (
    SupplierDTO,
    SupplierRegisterRequest,
    SupplierUpdateRequest,
    SupplierStatusUpdateRequest,
)
from models.user import UserDTO
from services.supplier import SupplierService
from utils.pagination import PageDTO
from web.dependencies import generate_correlation_id, get_session, get_current_user, require_roles

logger = logging.getLogger(__name__)

supplier_router = APIRouter(prefix="/suppliers", tags=["suppliers"])


@supplier_router.post("", status_code=status.HTTP_201_CREATED)
async def register_supplier(payload: SupplierRegisterRequest,
                            current_user: UserDTO = Depends(get_current_user),
                            session: AsyncSession = Depends(get_session)) -> SupplierDTO:
    correlation_id = generate_correlation_id()
    supplier = await SupplierService.register(payload, current_user, session)
    logger.info(f"[{correlation_id}] Supplier profile {supplier.id} submitted by user {current_user.id}")
    return supplier


@supplier_router.get("")
async def list_suppliers(page: int = 1, limit: int = 20,
                         status: SupplierStatus | None = None, verified: bool | None = None,
                         current_user: UserDTO = Depends(require_roles(Role.ADMIN)),
                         session: AsyncSession = Depends(get_session)) -> PageDTO:
    return await SupplierService.get_suppliers(page, limit, status, verified, session)


@supplier_router.get("/me")
async def my_supplier_profile(current_user: UserDTO = Depends(get_current_user),
                              session: AsyncSession = Depends(get_session)) -> SupplierDTO:
    return await SupplierService.get_my_profile(current_user, session)


@supplier_router.get("/{supplier_id}")
async def get_supplier(supplier_id: int, session: AsyncSession = Depends(get_session)) -> SupplierDTO:
    return await SupplierService.get_supplier(supplier_id, session)


@supplier_router.put("/{supplier_id}")
async def update_supplier(supplier_id: int, payload: SupplierUpdateRequest,
                          current_user: UserDTO = Depends(get_current_user),
                          session: AsyncSession = Depends(get_session)) -> SupplierDTO:
    return await SupplierService.update(supplier_id, payload, current_user, session)


@supplier_router.patch("/{supplier_id}/status")
async def update_supplier_status(supplier_id: int, payload: SupplierStatusUpdateRequest,
                                 current_user: UserDTO = Depends(require_roles(Role.ADMIN)),
                                 session: AsyncSession = Depends(get_session)) -> SupplierDTO:
    correlation_id = generate_correlation_id()
    logger.info(f"[{correlation_id}] Admin {current_user.id} sets supplier {supplier_id} to {payload.status.value}")
    return await SupplierService.update_status(supplier_id, payload, current_user, session)


@supplier_router.patch("/{supplier_id}/verify")
async def verify_supplier(supplier_id: int,
                          current_user: UserDTO = Depends(require_roles(Role.ADMIN)),
                          session: AsyncSession = Depends(get_session)) -> SupplierDTO:
    return await SupplierService.verify(supplier_id, current_user, session)


@supplier_router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_supplier(supplier_id: int,
                          current_user: UserDTO = Depends(require_roles(Role.ADMIN)),
                          session: AsyncSession = Depends(get_session)) -> None:
    await SupplierService.delete(supplier_id, current_user, session)
