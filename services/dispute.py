import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from enums.dispute import DisputeStatus
from enums.order_status import OrderStatus
from enums.role import Role
from exceptions.base import PermissionDeniedException
from exceptions.dispute import DisputeNotFoundException, DisputeAlreadyOpenException, DisputeNotAllowedException
from exceptions.order import OrderOwnershipException, ProductNotInOrderException
from models.dispute import Dispute, DisputeDTO, DisputeCreateRequest, DisputeStatusUpdateRequest
from models.user import UserDTO
from repositories.dispute import DisputeRepository
from repositories.supplier import SupplierRepository
from services.notification import NotificationService
from services.order import OrderService
from utils.dispute_state_machine import DisputeStateMachine
from utils.pagination import build_page, PageDTO

logger = logging.getLogger(__name__)


class DisputeService:

    @staticmethod
    async def get_entity(dispute_id: int, session: AsyncSession) -> Dispute:
        dispute = await DisputeRepository.get_by_id(dispute_id, session)
        if dispute is None:
            raise DisputeNotFoundException(dispute_id)
        return dispute

    @staticmethod
    async def _supplier_user_id(supplier_id: int, session: AsyncSession) -> int | None:
        supplier = await SupplierRepository.get_by_id(supplier_id, session)
        return supplier.user_id if supplier else None

    @staticmethod
    async def create(request: DisputeCreateRequest, current_user: UserDTO, session: AsyncSession) -> DisputeDTO:
        """
        Buyer opens a dispute on one of their orders.

        Only one open dispute (Pending, In Review, Escalated) per order.
        """
        if current_user.role != Role.USER:
            raise PermissionDeniedException(current_user.id, "open a dispute")
        order = await OrderService.get_order_entity(request.order_id, session)
        if order.buyer_id != current_user.id:
            raise OrderOwnershipException(order.id, current_user.id)
        if order.status in (OrderStatus.PENDING, OrderStatus.CANCELLED):
            raise DisputeNotAllowedException(order.id, order.status.value)
        if request.product_id is not None and request.product_id not in {i.product_id for i in order.items}:
            raise ProductNotInOrderException(order.id, request.product_id)
        open_dispute = await DisputeRepository.get_open_by_order_id(order.id, session)
        if open_dispute is not None:
            raise DisputeAlreadyOpenException(order.id, open_dispute.id)

        dispute = await DisputeRepository.create(Dispute(
            order_id=order.id,
            user_id=current_user.id,
            seller_id=order.supplier_id,
            product_id=request.product_id,
            type=request.type,
            reason=request.reason,
            evidence=request.evidence,
            status=DisputeStatus.PENDING,
        ), session)
        await session_commit(session)

        logger.info(f"⚠️ Dispute {dispute.id} opened on order {order.id} by user {current_user.id} ({dispute.type.value})")
        await NotificationService.dispute_updated(dispute, await DisputeService._supplier_user_id(order.supplier_id, session))
        return DisputeDTO.model_validate(dispute, from_attributes=True)

    @staticmethod
    async def get_my_disputes(current_user: UserDTO, session: AsyncSession) -> list[DisputeDTO]:
        return await DisputeRepository.get_by_user_id(current_user.id, session)

    @staticmethod
    async def get_disputes(page: int, limit: int, status: DisputeStatus | None, session: AsyncSession) -> PageDTO:
        disputes = await DisputeRepository.get_paginated(page, limit, status, session)
        count = await DisputeRepository.count(session, statuses=[status] if status else None)
        return build_page(disputes, page, limit, count)

    @staticmethod
    async def get_dispute(dispute_id: int, current_user: UserDTO, session: AsyncSession) -> DisputeDTO:
        dispute = await DisputeService.get_entity(dispute_id, session)
        if current_user.role != Role.ADMIN and dispute.user_id != current_user.id:
            supplier = await SupplierRepository.get_by_user_id(current_user.id, session)
            if supplier is None or supplier.id != dispute.seller_id:
                raise PermissionDeniedException(current_user.id, f"view dispute {dispute_id}")
        return DisputeDTO.model_validate(dispute, from_attributes=True)

    @staticmethod
    async def update_status(dispute_id: int, request: DisputeStatusUpdateRequest, current_user: UserDTO,
                            session: AsyncSession) -> DisputeDTO:
        dispute = await DisputeService.get_entity(dispute_id, session)
        DisputeStateMachine.ensure_transition(dispute.id, dispute.status, request.status, current_user.id)
        dispute.status = request.status
        if request.resolution_notes is not None:
            dispute.resolution_notes = request.resolution_notes
        if request.status in (DisputeStatus.RESOLVED, DisputeStatus.CLOSED) and dispute.resolved_at is None:
            dispute.resolved_by = current_user.id
            dispute.resolved_at = datetime.now()
        await session_commit(session)

        await NotificationService.dispute_updated(dispute, await DisputeService._supplier_user_id(dispute.seller_id, session))
        return DisputeDTO.model_validate(dispute, from_attributes=True)

    @staticmethod
    async def delete(dispute_id: int, current_user: UserDTO, session: AsyncSession) -> None:
        await DisputeService.get_entity(dispute_id, session)
        await DisputeRepository.delete(dispute_id, session)
        await session_commit(session)
        logger.info(f"🗑️ Dispute {dispute_id} deleted by admin {current_user.id}")
