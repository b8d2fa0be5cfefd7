"""
After-sale endpoints: disputes, reviews and abuse reports.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from enums.dispute import DisputeStatus
from enums.report import ReportStatus, ReportEntityType
from enums.role import Role
from models.dispute import DisputeDTO, DisputeCreateRequest, DisputeStatusUpdateRequest
from models.report import ReportDTO, ReportCreateRequest, ReportStatusUpdateRequest
from models.review import ReviewDTO, ReviewCreateRequest, ReviewUpdateRequest
from models.user import UserDTO
from services.dispute import DisputeService
from services.report import ReportService
from services.review import ReviewService
from utils.pagination import PageDTO
from web.dependencies import generate_correlation_id, get_session, get_current_user, require_roles

logger = logging.getLogger(__name__)

dispute_router = APIRouter(prefix="/disputes", tags=["disputes"])
review_router = APIRouter(prefix="/reviews", tags=["reviews"])
report_router = APIRouter(prefix="/reports", tags=["reports"])

admin_only = require_roles(Role.ADMIN)


# === Disputes ===

@dispute_router.post("", status_code=status.HTTP_201_CREATED)
async def open_dispute(payload: DisputeCreateRequest,
                       current_user: UserDTO = Depends(get_current_user),
                       session: AsyncSession = Depends(get_session)) -> DisputeDTO:
    correlation_id = generate_correlation_id()
    dispute = await DisputeService.create(payload, current_user, session)
    logger.info(f"[{correlation_id}] Dispute {dispute.id} opened on order {dispute.order_id}")
    return dispute


@dispute_router.get("/mine")
async def my_disputes(current_user: UserDTO = Depends(get_current_user),
                      session: AsyncSession = Depends(get_session)) -> list[DisputeDTO]:
    return await DisputeService.get_my_disputes(current_user, session)


@dispute_router.get("")
async def list_disputes(page: int = Query(1, ge=1), limit: int = Query(20, ge=1, le=100),
                        dispute_status: DisputeStatus | None = Query(None, alias="status"),
                        current_user: UserDTO = Depends(admin_only),
                        session: AsyncSession = Depends(get_session)) -> PageDTO:
    return await DisputeService.get_disputes(page, limit, dispute_status, session)


@dispute_router.get("/{dispute_id}")
async def get_dispute(dispute_id: int,
                      current_user: UserDTO = Depends(get_current_user),
                      session: AsyncSession = Depends(get_session)) -> DisputeDTO:
    return await DisputeService.get_dispute(dispute_id, current_user, session)


@dispute_router.patch("/{dispute_id}/status")
async def update_dispute_status(dispute_id: int, payload: DisputeStatusUpdateRequest,
                                current_user: UserDTO = Depends(admin_only),
                                session: AsyncSession = Depends(get_session)) -> DisputeDTO:
    correlation_id = generate_correlation_id()
    logger.info(f"[{correlation_id}] Admin {current_user.id} moves dispute {dispute_id} to {payload.status.value}")
    return await DisputeService.update_status(dispute_id, payload, current_user, session)


@dispute_router.delete("/{dispute_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_dispute(dispute_id: int,
                         current_user: UserDTO = Depends(admin_only),
                         session: AsyncSession = Depends(get_session)) -> None:
    await DisputeService.delete(dispute_id, current_user, session)


# === Reviews ===

@review_router.post("", status_code=status.HTTP_201_CREATED)
async def add_review(payload: ReviewCreateRequest,
                     current_user: UserDTO = Depends(get_current_user),
                     session: AsyncSession = Depends(get_session)) -> ReviewDTO:
    return await ReviewService.add(payload, current_user, session)


@review_router.get("/product/{product_id}")
async def product_reviews(product_id: int, session: AsyncSession = Depends(get_session)) -> list[ReviewDTO]:
    return await ReviewService.get_by_product(product_id, session)


@review_router.get("/user/{user_id}")
async def user_reviews(user_id: int, session: AsyncSession = Depends(get_session)) -> list[ReviewDTO]:
    return await ReviewService.get_by_user(user_id, session)


@review_router.put("/{review_id}")
async def update_review(review_id: int, payload: ReviewUpdateRequest,
                        current_user: UserDTO = Depends(get_current_user),
                        session: AsyncSession = Depends(get_session)) -> ReviewDTO:
    return await ReviewService.update(review_id, payload, current_user, session)


@review_router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(review_id: int,
                        current_user: UserDTO = Depends(get_current_user),
                        session: AsyncSession = Depends(get_session)) -> None:
    await ReviewService.delete(review_id, current_user, session)


# === Reports ===

@report_router.post("", status_code=status.HTTP_201_CREATED)
async def create_report(payload: ReportCreateRequest,
                        current_user: UserDTO = Depends(get_current_user),
                        session: AsyncSession = Depends(get_session)) -> ReportDTO:
    return await ReportService.create(payload, current_user, session)


@report_router.get("")
async def list_reports(page: int = Query(1, ge=1), limit: int = Query(20, ge=1, le=100),
                       report_status: ReportStatus | None = Query(None, alias="status"),
                       entity_type: ReportEntityType | None = None,
                       current_user: UserDTO = Depends(admin_only),
                       session: AsyncSession = Depends(get_session)) -> PageDTO:
    return await ReportService.get_reports(page, limit, report_status, entity_type, session)


@report_router.patch("/{report_id}/status")
async def update_report_status(report_id: int, payload: ReportStatusUpdateRequest,
                               current_user: UserDTO = Depends(admin_only),
                               session: AsyncSession = Depends(get_session)) -> ReportDTO:
    return await ReportService.update_status(report_id, payload.status, current_user, session)
