import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from enums.report import ReportEntityType, ReportStatus
from exceptions.product import ProductNotFoundException
from exceptions.report import ReportNotFoundException, SelfReportException, InvalidReportTransitionException
from exceptions.user import UserNotFoundException
from models.report import Report, ReportDTO, ReportCreateRequest
from models.user import UserDTO
from repositories.product import ProductRepository
from repositories.report import ReportRepository
from repositories.supplier import SupplierRepository
from repositories.user import UserRepository
from utils.pagination import build_page, PageDTO


class ReportService:

    @staticmethod
    async def create(request: ReportCreateRequest, current_user: UserDTO, session: AsyncSession) -> ReportDTO:
        """Reported entity must exist and must not be the reporter (or the reporter's own product)."""
        match request.entity_type:
            case ReportEntityType.USER:
                if request.reported_entity_id == current_user.id:
                    raise SelfReportException(current_user.id)
                if await UserRepository.get_by_id(request.reported_entity_id, session) is None:
                    raise UserNotFoundException(user_id=request.reported_entity_id)
            case ReportEntityType.PRODUCT:
                product = await ProductRepository.get_by_id(request.reported_entity_id, session)
                if product is None:
                    raise ProductNotFoundException(request.reported_entity_id)
                supplier = await SupplierRepository.get_by_id(product.supplier_id, session)
                if supplier is not None and supplier.user_id == current_user.id:
                    raise SelfReportException(current_user.id)

        report = await ReportRepository.create(Report(
            reporter_id=current_user.id,
            reported_entity_id=request.reported_entity_id,
            entity_type=request.entity_type,
            type=request.type,
            reason=request.reason.strip(),
            status=ReportStatus.PENDING,
        ), session)
        await session_commit(session)
        logging.info(f"🚩 Report {report.id}: {report.entity_type.value} {report.reported_entity_id} "
                     f"reported for {report.type.value} by user {current_user.id}")
        return ReportDTO.model_validate(report, from_attributes=True)

    @staticmethod
    async def get_reports(page: int, limit: int, status: ReportStatus | None, entity_type: ReportEntityType | None,
                          session: AsyncSession) -> PageDTO:
        reports = await ReportRepository.get_paginated(page, limit, status, entity_type, session)
        count = await ReportRepository.count(session, status=status, entity_type=entity_type)
        return build_page(reports, page, limit, count)

    @staticmethod
    async def update_status(report_id: int, status: ReportStatus, current_user: UserDTO,
                            session: AsyncSession) -> ReportDTO:
        """Pending reports are either Resolved or Ignored, both final."""
        report = await ReportRepository.get_by_id(report_id, session)
        if report is None:
            raise ReportNotFoundException(report_id)
        if report.status != ReportStatus.PENDING or status == ReportStatus.PENDING:
            raise InvalidReportTransitionException(report.id, report.status.value, status.value)
        report.status = status
        report.handled_by = current_user.id
        report.handled_at = datetime.now()
        await session_commit(session)
        logging.info(f"Report {report.id} marked {status.value} by admin {current_user.id}")
        return ReportDTO.model_validate(report, from_attributes=True)
