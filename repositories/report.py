from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.report import ReportStatus, ReportEntityType
from models.report import Report, ReportDTO
from utils.pagination import page_offset


class ReportRepository:
    @staticmethod
    async def create(report: Report, session: AsyncSession) -> Report:
        session.add(report)
        await session_flush(session)
        return report

    @staticmethod
    async def get_by_id(report_id: int, session: AsyncSession) -> Report | None:
        stmt = select(Report).where(Report.id == report_id)
        report = await session_execute(stmt, session)
        return report.scalar()

    @staticmethod
    def _filters(status: ReportStatus | None, entity_type: ReportEntityType | None) -> list:
        conditions = []
        if status is not None:
            conditions.append(Report.status == status)
        if entity_type is not None:
            conditions.append(Report.entity_type == entity_type)
        return conditions

    @staticmethod
    async def get_paginated(page: int, limit: int, status: ReportStatus | None,
                            entity_type: ReportEntityType | None, session: AsyncSession) -> list[ReportDTO]:
        stmt = (select(Report)
                .where(*ReportRepository._filters(status, entity_type))
                .order_by(Report.created_at.desc())
                .limit(limit)
                .offset(page_offset(page, limit)))
        reports = await session_execute(stmt, session)
        return [ReportDTO.model_validate(r, from_attributes=True) for r in reports.scalars().all()]

    @staticmethod
    async def count(session: AsyncSession, status: ReportStatus | None = None,
                    entity_type: ReportEntityType | None = None) -> int:
        stmt = select(func.count(Report.id)).where(*ReportRepository._filters(status, entity_type))
        count = await session_execute(stmt, session)
        return count.scalar_one()
