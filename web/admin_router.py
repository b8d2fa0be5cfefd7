from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from enums.role import Role
from models.analytics import (
    DashboardDTO,
    DashboardStatsDTO,
    AdminAnalyticsDTO,
    SupplierAnalyticsDTO,
    CustomerAnalyticsDTO,
)
from models.user import UserDTO
from services.analytics import AnalyticsService
from web.dependencies import get_session, get_current_user, require_roles

admin_router = APIRouter(prefix="/admin", tags=["admin"])
analytics_router = APIRouter(prefix="/analytics", tags=["analytics"])


@admin_router.get("/dashboard")
async def dashboard(current_user: UserDTO = Depends(require_roles(Role.ADMIN)),
                    session: AsyncSession = Depends(get_session)) -> DashboardDTO:
    return await AnalyticsService.get_dashboard(session)


@admin_router.get("/stats")
async def dashboard_stats(current_user: UserDTO = Depends(require_roles(Role.ADMIN)),
                          session: AsyncSession = Depends(get_session)) -> DashboardStatsDTO:
    return await AnalyticsService.get_dashboard_stats(session)


@analytics_router.get("/admin")
async def admin_analytics(current_user: UserDTO = Depends(require_roles(Role.ADMIN)),
                          session: AsyncSession = Depends(get_session)) -> AdminAnalyticsDTO:
    return await AnalyticsService.get_admin_analytics(session)


@analytics_router.get("/supplier")
async def supplier_analytics(current_user: UserDTO = Depends(require_roles(Role.SUPPLIER)),
                             session: AsyncSession = Depends(get_session)) -> SupplierAnalyticsDTO:
    return await AnalyticsService.get_supplier_analytics(current_user, session)


@analytics_router.get("/customer")
async def customer_analytics(current_user: UserDTO = Depends(get_current_user),
                             session: AsyncSession = Depends(get_session)) -> CustomerAnalyticsDTO:
    return await AnalyticsService.get_customer_analytics(current_user, session)
