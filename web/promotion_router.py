from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from enums.role import Role
from models.coupon import CouponDTO, CouponApplicationDTO, CouponCreateRequest, CouponApplyRequest, OffersDTO
from models.user import UserDTO
from models.wallet import WalletDTO, WalletTransactionDTO, WalletAmountRequest
from services.coupon import CouponService, OffersService
from services.wallet import WalletService
from utils.pagination import PageDTO
from web.dependencies import get_session, get_current_user, require_roles

coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])
offers_router = APIRouter(prefix="/offers", tags=["coupons"])
wallet_router = APIRouter(prefix="/wallet", tags=["wallet"])

admin_only = require_roles(Role.ADMIN)


# === Coupons / offers ===

@coupon_router.post("", status_code=status.HTTP_201_CREATED)
async def create_coupon(payload: CouponCreateRequest,
                        current_user: UserDTO = Depends(admin_only),
                        session: AsyncSession = Depends(get_session)) -> CouponDTO:
    return await CouponService.create(payload, session)


@coupon_router.get("")
async def list_coupons(current_user: UserDTO = Depends(admin_only),
                       session: AsyncSession = Depends(get_session)) -> list[CouponDTO]:
    return await CouponService.get_all(session)


@coupon_router.delete("/{coupon_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_coupon(coupon_id: int,
                        current_user: UserDTO = Depends(admin_only),
                        session: AsyncSession = Depends(get_session)) -> None:
    await CouponService.delete(coupon_id, session)


@coupon_router.post("/apply")
async def apply_coupon(payload: CouponApplyRequest,
                       current_user: UserDTO = Depends(get_current_user),
                       session: AsyncSession = Depends(get_session)) -> CouponApplicationDTO:
    return await CouponService.apply(payload.code, payload.total, session)


@offers_router.get("")
async def get_offers(current_user: UserDTO = Depends(get_current_user),
                     session: AsyncSession = Depends(get_session)) -> OffersDTO:
    return await OffersService.get_offers(current_user, session)


# === Wallet ===

@wallet_router.get("")
async def get_wallet(current_user: UserDTO = Depends(get_current_user),
                     session: AsyncSession = Depends(get_session)) -> WalletDTO:
    return await WalletService.get_wallet(current_user, session)


@wallet_router.post("/deposit")
async def deposit(payload: WalletAmountRequest,
                  current_user: UserDTO = Depends(get_current_user),
                  session: AsyncSession = Depends(get_session)) -> WalletDTO:
    return await WalletService.deposit(payload, current_user, session)


@wallet_router.post("/withdraw")
async def withdraw(payload: WalletAmountRequest,
                   current_user: UserDTO = Depends(get_current_user),
                   session: AsyncSession = Depends(get_session)) -> WalletDTO:
    return await WalletService.withdraw(payload, current_user, session)


@wallet_router.get("/transactions")
async def wallet_transactions(current_user: UserDTO = Depends(get_current_user),
                              session: AsyncSession = Depends(get_session)) -> list[WalletTransactionDTO]:
    return await WalletService.get_transactions(current_user, session)


@wallet_router.get("/all")
async def list_wallets(page: int = Query(1, ge=1), limit: int = Query(20, ge=1, le=100),
                       current_user: UserDTO = Depends(admin_only),
                       session: AsyncSession = Depends(get_session)) -> PageDTO:
    return await WalletService.list_wallets(page, limit, session)
