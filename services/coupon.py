import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import session_commit
from enums.coupon_discount_type import CouponDiscountType
from exceptions.base import ValidationException
from exceptions.coupon import CouponNotFoundException, DuplicateCouponException, CouponNotApplicableException
from models.coupon import Coupon, CouponDTO, CouponApplicationDTO, CouponCreateRequest, OffersDTO
from models.user import UserDTO
from repositories.coupon import CouponRepository
from repositories.user import UserRepository

logger = logging.getLogger(__name__)


class CouponService:

    @staticmethod
    async def create(request: CouponCreateRequest, session: AsyncSession) -> CouponDTO:
        if request.discount_type == CouponDiscountType.PERCENTAGE and request.discount_value > 100:
            raise ValidationException("discount_value", "Percentage discount cannot exceed 100")
        if await CouponRepository.get_by_code(request.code, session) is not None:
            raise DuplicateCouponException(request.code)
        coupon = await CouponRepository.create(Coupon(**request.model_dump()), session)
        await session_commit(session)
        logger.info(f"🎟️ Coupon {coupon.code} created ({coupon.discount_type.value} {coupon.discount_value})")
        return CouponDTO.model_validate(coupon, from_attributes=True)

    @staticmethod
    async def get_all(session: AsyncSession) -> list[CouponDTO]:
        coupons = await CouponRepository.get_all(session)
        return [CouponDTO.model_validate(c, from_attributes=True) for c in coupons]

    @staticmethod
    async def delete(coupon_id: int, session: AsyncSession) -> None:
        coupon = await CouponRepository.get_by_id(coupon_id, session)
        if coupon is None:
            raise CouponNotFoundException(coupon_id)
        await CouponRepository.delete(coupon_id, session)
        await session_commit(session)
        logger.info(f"🗑️ Coupon {coupon.code} deleted")

    @staticmethod
    def calculate(coupon: Coupon, total: float, now: datetime | None = None) -> CouponApplicationDTO:
        """
        Validate the coupon against an order total and compute the discount.

        Raises:
            CouponNotApplicableException: inactive, expired, exhausted or below minimum
        """
        now = now or datetime.now()
        if not coupon.active:
            raise CouponNotApplicableException(coupon.code, "Coupon is not active")
        if coupon.expiry_date <= now:
            raise CouponNotApplicableException(coupon.code, "Coupon has expired")
        if coupon.used_count >= coupon.usage_limit:
            raise CouponNotApplicableException(coupon.code, "Coupon usage limit reached")
        if total < coupon.min_order_value:
            raise CouponNotApplicableException(
                coupon.code, f"Minimum order value for this coupon is {coupon.min_order_value:.2f}")

        if coupon.discount_type == CouponDiscountType.PERCENTAGE:
            discount = total * coupon.discount_value / 100
        else:
            discount = coupon.discount_value
        discount = round(min(discount, total), 2)
        return CouponApplicationDTO(code=coupon.code, discount=discount, final_amount=round(max(total - discount, 0), 2))

    @staticmethod
    async def apply(code: str, total: float, session: AsyncSession) -> CouponApplicationDTO:
        """Preview only, does not consume a use."""
        coupon = await CouponRepository.get_by_code(code, session)
        if coupon is None:
            raise CouponNotFoundException(code)
        return CouponService.calculate(coupon, total)

    @staticmethod
    async def redeem(code: str, total: float, session: AsyncSession) -> CouponApplicationDTO:
        """Apply and consume one use. Caller commits."""
        coupon = await CouponRepository.get_by_code(code, session)
        if coupon is None:
            raise CouponNotFoundException(code)
        application = CouponService.calculate(coupon, total)
        coupon.used_count += 1
        logger.info(f"🎟️ Coupon {coupon.code} redeemed ({coupon.used_count}/{coupon.usage_limit}), discount {application.discount:.2f}")
        return application


class OffersService:

    @staticmethod
    async def get_offers(current_user: UserDTO, session: AsyncSession) -> OffersDTO:
        coupons = await CouponRepository.get_available(datetime.now(), session)
        user = await UserRepository.get_by_id(current_user.id, session)
        return OffersDTO(
            coupons=[CouponDTO.model_validate(c, from_attributes=True) for c in coupons],
            reward_points=round(user.reward_points, 2) if user else 0.0
        )

    @staticmethod
    async def award_points(user_id: int, paid_amount: float, session: AsyncSession) -> float:
        """1 point per REWARD_POINTS_PER_UNIT of a paid order. Caller commits."""
        user = await UserRepository.get_by_id(user_id, session)
        if user is None:
            return 0.0
        points = round(paid_amount / config.REWARD_POINTS_PER_UNIT, 2)
        user.reward_points = round(user.reward_points + points, 2)
        logger.info(f"⭐ User {user_id} earned {points} reward points")
        return points

    @staticmethod
    async def revoke_points(user_id: int, refunded_amount: float, session: AsyncSession) -> float:
        user = await UserRepository.get_by_id(user_id, session)
        if user is None:
            return 0.0
        points = round(refunded_amount / config.REWARD_POINTS_PER_UNIT, 2)
        user.reward_points = round(max(user.reward_points - points, 0.0), 2)
        logger.info(f"⭐ User {user_id} lost {points} reward points (refund)")
        return points
