"""
Unit Tests: CouponService and OffersService
"""

from datetime import datetime, timedelta

import pytest

from conftest import as_dto
from enums.coupon_discount_type import CouponDiscountType
from exceptions.base import ValidationException
from exceptions.coupon import CouponNotApplicableException, CouponNotFoundException, DuplicateCouponException
from models.coupon import Coupon, CouponCreateRequest
from services.coupon import CouponService, OffersService


def make_coupon(**fields) -> Coupon:
    values = dict(code="SAVE10", discount_type=CouponDiscountType.PERCENTAGE, discount_value=10.0,
                  min_order_value=0.0, expiry_date=datetime.now() + timedelta(days=1), usage_limit=3,
                  used_count=0, active=True)
    values.update(fields)
    return Coupon(**values)


class TestCalculate:

    def test_percentage(self):
        application = CouponService.calculate(make_coupon(), 1500.0)

        assert application.discount == 150.0
        assert application.final_amount == 1350.0

    def test_fixed_is_capped_at_total(self):
        application = CouponService.calculate(
            make_coupon(discount_type=CouponDiscountType.FIXED, discount_value=500.0), 300.0)

        assert application.discount == 300.0
        assert application.final_amount == 0.0

    @pytest.mark.parametrize("fields,total", [
        ({"active": False}, 1000.0),
        ({"expiry_date": datetime.now() - timedelta(seconds=1)}, 1000.0),
        ({"used_count": 3}, 1000.0),
        ({"min_order_value": 2000.0}, 1999.99),
    ])
    def test_not_applicable(self, fields, total):
        with pytest.raises(CouponNotApplicableException):
            CouponService.calculate(make_coupon(**fields), total)

    def test_minimum_order_value_is_inclusive(self):
        application = CouponService.calculate(make_coupon(min_order_value=2000.0), 2000.0)

        assert application.discount == 200.0


class TestCouponLifecycle:

    @pytest.mark.asyncio
    async def test_create_normalizes_code(self, test_session):
        coupon = await CouponService.create(CouponCreateRequest(
            code=" welcome ", discount_type=CouponDiscountType.FIXED, discount_value=100.0,
            expiry_date=datetime.now() + timedelta(days=7), usage_limit=10), test_session)

        assert coupon.code == "WELCOME"
        assert coupon.used_count == 0

    @pytest.mark.asyncio
    async def test_duplicate_code(self, test_session):
        request = CouponCreateRequest(code="WELCOME", discount_type=CouponDiscountType.FIXED, discount_value=100.0,
                                      expiry_date=datetime.now() + timedelta(days=7))
        await CouponService.create(request, test_session)

        with pytest.raises(DuplicateCouponException):
            await CouponService.create(request, test_session)

    @pytest.mark.asyncio
    async def test_percentage_above_100_is_rejected(self, test_session):
        with pytest.raises(ValidationException):
            await CouponService.create(CouponCreateRequest(
                code="TOOMUCH", discount_type=CouponDiscountType.PERCENTAGE, discount_value=150.0,
                expiry_date=datetime.now() + timedelta(days=7)), test_session)

    @pytest.mark.asyncio
    async def test_apply_is_a_preview_and_redeem_consumes(self, test_session):
        coupon = make_coupon(usage_limit=1)
        test_session.add(coupon)
        await test_session.flush()

        await CouponService.apply("save10", 1000.0, test_session)
        assert coupon.used_count == 0

        await CouponService.redeem("save10", 1000.0, test_session)
        assert coupon.used_count == 1

        with pytest.raises(CouponNotApplicableException):
            await CouponService.redeem("save10", 1000.0, test_session)

    @pytest.mark.asyncio
    async def test_unknown_code(self, test_session):
        with pytest.raises(CouponNotFoundException):
            await CouponService.apply("NOPE", 100.0, test_session)


class TestRewardPoints:

    @pytest.mark.asyncio
    async def test_award_and_revoke(self, test_session, make_user):
        user = await make_user()

        assert await OffersService.award_points(user.id, 2550.0, test_session) == 25.5
        assert user.reward_points == 25.5

        await OffersService.revoke_points(user.id, 5000.0, test_session)
        assert user.reward_points == 0.0

    @pytest.mark.asyncio
    async def test_offers_lists_usable_coupons(self, test_session, make_user):
        user = await make_user(reward_points=12.0)
        test_session.add_all([
            make_coupon(code="LIVE"),
            make_coupon(code="EXPIRED", expiry_date=datetime.now() - timedelta(days=1)),
            make_coupon(code="OFF", active=False),
            make_coupon(code="USEDUP", used_count=3),
        ])
        await test_session.flush()

        offers = await OffersService.get_offers(as_dto(user), test_session)

        assert [c.code for c in offers.coupons] == ["LIVE"]
        assert offers.reward_points == 12.0
