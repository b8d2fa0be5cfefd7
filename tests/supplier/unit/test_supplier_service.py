"""
Unit Tests: SupplierService

Supplier onboarding and admin review:
- One application per user, starting Pending/unverified
- Approve promotes the user, rejecting an approved supplier demotes it
- Verification only for approved suppliers
- Deletion blocked while orders exist
"""

import pytest

from conftest import as_dto
from enums.role import Role
from enums.supplier_status import SupplierStatus
from exceptions.base import PermissionDeniedException, ValidationException
from exceptions.supplier import SupplierAlreadyRegisteredException, SupplierNotFoundException
from models.supplier import SupplierRegisterRequest, SupplierStatusUpdateRequest, SupplierUpdateRequest
from repositories.supplier import SupplierRepository
from repositories.user import UserRepository
from services.supplier import SupplierService


def application(shop_name: str = "Jane's Gadgets") -> SupplierRegisterRequest:
    return SupplierRegisterRequest(
        full_name="Jane Wanjiru",
        phone_number="0712345678",
        address="Moi Avenue 1, Nairobi",
        id_number="12345678",
        shop_name=shop_name,
    )


class TestRegistration:

    @pytest.mark.asyncio
    async def test_application_starts_pending(self, test_session, make_user):
        user = await make_user()
        supplier = await SupplierService.register(application(), as_dto(user), test_session)

        assert supplier.status == SupplierStatus.PENDING
        assert supplier.verified is False
        assert supplier.user_id == user.id
        # The role only changes on approval
        assert (await UserRepository.get_by_id(user.id, test_session)).role == Role.USER

    @pytest.mark.asyncio
    async def test_one_application_per_user(self, test_session, make_user):
        user = await make_user()
        await SupplierService.register(application(), as_dto(user), test_session)

        with pytest.raises(SupplierAlreadyRegisteredException):
            await SupplierService.register(application("Second shop"), as_dto(user), test_session)

    @pytest.mark.asyncio
    async def test_my_profile_requires_application(self, test_session, make_user):
        user = await make_user()
        with pytest.raises(SupplierNotFoundException):
            await SupplierService.get_my_profile(as_dto(user), test_session)


class TestReview:

    @pytest.mark.asyncio
    async def test_approve_promotes_user(self, test_session, make_user, make_supplier):
        admin = await make_user(role=Role.ADMIN)
        supplier = await make_supplier(status=SupplierStatus.PENDING)

        result = await SupplierService.update_status(
            supplier.id, SupplierStatusUpdateRequest(status=SupplierStatus.APPROVED), as_dto(admin), test_session
        )

        assert result.status == SupplierStatus.APPROVED
        user = await UserRepository.get_by_id(supplier.user_id, test_session)
        assert user.role == Role.SUPPLIER
        reviewed = await SupplierRepository.get_by_id(supplier.id, test_session)
        assert reviewed.reviewed_by_admin_id == admin.id
        assert reviewed.reviewed_at is not None

    @pytest.mark.asyncio
    async def test_rejecting_approved_supplier_demotes_user(self, test_session, make_user, make_supplier):
        admin = await make_user(role=Role.ADMIN)
        supplier = await make_supplier(status=SupplierStatus.APPROVED)

        result = await SupplierService.update_status(
            supplier.id,
            SupplierStatusUpdateRequest(status=SupplierStatus.REJECTED, reason="Fake documents"),
            as_dto(admin),
            test_session
        )

        assert result.status == SupplierStatus.REJECTED
        assert result.verified is False
        assert (await UserRepository.get_by_id(supplier.user_id, test_session)).role == Role.USER
        assert (await SupplierRepository.get_by_id(supplier.id, test_session)).rejection_reason == "Fake documents"

    @pytest.mark.asyncio
    async def test_verify_requires_approval(self, test_session, make_user, make_supplier):
        admin = await make_user(role=Role.ADMIN)
        pending = await make_supplier(status=SupplierStatus.PENDING)
        approved = await make_supplier(status=SupplierStatus.APPROVED)

        with pytest.raises(ValidationException):
            await SupplierService.verify(pending.id, as_dto(admin), test_session)
        assert (await SupplierService.verify(approved.id, as_dto(admin), test_session)).verified is True

    @pytest.mark.asyncio
    async def test_list_filters_by_status(self, test_session, make_supplier):
        await make_supplier(status=SupplierStatus.PENDING)
        await make_supplier(status=SupplierStatus.APPROVED)
        await make_supplier(status=SupplierStatus.APPROVED)

        page = await SupplierService.get_suppliers(1, 10, SupplierStatus.APPROVED, None, test_session)

        assert page.total == 2
        assert all(s.status == SupplierStatus.APPROVED for s in page.items)


class TestUpdateAndDelete:

    @pytest.mark.asyncio
    async def test_owner_updates_profile(self, test_session, make_supplier):
        supplier = await make_supplier()
        owner = await UserRepository.get_by_id(supplier.user_id, test_session)

        result = await SupplierService.update(
            supplier.id, SupplierUpdateRequest(shop_name="Renamed"), as_dto(owner), test_session
        )

        assert result.shop_name == "Renamed"
        assert result.full_name == supplier.full_name

    @pytest.mark.asyncio
    async def test_stranger_cannot_update(self, test_session, make_user, make_supplier):
        supplier = await make_supplier()
        stranger = await make_user()

        with pytest.raises(PermissionDeniedException):
            await SupplierService.update(supplier.id, SupplierUpdateRequest(shop_name="Mine"), as_dto(stranger),
                                         test_session)

    @pytest.mark.asyncio
    async def test_delete_demotes_user(self, test_session, make_user, make_supplier):
        admin = await make_user(role=Role.ADMIN)
        supplier = await make_supplier()
        user_id = supplier.user_id

        await SupplierService.delete(supplier.id, as_dto(admin), test_session)

        assert await SupplierRepository.get_by_id(supplier.id, test_session) is None
        assert (await UserRepository.get_by_id(user_id, test_session)).role == Role.USER

    @pytest.mark.asyncio
    async def test_delete_blocked_by_orders(self, test_session, make_user, make_supplier, make_product, make_order):
        admin = await make_user(role=Role.ADMIN)
        buyer = await make_user()
        supplier = await make_supplier()
        product = await make_product(supplier)
        await make_order(buyer, supplier, [(product, 1)])

        with pytest.raises(ValidationException):
            await SupplierService.delete(supplier.id, as_dto(admin), test_session)
