"""
Unit Tests: background jobs

BackgroundTaskService opens its own sessions; here they are redirected to the
test session so the jobs can be checked against the in-memory database.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest

import config
from enums.dispute import DisputeStatus, DisputeType
from enums.escrow_status import EscrowStatus
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus, PendingPaymentStatus
from conftest import set_order_state
from exceptions.supplier import SupplierNotFoundException
from jobs.escrow_release_job import run_escrow_release_cycle
from jobs.payment_timeout_job import PaymentTimeoutJob
from models.dispute import Dispute
from models.pending_payment import PendingPayment
from repositories.order import OrderRepository
from repositories.product import ProductRepository
from repositories.user import UserRepository
from repositories.wallet import WalletRepository
from services.background_tasks import BackgroundTaskService
from services.order import OrderService


@pytest.fixture
def db_session_patch(test_session):
    @asynccontextmanager
    async def _session():
        yield test_session

    with patch("services.background_tasks.get_db_session", _session):
        yield


@pytest.fixture
def delivered(test_session, make_user, make_supplier, make_product, make_order):
    """Paid order delivered `days_ago` days ago."""

    async def _setup(days_ago: int, supplier=None):
        buyer = await make_user()
        supplier = supplier or await make_supplier()
        order = await make_order(buyer, supplier, [(await make_product(supplier, price=1000.0), 1)])
        await set_order_state(test_session, order.id, OrderStatus.DELIVERED, PaymentStatus.PAID,
                              delivered_at=datetime.now() - timedelta(days=days_ago))
        return buyer.id, supplier.id, supplier.user_id, order.id

    return _setup


class TestEscrowAutoRelease:

    @pytest.mark.asyncio
    async def test_only_due_orders_are_released(self, test_session, db_session_patch, delivered):
        _, supplier_id, supplier_user_id, due_id = await delivered(config.ESCROW_AUTO_RELEASE_DAYS + 1)
        _, _, _, recent_id = await delivered(1)

        assert await BackgroundTaskService.release_due_escrows() == 1

        due = await OrderRepository.get_by_id(due_id, test_session)
        recent = await OrderRepository.get_by_id(recent_id, test_session)
        assert due.escrow_status == EscrowStatus.RELEASED
        assert due.released_by is None
        assert recent.escrow_status == EscrowStatus.HELD
        wallet = await WalletRepository.get_by_user_id(supplier_user_id, test_session)
        assert wallet.balance == 900.0

    @pytest.mark.asyncio
    async def test_open_dispute_is_skipped(self, test_session, db_session_patch, delivered):
        buyer_id, supplier_id, _, order_id = await delivered(config.ESCROW_AUTO_RELEASE_DAYS + 1)
        test_session.add(Dispute(order_id=order_id, user_id=buyer_id, seller_id=supplier_id,
                                 type=DisputeType.LATE_DELIVERY, reason="Arrived two weeks late",
                                 status=DisputeStatus.PENDING, evidence=[]))
        await test_session.commit()

        assert await run_escrow_release_cycle() == 0

        order = await OrderRepository.get_by_id(order_id, test_session)
        assert order.escrow_status == EscrowStatus.HELD

    @pytest.mark.asyncio
    async def test_failing_order_does_not_block_the_rest(self, test_session, db_session_patch, delivered):
        _, _, _, first_id = await delivered(config.ESCROW_AUTO_RELEASE_DAYS + 1)
        _, _, _, second_id = await delivered(config.ESCROW_AUTO_RELEASE_DAYS + 2)
        release_escrow = OrderService.release_escrow
        calls = []

        async def flaky_release(order_id, admin, session):
            calls.append(order_id)
            if len(calls) == 1:
                raise SupplierNotFoundException(supplier_id=999)
            return await release_escrow(order_id, admin, session)

        with patch.object(OrderService, "release_escrow", flaky_release):
            assert await BackgroundTaskService.release_due_escrows() == 1

        assert sorted(calls) == sorted([first_id, second_id])
        statuses = {(await OrderRepository.get_by_id(order_id, test_session)).escrow_status
                    for order_id in (first_id, second_id)}
        assert statuses == {EscrowStatus.HELD, EscrowStatus.RELEASED}

    @pytest.mark.asyncio
    async def test_cycle_survives_database_errors(self):
        with patch.object(BackgroundTaskService, "release_due_escrows", AsyncMock(side_effect=RuntimeError("db down"))):
            assert await run_escrow_release_cycle() == 0


class TestPaymentTimeout:

    @pytest.mark.asyncio
    async def test_expired_payments_are_failed(self, test_session, db_session_patch, make_user, make_supplier,
                                               make_product, make_order):
        buyer = await make_user()
        supplier = await make_supplier()
        order = await make_order(buyer, supplier, [(await make_product(supplier), 1)])
        test_session.add(PendingPayment(
            checkout_request_id="ws_CO_old", order_id=order.id, phone_number="254712345678",
            amount=order.total_amount, status=PendingPaymentStatus.PENDING,
            created_at=datetime.now() - timedelta(minutes=config.PAYMENT_TIMEOUT_MINUTES + 1)))
        await test_session.commit()

        assert await BackgroundTaskService.process_expired_payments() == 1

        order = await OrderRepository.get_by_id(order.id, test_session)
        assert order.payment_status == PaymentStatus.FAILED

    @pytest.mark.asyncio
    async def test_expired_flash_sales_are_switched_off(self, test_session, db_session_patch, make_supplier,
                                                        make_product):
        supplier = await make_supplier()
        now = datetime.now()
        ended = await make_product(supplier, flash_sale_active=True, flash_sale_discount_percentage=10.0,
                                   flash_sale_start=now - timedelta(days=2), flash_sale_end=now - timedelta(days=1))
        running = await make_product(supplier, flash_sale_active=True, flash_sale_discount_percentage=10.0,
                                     flash_sale_start=now - timedelta(days=1), flash_sale_end=now + timedelta(days=1))
        await test_session.commit()

        assert await BackgroundTaskService.end_expired_flash_sales() == 1

        assert (await ProductRepository.get_by_id(ended.id, test_session)).flash_sale_active is False
        assert (await ProductRepository.get_by_id(running.id, test_session)).flash_sale_active is True

    @pytest.mark.asyncio
    async def test_stale_unverified_accounts_are_removed(self, test_session, db_session_patch, make_user):
        registered_long_ago = datetime.now() - timedelta(hours=config.UNVERIFIED_ACCOUNT_TTL_HOURS + 1)
        stale = await make_user(verified=False, registered_at=registered_long_ago)
        fresh = await make_user(verified=False)
        verified = await make_user(registered_at=registered_long_ago)
        stale_id, fresh_id, verified_id = stale.id, fresh.id, verified.id
        await test_session.commit()

        assert await BackgroundTaskService.remove_unverified_accounts() == 1

        assert await UserRepository.get_by_id(stale_id, test_session) is None
        assert await UserRepository.get_by_id(fresh_id, test_session) is not None
        assert await UserRepository.get_by_id(verified_id, test_session) is not None

    @pytest.mark.asyncio
    async def test_one_failing_task_does_not_stop_the_cycle(self):
        with patch.object(BackgroundTaskService, "process_expired_payments",
                          AsyncMock(side_effect=RuntimeError("boom"))), \
                patch.object(BackgroundTaskService, "end_expired_flash_sales", AsyncMock(return_value=0)) as flash, \
                patch.object(BackgroundTaskService, "remove_unverified_accounts", AsyncMock(return_value=0)) as cleanup:
            await BackgroundTaskService.run_background_tasks()

        flash.assert_awaited_once()
        cleanup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_job_start_and_stop(self):
        job = PaymentTimeoutJob(check_interval_seconds=3600)
        with patch.object(BackgroundTaskService, "run_background_tasks", AsyncMock()) as run:
            await job.start()
            assert job.running
            await job.stop()

        assert not job.running
        assert run.await_count <= 1
