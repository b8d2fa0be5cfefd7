import logging
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError

import config
from db import get_db_session, session_commit
from exceptions.base import MarketplaceException
from exceptions.order import EscrowReleaseException
from repositories.order import OrderRepository
from repositories.user import UserRepository
from services.order import OrderService
from services.payment import PaymentService
from services.product import ProductService

logger = logging.getLogger(__name__)


class BackgroundTaskService:

    @staticmethod
    async def process_expired_payments() -> int:
        """Fail M-Pesa requests nobody answered within PAYMENT_TIMEOUT_MINUTES."""
        async with get_db_session() as session:
            return await PaymentService.expire_stale_pending_payments(session)

    @staticmethod
    async def release_due_escrows() -> int:
        """
        Release escrow of orders delivered more than ESCROW_AUTO_RELEASE_DAYS ago.

        Orders with a pending refund or an open dispute are skipped; each order is
        released in its own transaction so one failure does not block the rest.
        """
        delivered_before = datetime.now() - timedelta(days=config.ESCROW_AUTO_RELEASE_DAYS)
        released = 0
        async with get_db_session() as session:
            candidates = await OrderRepository.get_escrow_release_candidates(delivered_before, session)
            order_ids = [order.id for order in candidates]

        for order_id in order_ids:
            async with get_db_session() as session:
                try:
                    await OrderService.release_escrow(order_id, None, session)
                    released += 1
                except EscrowReleaseException as e:
                    await session.rollback()
                    logger.info(f"Escrow of order {order_id} not released: {e.reason}")
                except (MarketplaceException, SQLAlchemyError) as e:
                    await session.rollback()
                    logger.error(f"❌ Escrow auto-release of order {order_id} failed: {e}", exc_info=True)
        if released:
            logger.info(f"🔓 Auto-released escrow of {released} order(s)")
        return released

    @staticmethod
    async def end_expired_flash_sales() -> int:
        async with get_db_session() as session:
            return await ProductService.end_expired_flash_sales(session)

    @staticmethod
    async def remove_unverified_accounts() -> int:
        """Delete accounts still unverified UNVERIFIED_ACCOUNT_TTL_HOURS after registration."""
        registered_before = datetime.now() - timedelta(hours=config.UNVERIFIED_ACCOUNT_TTL_HOURS)
        async with get_db_session() as session:
            removed = await UserRepository.delete_unverified(registered_before, session)
            await session_commit(session)
        if removed:
            logger.info(f"🧹 Removed {removed} unverified account(s)")
        return removed

    @staticmethod
    async def run_background_tasks() -> None:
        """Run one cycle of background tasks with error isolation."""
        for task in (BackgroundTaskService.process_expired_payments,
                     BackgroundTaskService.end_expired_flash_sales,
                     BackgroundTaskService.remove_unverified_accounts):
            try:
                await task()
            except Exception as e:
                logger.error(f"Background task {task.__name__} failed: {e}", exc_info=True)
