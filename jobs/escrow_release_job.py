"""Escrow Auto-Release Job

Pays suppliers for orders that were delivered more than
ESCROW_AUTO_RELEASE_DAYS ago and have neither a pending refund nor an
open dispute.
"""

import asyncio
import logging
from datetime import datetime, timedelta

import config
from services.background_tasks import BackgroundTaskService

logger = logging.getLogger(__name__)


async def run_escrow_release_cycle() -> int:
    try:
        return await BackgroundTaskService.release_due_escrows()
    except Exception as e:
        logger.error(f"[Escrow Release] ❌ Cycle failed: {e}", exc_info=True)
        return 0


async def escrow_release_scheduler():
    """Runs release cycles at ESCROW_RELEASE_INTERVAL_SECONDS until cancelled."""
    interval_seconds = config.ESCROW_RELEASE_INTERVAL_SECONDS
    logger.info(
        f"[Escrow Release] Scheduler started "
        f"(interval: {interval_seconds}s, release after: {config.ESCROW_AUTO_RELEASE_DAYS} days)"
    )

    while True:
        try:
            await run_escrow_release_cycle()
            logger.debug(
                f"[Escrow Release] Next cycle at "
                f"{(datetime.now() + timedelta(seconds=interval_seconds)).strftime('%Y-%m-%d %H:%M:%S')}"
            )
            await asyncio.sleep(interval_seconds)
        except asyncio.CancelledError:
            logger.info("[Escrow Release] Scheduler stopped")
            break
