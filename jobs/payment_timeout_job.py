"""Payment Timeout Job

Periodically fails M-Pesa payment requests that were never confirmed and
switches off flash sales whose window has closed.
"""

import asyncio
import logging

from services.background_tasks import BackgroundTaskService

logger = logging.getLogger(__name__)


class PaymentTimeoutJob:

    def __init__(self, check_interval_seconds: int = 60):
        self.check_interval_seconds = check_interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info(f"[Payment Timeout] Job started (interval: {self.check_interval_seconds}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("[Payment Timeout] Job stopped")

    async def _run(self) -> None:
        while True:
            await BackgroundTaskService.run_background_tasks()
            await asyncio.sleep(self.check_interval_seconds)
