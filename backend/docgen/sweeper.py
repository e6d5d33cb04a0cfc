from __future__ import annotations

import asyncio
import traceback
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional

from .config import settings
from .exceptions import StorageError
from .logger import logger
from .store import JobStore


class RetentionSweeper:
    """
    Periodically deletes jobs older than the retention window.

    Every `check_interval` the loop wakes up and sweeps if at least `period`
    has passed since the last successful sweep. The sweeper owns that
    bookkeeping; nothing else reads or writes `last_run`.
    """

    def __init__(
        self,
        store: JobStore,
        *,
        retention: timedelta = timedelta(days=settings.JOB_RETENTION_DAYS),
        period: timedelta = timedelta(seconds=settings.SWEEP_PERIOD_SECONDS),
        check_interval: float = settings.SWEEP_CHECK_INTERVAL_SECONDS,
        clock: Optional[Callable[[], datetime]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.store = store
        self.retention = retention
        self.period = period
        self.check_interval = check_interval
        self._clock = clock or store.now
        self._sleep = sleep
        self.last_run: Optional[datetime] = None
        self._task: Optional[asyncio.Task] = None

    def is_due(self) -> bool:
        if self.last_run is None:
            return True
        return self._clock() - self.last_run >= self.period

    async def sweep(self) -> int:
        cutoff = self._clock() - self.retention
        return await self.store.delete_older_than(cutoff)

    async def tick(self) -> Optional[int]:
        """Sweep if due. Returns the number of deleted jobs, or None when skipped or failed."""
        if not self.is_due():
            return None
        try:
            deleted = await self.sweep()
        except StorageError as e:
            logger.error(f"Retention sweep failed: {e.message}")
            return None
        except Exception as e:
            logger.error(
                f"Retention sweep crashed: {e}",
                extra={"traceback": traceback.format_exc()},
            )
            return None
        self.last_run = self._clock()
        logger.info("Retention sweep finished", extra={"deleted": deleted})
        return deleted

    async def run_forever(self) -> None:
        while True:
            await self._sleep(self.check_interval)
            await self.tick()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self.run_forever())
        logger.info(
            "Retention sweeper started",
            extra={
                "retention_days": self.retention.days,
                "check_interval_s": self.check_interval,
            },
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Retention sweeper stopped")
