"""
Periodic cleanup of idle rate-limit entries and expired sessions.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Callable, Optional

from src.app.services.keyed_lock import KeyedLock
from src.app.services.rate_limiter import RateLimiter
from src.domain.base import utcnow

logger = logging.getLogger(__name__)


class CleanupScheduler:
    """
    Runs cleanup on a fixed interval in a background asyncio task.

    uow_scope is a callable returning an async context manager that yields
    a fresh UnitOfWork per run.
    """

    def __init__(
        self,
        uow_scope: Callable,
        locks: KeyedLock,
        interval_seconds: float,
        rate_limit_retention: timedelta,
        clock=utcnow,
    ):
        self.uow_scope = uow_scope
        self.locks = locks
        self.interval_seconds = interval_seconds
        self.rate_limit_retention = rate_limit_retention
        self.clock = clock
        self._task: Optional[asyncio.Task] = None

    async def run_once(self) -> dict:
        async with self.uow_scope() as uow:
            limiter = RateLimiter(uow, self.locks, clock=self.clock)
            purged_entries = await limiter.purge_idle(self.rate_limit_retention)

            async with uow:
                purged_sessions = await uow.sessions.delete_expired(self.clock())
                await uow.commit()

        if purged_entries or purged_sessions:
            logger.info(
                f"Cleanup removed {purged_entries} rate limit entries "
                f"and {purged_sessions} expired sessions"
            )
        return {"rate_limit_entries": purged_entries, "sessions": purged_sessions}

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._loop())
            logger.info("Cleanup scheduler started")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Cleanup scheduler stopped")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.run_once()
            except Exception:
                # Keep the loop alive; the next interval retries
                logger.exception("Cleanup run failed")
