"""
Rate Limiter

Per-origin attempt counting for login, registration and admin login.

Business Rules:
- Every gate check that is not already blocked counts as an attempt,
  whether or not the credentials later turn out to be valid
- Attempts count inside [first_attempt_at, first_attempt_at + window);
  a check outside the window starts a fresh window at 1
- Exceeding max_attempts blocks the origin for block_duration and denies
  the request that crossed the threshold
- A block that has run out is cleared and the check starts a fresh window
- A fully successful authentication deletes the origin's entry
- Storage read failures fail open; a block that cannot be persisted is
  retried once and the request is denied regardless
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from src.app.repositories.errors import StorageError
from src.app.services.keyed_lock import KeyedLock
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import RateLimitEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after_seconds: int = 0
    blocked_until: Optional[datetime] = None
    message: str = ""

    @property
    def retry_after_minutes(self) -> int:
        return math.ceil(self.retry_after_seconds / 60)


class RateLimiter:
    def __init__(
        self,
        uow: UnitOfWork,
        locks: KeyedLock,
        max_attempts: int = 5,
        window: timedelta = timedelta(minutes=15),
        block_duration: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.locks = locks
        self.max_attempts = max_attempts
        self.window = window
        self.block_duration = block_duration
        self.clock = clock

    @classmethod
    def from_config(cls, uow: UnitOfWork, locks: KeyedLock, config, clock=utcnow):
        return cls(
            uow,
            locks,
            max_attempts=config.RATE_LIMIT_MAX_ATTEMPTS,
            window=timedelta(seconds=config.RATE_LIMIT_WINDOW_SECONDS),
            block_duration=timedelta(seconds=config.RATE_LIMIT_BLOCK_SECONDS),
            clock=clock,
        )

    async def check(self, origin: str) -> RateLimitDecision:
        """
        Gate a credential-bearing request from origin.

        Returns an allowed decision, or a denied one carrying the time left
        on the block.
        """
        async with self.locks.hold(origin):
            async with self.uow:
                now = self.clock()

                try:
                    entry = await self.uow.rate_limits.get_for_update(origin)
                except StorageError as exc:
                    logger.warning(f"Rate limit lookup failed for {origin}, allowing: {exc}")
                    entry = None

                if entry is not None and entry.blocked and entry.blocked_until:
                    if now < entry.blocked_until:
                        return self._blocked(entry.blocked_until, now)

                    # Block ran out: start over as if the origin were new
                    entry.blocked = False
                    entry.blocked_until = None
                    entry.attempts = 0
                    entry.first_attempt_at = now

                if entry is None:
                    entry = RateLimitEntry(
                        origin=origin,
                        attempts=1,
                        first_attempt_at=now,
                        last_attempt_at=now,
                    )
                elif now >= entry.first_attempt_at + self.window:
                    entry.attempts = 1
                    entry.first_attempt_at = now
                else:
                    entry.attempts += 1
                entry.last_attempt_at = now

                if entry.attempts > self.max_attempts:
                    entry.blocked = True
                    entry.blocked_until = now + self.block_duration
                    await self._persist_block(entry)
                    logger.warning(
                        f"Origin {origin} blocked until {entry.blocked_until.isoformat()} "
                        f"after {entry.attempts} attempts"
                    )
                    return self._blocked(entry.blocked_until, now, just_blocked=True)

                try:
                    await self.uow.rate_limits.save(entry)
                    await self.uow.commit()
                except StorageError as exc:
                    logger.warning(f"Could not record attempt for {origin}: {exc}")

                return RateLimitDecision(allowed=True)

    async def record_failure(self, origin: str) -> None:
        """Note a failed credential check; counting already happened in check()."""
        async with self.locks.hold(origin):
            async with self.uow:
                try:
                    entry = await self.uow.rate_limits.get_for_update(origin)
                    if entry is None:
                        return
                    entry.last_attempt_at = self.clock()
                    await self.uow.rate_limits.save(entry)
                    await self.uow.commit()
                except StorageError as exc:
                    logger.warning(f"Could not record failure for {origin}: {exc}")

    async def reset(self, origin: str) -> None:
        """Forget every attempt from origin. Idempotent."""
        async with self.locks.hold(origin):
            async with self.uow:
                try:
                    await self.uow.rate_limits.delete(origin)
                    await self.uow.commit()
                except StorageError as exc:
                    logger.warning(f"Could not reset rate limit for {origin}: {exc}")

    async def list_entries(self) -> List[RateLimitEntry]:
        async with self.uow:
            return await self.uow.rate_limits.list()

    async def clear_all(self) -> int:
        async with self.uow:
            removed = await self.uow.rate_limits.delete_all()
            await self.uow.commit()
        logger.info(f"Cleared {removed} rate limit entries")
        return removed

    async def purge_idle(self, max_idle: timedelta) -> int:
        async with self.uow:
            removed = await self.uow.rate_limits.delete_idle_since(self.clock() - max_idle)
            await self.uow.commit()
        return removed

    async def _persist_block(self, entry: RateLimitEntry) -> None:
        snapshot = entry.model_dump()
        try:
            await self.uow.rate_limits.save(entry)
            await self.uow.commit()
            return
        except StorageError as exc:
            logger.warning(f"Persisting block for {entry.origin} failed, retrying: {exc}")

        try:
            await self.uow.rollback()
            await self.uow.rate_limits.save(RateLimitEntry(**snapshot))
            await self.uow.commit()
        except StorageError as exc:
            logger.error(
                f"Block for {entry.origin} could not be persisted; denying request anyway: {exc}"
            )

    def _blocked(
        self, blocked_until: datetime, now: datetime, just_blocked: bool = False
    ) -> RateLimitDecision:
        seconds = max(1, math.ceil((blocked_until - now).total_seconds()))
        minutes = math.ceil(seconds / 60)
        if just_blocked:
            message = f"Too many failed attempts. Blocked for {minutes} minutes."
        else:
            message = f"Too many failed attempts. Try again in {minutes} minutes."
        return RateLimitDecision(
            allowed=False,
            retry_after_seconds=seconds,
            blocked_until=blocked_until,
            message=message,
        )
