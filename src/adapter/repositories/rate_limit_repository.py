from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.errors import StorageError
from src.app.repositories.rate_limit_repository import IRateLimitRepository
from src.domain.entities import RateLimitEntry


class RateLimitRepository(IRateLimitRepository):
    """Rate limit repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_update(self, origin: str) -> Optional[RateLimitEntry]:
        """Row lock on backends with SELECT ... FOR UPDATE; SQLite ignores it"""
        stmt = (
            select(RateLimitEntry)
            .where(RateLimitEntry.origin == origin)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        try:
            result = await self.session.exec(stmt)
            return result.one_or_none()
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    async def list(self) -> List[RateLimitEntry]:
        """Get all entries, most recent attempt first"""
        stmt = select(RateLimitEntry).order_by(RateLimitEntry.last_attempt_at.desc())
        try:
            result = await self.session.exec(stmt)
            return list(result.all())
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    async def save(self, entry: RateLimitEntry) -> RateLimitEntry:
        """Insert or update an entry"""
        try:
            merged = await self.session.merge(entry)
            await self.session.flush()
            return merged
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    async def delete(self, origin: str) -> None:
        """Remove the entry for an origin"""
        stmt = delete(RateLimitEntry).where(RateLimitEntry.origin == origin)
        try:
            await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    async def delete_all(self) -> int:
        """Remove every entry"""
        try:
            result = await self.session.execute(delete(RateLimitEntry))
            return result.rowcount
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    async def delete_idle_since(self, cutoff: datetime) -> int:
        """Remove entries whose last attempt is older than cutoff"""
        stmt = delete(RateLimitEntry).where(RateLimitEntry.last_attempt_at < cutoff)
        try:
            result = await self.session.execute(stmt)
            return result.rowcount
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc
