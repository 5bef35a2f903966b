from datetime import datetime
from typing import List, Optional

from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.invite_code_repository import ClaimOutcome, IInviteCodeRepository
from src.domain.entities import InviteCode, InvitePurpose


class InviteCodeRepository(IInviteCodeRepository):
    """Invite code repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_code(self, code: str) -> Optional[InviteCode]:
        """Get invite code by its (normalized) text"""
        stmt = select(InviteCode).where(InviteCode.code == code)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def list(self) -> List[InviteCode]:
        """Get all invite codes, newest first"""
        stmt = select(InviteCode).order_by(InviteCode.created_at.desc())
        result = await self.session.exec(stmt)
        return list(result.all())

    async def create(self, invite_code: InviteCode) -> InviteCode:
        """Create a new invite code"""
        self.session.add(invite_code)
        await self.session.flush()
        await self.session.refresh(invite_code)
        return invite_code

    async def claim(
        self,
        code: str,
        consumer_id: str,
        purpose: InvitePurpose,
        consumed_at: datetime,
    ) -> ClaimOutcome:
        """
        Compare-and-set claim.

        The availability check lives in the WHERE clause of a single UPDATE,
        so the database serializes concurrent claims on the same row and
        exactly one of them sees a row count of 1.
        """
        stmt = (
            update(InviteCode)
            .where(
                InviteCode.code == code,
                InviteCode.is_active == True,  # noqa: E712
                InviteCode.consumed_by.is_(None),
            )
            .values(
                consumed_by=consumer_id,
                consumed_at=consumed_at,
                consumed_for=purpose,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 1:
            return ClaimOutcome.claimed

        invite_code = await self._reload(code)
        if invite_code is None:
            return ClaimOutcome.not_found
        if invite_code.is_consumed:
            return ClaimOutcome.already_consumed
        return ClaimOutcome.revoked

    async def release(self, code: str, consumer_id: str) -> bool:
        """Undo a claim, but only the one consumer_id holds"""
        stmt = (
            update(InviteCode)
            .where(InviteCode.code == code, InviteCode.consumed_by == consumer_id)
            .values(consumed_by=None, consumed_at=None, consumed_for=None)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def revoke(self, code: str) -> bool:
        """Deactivate an unconsumed code"""
        stmt = (
            update(InviteCode)
            .where(InviteCode.code == code, InviteCode.consumed_by.is_(None))
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def _reload(self, code: str) -> Optional[InviteCode]:
        stmt = (
            select(InviteCode)
            .where(InviteCode.code == code)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()
