from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import List, Optional

from src.domain.entities import InviteCode, InvitePurpose


class ClaimOutcome(str, Enum):
    """Result of an atomic claim attempt"""

    claimed = "claimed"
    not_found = "not_found"
    already_consumed = "already_consumed"
    revoked = "revoked"


class IInviteCodeRepository(ABC):
    """Invite code repository interface - application layer"""

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[InviteCode]:
        """Get invite code by its (normalized) text"""
        pass

    @abstractmethod
    async def list(self) -> List[InviteCode]:
        """Get all invite codes, newest first"""
        pass

    @abstractmethod
    async def create(self, invite_code: InviteCode) -> InviteCode:
        """Create a new invite code"""
        pass

    @abstractmethod
    async def claim(
        self,
        code: str,
        consumer_id: str,
        purpose: InvitePurpose,
        consumed_at: datetime,
    ) -> ClaimOutcome:
        """
        Atomically consume an active, unconsumed code.

        Consumer, timestamp and purpose are written in the same step as the
        availability check; two concurrent claims can never both succeed.
        """
        pass

    @abstractmethod
    async def release(self, code: str, consumer_id: str) -> bool:
        """Undo a claim held by consumer_id (registration compensation only)"""
        pass

    @abstractmethod
    async def revoke(self, code: str) -> bool:
        """Deactivate an unconsumed code; False if it was not revocable"""
        pass
