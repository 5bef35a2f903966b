"""
Invite Code Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the invite ledger.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from src.domain.entities import InviteCode


class InviteCodeInfo(BaseModel):
    """Invite code as shown to administrators"""

    code: str
    created_by: str
    created_at: datetime
    is_active: bool
    consumed_by: Optional[str] = None
    consumed_at: Optional[datetime] = None
    consumed_for: Optional[str] = None

    @classmethod
    def from_entity(cls, invite_code: InviteCode) -> "InviteCodeInfo":
        return cls(
            code=invite_code.code,
            created_by=invite_code.created_by,
            created_at=invite_code.created_at,
            is_active=invite_code.is_active,
            consumed_by=invite_code.consumed_by,
            consumed_at=invite_code.consumed_at,
            consumed_for=(
                invite_code.consumed_for.value if invite_code.consumed_for else None
            ),
        )


class GenerateInviteCodeResponse(BaseModel):
    """Response for generate invite code use case"""

    code: str
    message: str


class ListInviteCodesResponse(BaseModel):
    """Response for list invite codes use case"""

    codes: List[InviteCodeInfo]


class RevokeInviteCodeResponse(BaseModel):
    """Response for revoke invite code use case"""

    code: str
    status: str
    message: str
