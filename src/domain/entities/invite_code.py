"""
InviteCode Entity

Single-use codes that gate self-service registration.
"""

import secrets
from datetime import datetime
from typing import Optional

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import InvitePurpose


class InviteCode(SQLModel, table=True):
    """
    InviteCode entity - single-use registration token.

    Business Rules:
    - Format XXXX-XXXX-XXXX from an alphabet without look-alike characters
    - Consumed exactly once (consumed_by set atomically with consumed_at/for)
    - Revoked (is_active=False) and consumed are both permanent
    - Only unconsumed codes can be revoked
    """

    __tablename__ = "invite_codes"

    code: str = Field(primary_key=True, max_length=14)

    created_by: str = Field(max_length=64)
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    is_active: bool = Field(default=True)

    consumed_by: Optional[str] = Field(default=None, max_length=64)
    consumed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    consumed_for: Optional[InvitePurpose] = Field(default=None)

    __table_args__ = (
        Index("idx_invite_code_active", "is_active"),
        Index("idx_invite_code_consumed_by", "consumed_by"),
    )

    @property
    def is_consumed(self) -> bool:
        return self.consumed_by is not None

    @property
    def is_usable(self) -> bool:
        return self.is_active and not self.is_consumed


# Look-alike characters (0/O, 1/I) are left out to avoid transcription errors
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_SEGMENTS = 3
CODE_SEGMENT_LENGTH = 4


def generate_invite_code() -> str:
    """Random code such as 'K7QM-3XRT-W9PA'"""
    return "-".join(
        "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_SEGMENT_LENGTH))
        for _ in range(CODE_SEGMENTS)
    )


def normalize_code(code: str) -> str:
    """Codes are matched case-insensitively and without surrounding spaces"""
    return code.strip().upper()
