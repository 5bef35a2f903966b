"""
Session Entity

Server-side mapping of opaque session tokens.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import SessionScope


class Session(SQLModel, table=True):
    """
    Session entity - maps an opaque bearer/cookie token to a user.

    Business Rules:
    - Only the SHA-256 hash of the token is stored
    - User sessions last days, admin sessions hours
    - Admin-scoped tokens only unlock administrative endpoints
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    token_hash: str = Field(unique=True, index=True, max_length=64)  # SHA-256 hex
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    username: str = Field(max_length=64)
    scope: SessionScope = Field(default=SessionScope.user)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime))

    __table_args__ = (Index("idx_session_expires_at", "expires_at"),)
