"""
User Entity

A portal account holder.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import UserRole


def normalize_key(value: str) -> str:
    """Case-insensitive uniqueness key for usernames and emails."""
    return value.strip().lower()


class User(SQLModel, table=True):
    """
    User entity - a portal account holder.

    Business Rules:
    - Username and email are unique, case-insensitively (*_key columns)
    - Password stored as bcrypt hash, never plaintext
    - Deactivation is a flag flip; admin users are never deleted
    - Created only by registration or by an administrator
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    username: str = Field(max_length=64)
    username_key: str = Field(unique=True, index=True, max_length=64)
    email: str = Field(max_length=255)
    email_key: str = Field(unique=True, index=True, max_length=255)

    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    role: UserRole = Field(default=UserRole.standard)
    is_active: bool = Field(default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_user_role", "role"),)

    @classmethod
    def build(
        cls,
        username: str,
        email: str,
        password_hash: str,
        role: UserRole = UserRole.standard,
        user_id: Optional[UUID] = None,
    ) -> "User":
        return cls(
            id=user_id or uuid4(),
            username=username.strip(),
            username_key=normalize_key(username),
            email=email.strip(),
            email_key=normalize_key(email),
            password_hash=password_hash,
            role=role,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin
