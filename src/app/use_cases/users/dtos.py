"""
User Management Use Case DTOs (Data Transfer Objects)
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from src.domain.entities import User


class UserAction(str, Enum):
    """Administrator actions on an existing account"""

    reset_password = "reset_password"
    disable = "disable"
    enable = "enable"


class UserInfo(BaseModel):
    """User as shown to administrators; never includes the credential hash"""

    id: str
    username: str
    email: str
    role: str
    is_active: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, user: User) -> "UserInfo":
        return cls(
            id=str(user.id),
            username=user.username,
            email=user.email,
            role=user.role.value,
            is_active=user.is_active,
            created_at=user.created_at,
            last_login_at=user.last_login_at,
        )


class ListUsersResponse(BaseModel):
    """Response for list users use case"""

    users: List[UserInfo]


class UserActionResponse(BaseModel):
    """Response for update and delete user use cases"""

    success: bool
    message: str
