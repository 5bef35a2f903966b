"""
User Management Use Cases

Administrator operations on portal accounts.
"""

from .list_users_use_case import ListUsersUseCase
from .update_user_use_case import UpdateUserUseCase
from .delete_user_use_case import DeleteUserUseCase
from .ensure_admin_use_case import EnsureAdminUseCase
from .dtos import (
    ListUsersResponse,
    UserAction,
    UserActionResponse,
    UserInfo,
)

__all__ = [
    # Use Cases
    "ListUsersUseCase",
    "UpdateUserUseCase",
    "DeleteUserUseCase",
    "EnsureAdminUseCase",
    # DTOs
    "ListUsersResponse",
    "UserAction",
    "UserActionResponse",
    "UserInfo",
]
