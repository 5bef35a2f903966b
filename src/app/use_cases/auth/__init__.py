"""
Authentication Use Cases

All authentication-related business logic.
"""

from .login_use_case import INVALID_CREDENTIALS, LoginUseCase
from .check_session_use_case import CheckSessionUseCase
from .logout_use_case import LogoutUseCase
from .dtos import (
    LoginResponse,
    LogoutResponse,
    SessionInfo,
    UserSummary,
)

__all__ = [
    # Use Cases
    "LoginUseCase",
    "CheckSessionUseCase",
    "LogoutUseCase",
    # DTOs - Responses
    "LoginResponse",
    "LogoutResponse",
    "SessionInfo",
    # DTOs - Nested Models
    "UserSummary",
    # Errors
    "INVALID_CREDENTIALS",
]
