"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from datetime import datetime

from pydantic import BaseModel


# ============================================================================
# Response DTOs
# ============================================================================


class UserSummary(BaseModel):
    """User information in authentication responses"""

    id: str
    username: str
    email: str


class LoginResponse(BaseModel):
    """Response for user and admin login use cases"""

    token: str
    scope: str
    expires_at: datetime
    user: UserSummary


class SessionInfo(BaseModel):
    """Response for session check use case"""

    authenticated: bool
    user_id: str
    username: str
    scope: str
    expires_at: datetime


class LogoutResponse(BaseModel):
    """Response for logout use case"""

    success: bool
    message: str
