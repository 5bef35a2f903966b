"""
Portal Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    InvitePurpose,
    SessionScope,
    UserRole,
)

# Export all entities
from .user import User, normalize_key
from .invite_code import InviteCode, generate_invite_code, normalize_code
from .rate_limit_entry import RateLimitEntry
from .session import Session

__all__ = [
    # Enums
    "InvitePurpose",
    "SessionScope",
    "UserRole",
    # Entities
    "User",
    "InviteCode",
    "RateLimitEntry",
    "Session",
    # Helpers
    "normalize_key",
    "generate_invite_code",
    "normalize_code",
]
