"""
Portal Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserRole(str, Enum):
    """Portal user role"""

    standard = "standard"
    admin = "admin"


class InvitePurpose(str, Enum):
    """Registration flow an invite code was redeemed through"""

    library_invite = "library_invite"
    audiobook_provisioning = "audiobook_provisioning"
    plain_registration = "plain_registration"


class SessionScope(str, Enum):
    """Which endpoints a session token unlocks"""

    user = "user"
    admin = "admin"
