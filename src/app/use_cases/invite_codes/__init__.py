"""
Invite Code Use Cases

Administrator management of the invite ledger.
"""

from .generate_invite_code_use_case import GenerateInviteCodeUseCase
from .list_invite_codes_use_case import ListInviteCodesUseCase
from .revoke_invite_code_use_case import RevokeInviteCodeUseCase
from .dtos import (
    GenerateInviteCodeResponse,
    InviteCodeInfo,
    ListInviteCodesResponse,
    RevokeInviteCodeResponse,
)

__all__ = [
    # Use Cases
    "GenerateInviteCodeUseCase",
    "ListInviteCodesUseCase",
    "RevokeInviteCodeUseCase",
    # DTOs - Responses
    "GenerateInviteCodeResponse",
    "ListInviteCodesResponse",
    "RevokeInviteCodeResponse",
    # DTOs - Nested Models
    "InviteCodeInfo",
]
