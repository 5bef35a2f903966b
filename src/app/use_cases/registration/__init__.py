"""
Registration Use Cases

Invite-gated account creation and remote provisioning.
"""

from .register_use_case import RegisterUseCase
from .verify_invite_use_case import VerifyInviteUseCase
from .retry_provisioning_use_case import RetryProvisioningUseCase
from .invite_errors import INVITE_ERROR_CODES
from .dtos import (
    ProvisioningInfo,
    RegisterCommand,
    RegisteredUser,
    RegisterResponse,
    RetryProvisioningResponse,
    VerifyInviteResponse,
)

__all__ = [
    # Use Cases
    "RegisterUseCase",
    "VerifyInviteUseCase",
    "RetryProvisioningUseCase",
    # DTOs - Commands
    "RegisterCommand",
    # DTOs - Responses
    "RegisterResponse",
    "VerifyInviteResponse",
    "RetryProvisioningResponse",
    # DTOs - Nested Models
    "RegisteredUser",
    "ProvisioningInfo",
    # Error codes
    "INVITE_ERROR_CODES",
]
