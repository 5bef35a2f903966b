"""
Registration Use Case DTOs (Data Transfer Objects)

Command/Response pattern for invite-gated registration:
- RegisterCommand: Input to use case (validated business intent)
- RegisterResponse: Output from use case, success or partial success
"""

from typing import Optional

from pydantic import BaseModel

from src.domain.entities import InvitePurpose


class RegisterCommand(BaseModel):
    """
    Register command - represents validated registration intent

    Created by API layer after request validation passes.
    """

    invite_code: str
    username: str
    email: str
    password: str
    purpose: InvitePurpose = InvitePurpose.plain_registration


class RegisteredUser(BaseModel):
    """User information in registration response"""

    id: str
    username: str
    email: str


class ProvisioningInfo(BaseModel):
    """Outcome of the remote provisioning step"""

    purpose: str
    service: str
    ok: bool
    detail: str


class RegisterResponse(BaseModel):
    """
    Register response - structured output from use case

    status is "success" when every step completed and "partial" when the
    portal account exists but remote provisioning did not complete.
    """

    status: str
    message: str
    user: RegisteredUser
    provisioning: Optional[ProvisioningInfo] = None


class VerifyInviteResponse(BaseModel):
    """Response for verify invite code use case"""

    valid: bool
    message: str


class RetryProvisioningResponse(BaseModel):
    """Response for retry provisioning use case"""

    user_id: str
    provisioning: ProvisioningInfo
    message: str
