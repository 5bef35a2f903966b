import asyncio
import logging
from typing import Optional, Set

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, EmailStr, Field

from config import ApplicationConfig
from src.api.error import ClientError, RateLimitedError, ServerError
from src.api.utils.cookies import clear_session_cookie, set_session_cookie
from src.app.services.auth_gateway import AuthGateway
from src.app.services.provisioner import IExternalProvisioner
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    LoginResponse,
    LogoutResponse,
    LogoutUseCase,
    SessionInfo,
)
from src.app.use_cases.registration import (
    RegisterCommand,
    RegisterResponse,
    VerifyInviteResponse,
    VerifyInviteUseCase,
)
from src.depends import (
    build_auth_gateway,
    get_auth_gateway,
    get_client_origin,
    get_current_user,
    get_provisioner,
    get_unit_of_work,
    get_uow_scope,
    get_user_token,
)
from src.domain.entities import InvitePurpose

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

# Registrations still running after their client disconnected
_pending_registrations: Set[asyncio.Task] = set()


def _finish_abandoned_registration(task: asyncio.Task) -> None:
    _pending_registrations.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Registration failed after the client disconnected", exc_info=exc)


# Error code -> HTTP status for registration and invite checks
REGISTRATION_ERROR_STATUS = {
    "INVALID_USERNAME": status.HTTP_400_BAD_REQUEST,
    "WEAK_PASSWORD": status.HTTP_400_BAD_REQUEST,
    "INVALID_INVITE_CODE": status.HTTP_400_BAD_REQUEST,
    "INVITE_CODE_ALREADY_USED": status.HTTP_409_CONFLICT,
    "INVITE_CODE_REVOKED": status.HTTP_410_GONE,
    "USERNAME_TAKEN": status.HTTP_409_CONFLICT,
    "EMAIL_TAKEN": status.HTTP_409_CONFLICT,
}


def raise_for_login_error(error) -> None:
    if error.code == "RATE_LIMITED":
        raise RateLimitedError(error)
    if error.code == "INVALID_CREDENTIALS":
        raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
    if error.code == "USER_DISABLED":
        raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
    raise ServerError(error)


class LoginRequest(BaseModel):
    """
    Login HTTP request payload

    Validates incoming login request.
    """

    username: str = Field(..., min_length=1, max_length=64, description="Username")
    password: str = Field(..., min_length=1, max_length=256, description="User password")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest,
    response: Response,
    origin: str = Depends(get_client_origin),
    gateway: AuthGateway = Depends(get_auth_gateway),
):
    """
    User Login

    Rate limited per client origin. Sets the user session cookie and also
    returns the token for clients that prefer a bearer header.

    Raises:
        - 401 Unauthorized: INVALID_CREDENTIALS
        - 403 Forbidden: USER_DISABLED
        - 429 Too Many Requests: RATE_LIMITED
    """
    result = await gateway.login(origin, request.username, request.password)
    if result.is_err():
        raise_for_login_error(result.error)

    set_session_cookie(
        response,
        ApplicationConfig.SESSION_COOKIE_NAME,
        result.value.token,
        result.value.expires_at,
        ApplicationConfig.SESSION_COOKIE_SECURE,
    )
    return result.value


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_user_token),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """End the user session. Succeeds even without a session."""
    result = await LogoutUseCase(uow).execute(token)
    clear_session_cookie(
        response, ApplicationConfig.SESSION_COOKIE_NAME, ApplicationConfig.SESSION_COOKIE_SECURE
    )
    return result.value


@router.get("/check", status_code=status.HTTP_200_OK, response_model=SessionInfo)
async def check(session: SessionInfo = Depends(get_current_user)):
    """Who am I. 401 INVALID_SESSION when not logged in."""
    return session


class RegisterRequest(BaseModel):
    """
    Register HTTP request payload

    Shape validation only; username format and password policy are
    business rules checked by the use case.
    """

    invite_code: str = Field(..., min_length=1, max_length=32, description="Invite code")
    username: str = Field(..., min_length=1, max_length=64, description="Username")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, max_length=256, description="User password")
    purpose: InvitePurpose = Field(
        default=InvitePurpose.plain_registration, description="Registration flow"
    )


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=RegisterResponse)
async def register(
    request: RegisterRequest,
    origin: str = Depends(get_client_origin),
    scope=Depends(get_uow_scope),
    provisioner: IExternalProvisioner = Depends(get_provisioner),
):
    """
    Invite-gated Registration

    Flow: rate limit -> claim invite code -> create account -> remote
    provisioning for the purpose. A remote failure still returns 201 with
    status "partial"; the portal account exists.

    Raises:
        - 400 Bad Request: INVALID_USERNAME, WEAK_PASSWORD, INVALID_INVITE_CODE
        - 409 Conflict: INVITE_CODE_ALREADY_USED, USERNAME_TAKEN, EMAIL_TAKEN
        - 410 Gone: INVITE_CODE_REVOKED
        - 429 Too Many Requests: RATE_LIMITED
    """
    command = RegisterCommand(
        invite_code=request.invite_code,
        username=request.username,
        email=str(request.email),
        password=request.password,
        purpose=request.purpose,
    )

    async def run():
        # Owns its unit of work so a client disconnect cannot close it mid-flow
        async with scope() as uow:
            return await build_auth_gateway(uow, provisioner).register(origin, command)

    task = asyncio.create_task(run())
    try:
        result = await asyncio.shield(task)
    except asyncio.CancelledError:
        _pending_registrations.add(task)
        task.add_done_callback(_finish_abandoned_registration)
        raise

    if result.is_err():
        error = result.error
        if error.code == "RATE_LIMITED":
            raise RateLimitedError(error)
        if error.code in REGISTRATION_ERROR_STATUS:
            raise ClientError(error, status_code=REGISTRATION_ERROR_STATUS[error.code])
        raise ServerError(error)

    return result.value


class VerifyInviteRequest(BaseModel):
    invite_code: str = Field(..., min_length=1, max_length=32, description="Invite code")


@router.post(
    "/verify-invite", status_code=status.HTTP_200_OK, response_model=VerifyInviteResponse
)
async def verify_invite(
    request: VerifyInviteRequest, uow: UnitOfWork = Depends(get_unit_of_work)
):
    """Check an invite code without claiming it"""
    result = await VerifyInviteUseCase(uow).execute(request.invite_code)
    if result.is_err():
        error = result.error
        if error.code in REGISTRATION_ERROR_STATUS:
            raise ClientError(error, status_code=REGISTRATION_ERROR_STATUS[error.code])
        raise ServerError(error)
    return result.value
