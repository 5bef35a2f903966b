"""
Admin API Routes - Administrator Session

Admin sessions are separate from user sessions: their own cookie, scope
and shorter lifetime. Every other /admin endpoint requires one.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from config import ApplicationConfig
from src.api.routes.auth import raise_for_login_error
from src.api.utils.cookies import clear_session_cookie, set_session_cookie
from src.app.services.auth_gateway import AuthGateway
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import LoginResponse, LogoutResponse, LogoutUseCase
from src.depends import get_admin_token, get_auth_gateway, get_client_origin, get_unit_of_work

router = APIRouter(prefix="/admin", tags=["Admin"])


class AdminLoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64, description="Admin username")
    password: str = Field(..., min_length=1, max_length=256, description="Admin password")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def admin_login(
    request: AdminLoginRequest,
    response: Response,
    origin: str = Depends(get_client_origin),
    gateway: AuthGateway = Depends(get_auth_gateway),
):
    """
    Admin Login

    Shares the per-origin rate limit with user login and registration.
    A valid non-admin account gets the same INVALID_CREDENTIALS error.

    Raises:
        - 401 Unauthorized: INVALID_CREDENTIALS
        - 403 Forbidden: USER_DISABLED
        - 429 Too Many Requests: RATE_LIMITED
    """
    result = await gateway.admin_login(origin, request.username, request.password)
    if result.is_err():
        raise_for_login_error(result.error)

    set_session_cookie(
        response,
        ApplicationConfig.ADMIN_SESSION_COOKIE_NAME,
        result.value.token,
        result.value.expires_at,
        ApplicationConfig.SESSION_COOKIE_SECURE,
    )
    return result.value


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def admin_logout(
    response: Response,
    token: Optional[str] = Depends(get_admin_token),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await LogoutUseCase(uow).execute(token)
    clear_session_cookie(
        response,
        ApplicationConfig.ADMIN_SESSION_COOKIE_NAME,
        ApplicationConfig.SESSION_COOKIE_SECURE,
    )
    return result.value
