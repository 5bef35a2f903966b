"""
Auth Gateway

Single entry point for every credential-bearing request. Applies the rate
limiter around login, admin login and registration so endpoints stay thin.
"""

import logging

from src.libs.result import Error, Result, Return
from src.app.services.rate_limiter import RateLimitDecision, RateLimiter
from src.app.use_cases.auth import LoginResponse, LoginUseCase
from src.app.use_cases.registration import (
    INVITE_ERROR_CODES,
    RegisterCommand,
    RegisterResponse,
    RegisterUseCase,
)

logger = logging.getLogger(__name__)


def rate_limited_error(decision: RateLimitDecision) -> Error:
    return Error(
        "RATE_LIMITED",
        decision.message,
        details={
            "retry_after": decision.retry_after_seconds,
            "retry_after_minutes": decision.retry_after_minutes,
        },
    )


class AuthGateway:
    """
    Business Rules:
    - The rate limiter is consulted before anything else; a blocked origin
      never reaches the credential store
    - Failed logins and invite-code rejections are recorded against the origin
    - Only a fully successful login clears the origin's attempts
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        login_use_case: LoginUseCase = None,
        admin_login_use_case: LoginUseCase = None,
        register_use_case: RegisterUseCase = None,
    ):
        self.rate_limiter = rate_limiter
        self.login_use_case = login_use_case
        self.admin_login_use_case = admin_login_use_case
        self.register_use_case = register_use_case

    async def login(self, origin: str, username: str, password: str) -> Result[LoginResponse]:
        return await self._authenticate(self.login_use_case, origin, username, password)

    async def admin_login(
        self, origin: str, username: str, password: str
    ) -> Result[LoginResponse]:
        return await self._authenticate(self.admin_login_use_case, origin, username, password)

    async def register(self, origin: str, command: RegisterCommand) -> Result[RegisterResponse]:
        decision = await self.rate_limiter.check(origin)
        if not decision.allowed:
            return Return.err(rate_limited_error(decision))

        result = await self.register_use_case.execute(command)
        if result.is_err() and result.error.code in INVITE_ERROR_CODES:
            await self.rate_limiter.record_failure(origin)
            logger.info(f"Failed registration attempt with invite code from {origin}")
        return result

    async def _authenticate(
        self, use_case: LoginUseCase, origin: str, username: str, password: str
    ) -> Result[LoginResponse]:
        decision = await self.rate_limiter.check(origin)
        if not decision.allowed:
            return Return.err(rate_limited_error(decision))

        result = await use_case.execute(username, password)
        if result.is_err():
            await self.rate_limiter.record_failure(origin)
            logger.info(f"Failed {use_case.scope.value} login for {username} from {origin}")
            return result

        await self.rate_limiter.reset(origin)
        return result
