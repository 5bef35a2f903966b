"""
Login Use Case

Verifies credentials against the credential store and issues an opaque session token.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable

from src.libs.result import Error, Result, Return
from src.app.services.passwords import verify_password
from src.app.services.session_tokens import new_session_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import Session, SessionScope

from .dtos import LoginResponse, UserSummary

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = Error("INVALID_CREDENTIALS", "Invalid username or password.")


class LoginUseCase:
    """
    Use case for user and admin login.

    Business Rules:
    - Constant-time password comparison, even for unknown usernames
    - Unknown user and wrong password produce the same error
    - Admin scope additionally requires the admin role; a standard user
      gets the same INVALID_CREDENTIALS error
    - Deactivated users are refused with USER_DISABLED
    - Success creates a Session holding only the token hash
    """

    def __init__(
        self,
        uow: UnitOfWork,
        scope: SessionScope = SessionScope.user,
        session_ttl: timedelta = timedelta(days=30),
        bcrypt_rounds: int = 12,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.scope = scope
        self.session_ttl = session_ttl
        self.bcrypt_rounds = bcrypt_rounds
        self.clock = clock

    async def execute(self, username: str, password: str) -> Result[LoginResponse]:
        """
        Execute login use case.

        Args:
            username: Username, matched case-insensitively
            password: Plain text password

        Returns:
            Result with LoginResponse containing the session token, or Error
        """
        async with self.uow:
            user = await self.uow.users.get_by_username(username)

            password_valid = verify_password(
                password, user.password_hash if user else None, self.bcrypt_rounds
            )
            if user is None or not password_valid:
                return Return.err(INVALID_CREDENTIALS)

            if self.scope == SessionScope.admin and not user.is_admin:
                return Return.err(INVALID_CREDENTIALS)

            if not user.is_active:
                return Return.err(Error("USER_DISABLED", "User account is disabled."))

            now = self.clock()
            token, token_hash = new_session_token()
            session = Session(
                token_hash=token_hash,
                user_id=user.id,
                username=user.username,
                scope=self.scope,
                created_at=now,
                expires_at=now + self.session_ttl,
            )
            await self.uow.sessions.create(session)

            user.last_login_at = now
            await self.uow.users.update(user)

            await self.uow.commit()

        logger.info(f"User logged in: {user.username} ({self.scope.value})")

        return Return.ok(
            LoginResponse(
                token=token,
                scope=self.scope.value,
                expires_at=session.expires_at,
                user=UserSummary(id=str(user.id), username=user.username, email=user.email),
            )
        )
