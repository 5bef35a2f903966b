from datetime import datetime
from typing import Callable, Optional

from src.libs.result import Error, Result, Return
from src.app.services.session_tokens import hash_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import SessionScope

from .dtos import SessionInfo


class CheckSessionUseCase:
    """
    Resolve an opaque token to its session.

    Expired sessions, sessions of deactivated users and sessions of the
    wrong scope are all reported as INVALID_SESSION.
    """

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(
        self, token: Optional[str], scope: SessionScope = SessionScope.user
    ) -> Result[SessionInfo]:
        invalid = Error("INVALID_SESSION", "Invalid or expired session")
        if not token:
            return Return.err(invalid)

        async with self.uow:
            session = await self.uow.sessions.get_by_token_hash(hash_token(token))
            if session is None or session.scope != scope:
                return Return.err(invalid)

            if session.expires_at <= self.clock():
                return Return.err(invalid)

            user = await self.uow.users.get_by_id(session.user_id)
            if user is None or not user.is_active:
                return Return.err(invalid)

        return Return.ok(
            SessionInfo(
                authenticated=True,
                user_id=str(session.user_id),
                username=session.username,
                scope=session.scope.value,
                expires_at=session.expires_at,
            )
        )
