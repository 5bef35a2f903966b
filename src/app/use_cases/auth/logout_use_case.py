from typing import Optional

from src.libs.result import Result, Return
from src.app.services.session_tokens import hash_token
from src.app.services.unit_of_work import UnitOfWork

from .dtos import LogoutResponse


class LogoutUseCase:
    """Delete the session behind a token; logging out twice is not an error"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, token: Optional[str]) -> Result[LogoutResponse]:
        if token:
            async with self.uow:
                await self.uow.sessions.delete_by_token_hash(hash_token(token))
                await self.uow.commit()

        return Return.ok(LogoutResponse(success=True, message="Logged out successfully"))
