"""
Update User Use Case

Administrator credential reset and account activation changes.
"""

import logging
from typing import Optional
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.passwords import PasswordPolicy, hash_password
from src.app.services.unit_of_work import UnitOfWork

from .dtos import UserAction, UserActionResponse

logger = logging.getLogger(__name__)


class UpdateUserUseCase:
    """
    Use case for administrator changes to an account.

    Business Rules:
    - reset_password: new password must satisfy the policy; existing
      sessions are ended
    - disable: flag flip only, the record stays; existing sessions are ended
    - enable: flag flip only
    """

    def __init__(
        self,
        uow: UnitOfWork,
        password_policy: Optional[PasswordPolicy] = None,
        bcrypt_rounds: int = 12,
    ):
        self.uow = uow
        self.password_policy = password_policy or PasswordPolicy()
        self.bcrypt_rounds = bcrypt_rounds

    async def execute(
        self, user_id: UUID, action: UserAction, new_password: Optional[str] = None
    ) -> Result[UserActionResponse]:
        if action == UserAction.reset_password:
            reason = self.password_policy.violation(new_password or "")
            if reason:
                return Return.err(Error("WEAK_PASSWORD", reason))

        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found."))

            if action == UserAction.reset_password:
                user.password_hash = hash_password(new_password, self.bcrypt_rounds)
                message = f"Password reset successfully for {user.username}."
            elif action == UserAction.disable:
                user.is_active = False
                message = f"User {user.username} has been disabled."
            else:
                user.is_active = True
                message = f"User {user.username} has been enabled."

            await self.uow.users.update(user)
            if action != UserAction.enable:
                await self.uow.sessions.delete_by_user_id(user.id)
            await self.uow.commit()

        logger.info(f"User {user.username}: {action.value}")
        return Return.ok(UserActionResponse(success=True, message=message))
