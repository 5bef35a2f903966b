import logging
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork

from .dtos import UserActionResponse

logger = logging.getLogger(__name__)


class DeleteUserUseCase:
    """
    Use case for deleting a standard user.

    Admin users can only be deactivated, never removed (CANNOT_DELETE_ADMIN).
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID) -> Result[UserActionResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found."))

            if user.is_admin:
                return Return.err(
                    Error("CANNOT_DELETE_ADMIN", "Cannot delete admin users.")
                )

            await self.uow.sessions.delete_by_user_id(user.id)
            await self.uow.users.delete(user)
            await self.uow.commit()

        logger.info(f"User deleted: {user.username}")
        return Return.ok(
            UserActionResponse(success=True, message=f"User {user.username} has been deleted.")
        )
