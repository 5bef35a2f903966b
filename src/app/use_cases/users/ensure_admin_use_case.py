"""
Ensure Admin Use Case

Creates the configured bootstrap administrator on startup.
"""

import logging

from src.libs.result import Error, Result, Return
from src.app.repositories.errors import UserAlreadyExistsError
from src.app.services.passwords import hash_password
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import User, UserRole

logger = logging.getLogger(__name__)


class EnsureAdminUseCase:
    """
    Use case for seeding the administrator account.

    Business Rules:
    - Does nothing when a user with that username already exists
    - The existing account is never modified (no silent password reset)
    """

    def __init__(self, uow: UnitOfWork, bcrypt_rounds: int = 12):
        self.uow = uow
        self.bcrypt_rounds = bcrypt_rounds

    async def execute(self, username: str, email: str, password: str) -> Result[bool]:
        """Returns Result[True] if the admin was created, Result[False] if it existed"""
        if not username or not password:
            return Return.err(
                Error("ADMIN_NOT_CONFIGURED", "Admin username and password are required")
            )

        async with self.uow:
            if await self.uow.users.get_by_username(username) is not None:
                return Return.ok(False)

            admin = User.build(
                username,
                email,
                hash_password(password, self.bcrypt_rounds),
                role=UserRole.admin,
            )
            try:
                await self.uow.users.create(admin)
                await self.uow.commit()
            except UserAlreadyExistsError as exc:
                return Return.err(
                    Error("ADMIN_CONFLICT", f"Cannot create admin: {exc.field} already in use")
                )

        logger.info(f"Bootstrap admin account created: {username}")
        return Return.ok(True)
