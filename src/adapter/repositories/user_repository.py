from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.errors import StorageError, UserAlreadyExistsError
from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import User, normalize_key


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username, case-insensitively"""
        stmt = select(User).where(User.username_key == normalize_key(username))
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address, case-insensitively"""
        stmt = select(User).where(User.email_key == normalize_key(email))
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def list(self) -> List[User]:
        """Get all users, newest first"""
        stmt = select(User).order_by(User.created_at.desc())
        result = await self.session.exec(stmt)
        return list(result.all())

    async def create(self, user: User) -> User:
        """Create a new user; the unique *_key indexes arbitrate races"""
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            raise UserAlreadyExistsError(_conflicting_field(exc)) from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise StorageError(str(exc)) from exc
        await self.session.refresh(user)
        return user

    async def update(self, user: User) -> User:
        """Update existing user"""
        self.session.add(user)
        try:
            await self.session.flush()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise StorageError(str(exc)) from exc
        await self.session.refresh(user)
        return user

    async def delete(self, user: User) -> None:
        """Delete a user"""
        await self.session.delete(user)
        await self.session.flush()


def _conflicting_field(exc: IntegrityError) -> str:
    message = str(exc.orig).lower()
    if "email" in message:
        return "email"
    return "username"
