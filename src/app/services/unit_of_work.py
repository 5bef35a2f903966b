from abc import ABC, abstractmethod

from src.app.repositories.invite_code_repository import IInviteCodeRepository
from src.app.repositories.rate_limit_repository import IRateLimitRepository
from src.app.repositories.session_repository import ISessionRepository
from src.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    invite_codes: IInviteCodeRepository
    rate_limits: IRateLimitRepository
    sessions: ISessionRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        """Make pending changes durable; raises StorageError on failure"""
        pass

    @abstractmethod
    async def rollback(self):
        pass
