from src.adapter.repositories.in_memory import (
    InMemoryInviteCodeRepository,
    InMemoryRateLimitRepository,
    InMemorySessionRepository,
    InMemoryUserRepository,
    MemoryStore,
)
from src.app.services.unit_of_work import UnitOfWork


class InMemoryUnitOfWork(UnitOfWork):
    """
    UnitOfWork over a shared MemoryStore.

    Writes land immediately, so commit and rollback have nothing to do.
    Suited to tests and single-process deployments without a database.
    """

    def __init__(self, store: MemoryStore):
        self.store = store

    async def __aenter__(self):
        self.users = InMemoryUserRepository(self.store)
        self.invite_codes = InMemoryInviteCodeRepository(self.store)
        self.rate_limits = InMemoryRateLimitRepository(self.store)
        self.sessions = InMemorySessionRepository(self.store)
        return self

    async def __aexit__(self, *args):
        pass

    async def commit(self):
        pass

    async def rollback(self):
        pass
