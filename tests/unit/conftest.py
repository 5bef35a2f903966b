from unittest.mock import AsyncMock, MagicMock

import pytest

from src.adapter.repositories.in_memory import MemoryStore
from src.adapter.services.in_memory_unit_of_work import InMemoryUnitOfWork
from src.app.services.keyed_lock import KeyedLock
from tests.fixtures.portal import FakeClock


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def memory_uow(store):
    return InMemoryUnitOfWork(store)


@pytest.fixture
def locks():
    return KeyedLock()


@pytest.fixture
def clock():
    return FakeClock()
