from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import bcrypt
import pytest

from src.app.use_cases.auth.login_use_case import LoginUseCase
from src.domain.entities import Session, SessionScope, User, UserRole

NOW = datetime(2025, 1, 1, 12, 0, 0)


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    # Mock repositories
    uow.users = MagicMock()
    uow.users.get_by_username = AsyncMock()
    uow.users.update = AsyncMock()

    uow.sessions = MagicMock()
    uow.sessions.create = AsyncMock()

    return uow


def make_user(password: str = "SecurePass123!", **overrides) -> User:
    password_hash = bcrypt.hashpw(password.encode(), bcrypt.gensalt(4)).decode()
    user = User.build("alice", "alice@example.com", password_hash, user_id=uuid4())
    for key, value in overrides.items():
        setattr(user, key, value)
    return user


@pytest.mark.asyncio
async def test_successful_login(mock_uow):
    """Valid credentials create a user-scoped session"""
    # Arrange
    mock_user = make_user()
    mock_uow.users.get_by_username.return_value = mock_user

    use_case = LoginUseCase(mock_uow, clock=lambda: NOW)

    # Act
    result = await use_case.execute("alice", "SecurePass123!")

    # Assert
    assert result.is_ok()
    response = result.value
    assert len(response.token) == 64
    assert response.scope == "user"
    assert response.expires_at == NOW + timedelta(days=30)
    assert response.user.id == str(mock_user.id)

    mock_uow.sessions.create.assert_called_once()
    session = mock_uow.sessions.create.call_args.args[0]
    assert isinstance(session, Session)
    assert session.token_hash != response.token
    assert session.scope == SessionScope.user

    assert mock_user.last_login_at == NOW
    mock_uow.users.update.assert_called_once_with(mock_user)
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_login_unknown_user(mock_uow):
    """Unknown username returns INVALID_CREDENTIALS without writing anything"""
    mock_uow.users.get_by_username.return_value = None

    result = await LoginUseCase(mock_uow, bcrypt_rounds=4).execute("ghost", "SecurePass123!")

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    mock_uow.sessions.create.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_login_wrong_password(mock_uow):
    mock_uow.users.get_by_username.return_value = make_user()

    result = await LoginUseCase(mock_uow).execute("alice", "WrongPassword!")

    assert result.error.code == "INVALID_CREDENTIALS"
    mock_uow.sessions.create.assert_not_called()


@pytest.mark.asyncio
async def test_login_user_disabled(mock_uow):
    mock_uow.users.get_by_username.return_value = make_user(is_active=False)

    result = await LoginUseCase(mock_uow).execute("alice", "SecurePass123!")

    assert result.error.code == "USER_DISABLED"
    mock_uow.sessions.create.assert_not_called()


@pytest.mark.asyncio
async def test_admin_login_requires_admin_role(mock_uow):
    mock_uow.users.get_by_username.return_value = make_user()

    result = await LoginUseCase(mock_uow, scope=SessionScope.admin).execute(
        "alice", "SecurePass123!"
    )

    assert result.error.code == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_admin_login_session_lifetime(mock_uow):
    mock_uow.users.get_by_username.return_value = make_user(role=UserRole.admin)

    result = await LoginUseCase(
        mock_uow,
        scope=SessionScope.admin,
        session_ttl=timedelta(hours=24),
        clock=lambda: NOW,
    ).execute("alice", "SecurePass123!")

    assert result.value.scope == "admin"
    assert result.value.expires_at == NOW + timedelta(hours=24)


@pytest.mark.asyncio
async def test_unknown_user_checked_at_configured_cost(mock_uow, monkeypatch):
    """The dummy bcrypt check for a missing user runs at the stored-hash cost"""
    calls = []

    def record(password, password_hash, rounds=12):
        calls.append((password_hash, rounds))
        return False

    monkeypatch.setattr("src.app.use_cases.auth.login_use_case.verify_password", record)
    mock_uow.users.get_by_username.return_value = None

    await LoginUseCase(mock_uow, bcrypt_rounds=11).execute("ghost", "SecurePass123!")

    assert calls == [(None, 11)]
