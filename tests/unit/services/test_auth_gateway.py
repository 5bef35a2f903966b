from datetime import timedelta

import pytest

from src.app.services.auth_gateway import AuthGateway
from src.app.services.rate_limiter import RateLimiter
from src.app.use_cases.auth import LoginUseCase
from src.app.use_cases.registration import RegisterCommand, RegisterUseCase
from src.domain.entities import SessionScope, UserRole
from tests.fixtures.portal import STRONG_PASSWORD, FakeProvisioner, add_invite_code, add_user

ORIGIN = "203.0.113.7"


@pytest.fixture
def gateway(memory_uow, locks, clock):
    return AuthGateway(
        rate_limiter=RateLimiter(memory_uow, locks, clock=clock),
        login_use_case=LoginUseCase(memory_uow, SessionScope.user, clock=clock),
        admin_login_use_case=LoginUseCase(
            memory_uow, SessionScope.admin, session_ttl=timedelta(hours=24), clock=clock
        ),
        register_use_case=RegisterUseCase(
            memory_uow, FakeProvisioner(), bcrypt_rounds=4, clock=clock
        ),
    )


@pytest.mark.asyncio
async def test_five_failures_then_sixth_and_seventh_denied(gateway, store, clock):
    add_user(store)

    for _ in range(5):
        result = await gateway.login(ORIGIN, "alice", "WrongPass1!")
        assert result.error.code == "INVALID_CREDENTIALS"

    sixth = await gateway.login(ORIGIN, "alice", "WrongPass1!")
    assert sixth.error.code == "RATE_LIMITED"
    assert sixth.error.details["retry_after"] == 3600

    clock.advance(seconds=1)
    seventh = await gateway.login(ORIGIN, "alice", STRONG_PASSWORD)
    assert seventh.error.code == "RATE_LIMITED"
    assert seventh.error.details["retry_after"] == 3599
    assert seventh.error.details["retry_after_minutes"] == 60


@pytest.mark.asyncio
async def test_blocked_origin_never_reaches_credential_check(gateway, store, clock):
    user = add_user(store)
    for _ in range(6):
        await gateway.login(ORIGIN, "alice", "WrongPass1!")

    result = await gateway.login(ORIGIN, "alice", STRONG_PASSWORD)

    assert result.error.code == "RATE_LIMITED"
    assert store.users[user.id].last_login_at is None
    assert store.sessions == {}


@pytest.mark.asyncio
async def test_successful_login_clears_prior_failures(gateway, store):
    add_user(store)
    for _ in range(4):
        await gateway.login(ORIGIN, "alice", "WrongPass1!")

    ok = await gateway.login(ORIGIN, "alice", STRONG_PASSWORD)
    assert ok.is_ok()
    assert ORIGIN not in store.rate_limits

    failed = await gateway.login(ORIGIN, "alice", "WrongPass1!")
    assert failed.error.code == "INVALID_CREDENTIALS"
    assert store.rate_limits[ORIGIN].attempts == 1


@pytest.mark.asyncio
async def test_disabled_user_counts_as_failure(gateway, store):
    add_user(store, is_active=False)

    result = await gateway.login(ORIGIN, "alice", STRONG_PASSWORD)

    assert result.error.code == "USER_DISABLED"
    assert store.rate_limits[ORIGIN].attempts == 1


@pytest.mark.asyncio
async def test_admin_login_rejects_standard_user(gateway, store):
    add_user(store)

    result = await gateway.admin_login(ORIGIN, "alice", STRONG_PASSWORD)

    assert result.error.code == "INVALID_CREDENTIALS"
    assert store.sessions == {}


@pytest.mark.asyncio
async def test_admin_login_issues_admin_session(gateway, store, clock):
    add_user(store, username="root", email="root@example.com", role=UserRole.admin)

    result = await gateway.admin_login(ORIGIN, "root", STRONG_PASSWORD)

    assert result.is_ok()
    assert result.value.scope == "admin"
    assert result.value.expires_at == clock.now + timedelta(hours=24)


@pytest.mark.asyncio
async def test_login_and_registration_share_origin_budget(gateway, store):
    add_user(store)
    for _ in range(5):
        await gateway.login(ORIGIN, "alice", "WrongPass1!")

    add_invite_code(store)
    result = await gateway.register(
        ORIGIN,
        RegisterCommand(
            invite_code="ABCD-EFGH-JKLM",
            username="bob",
            email="bob@example.com",
            password=STRONG_PASSWORD,
        ),
    )

    assert result.error.code == "RATE_LIMITED"
    assert store.invite_codes["ABCD-EFGH-JKLM"].consumed_by is None


@pytest.mark.asyncio
async def test_registration_with_bad_code_records_failure(gateway, store, clock):
    result = await gateway.register(
        ORIGIN,
        RegisterCommand(
            invite_code="NOPE-NOPE-NOPE",
            username="bob",
            email="bob@example.com",
            password=STRONG_PASSWORD,
        ),
    )

    assert result.error.code == "INVALID_INVITE_CODE"
    assert store.rate_limits[ORIGIN].last_attempt_at == clock.now


@pytest.mark.asyncio
async def test_successful_registration_does_not_reset_limiter(gateway, store):
    add_invite_code(store)

    result = await gateway.register(
        ORIGIN,
        RegisterCommand(
            invite_code="ABCD-EFGH-JKLM",
            username="bob",
            email="bob@example.com",
            password=STRONG_PASSWORD,
        ),
    )

    assert result.is_ok()
    assert store.rate_limits[ORIGIN].attempts == 1
