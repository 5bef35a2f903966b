import asyncio
from datetime import datetime

import pytest

from src.app.repositories.errors import UserAlreadyExistsError
from src.app.repositories.invite_code_repository import ClaimOutcome
from src.domain.entities import InviteCode, InvitePurpose, RateLimitEntry, User

NOW = datetime(2025, 1, 1, 12, 0, 0)


async def seed_code(uow_scope, code="ABCD-EFGH-JKLM", is_active=True):
    async with uow_scope() as uow:
        async with uow:
            await uow.invite_codes.create(
                InviteCode(code=code, created_by="admin", is_active=is_active)
            )
            await uow.commit()


async def claim(uow_scope, code, consumer_id):
    async with uow_scope() as uow:
        async with uow:
            outcome = await uow.invite_codes.claim(
                code, consumer_id, InvitePurpose.plain_registration, NOW
            )
            await uow.commit()
    return outcome


@pytest.mark.asyncio
async def test_claim_outcomes(uow_scope):
    await seed_code(uow_scope)
    await seed_code(uow_scope, code="REVK-EDCO-DE22", is_active=False)

    assert await claim(uow_scope, "NOPE-NOPE-NOPE", "u1") == ClaimOutcome.not_found
    assert await claim(uow_scope, "REVK-EDCO-DE22", "u1") == ClaimOutcome.revoked
    assert await claim(uow_scope, "ABCD-EFGH-JKLM", "u1") == ClaimOutcome.claimed
    assert await claim(uow_scope, "ABCD-EFGH-JKLM", "u2") == ClaimOutcome.already_consumed

    async with uow_scope() as uow:
        stored = await uow.invite_codes.get_by_code("ABCD-EFGH-JKLM")
    assert stored.consumed_by == "u1"
    assert stored.consumed_at == NOW
    assert stored.consumed_for == InvitePurpose.plain_registration


@pytest.mark.asyncio
async def test_concurrent_claims_single_winner(uow_scope):
    await seed_code(uow_scope)

    outcomes = await asyncio.gather(
        *(claim(uow_scope, "ABCD-EFGH-JKLM", f"user-{i}") for i in range(50))
    )

    assert outcomes.count(ClaimOutcome.claimed) == 1
    assert outcomes.count(ClaimOutcome.already_consumed) == 49


@pytest.mark.asyncio
async def test_release_only_by_holder(uow_scope):
    await seed_code(uow_scope)
    await claim(uow_scope, "ABCD-EFGH-JKLM", "u1")

    async with uow_scope() as uow:
        async with uow:
            assert await uow.invite_codes.release("ABCD-EFGH-JKLM", "someone-else") is False
            assert await uow.invite_codes.release("ABCD-EFGH-JKLM", "u1") is True
            await uow.commit()

    assert await claim(uow_scope, "ABCD-EFGH-JKLM", "u2") == ClaimOutcome.claimed


@pytest.mark.asyncio
async def test_revoke_skips_consumed(uow_scope):
    await seed_code(uow_scope)
    await seed_code(uow_scope, code="SECO-NDCO-DE22")
    await claim(uow_scope, "ABCD-EFGH-JKLM", "u1")

    async with uow_scope() as uow:
        async with uow:
            assert await uow.invite_codes.revoke("ABCD-EFGH-JKLM") is False
            assert await uow.invite_codes.revoke("SECO-NDCO-DE22") is True
            await uow.commit()

    assert await claim(uow_scope, "SECO-NDCO-DE22", "u2") == ClaimOutcome.revoked


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "username, email, field",
    [
        ("ALICE", "other@example.com", "username"),
        ("bob", "Alice@Example.com", "email"),
    ],
)
async def test_duplicate_user_reports_field(uow_scope, username, email, field):
    async with uow_scope() as uow:
        async with uow:
            await uow.users.create(User.build("alice", "alice@example.com", "x" * 60))
            await uow.commit()

    async with uow_scope() as uow:
        async with uow:
            with pytest.raises(UserAlreadyExistsError) as exc_info:
                await uow.users.create(User.build(username, email, "x" * 60))

    assert exc_info.value.field == field


@pytest.mark.asyncio
async def test_idle_rate_limit_entries_are_purged(uow_scope):
    async with uow_scope() as uow:
        async with uow:
            await uow.rate_limits.save(
                RateLimitEntry(
                    origin="10.0.0.1",
                    attempts=1,
                    first_attempt_at=datetime(2024, 12, 1),
                    last_attempt_at=datetime(2024, 12, 1),
                )
            )
            await uow.rate_limits.save(
                RateLimitEntry(
                    origin="10.0.0.2", attempts=1, first_attempt_at=NOW, last_attempt_at=NOW
                )
            )
            await uow.commit()

    async with uow_scope() as uow:
        async with uow:
            removed = await uow.rate_limits.delete_idle_since(datetime(2024, 12, 31))
            await uow.commit()
        remaining = await uow.rate_limits.list()

    assert removed == 1
    assert [e.origin for e in remaining] == ["10.0.0.2"]
