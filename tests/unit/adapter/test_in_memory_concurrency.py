import asyncio
from uuid import uuid4

import pytest

from src.adapter.services.in_memory_unit_of_work import InMemoryUnitOfWork
from src.app.repositories.errors import UserAlreadyExistsError
from src.app.repositories.invite_code_repository import ClaimOutcome
from src.app.use_cases.registration import RegisterCommand, RegisterUseCase
from src.domain.entities import InvitePurpose, User
from tests.fixtures.portal import STRONG_PASSWORD, FakeProvisioner, add_invite_code


@pytest.mark.asyncio
async def test_fifty_concurrent_claims_yield_one_winner(store, clock):
    add_invite_code(store, "RACE-RACE-RACE")

    async def claim(i):
        async with InMemoryUnitOfWork(store) as uow:
            return await uow.invite_codes.claim(
                "RACE-RACE-RACE", f"user-{i}", InvitePurpose.plain_registration, clock()
            )

    outcomes = await asyncio.gather(*(claim(i) for i in range(50)))

    assert outcomes.count(ClaimOutcome.claimed) == 1
    assert outcomes.count(ClaimOutcome.already_consumed) == 49


@pytest.mark.asyncio
async def test_fifty_concurrent_registrations_create_one_account(store, clock):
    add_invite_code(store, "RACE-RACE-RACE")

    async def register(i):
        use_case = RegisterUseCase(
            InMemoryUnitOfWork(store), FakeProvisioner(), bcrypt_rounds=4, clock=clock
        )
        return await use_case.execute(
            RegisterCommand(
                invite_code="race-race-race",
                username=f"user{i}",
                email=f"user{i}@example.com",
                password=STRONG_PASSWORD,
            )
        )

    results = await asyncio.gather(*(register(i) for i in range(50)))

    winners = [r for r in results if r.is_ok()]
    assert len(winners) == 1
    assert all(r.error.code == "INVITE_CODE_ALREADY_USED" for r in results if r.is_err())
    assert len(store.users) == 1
    assert store.invite_codes["RACE-RACE-RACE"].consumed_by == winners[0].value.user.id


@pytest.mark.asyncio
async def test_same_username_race_releases_losing_claim(store, clock):
    add_invite_code(store, "AAAA-AAAA-AAAA")
    add_invite_code(store, "BBBB-BBBB-BBBB")

    async def register(code, email):
        use_case = RegisterUseCase(
            InMemoryUnitOfWork(store), FakeProvisioner(), bcrypt_rounds=4, clock=clock
        )
        return await use_case.execute(
            RegisterCommand(
                invite_code=code, username="Dupe", email=email, password=STRONG_PASSWORD
            )
        )

    first, second = await asyncio.gather(
        register("AAAA-AAAA-AAAA", "one@example.com"),
        register("BBBB-BBBB-BBBB", "two@example.com"),
    )

    assert sorted([first.is_ok(), second.is_ok()]) == [False, True]
    loser = first if first.is_err() else second
    assert loser.error.code == "USERNAME_TAKEN"
    assert len(store.users) == 1
    consumed = [c for c in store.invite_codes.values() if c.is_consumed]
    assert len(consumed) == 1


@pytest.mark.asyncio
async def test_user_create_enforces_case_insensitive_uniqueness(memory_uow):
    async with memory_uow:
        await memory_uow.users.create(User.build("Alice", "alice@example.com", "hash"))

        with pytest.raises(UserAlreadyExistsError) as username_clash:
            await memory_uow.users.create(User.build("ALICE", "other@example.com", "hash"))
        with pytest.raises(UserAlreadyExistsError) as email_clash:
            await memory_uow.users.create(User.build("bob", "Alice@Example.com", "hash"))

    assert username_clash.value.field == "username"
    assert email_clash.value.field == "email"


@pytest.mark.asyncio
async def test_reads_return_copies(memory_uow, store):
    user = User.build("alice", "alice@example.com", "hash", user_id=uuid4())
    store.users[user.id] = user

    async with memory_uow:
        loaded = await memory_uow.users.get_by_id(user.id)
        loaded.is_active = False

    assert store.users[user.id].is_active is True


@pytest.mark.asyncio
async def test_release_only_for_holder(memory_uow, store, clock):
    add_invite_code(store, "HOLD-HOLD-HOLD")

    async with memory_uow:
        await memory_uow.invite_codes.claim(
            "HOLD-HOLD-HOLD", "owner", InvitePurpose.library_invite, clock()
        )
        assert not await memory_uow.invite_codes.release("HOLD-HOLD-HOLD", "someone-else")
        assert await memory_uow.invite_codes.release("HOLD-HOLD-HOLD", "owner")

    invite_code = store.invite_codes["HOLD-HOLD-HOLD"]
    assert invite_code.is_usable
    assert invite_code.consumed_for is None
