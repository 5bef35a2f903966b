import re
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.app.use_cases.invite_codes import (
    GenerateInviteCodeUseCase,
    ListInviteCodesUseCase,
    RevokeInviteCodeUseCase,
)
from src.domain.entities import InviteCode, InvitePurpose
from src.domain.entities.invite_code import CODE_ALPHABET
from tests.fixtures.portal import add_invite_code

CODE_FORMAT = re.compile(rf"^[{CODE_ALPHABET}]{{4}}-[{CODE_ALPHABET}]{{4}}-[{CODE_ALPHABET}]{{4}}$")


@pytest.mark.asyncio
async def test_generate_creates_active_unconsumed_code(memory_uow, store):
    result = await GenerateInviteCodeUseCase(memory_uow).execute("admin")

    assert result.is_ok()
    code = result.value.code
    assert CODE_FORMAT.match(code)
    stored = store.invite_codes[code]
    assert stored.created_by == "admin"
    assert stored.is_usable


@pytest.mark.asyncio
async def test_generate_gives_up_after_repeated_collisions(mock_uow):
    mock_uow.invite_codes = MagicMock()
    mock_uow.invite_codes.get_by_code = AsyncMock(
        return_value=InviteCode(code="TAKEN", created_by="x")
    )
    mock_uow.invite_codes.create = AsyncMock()

    result = await GenerateInviteCodeUseCase(mock_uow).execute("admin")

    assert result.error.code == "CODE_GENERATION_FAILED"
    assert mock_uow.invite_codes.get_by_code.await_count == 10
    mock_uow.invite_codes.create.assert_not_called()


@pytest.mark.asyncio
async def test_list_shows_consumption_details(memory_uow, store, clock):
    add_invite_code(store, "AAAA-AAAA-AAAA")
    add_invite_code(store, "BBBB-BBBB-BBBB")
    async with memory_uow:
        await memory_uow.invite_codes.claim(
            "AAAA-AAAA-AAAA", "user-1", InvitePurpose.library_invite, clock()
        )

    result = await ListInviteCodesUseCase(memory_uow).execute()

    codes = {c.code: c for c in result.value.codes}
    assert codes["AAAA-AAAA-AAAA"].consumed_by == "user-1"
    assert codes["AAAA-AAAA-AAAA"].consumed_for == "library_invite"
    assert codes["BBBB-BBBB-BBBB"].consumed_by is None


@pytest.mark.asyncio
async def test_revoke_unconsumed_code(memory_uow, store):
    add_invite_code(store)

    result = await RevokeInviteCodeUseCase(memory_uow).execute("abcd-efgh-jklm")

    assert result.is_ok()
    assert store.invite_codes["ABCD-EFGH-JKLM"].is_active is False


@pytest.mark.asyncio
async def test_revoke_twice_is_idempotent(memory_uow, store):
    add_invite_code(store)
    use_case = RevokeInviteCodeUseCase(memory_uow)

    await use_case.execute("ABCD-EFGH-JKLM")
    again = await use_case.execute("ABCD-EFGH-JKLM")

    assert again.is_ok()


@pytest.mark.asyncio
async def test_revoke_consumed_code_refused(memory_uow, store, clock):
    add_invite_code(store)
    async with memory_uow:
        await memory_uow.invite_codes.claim(
            "ABCD-EFGH-JKLM", "user-1", InvitePurpose.plain_registration, clock()
        )

    result = await RevokeInviteCodeUseCase(memory_uow).execute("ABCD-EFGH-JKLM")

    assert result.error.code == "INVITE_CODE_ALREADY_CONSUMED"
    assert store.invite_codes["ABCD-EFGH-JKLM"].is_active is True


@pytest.mark.asyncio
async def test_revoke_unknown_code(memory_uow):
    result = await RevokeInviteCodeUseCase(memory_uow).execute("NOPE-NOPE-NOPE")

    assert result.error.code == "INVITE_CODE_NOT_FOUND"
