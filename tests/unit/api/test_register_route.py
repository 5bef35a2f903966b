import asyncio
import logging
from contextlib import asynccontextmanager

import pytest

from src.api.routes.auth import RegisterRequest, _pending_registrations, register
from src.app.repositories.errors import StorageError
from tests.fixtures.portal import STRONG_PASSWORD, FakeProvisioner


def register_request() -> RegisterRequest:
    return RegisterRequest(
        invite_code="ABCD-EFGH-JKLM",
        username="alice",
        email="alice@example.com",
        password=STRONG_PASSWORD,
    )


@pytest.mark.asyncio
async def test_disconnect_does_not_stop_registration_and_errors_are_logged(caplog):
    started = asyncio.Event()

    @asynccontextmanager
    async def failing_scope():
        started.set()
        await asyncio.sleep(0.05)
        raise StorageError("disk full")
        yield  # pragma: no cover

    call = asyncio.create_task(
        register(register_request(), "198.51.100.1", failing_scope, FakeProvisioner())
    )
    await started.wait()
    call.cancel()

    with caplog.at_level(logging.ERROR, logger="src.api.routes.auth"):
        with pytest.raises(asyncio.CancelledError):
            await call
        assert len(_pending_registrations) == 1

        await asyncio.sleep(0.1)

    assert "Registration failed after the client disconnected" in caplog.text
    assert "disk full" in caplog.text
    assert _pending_registrations == set()
