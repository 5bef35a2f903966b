import pytest

from src.app.services.provisioner import (
    IExternalProvisioner,
    ProvisionOutcome,
    provision_with_timeout,
)
from src.domain.entities import InvitePurpose
from tests.fixtures.portal import FakeProvisioner


class ExplodingProvisioner(IExternalProvisioner):
    async def provision(self, purpose, email, username, password=None):
        raise RuntimeError("socket closed")


@pytest.mark.asyncio
async def test_outcome_passes_through():
    provisioner = FakeProvisioner(ProvisionOutcome.success("Plex", "sent"))

    outcome = await provision_with_timeout(
        provisioner, 1.0, InvitePurpose.library_invite, "a@example.com", "alice"
    )

    assert outcome.ok
    assert outcome.detail == "sent"
    assert provisioner.calls == [
        (InvitePurpose.library_invite, "a@example.com", "alice", None)
    ]


@pytest.mark.asyncio
async def test_timeout_becomes_failure():
    provisioner = FakeProvisioner(delay=1.0)

    outcome = await provision_with_timeout(
        provisioner, 0.05, InvitePurpose.audiobook_provisioning, "a@example.com", "alice"
    )

    assert not outcome.ok
    assert "did not respond within 0.05 seconds" in outcome.detail


@pytest.mark.asyncio
async def test_unexpected_exception_becomes_failure():
    outcome = await provision_with_timeout(
        ExplodingProvisioner(), 1.0, InvitePurpose.library_invite, "a@example.com", "alice"
    )

    assert not outcome.ok
    assert "socket closed" in outcome.detail
