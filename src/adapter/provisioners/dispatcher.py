from typing import Dict, Optional

from src.app.services.provisioner import IExternalProvisioner, ProvisionOutcome
from src.domain.entities import InvitePurpose

from .audiobookshelf import AudiobookShelfProvisioner
from .plex import PlexInviteProvisioner


class PurposeProvisioner(IExternalProvisioner):
    """Routes each invite purpose to the binding that serves it"""

    def __init__(self, bindings: Dict[InvitePurpose, IExternalProvisioner]):
        self.bindings = bindings

    @classmethod
    def from_config(cls, config, transport=None) -> "PurposeProvisioner":
        return cls(
            {
                InvitePurpose.library_invite: PlexInviteProvisioner.from_config(
                    config, transport
                ),
                InvitePurpose.audiobook_provisioning: AudiobookShelfProvisioner.from_config(
                    config, transport
                ),
            }
        )

    def handles(self, purpose: InvitePurpose) -> bool:
        return purpose in self.bindings

    async def provision(
        self,
        purpose: InvitePurpose,
        email: str,
        username: str,
        password: Optional[str] = None,
    ) -> ProvisionOutcome:
        binding = self.bindings.get(purpose)
        if binding is None:
            return ProvisionOutcome.failure(purpose.value, "No remote step for this purpose")
        return await binding.provision(purpose, email, username, password=password)
