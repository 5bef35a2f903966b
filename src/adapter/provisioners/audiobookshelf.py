"""
AudiobookShelf account creation.

Creates a listener account with the portal username and password.
"""

import logging
from typing import Optional

import httpx

from src.app.services.provisioner import IExternalProvisioner, ProvisionOutcome
from src.domain.entities import InvitePurpose

logger = logging.getLogger(__name__)

SERVICE = "AudiobookShelf"

DEFAULT_PERMISSIONS = {
    "download": True,
    "update": False,
    "delete": False,
    "upload": False,
    "accessAllLibraries": True,
    "accessAllTags": True,
}


class AudiobookShelfProvisioner(IExternalProvisioner):
    def __init__(
        self,
        base_url: Optional[str],
        api_token: Optional[str],
        public_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/") if base_url else None
        self.api_token = api_token
        self.public_url = public_url or self.base_url
        self.transport = transport

    @classmethod
    def from_config(cls, config, transport=None) -> "AudiobookShelfProvisioner":
        return cls(
            base_url=config.AUDIOBOOKSHELF_BASE_URL,
            api_token=config.AUDIOBOOKSHELF_API_TOKEN,
            public_url=config.AUDIOBOOKSHELF_PUBLIC_URL,
            transport=transport,
        )

    def handles(self, purpose: InvitePurpose) -> bool:
        return purpose == InvitePurpose.audiobook_provisioning

    async def provision(
        self,
        purpose: InvitePurpose,
        email: str,
        username: str,
        password: Optional[str] = None,
    ) -> ProvisionOutcome:
        if not self.base_url or not self.api_token:
            return ProvisionOutcome.failure(SERVICE, "AudiobookShelf is not configured")
        if not password:
            return ProvisionOutcome.failure(SERVICE, "A password is required for AudiobookShelf")

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/api/users",
                    headers={"Authorization": f"Bearer {self.api_token}"},
                    json={
                        "username": username,
                        "password": password,
                        "type": "user",
                        "isActive": True,
                        "permissions": DEFAULT_PERMISSIONS,
                    },
                )
        except httpx.HTTPError as e:
            logger.error(f"AudiobookShelf account for {username} failed: {e}")
            return ProvisionOutcome.failure(SERVICE, f"Failed to reach AudiobookShelf: {e}")

        if response.is_error:
            logger.error(
                f"AudiobookShelf rejected account for {username}: {response.status_code}"
            )
            return ProvisionOutcome.failure(
                SERVICE, f"AudiobookShelf API error ({response.status_code}): {response.text}"
            )

        logger.info(f"AudiobookShelf account created for {username}")
        return ProvisionOutcome.success(
            SERVICE, f"Sign in to AudiobookShelf at {self.public_url}."
        )
