"""
Plex library invitations.

Reads the media server's machine identifier, then asks plex.tv to share the
configured library sections with the new user's email address.
"""

import logging
import re
from typing import List, Optional

import httpx

from src.app.services.provisioner import IExternalProvisioner, ProvisionOutcome
from src.domain.entities import InvitePurpose

logger = logging.getLogger(__name__)

SERVICE = "Plex"
MACHINE_ID_PATTERN = re.compile(r'machineIdentifier="([^"]+)"')


def parse_library_ids(raw) -> List[int]:
    """Accepts a list or a comma-separated string; non-numeric ids are dropped"""
    if not raw:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    ids = []
    for item in raw:
        try:
            ids.append(int(str(item).strip()))
        except ValueError:
            continue
    return ids


class PlexInviteProvisioner(IExternalProvisioner):
    def __init__(
        self,
        base_url: Optional[str],
        token: Optional[str],
        library_ids: List[int],
        plex_tv_url: str = "https://plex.tv",
        client_identifier: str = "media-request-portal",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/") if base_url else None
        self.token = token
        self.library_ids = library_ids
        self.plex_tv_url = plex_tv_url.rstrip("/")
        self.client_identifier = client_identifier
        self.transport = transport

    @classmethod
    def from_config(cls, config, transport=None) -> "PlexInviteProvisioner":
        return cls(
            base_url=config.PLEX_BASE_URL,
            token=config.PLEX_TOKEN,
            library_ids=parse_library_ids(config.PLEX_LIBRARY_IDS),
            plex_tv_url=config.PLEX_TV_URL,
            client_identifier=config.PLEX_CLIENT_IDENTIFIER,
            transport=transport,
        )

    def handles(self, purpose: InvitePurpose) -> bool:
        return purpose == InvitePurpose.library_invite

    async def provision(
        self,
        purpose: InvitePurpose,
        email: str,
        username: str,
        password: Optional[str] = None,
    ) -> ProvisionOutcome:
        if not self.base_url or not self.token:
            return ProvisionOutcome.failure(SERVICE, "Plex server is not configured")

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                machine_id = await self._machine_identifier(client)
                if machine_id is None:
                    return ProvisionOutcome.failure(
                        SERVICE, "Could not retrieve Plex server ID"
                    )

                response = await client.post(
                    f"{self.plex_tv_url}/api/v2/shared_servers",
                    headers={
                        "X-Plex-Token": self.token,
                        "X-Plex-Client-Identifier": self.client_identifier,
                        "Accept": "application/json",
                    },
                    json={
                        "machineIdentifier": machine_id,
                        "librarySectionIds": self.library_ids,
                        "invitedEmail": email,
                    },
                )
        except httpx.HTTPError as e:
            logger.error(f"Plex invite for {email} failed: {e}")
            return ProvisionOutcome.failure(SERVICE, f"Failed to reach Plex: {e}")

        if response.is_error:
            logger.error(f"Plex API rejected invite for {email}: {response.status_code}")
            return ProvisionOutcome.failure(
                SERVICE, f"Plex API error ({response.status_code}): {response.text}"
            )

        logger.info(f"Plex invitation sent to {email}")
        return ProvisionOutcome.success(SERVICE, "Plex invitation sent successfully!")

    async def _machine_identifier(self, client: httpx.AsyncClient) -> Optional[str]:
        response = await client.get(
            f"{self.base_url}/", params={"X-Plex-Token": self.token}
        )
        response.raise_for_status()
        match = MACHINE_ID_PATTERN.search(response.text)
        return match.group(1) if match else None
