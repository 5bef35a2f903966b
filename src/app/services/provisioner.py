import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from src.domain.entities import InvitePurpose

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvisionOutcome:
    """Outcome of a remote provisioning call; failures carry a detail, never raise"""

    ok: bool
    detail: str = ""
    service: str = ""

    @classmethod
    def success(cls, service: str, detail: str = "") -> "ProvisionOutcome":
        return cls(ok=True, detail=detail, service=service)

    @classmethod
    def failure(cls, service: str, detail: str) -> "ProvisionOutcome":
        return cls(ok=False, detail=detail, service=service)


class IExternalProvisioner(ABC):
    """Grants a new portal account access to a collaborator system"""

    @abstractmethod
    async def provision(
        self,
        purpose: InvitePurpose,
        email: str,
        username: str,
        password: Optional[str] = None,
    ) -> ProvisionOutcome:
        """
        Run the purpose-specific remote action.

        Implementations must report every failure (configuration, transport,
        non-2xx response) as ProvisionOutcome.failure instead of raising.
        """
        pass

    def handles(self, purpose: InvitePurpose) -> bool:
        """Whether this provisioner has a remote step for purpose"""
        return True


async def provision_with_timeout(
    provisioner: IExternalProvisioner,
    timeout: float,
    purpose: InvitePurpose,
    email: str,
    username: str,
    password: Optional[str] = None,
) -> ProvisionOutcome:
    """Run a provisioner under a deadline; a timeout becomes a failed outcome"""
    try:
        return await asyncio.wait_for(
            provisioner.provision(purpose, email, username, password=password),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.error(f"Provisioning {purpose.value} for {username} timed out after {timeout:g}s")
        return ProvisionOutcome.failure(
            purpose.value, f"Remote service did not respond within {timeout:g} seconds"
        )
    except Exception as exc:
        # Bindings report failures as outcomes; anything escaping is a bug in one
        logger.exception(f"Provisioner raised for {purpose.value} / {username}")
        return ProvisionOutcome.failure(purpose.value, f"Unexpected provisioning error: {exc}")
