"""
Retry Provisioning Use Case

Lets an administrator finish remote provisioning after a partial registration.
"""

import logging
from typing import Optional
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.provisioner import IExternalProvisioner, provision_with_timeout
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import InvitePurpose

from .dtos import ProvisioningInfo, RetryProvisioningResponse

logger = logging.getLogger(__name__)


class RetryProvisioningUseCase:
    """
    Use case for re-running remote provisioning for an existing user.

    Business Rules:
    - User must exist (USER_NOT_FOUND)
    - Purpose must have a remote step (NOTHING_TO_PROVISION)
    - Remote-account creation needs a password, since the portal only
      holds a one-way hash (PASSWORD_REQUIRED)
    - Remote failure is reported as PROVISIONING_FAILED with the detail
    """

    def __init__(
        self,
        uow: UnitOfWork,
        provisioner: IExternalProvisioner,
        provisioning_timeout: float = 15.0,
    ):
        self.uow = uow
        self.provisioner = provisioner
        self.provisioning_timeout = provisioning_timeout

    async def execute(
        self, user_id: UUID, purpose: InvitePurpose, password: Optional[str] = None
    ) -> Result[RetryProvisioningResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)

        if user is None:
            return Return.err(Error("USER_NOT_FOUND", "User not found."))

        if not self.provisioner.handles(purpose):
            return Return.err(
                Error("NOTHING_TO_PROVISION", f"{purpose.value} has no remote provisioning step.")
            )

        if purpose == InvitePurpose.audiobook_provisioning and not password:
            return Return.err(
                Error(
                    "PASSWORD_REQUIRED",
                    "A password is required to create the remote account.",
                )
            )

        outcome = await provision_with_timeout(
            self.provisioner,
            self.provisioning_timeout,
            purpose,
            user.email,
            user.username,
            password=password,
        )
        info = ProvisioningInfo(
            purpose=purpose.value, service=outcome.service, ok=outcome.ok, detail=outcome.detail
        )

        if not outcome.ok:
            logger.error(f"Provisioning retry failed for {user.username}: {outcome.detail}")
            return Return.err(
                Error(
                    "PROVISIONING_FAILED",
                    f"Provisioning failed: {outcome.detail}",
                    details={"provisioning": info.model_dump()},
                )
            )

        logger.info(f"Provisioning retry succeeded for {user.username} ({purpose.value})")
        return Return.ok(
            RetryProvisioningResponse(
                user_id=str(user.id),
                provisioning=info,
                message=f"Provisioning completed for {user.username}.",
            )
        )
