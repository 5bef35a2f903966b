"""
Register Use Case

Invite-gated self-service account creation.
"""

import logging
from contextlib import suppress
from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4

from src.libs.result import Error, Result, Return
from src.app.repositories.errors import StorageError, UserAlreadyExistsError
from src.app.repositories.invite_code_repository import ClaimOutcome
from src.app.services.passwords import (
    PasswordPolicy,
    hash_password,
    username_violation,
)
from src.app.services.provisioner import (
    IExternalProvisioner,
    ProvisionOutcome,
    provision_with_timeout,
)
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import InvitePurpose, User, normalize_code

from .dtos import ProvisioningInfo, RegisterCommand, RegisteredUser, RegisterResponse
from .invite_errors import CLAIM_ERRORS

logger = logging.getLogger(__name__)

SUCCESS_MESSAGES = {
    InvitePurpose.library_invite: (
        "Portal account created successfully! "
        "A library invitation was sent to your email - check your inbox to accept."
    ),
    InvitePurpose.audiobook_provisioning: (
        "Portal account created successfully! "
        "Your audiobook account uses the same username and password."
    ),
    InvitePurpose.plain_registration: "Portal account created successfully!",
}


class RegisterUseCase:
    """
    Register Use Case

    Business Logic:
    1. Validate username and password policy (nothing stored on failure)
    2. Claim the invite code atomically (fail fast, nothing else happens)
    3. Create the user; if username/email is taken or storage fails,
       release the claim
    4. Run purpose-specific remote provisioning under a timeout
    5. Remote failure leaves the local account in place and reports
       a partial success for an administrator to follow up
    """

    def __init__(
        self,
        uow: UnitOfWork,
        provisioner: IExternalProvisioner,
        password_policy: Optional[PasswordPolicy] = None,
        bcrypt_rounds: int = 12,
        provisioning_timeout: float = 15.0,
        username_min_length: int = 3,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.provisioner = provisioner
        self.password_policy = password_policy or PasswordPolicy()
        self.bcrypt_rounds = bcrypt_rounds
        self.provisioning_timeout = provisioning_timeout
        self.username_min_length = username_min_length
        self.clock = clock

    async def execute(self, command: RegisterCommand) -> Result[RegisterResponse]:
        """
        Execute register use case

        Args:
            command: RegisterCommand with invite code, identity, password, purpose

        Returns:
            Result[RegisterResponse] (status "success" or "partial"),
            or Error for validation, invite and conflict failures
        """
        username = command.username.strip()
        email = command.email.strip()

        reason = username_violation(username, self.username_min_length)
        if reason:
            return Return.err(Error("INVALID_USERNAME", reason))

        reason = self.password_policy.violation(command.password)
        if reason:
            return Return.err(Error("WEAK_PASSWORD", reason))

        code = normalize_code(command.invite_code)
        user_id = uuid4()
        password_hash = hash_password(command.password, self.bcrypt_rounds)

        async with self.uow:
            outcome = await self.uow.invite_codes.claim(
                code, str(user_id), command.purpose, self.clock()
            )
            if outcome != ClaimOutcome.claimed:
                logger.info(f"Registration rejected for {username}: invite code {outcome.value}")
                return Return.err(CLAIM_ERRORS[outcome])
            await self.uow.commit()

            user = User.build(username, email, password_hash, user_id=user_id)
            conflict = await self._conflicting_field(username, email)
            if conflict is None:
                try:
                    user = await self.uow.users.create(user)
                    await self.uow.commit()
                except UserAlreadyExistsError as exc:
                    conflict = exc.field
                except StorageError:
                    logger.error(
                        f"Account creation for {username} failed; releasing invite code {code}"
                    )
                    # A failed release is logged inside _release_claim
                    with suppress(StorageError):
                        await self._release_claim(code, str(user_id))
                    raise

            if conflict is not None:
                await self._release_claim(code, str(user_id))
                return Return.err(self._conflict_error(conflict))

        logger.info(
            f"New user registered: {username} ({email}) using invite code {code} "
            f"for {command.purpose.value}"
        )

        registered = RegisteredUser(id=str(user.id), username=user.username, email=user.email)

        if not self.provisioner.handles(command.purpose):
            return Return.ok(
                RegisterResponse(
                    status="success",
                    message=SUCCESS_MESSAGES[command.purpose],
                    user=registered,
                )
            )

        provisioned = await provision_with_timeout(
            self.provisioner,
            self.provisioning_timeout,
            command.purpose,
            email,
            username,
            password=command.password,
        )
        info = ProvisioningInfo(
            purpose=command.purpose.value,
            service=provisioned.service,
            ok=provisioned.ok,
            detail=provisioned.detail,
        )

        if not provisioned.ok:
            logger.error(
                f"Remote provisioning failed for {username} ({command.purpose.value}): "
                f"{provisioned.detail}"
            )
            return Return.ok(
                RegisterResponse(
                    status="partial",
                    message=self._partial_message(provisioned),
                    user=registered,
                    provisioning=info,
                )
            )

        message = SUCCESS_MESSAGES[command.purpose]
        if provisioned.detail:
            message = f"{message} {provisioned.detail}"
        return Return.ok(
            RegisterResponse(
                status="success", message=message, user=registered, provisioning=info
            )
        )

    async def _conflicting_field(self, username: str, email: str) -> Optional[str]:
        if await self.uow.users.get_by_username(username) is not None:
            return "username"
        if await self.uow.users.get_by_email(email) is not None:
            return "email"
        return None

    async def _release_claim(self, code: str, consumer_id: str) -> None:
        """No account was created, so the claimed code goes back to the ledger"""
        await self.uow.rollback()
        try:
            await self.uow.invite_codes.release(code, consumer_id)
            await self.uow.commit()
        except StorageError:
            logger.error(f"Invite code {code} stays claimed by {consumer_id}; release failed")
            raise
        logger.info(f"Invite code {code} released; no account was created")

    @staticmethod
    def _conflict_error(field: str) -> Error:
        if field == "email":
            return Error("EMAIL_TAKEN", "Email already registered.")
        return Error("USERNAME_TAKEN", "Username already exists.")

    @staticmethod
    def _partial_message(outcome: ProvisionOutcome) -> str:
        service = outcome.service or "remote service"
        return (
            f"Your portal account was created, but {service} access could not be set up: "
            f"{outcome.detail}. Please contact an administrator to finish setting up access."
        )
