"""
Revoke Invite Code Use Case

Permanently deactivates an unconsumed invite code.
"""

import logging

from src.libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import normalize_code

from .dtos import RevokeInviteCodeResponse

logger = logging.getLogger(__name__)


class RevokeInviteCodeUseCase:
    """
    Use case for revoking invite codes (administrator action).

    Business Rules:
    - Unknown code fails with INVITE_CODE_NOT_FOUND
    - Consumed codes cannot be revoked (INVITE_CODE_ALREADY_CONSUMED)
    - Revoking an already revoked code succeeds without change
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, code: str) -> Result[RevokeInviteCodeResponse]:
        code = normalize_code(code)

        async with self.uow:
            invite_code = await self.uow.invite_codes.get_by_code(code)

            if invite_code is None:
                return Return.err(
                    Error("INVITE_CODE_NOT_FOUND", "Invite code not found")
                )

            if invite_code.is_consumed:
                return Return.err(
                    Error(
                        "INVITE_CODE_ALREADY_CONSUMED",
                        "Cannot revoke an invite code that has already been used",
                    )
                )

            if invite_code.is_active:
                revoked = await self.uow.invite_codes.revoke(code)
                if not revoked:
                    # Consumed between the read and the conditional update
                    return Return.err(
                        Error(
                            "INVITE_CODE_ALREADY_CONSUMED",
                            "Cannot revoke an invite code that has already been used",
                        )
                    )
                await self.uow.commit()
                logger.info(f"Invite code revoked: {code}")

        return Return.ok(
            RevokeInviteCodeResponse(
                code=code,
                status="revoked",
                message="Invite code revoked successfully",
            )
        )
