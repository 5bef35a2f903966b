"""
Generate Invite Code Use Case

Issues a new single-use registration code.
"""

import logging

from src.libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import InviteCode, generate_invite_code

from .dtos import GenerateInviteCodeResponse

logger = logging.getLogger(__name__)

MAX_GENERATION_ATTEMPTS = 10


class GenerateInviteCodeUseCase:
    """
    Use case for generating invite codes (administrator action).

    Business Rules:
    - Code is unique across the ledger; collisions are regenerated
    - New codes start active and unconsumed
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, creator_id: str) -> Result[GenerateInviteCodeResponse]:
        async with self.uow:
            for _ in range(MAX_GENERATION_ATTEMPTS):
                code = generate_invite_code()
                if await self.uow.invite_codes.get_by_code(code) is None:
                    break
            else:
                return Return.err(
                    Error(
                        "CODE_GENERATION_FAILED",
                        "Could not generate a unique invite code",
                    )
                )

            await self.uow.invite_codes.create(
                InviteCode(code=code, created_by=creator_id)
            )
            await self.uow.commit()

        logger.info(f"New invite code generated: {code} by {creator_id}")
        return Return.ok(
            GenerateInviteCodeResponse(
                code=code, message="Invite code generated successfully"
            )
        )
