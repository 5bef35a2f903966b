from src.libs.result import Result, Return
from src.app.repositories.invite_code_repository import ClaimOutcome
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import normalize_code

from .dtos import VerifyInviteResponse
from .invite_errors import CLAIM_ERRORS


class VerifyInviteUseCase:
    """
    Read-only invite code check for the registration form.

    Does not claim the code; the answer can be stale by the time the user
    submits, which the claim in RegisterUseCase accounts for.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, code: str) -> Result[VerifyInviteResponse]:
        async with self.uow:
            invite_code = await self.uow.invite_codes.get_by_code(normalize_code(code))

        if invite_code is None:
            return Return.err(CLAIM_ERRORS[ClaimOutcome.not_found])
        if invite_code.is_consumed:
            return Return.err(CLAIM_ERRORS[ClaimOutcome.already_consumed])
        if not invite_code.is_active:
            return Return.err(CLAIM_ERRORS[ClaimOutcome.revoked])

        return Return.ok(VerifyInviteResponse(valid=True, message="Invite code is valid."))
