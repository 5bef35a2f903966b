from src.libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork

from .dtos import InviteCodeInfo, ListInviteCodesResponse


class ListInviteCodesUseCase:
    """Use case for listing every invite code with its consumption state"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[ListInviteCodesResponse]:
        async with self.uow:
            codes = await self.uow.invite_codes.list()

        return Return.ok(
            ListInviteCodesResponse(
                codes=[InviteCodeInfo.from_entity(c) for c in codes]
            )
        )
