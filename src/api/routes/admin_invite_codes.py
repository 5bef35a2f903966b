from fastapi import APIRouter, Depends, status

from src.api.error import ClientError, ServerError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import SessionInfo
from src.app.use_cases.invite_codes import (
    GenerateInviteCodeResponse,
    GenerateInviteCodeUseCase,
    ListInviteCodesResponse,
    ListInviteCodesUseCase,
    RevokeInviteCodeResponse,
    RevokeInviteCodeUseCase,
)
from src.depends import get_unit_of_work, require_admin

router = APIRouter(prefix="/admin/invite-codes", tags=["Invite Codes"])


@router.get("", status_code=status.HTTP_200_OK, response_model=ListInviteCodesResponse)
async def list_invite_codes(
    admin: SessionInfo = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """All invite codes, newest first, with consumption details"""
    result = await ListInviteCodesUseCase(uow).execute()
    if result.is_err():
        raise ServerError(result.error)
    return result.value


@router.post(
    "", status_code=status.HTTP_201_CREATED, response_model=GenerateInviteCodeResponse
)
async def generate_invite_code(
    admin: SessionInfo = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Generate Invite Code

    Creates a fresh XXXX-XXXX-XXXX code attributed to the calling admin.

    Raises:
        - 500 Internal Server Error: CODE_GENERATION_FAILED
    """
    result = await GenerateInviteCodeUseCase(uow).execute(admin.username)
    if result.is_err():
        raise ServerError(result.error)
    return result.value


@router.delete(
    "/{code}", status_code=status.HTTP_200_OK, response_model=RevokeInviteCodeResponse
)
async def revoke_invite_code(
    code: str,
    admin: SessionInfo = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Revoke Invite Code

    Raises:
        - 404 Not Found: INVITE_CODE_NOT_FOUND
        - 409 Conflict: INVITE_CODE_ALREADY_CONSUMED
    """
    result = await RevokeInviteCodeUseCase(uow).execute(code)
    if result.is_err():
        error = result.error
        if error.code == "INVITE_CODE_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        if error.code == "INVITE_CODE_ALREADY_CONSUMED":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        raise ServerError(error)
    return result.value
