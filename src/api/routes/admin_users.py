from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from config import ApplicationConfig
from src.api.error import ClientError, ServerError
from src.app.services.provisioner import IExternalProvisioner
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import SessionInfo
from src.app.use_cases.registration import (
    RetryProvisioningResponse,
    RetryProvisioningUseCase,
)
from src.app.use_cases.users import (
    DeleteUserUseCase,
    ListUsersResponse,
    ListUsersUseCase,
    UpdateUserUseCase,
    UserAction,
    UserActionResponse,
)
from src.depends import get_password_policy, get_provisioner, get_unit_of_work, require_admin
from src.domain.entities import InvitePurpose

router = APIRouter(prefix="/admin/users", tags=["Users"])


@router.get("", status_code=status.HTTP_200_OK, response_model=ListUsersResponse)
async def list_users(
    admin: SessionInfo = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """All portal accounts, without credential hashes"""
    result = await ListUsersUseCase(uow).execute()
    if result.is_err():
        raise ServerError(result.error)
    return result.value


class UpdateUserRequest(BaseModel):
    action: UserAction = Field(..., description="reset_password, disable or enable")
    new_password: Optional[str] = Field(
        default=None, max_length=256, description="Required for reset_password"
    )


@router.patch("/{user_id}", status_code=status.HTTP_200_OK, response_model=UserActionResponse)
async def update_user(
    user_id: UUID,
    request: UpdateUserRequest,
    admin: SessionInfo = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Update User

    Raises:
        - 400 Bad Request: WEAK_PASSWORD
        - 404 Not Found: USER_NOT_FOUND
    """
    use_case = UpdateUserUseCase(
        uow,
        password_policy=get_password_policy(),
        bcrypt_rounds=ApplicationConfig.BCRYPT_ROUNDS,
    )
    result = await use_case.execute(user_id, request.action, request.new_password)
    if result.is_err():
        error = result.error
        if error.code == "WEAK_PASSWORD":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        if error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)
    return result.value


@router.delete("/{user_id}", status_code=status.HTTP_200_OK, response_model=UserActionResponse)
async def delete_user(
    user_id: UUID,
    admin: SessionInfo = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Delete User

    Raises:
        - 403 Forbidden: CANNOT_DELETE_ADMIN
        - 404 Not Found: USER_NOT_FOUND
    """
    result = await DeleteUserUseCase(uow).execute(user_id)
    if result.is_err():
        error = result.error
        if error.code == "CANNOT_DELETE_ADMIN":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        if error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)
    return result.value


class RetryProvisioningRequest(BaseModel):
    purpose: InvitePurpose = Field(..., description="Which remote step to run")
    password: Optional[str] = Field(
        default=None, max_length=256, description="Needed for remote account creation"
    )


@router.post(
    "/{user_id}/provision",
    status_code=status.HTTP_200_OK,
    response_model=RetryProvisioningResponse,
)
async def retry_provisioning(
    user_id: UUID,
    request: RetryProvisioningRequest,
    admin: SessionInfo = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    provisioner: IExternalProvisioner = Depends(get_provisioner),
):
    """
    Retry Remote Provisioning

    Finishes a registration that ended with status "partial".

    Raises:
        - 400 Bad Request: NOTHING_TO_PROVISION, PASSWORD_REQUIRED
        - 404 Not Found: USER_NOT_FOUND
        - 502 Bad Gateway: PROVISIONING_FAILED
    """
    use_case = RetryProvisioningUseCase(
        uow, provisioner, provisioning_timeout=ApplicationConfig.PROVISIONING_TIMEOUT_SECONDS
    )
    result = await use_case.execute(user_id, request.purpose, request.password)
    if result.is_err():
        error = result.error
        if error.code in ("NOTHING_TO_PROVISION", "PASSWORD_REQUIRED"):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        if error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        if error.code == "PROVISIONING_FAILED":
            raise ClientError(error, status_code=status.HTTP_502_BAD_GATEWAY)
        raise ServerError(error)
    return result.value
