from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.provisioners.dispatcher import PurposeProvisioner
from src.adapter.repositories.in_memory import MemoryStore
from src.adapter.services.in_memory_unit_of_work import InMemoryUnitOfWork
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.utils.client_ip import resolve_origin
from src.app.services.auth_gateway import AuthGateway
from src.app.services.keyed_lock import KeyedLock
from src.app.services.passwords import PasswordPolicy
from src.app.services.provisioner import IExternalProvisioner
from src.app.services.rate_limiter import RateLimiter
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import CheckSessionUseCase, LoginUseCase, SessionInfo
from src.app.use_cases.registration import RegisterUseCase
from src.domain.entities import SessionScope

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

memory_store = MemoryStore()

# Shared by every request so concurrent checks for one origin serialize
rate_limit_locks = KeyedLock()

security = HTTPBearer(auto_error=False)

_provisioner: Optional[IExternalProvisioner] = None


@asynccontextmanager
async def uow_scope():
    """A UnitOfWork for the configured storage backend"""
    if ApplicationConfig.STORAGE_BACKEND == "memory":
        yield InMemoryUnitOfWork(memory_store)
        return
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_uow_scope():
    return uow_scope


async def get_unit_of_work(scope=Depends(get_uow_scope)):
    async with scope() as uow:
        yield uow


def get_provisioner() -> IExternalProvisioner:
    global _provisioner
    if _provisioner is None:
        _provisioner = PurposeProvisioner.from_config(ApplicationConfig)
    return _provisioner


def get_client_origin(request: Request) -> str:
    return resolve_origin(request, ApplicationConfig.TRUSTED_PROXIES)


def get_password_policy() -> PasswordPolicy:
    return PasswordPolicy.from_config(ApplicationConfig)


def build_auth_gateway(uow: UnitOfWork, provisioner: IExternalProvisioner) -> AuthGateway:
    """Wires the rate limiter and credential use cases around one unit of work"""
    return AuthGateway(
        rate_limiter=RateLimiter.from_config(uow, rate_limit_locks, ApplicationConfig),
        login_use_case=LoginUseCase(
            uow,
            scope=SessionScope.user,
            session_ttl=timedelta(days=ApplicationConfig.SESSION_TTL_DAYS),
            bcrypt_rounds=ApplicationConfig.BCRYPT_ROUNDS,
        ),
        admin_login_use_case=LoginUseCase(
            uow,
            scope=SessionScope.admin,
            session_ttl=timedelta(hours=ApplicationConfig.ADMIN_SESSION_TTL_HOURS),
            bcrypt_rounds=ApplicationConfig.BCRYPT_ROUNDS,
        ),
        register_use_case=RegisterUseCase(
            uow,
            provisioner,
            password_policy=get_password_policy(),
            bcrypt_rounds=ApplicationConfig.BCRYPT_ROUNDS,
            provisioning_timeout=ApplicationConfig.PROVISIONING_TIMEOUT_SECONDS,
            username_min_length=ApplicationConfig.USERNAME_MIN_LENGTH,
        ),
    )


async def get_auth_gateway(
    uow: UnitOfWork = Depends(get_unit_of_work),
    provisioner: IExternalProvisioner = Depends(get_provisioner),
) -> AuthGateway:
    return build_auth_gateway(uow, provisioner)


async def get_rate_limiter(uow: UnitOfWork = Depends(get_unit_of_work)) -> RateLimiter:
    return RateLimiter.from_config(uow, rate_limit_locks, ApplicationConfig)


def session_token(
    request: Request,
    cookie_name: str,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    """Bearer header wins over the session cookie"""
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(cookie_name)


def get_user_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    return session_token(request, ApplicationConfig.SESSION_COOKIE_NAME, credentials)


def get_admin_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    return session_token(request, ApplicationConfig.ADMIN_SESSION_COOKIE_NAME, credentials)


async def get_current_user(
    token: Optional[str] = Depends(get_user_token),
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> SessionInfo:
    """
    Dependency resolving the caller's user session.

    Raises:
        ClientError: 401 if the token is missing, unknown or expired
    """
    result = await CheckSessionUseCase(uow).execute(token, SessionScope.user)
    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_401_UNAUTHORIZED)
    return result.value


async def require_admin(
    token: Optional[str] = Depends(get_admin_token),
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> SessionInfo:
    """
    Dependency guarding every /admin endpoint except login.

    Raises:
        ClientError: 401 if there is no valid admin session
    """
    result = await CheckSessionUseCase(uow).execute(token, SessionScope.admin)
    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_401_UNAUTHORIZED)
    return result.value
