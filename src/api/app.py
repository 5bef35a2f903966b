from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import SQLModel
from .error import ClientError, RateLimitedError, ServerError
from src.app.repositories.errors import StorageError
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_rate_limited(request: Request, exc: RateLimitedError):
    error_dict = {
        "code": exc.base_error.code,
        "message": exc.base_error.message,
        "retry_after": exc.retry_after,
        "retry_after_minutes": exc.retry_after_minutes,
    }
    logger.warning(f"Rate limited: {error_dict}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": error_dict},
        headers={"Retry-After": str(exc.retry_after)},
    )


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_storage_error(request: Request, exc: StorageError):
    error_dict = {
        "code": "STORAGE_UNAVAILABLE",
        "message": "Storage is temporarily unavailable. Please try again.",
    }
    logger.error(f"Storage error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"error": error_dict}
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = first.get("msg", "Invalid request")
    error_dict = {
        "code": "VALIDATION_ERROR",
        "message": f"{field}: {message}" if field else message,
    }
    return JSONResponse(status_code=422, content={"error": error_dict})


async def bootstrap(ApplicationConfig) -> None:
    """Create tables and the configured admin account"""
    from src.app.use_cases.users import EnsureAdminUseCase
    from src.depends import engine, uow_scope

    if ApplicationConfig.STORAGE_BACKEND == "sql" and ApplicationConfig.AUTO_CREATE_TABLES:
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    if not ApplicationConfig.ADMIN_USERNAME:
        logger.warning("ADMIN_USERNAME not set; no bootstrap admin account")
        return

    async with uow_scope() as uow:
        result = await EnsureAdminUseCase(uow, ApplicationConfig.BCRYPT_ROUNDS).execute(
            ApplicationConfig.ADMIN_USERNAME,
            ApplicationConfig.ADMIN_EMAIL,
            ApplicationConfig.ADMIN_PASSWORD,
        )
    if result.is_err():
        logger.error(f"Bootstrap admin not created: {result.error.message}")


def create_app(ApplicationConfig) -> FastAPI:
    from src.app.services.cleanup import CleanupScheduler
    from src.depends import rate_limit_locks, uow_scope

    cleanup = CleanupScheduler(
        uow_scope,
        rate_limit_locks,
        interval_seconds=ApplicationConfig.CLEANUP_INTERVAL_SECONDS,
        rate_limit_retention=timedelta(seconds=ApplicationConfig.RATE_LIMIT_RETENTION_SECONDS),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await bootstrap(ApplicationConfig)
        cleanup.start()
        yield
        await cleanup.stop()

    app = FastAPI(title="Media Portal Access API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import (
        admin,
        admin_invite_codes,
        admin_rate_limits,
        admin_users,
        auth,
        health_check,
    )

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(admin.router, tags=["Admin"])
    app.include_router(admin_invite_codes.router, tags=["Invite Codes"])
    app.include_router(admin_users.router, tags=["Users"])
    app.include_router(admin_rate_limits.router, tags=["Rate Limits"])

    app.add_exception_handler(RateLimitedError, handle_rate_limited)
    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(StorageError, handle_storage_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    return app
