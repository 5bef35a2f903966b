from contextlib import asynccontextmanager

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from src.depends import get_provisioner, get_uow_scope
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.passwords import hash_password
from src.domain.entities import User, UserRole
from tests.fixtures.portal import FakeProvisioner

ADMIN_PASSWORD = "AdminPass123!"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
def uow_scope(session_factory):
    @asynccontextmanager
    async def scope():
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    return scope


@pytest.fixture
def provisioner():
    return FakeProvisioner()


@pytest.fixture(autouse=True)
def app_config(monkeypatch):
    from config import ApplicationConfig

    monkeypatch.setattr(ApplicationConfig, "BCRYPT_ROUNDS", 4)
    monkeypatch.setattr(ApplicationConfig, "STORAGE_BACKEND", "sql")
    # httpx's ASGITransport connects from 127.0.0.1, standing in for the proxy
    monkeypatch.setattr(ApplicationConfig, "TRUSTED_PROXIES", ["127.0.0.1"])


@pytest_asyncio.fixture
async def client(uow_scope, provisioner):
    from httpx import ASGITransport
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    app.dependency_overrides[get_uow_scope] = lambda: uow_scope
    app.dependency_overrides[get_provisioner] = lambda: provisioner

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def admin_user(uow_scope):
    admin = User.build(
        "admin", "admin@example.com", hash_password(ADMIN_PASSWORD, 4), role=UserRole.admin
    )
    async with uow_scope() as uow:
        async with uow:
            await uow.users.create(admin)
            await uow.commit()
    return admin


@pytest_asyncio.fixture
async def admin_headers(client, admin_user):
    response = await client.post(
        "/admin/login", json={"username": "admin", "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest_asyncio.fixture
async def invite_code(client, admin_headers):
    response = await client.post("/admin/invite-codes", headers=admin_headers)
    assert response.status_code == 201
    return response.json()["code"]

