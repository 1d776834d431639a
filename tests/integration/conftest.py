from contextlib import asynccontextmanager
from datetime import timedelta
from typing import List, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.memory_tenant_cache import MemoryTenantCache
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.utils.jwt import generate_jwt
from src.app.services.email_service import IEmailService
from src.app.use_cases.provisioning import SeedPlansUseCase
from src.depends import get_email_service, get_tenant_cache, get_unit_of_work, get_uow_factory


class RecordingEmailService(IEmailService):
    def __init__(self):
        self.invites: List[Tuple[str, str, str, str]] = []
        self.suspension_notices: List[Tuple[str, str, str, int]] = []
        self.fail_invites = False

    async def send_admin_invite(self, to_email, first_name, tenant_name, setup_token):
        if self.fail_invites:
            raise ConnectionError("mail relay unavailable")
        self.invites.append((to_email, first_name, tenant_name, setup_token))

    async def send_suspension_notice(self, to_email, tenant_name, reason, grace_period_days):
        self.suspension_notices.append((to_email, tenant_name, reason, grace_period_days))


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db", connect_args={"timeout": 30})
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def uow_scope(session_factory):
    @asynccontextmanager
    async def scope():
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    return scope


@pytest_asyncio.fixture
async def seeded_plans(uow_scope):
    async with uow_scope() as uow:
        result = await SeedPlansUseCase(uow).execute()
    return result.value


@pytest.fixture
def email_service():
    return RecordingEmailService()


@pytest.fixture
def tenant_cache():
    return MemoryTenantCache()


@pytest_asyncio.fixture
async def client(session_factory, uow_scope, seeded_plans, email_service, tenant_cache):
    from src.api.app import create_app

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_uow_factory] = lambda: uow_scope
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_tenant_cache] = lambda: tenant_cache

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def superadmin_headers():
    token = generate_jwt("root", None, ApplicationConfig.SUPERADMIN_ROLE)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def tenant_headers():
    def _headers(tenant_id, header_tenant_id=None, role="admin", user_id="user-1"):
        token = generate_jwt(user_id, str(tenant_id), role, expires_delta=timedelta(minutes=5))
        headers = {"Authorization": f"Bearer {token}"}
        header_value = tenant_id if header_tenant_id is None else header_tenant_id
        if header_value:
            headers[ApplicationConfig.TENANT_HEADER] = str(header_value)
        return headers

    return _headers


@pytest.fixture
def signup_tenant(client):
    async def _signup(name="Acme Corp", **fields):
        body = {"name": name, "admin_email": f"owner@{name.lower().replace(' ', '')}.com"}
        body.update(fields)
        response = await client.post("/tenants/signup", json=body)
        assert response.status_code == 201, response.text
        return response.json()["tenant_id"]

    return _signup


@pytest.fixture
def active_tenant(client, signup_tenant, superadmin_headers):
    async def _create(name="Acme Corp", **fields):
        tenant_id = await signup_tenant(name, **fields)
        response = await client.post(
            f"/admin/tenants/{tenant_id}/provision", headers=superadmin_headers
        )
        assert response.status_code == 200, response.text
        assert response.json()["status"] == "active"
        return tenant_id

    return _create
