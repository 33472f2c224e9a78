"""Pytest configuration and shared fixtures.

Integration tests run against a SQLite database created per test in a
temporary directory. The app under test shares the test's session so
data created by fixtures is visible to the routes.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path
from uuid import UUID

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.config import Settings
from inkwell.core.database import Database, get_db
from inkwell.core.permissions.catalog import built_in_role_id
from inkwell.core.permissions.enums import SystemRole, TenantRole
from inkwell.core.permissions.roles import RoleStore
from inkwell.main import create_app
from inkwell.models import metadata
from inkwell.modules.rbac.repos import SQLAlchemyRBACRepository
from inkwell.modules.rbac.seeding import seed_built_ins
from inkwell.modules.tenants.models import Tenant
from inkwell.modules.tenants.repos import TenantRepository
from inkwell.modules.tenants.services import TenantService
from inkwell.modules.users.models import User
from inkwell.modules.users.repos import UserRepository
from inkwell.modules.users.services import UserService
from tests.factories.tenant import TenantCreateFactory
from tests.factories.user import UserCreateFactory


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'inkwell.db'}"


@pytest.fixture
async def database(database_url: str) -> AsyncGenerator[Database, None]:
    """Connected database with every table created."""
    database = Database(database_url)
    await database.connect()
    async with database.engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    yield database

    await database.disconnect()


@pytest.fixture
async def db(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session shared by fixtures and the app."""
    async with database.session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def settings(database_url: str) -> Settings:
    return Settings(environment="test", database_url=database_url, seed_on_startup=False)


@pytest.fixture
async def app(
    settings: Settings, database: Database, db: AsyncSession
) -> AsyncGenerator[FastAPI, None]:
    """Create test application instance."""
    application = create_app(settings, database)

    # Override database dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# RBAC, Tenant and User Fixtures
# ============================================================


@pytest.fixture
async def seeded(db: AsyncSession) -> None:
    """Built-in permissions and system roles."""
    await seed_built_ins(db)


@pytest.fixture
def user_service(db: AsyncSession) -> UserService:
    return UserService(UserRepository(db), RoleStore(SQLAlchemyRBACRepository(db)))


@pytest.fixture
async def tenant(db: AsyncSession, seeded: None) -> Tenant:
    """Create a test tenant with its built-in roles."""
    service = TenantService(TenantRepository(db), RoleStore(SQLAlchemyRBACRepository(db)))
    return await service.create_tenant(TenantCreateFactory.build())


MakeUser = Callable[..., Awaitable[User]]


@pytest.fixture
def make_user(user_service: UserService, seeded: None) -> MakeUser:
    """Create users holding built-in roles.

    Usage:
        reader = await make_user(tenant_roles={tenant.id: TenantRole.READER})
    """

    async def _make(
        *,
        system_role: SystemRole | None = None,
        tenant_roles: dict[UUID, TenantRole] | None = None,
    ) -> User:
        user = await user_service.create_user(UserCreateFactory.build())
        if system_role is not None:
            await user_service.assign_system_role(user.id, built_in_role_id(system_role.value))
        for tenant_id, role in (tenant_roles or {}).items():
            await user_service.assign_tenant_role(
                user.id, tenant_id, built_in_role_id(role.value, tenant_id)
            )
        return user

    return _make


@pytest.fixture
async def admin(make_user: MakeUser) -> User:
    """A super admin."""
    return await make_user(system_role=SystemRole.SUPER_ADMIN)

