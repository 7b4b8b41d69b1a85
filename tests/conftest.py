"""Tests configuration and fixtures."""

from typing import AsyncGenerator, Callable

import pytest
from httpx import ASGITransport, AsyncClient

from haven.config import Settings, get_settings
from haven.domain.enums import Role
from haven.infrastructure.database import DatabaseManager, get_db_manager
from haven.infrastructure.database.models import UserModel
from haven.infrastructure.database.repositories import UserRepository
from haven.main import app
from haven.services.identity import TokenService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

THERAPIST_ID = "therapist-1"
ADMIN_ID = "admin-1"
CLIENT_A_ID = "client-a"
CLIENT_B_ID = "client-b"


@pytest.fixture
def test_settings() -> Settings:
    """Settings as the running app sees them."""
    return get_settings()


@pytest.fixture
async def db() -> AsyncGenerator[DatabaseManager, None]:
    """Fresh in-memory database with every table created."""
    manager = DatabaseManager()
    await manager.initialize(TEST_DATABASE_URL)
    await manager.create_schema()
    yield manager
    await manager.close()


async def add_user(db: DatabaseManager, user_id: str, role: Role, **fields) -> UserModel:
    """Insert a portal account."""
    fields.setdefault("email", f"{user_id}@example.com")
    async with db.session() as session:
        return await UserRepository(session).create(
            UserModel(id=user_id, role=role.value, **fields)
        )


@pytest.fixture
async def users(db: DatabaseManager) -> dict[str, UserModel]:
    """One therapist, one office admin and two clients."""
    return {
        THERAPIST_ID: await add_user(db, THERAPIST_ID, Role.THERAPIST, first_name="Dana"),
        ADMIN_ID: await add_user(db, ADMIN_ID, Role.OFFICE_ADMIN),
        CLIENT_A_ID: await add_user(db, CLIENT_A_ID, Role.CLIENT, first_name="Alex"),
        CLIENT_B_ID: await add_user(db, CLIENT_B_ID, Role.CLIENT, first_name="Blair"),
    }


@pytest.fixture
def token_service(test_settings: Settings) -> TokenService:
    return TokenService(test_settings)


@pytest.fixture
def auth_headers(token_service: TokenService) -> Callable[[str], dict[str, str]]:
    """Build bearer headers carrying a fresh session for a user."""

    def _headers(user_id: str) -> dict[str, str]:
        issued = token_service.issue_session_token(user_id)
        return {"Authorization": f"Bearer {issued.token}"}

    return _headers


@pytest.fixture
async def client(db: DatabaseManager) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app and the test database."""
    app.dependency_overrides[get_db_manager] = lambda: db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
