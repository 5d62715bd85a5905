import os

# Settings are read once at import time, so the test environment has to be in
# place before anything from chatauth is imported.
os.environ["APP_ENV"] = "test"
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret-0123456789abcdefghijkl")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-0123456789abcdefghijk")
os.environ.setdefault("TOKEN_ENCRYPTION_KEY", "MDEyMzQ1Njc4OWFiY2RlZjAxMjM0NTY3ODlhYmNkZWY=")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("AUTH_COOKIE_SECURE", "false")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("CLIENT_URL", "http://localhost:3000/auth/callback")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from chatauth.core.application import create_application
from chatauth.domain.services.auth.identity_reconciliation import IdentityReconciliationService
from chatauth.domain.services.auth.token import TokenService
from chatauth.domain.services.auth.user_authentication import UserAuthenticationService
from chatauth.infrastructure.database import (
    create_db_and_tables,
    create_engine_from_settings,
    create_session_factory,
)
from chatauth.infrastructure.repositories.user_repository import UserRepository
from chatauth.infrastructure.services.authentication.token_encryption import FernetTokenEncryptionService


@pytest_asyncio.fixture
async def engine(tmp_path):
    """A fresh SQLite database per test, with every table created."""
    engine = create_engine_from_settings(f"sqlite+aiosqlite:///{tmp_path / 'chatauth.db'}")
    await create_db_and_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def user_repository(db_session):
    return UserRepository(db_session)


@pytest.fixture
def token_service():
    return TokenService()


@pytest.fixture
def token_encryption():
    return FernetTokenEncryptionService()


@pytest.fixture
def auth_service(user_repository, token_service):
    return UserAuthenticationService(user_repository, token_service)


@pytest.fixture
def reconciliation_service(user_repository, token_service, token_encryption):
    return IdentityReconciliationService(user_repository, token_service, token_encryption)


@pytest.fixture
def app(session_factory):
    """Application wired to the per-test database.

    The ASGI transport does not run the lifespan, so the session factory is
    placed on the application state directly.
    """
    application = create_application()
    application.state.session_factory = session_factory
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
