"""
Global test fixtures and configuration.

This module provides base fixtures for all tests:
- Database session over a private in-memory SQLite database per test
- Recording e-mail service (captures messages instead of queueing them)
- HTTP client with dependency overrides
- Base data fixtures (user, auth_headers, product)
"""

import os
from typing import AsyncGenerator, Dict, List

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment variables BEFORE importing app
os.environ["MODE"] = "test"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-with-at-least-32-characters!"
os.environ["JWT_ISSUER"] = "product-manager-tests"
os.environ["JWT_AUDIENCE"] = "product-manager-tests"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["APP_BASE_URL"] = "http://testserver"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"  # bcrypt mínimo; testes mais rápidos
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"

from app.main import app  # noqa: E402
from app.api.dependencies import get_db  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.services.email import EmailService, get_email_service  # noqa: E402

TEST_DATABASE_URL = os.environ["DATABASE_URL"]
DEFAULT_PASSWORD = "Password123!"


# ==================== Database ====================

@pytest.fixture(scope="function")
async def test_engine():
    """
    In-memory SQLite engine, one per test.

    StaticPool keeps the single connection alive so every session sees the
    same database. Tables are created up front.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Session shared by the test body and the application under test.
    """
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


# ==================== E-mail ====================

class RecordingEmailService(EmailService):
    """Keeps every message in memory instead of dispatching it to Celery."""

    def __init__(self):
        self.outbox: List[Dict] = []

    async def send_email(self, to: str, subject: str, body: str, is_html: bool = True) -> None:
        self.outbox.append({"to": to, "subject": subject, "body": body, "is_html": is_html})

    def messages_to(self, email: str) -> List[Dict]:
        return [message for message in self.outbox if message["to"] == email]


@pytest.fixture
def email_service() -> RecordingEmailService:
    return RecordingEmailService()


@pytest.fixture
def outbox(email_service: RecordingEmailService) -> List[Dict]:
    return email_service.outbox


# ==================== FastAPI Client ====================

@pytest.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    email_service: RecordingEmailService
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create HTTP client for testing FastAPI endpoints.

    Overrides get_db and get_email_service. Unhandled exceptions are returned
    as the 500 response instead of being re-raised into the test.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_service

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Base Data Fixtures ====================

@pytest.fixture
async def user(db_session: AsyncSession):
    """
    Confirmed, active user without 2FA. Password: DEFAULT_PASSWORD.
    """
    from tests.factories.user import UserFactory
    user = await UserFactory.create_async(db_session)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def unconfirmed_user(db_session: AsyncSession):
    from tests.factories.user import UserFactory
    user = await UserFactory.create_async(db_session, email_confirmed=False)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def two_factor_user(db_session: AsyncSession):
    from tests.factories.user import UserFactory
    user = await UserFactory.create_async(db_session, two_factor_enabled=True)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def auth_headers(user):
    """
    Bearer header with a valid access token for ``user``.
    """
    from app.services.token_service import get_token_service

    token, _ = get_token_service().generate_tokens(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def product(db_session: AsyncSession):
    from tests.factories.product import ProductFactory
    product = await ProductFactory.create_async(db_session)
    await db_session.commit()
    await db_session.refresh(product)
    return product

