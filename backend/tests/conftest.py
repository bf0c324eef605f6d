"""Shared test configuration and fixtures.

Each test gets a fresh in-memory SQLite database (``sqlite+aiosqlite``) with
all tables created, so no external database is needed. Paystack is never
contacted: the client dependency is overridden with an ``httpx.MockTransport``.
"""

import os

# Must be set before weightwise.config is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-for-unit-tests")
os.environ.setdefault("PAYSTACK_SECRET_KEY", "sk_test_weightwise")
os.environ.setdefault("PAYSTACK_WEBHOOK_SECRET", "whsec_test_weightwise")
os.environ.setdefault("BILLING_CURRENCY", "KES")

from collections.abc import AsyncGenerator, Callable  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tests.helpers import (  # noqa: E402
    PAYSTACK_TEST_BASE_URL,
    PaystackRecorder,
    auth_headers_for,
    create_user,
)
from weightwise.billing.paystack_client import PaystackClient, get_paystack_client  # noqa: E402
from weightwise.config import settings  # noqa: E402
from weightwise.database import Base, get_db, get_session_factory  # noqa: E402
from weightwise.main import app  # noqa: E402
from weightwise.models.user import User  # noqa: E402

# ---------------------------------------------------------------------------
# Database: one in-memory SQLite database per test
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """Create an engine on a single shared in-memory connection."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for seeding and inspecting data directly."""
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Paystack mock transport
# ---------------------------------------------------------------------------


@pytest.fixture
def paystack() -> PaystackRecorder:
    return PaystackRecorder()


@pytest.fixture
def make_paystack_client(paystack: PaystackRecorder) -> Callable[..., PaystackClient]:
    def _make(secret_key: str = "sk_test_weightwise") -> PaystackClient:
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(paystack.handler),
            base_url=PAYSTACK_TEST_BASE_URL,
        )
        return PaystackClient(http_client, secret_key)

    return _make


# ---------------------------------------------------------------------------
# HTTP client wired to the test database and mocked Paystack
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(session_factory, make_paystack_client) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the test DB and mocked Paystack."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_get_paystack_client() -> AsyncGenerator[PaystackClient, None]:
        yield make_paystack_client(settings.paystack_secret_key)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_paystack_client] = override_get_paystack_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: authenticated user
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """A free-plan user with a subscriber record."""
    return await create_user(db_session)


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict[str, str]:
    """Return Authorization headers for the test user."""
    return auth_headers_for(test_user)
