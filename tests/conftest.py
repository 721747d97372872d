"""Shared fixtures: in-memory database, fake clock, services and an API client.

Every test gets a fresh in-memory SQLite database (aiosqlite + StaticPool so
all sessions share one connection). Time-dependent code receives a FakeClock.
"""

import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from collections.abc import AsyncIterator, Awaitable, Callable  # noqa: E402
from datetime import date, datetime, timedelta, timezone  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import civic_registry.domain  # noqa: E402,F401
from civic_registry.core.security import hash_password  # noqa: E402
from civic_registry.db.base import Base, get_db  # noqa: E402
from civic_registry.domain.user import User, UserRole  # noqa: E402
from civic_registry.main import create_app  # noqa: E402
from civic_registry.routers.deps import get_access_tokens, get_refresh_tokens  # noqa: E402
from civic_registry.services.person import PersonService  # noqa: E402
from civic_registry.services.token import TokenService, TokenSettings  # noqa: E402

TEST_SECRET = "test-secret-0123456789abcdef0123456789abcdef"
REFRESH_AUDIENCE = "civic-registry-refresh"
T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable clock; call it to read, ``advance`` / ``set`` to move it."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)

    def set(self, seconds_after_start: float) -> None:
        self.now = T0 + timedelta(seconds=seconds_after_start)


def make_token_settings(**overrides) -> TokenSettings:
    values = {
        "secret": TEST_SECRET,
        "ttl_seconds": 900,
        "issuer": "civic-registry",
        "audience": "civic-registry-api",
    }
    values.update(overrides)
    return TokenSettings(**values)


def person_values(**overrides) -> dict:
    values = {
        "first_name": "Erika",
        "last_name": "Mustermann",
        "date_of_birth": date(1964, 8, 12),
        "city": "Berlin",
        "country": "Deutschland",
        "email": "erika@mustermann.de",
    }
    values.update(overrides)
    return values


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def person_service(session: AsyncSession, clock: FakeClock) -> PersonService:
    return PersonService(session, clock=clock)


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------

@pytest.fixture
def access_tokens() -> TokenService:
    return TokenService(make_token_settings())


@pytest.fixture
def app(session_factory, access_tokens: TokenService):
    app = create_app()

    async def _get_test_db() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_access_tokens] = lambda: access_tokens
    app.dependency_overrides[get_refresh_tokens] = lambda: TokenService(
        make_token_settings(ttl_seconds=7 * 24 * 3600, audience=REFRESH_AUDIENCE)
    )
    return app


@pytest_asyncio.fixture
async def client(app) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def principal_headers(
    session_factory, access_tokens: TokenService
) -> Callable[..., Awaitable[dict[str, str]]]:
    """Create a principal with the given role and return its auth header."""

    async def _make(
        role: UserRole = UserRole.OFFICER,
        email: str | None = None,
        enabled: bool = True,
    ) -> dict[str, str]:
        email = email or f"{role.value.lower()}@amt-berlin.de"
        async with session_factory() as session:
            user = User(
                email=email,
                password_hash=hash_password("Secret#123"),
                first_name="Test",
                last_name=role.value.title(),
                role=role,
                enabled=enabled,
            )
            session.add(user)
            await session.commit()
        return {"Authorization": f"Bearer {access_tokens.issue(user)}"}

    return _make


@pytest.fixture
def person_data() -> Callable[..., dict]:
    return person_values


@pytest.fixture
def token_settings() -> Callable[..., TokenSettings]:
    return make_token_settings
