"""
Shared pytest fixtures for the HRM backend tests.

Uses SQLite in-memory with StaticPool so all sessions share one connection,
meaning data written in one session is visible to others (important for HTTP client tests).
"""
import uuid
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

import hrm.models  # noqa – registers all SQLAlchemy models with Base.metadata
from hrm.core.database import Base, get_db
from hrm.core.security import hash_password, create_access_token
from hrm.main import app
from hrm.models.user import User

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ── Shared engine (function-scoped: fresh DB per test) ───────────────────────

@pytest_asyncio.fixture
async def engine():
    """Creates a fresh in-memory SQLite engine per test with a shared connection pool."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,          # single shared connection → all sessions see same data
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine) -> AsyncSession:
    """Async DB session for direct data inspection inside tests."""
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


# ── HTTP client fixture ───────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def client(engine) -> AsyncClient:
    """
    FastAPI test client with get_db overridden to use the test engine.
    Each request gets its own session (proper handling) but shares the same
    underlying connection via StaticPool.
    """
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


# ── User fixtures ─────────────────────────────────────────────────────────────

async def _make_user(db, email: str, role: str) -> User:
    u = User(
        id=uuid.uuid4(),
        email=email,
        hashed_password=hash_password("testpass123"),
        full_name=email.split("@")[0].title(),
        role=role,
        is_active=True,
        created_at=datetime.now(timezone.utc),
    )
    db.add(u)
    await db.commit()
    await db.refresh(u)
    return u


@pytest_asyncio.fixture
async def admin_user(db) -> User:
    return await _make_user(db, "admin@test.de", "admin")


@pytest_asyncio.fixture
async def manager_user(db) -> User:
    return await _make_user(db, "manager@test.de", "manager")


@pytest_asyncio.fixture
async def employee_user(db) -> User:
    return await _make_user(db, "employee@test.de", "employee")


@pytest.fixture
def admin_token(admin_user) -> str:
    return create_access_token(admin_user.id, "admin")


@pytest.fixture
def manager_token(manager_user) -> str:
    return create_access_token(manager_user.id, "manager")


@pytest.fixture
def employee_token(employee_user) -> str:
    return create_access_token(employee_user.id, "employee")


# ── Helper ────────────────────────────────────────────────────────────────────

def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
