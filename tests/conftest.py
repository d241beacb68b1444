"""Shared test fixtures — async DB, client, auth helpers, factories.

Uses SQLite + aiosqlite in memory, so every test runs against a fresh
schema without any external database.
"""

from __future__ import annotations

import os

# Set test settings before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from competency_hub.auth.models import User
from competency_hub.auth.service import create_session, hash_password
from competency_hub.common.constants import UserRole
from competency_hub.common.rate_limit import limiter
from competency_hub.database import Base, get_db
from competency_hub.main import create_app

# Register every model on Base.metadata
import competency_hub.models  # noqa: F401


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def _make_department(*, code: str = "ENG", name: str = "Engineering") -> dict:
    return dict(department_code=code, name=name)


def _make_role(*, code: str = "DEV", name: str = "Developer") -> dict:
    return dict(role_code=code, name=name)


def _make_competency(
    *,
    code: str = "COMM",
    name: str = "Communication",
    description: str | None = "Clear written and verbal communication",
) -> dict:
    return dict(code=code, name=name, description=description)


def _make_employee(
    *,
    number: str = "E001",
    name: str = "Asha Rao",
    role_code: str = "DEV",
    department_code: str = "ENG",
) -> dict:
    return dict(
        employee_number=number,
        employee_name=name,
        job_code="SE2",
        reporting_employee_name="Priya Nair",
        role_code=role_code,
        department_code=department_code,
    )


async def seed(db: AsyncSession, *objects):
    """Add and commit ORM objects; returns the first for convenience."""
    db.add_all(objects)
    await db.commit()
    return objects[0]


# ── Auth helpers ────────────────────────────────────────────────────

async def seed_user(
    db: AsyncSession,
    *,
    username: str = "hr.admin",
    email: str = "hr.admin@example.com",
    password: str = "password123",
    role: UserRole = UserRole.hr,
    department_code: str | None = None,
) -> User:
    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role,
        department_code=department_code,
    )
    return await seed(db, user)


async def headers_for(db: AsyncSession, user: User) -> dict[str, str]:
    """Return Bearer auth headers with a valid session persisted in the DB."""
    token, _ = await create_session(db, user)
    await db.commit()
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def department(db) -> dict:
    """The ENG department every HOD fixture belongs to."""
    from competency_hub.departments.models import Department

    data = _make_department()
    await seed(db, Department(**data))
    return data


@pytest.fixture
async def hr_user(db) -> User:
    return await seed_user(db)


@pytest.fixture
async def hr_headers(db, hr_user) -> dict[str, str]:
    return await headers_for(db, hr_user)


@pytest.fixture
async def hod_user(db, department) -> User:
    return await seed_user(
        db,
        username="eng.head",
        email="eng.head@example.com",
        role=UserRole.hod,
        department_code=department["department_code"],
    )


@pytest.fixture
async def hod_headers(db, hod_user) -> dict[str, str]:
    return await headers_for(db, hod_user)


@pytest.fixture
async def catalog(client, hr_headers, department) -> dict:
    """Competencies COMM / CODE / LEAD and role DEV requiring COMM=3, CODE=2."""
    for comp in (
        _make_competency(),
        _make_competency(code="CODE", name="Coding", description=None),
        _make_competency(code="LEAD", name="Leadership", description="Leads by example"),
    ):
        resp = await client.post("/competency", json=comp, headers=hr_headers)
        assert resp.status_code == 201, resp.text

    resp = await client.post("/roles", json=_make_role(), headers=hr_headers)
    assert resp.status_code == 201, resp.text
    role = resp.json()

    resp = await client.post(
        "/roles/DEV/competencies",
        json=[
            {"competency_code": "COMM", "required_score": 3},
            {"competency_code": "CODE", "required_score": 2},
        ],
        headers=hr_headers,
    )
    assert resp.status_code == 200, resp.text
    return {"role": role, "requirements": {"COMM": 3, "CODE": 2}}


async def create_employee(client: AsyncClient, headers: dict[str, str], **overrides) -> dict:
    resp = await client.post("/employees", json=_make_employee(**overrides), headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()
