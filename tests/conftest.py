import os
from typing import AsyncGenerator

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import tuition.core.models  # noqa: F401
from tuition.auth.dependencies import get_current_user
from tuition.auth.schemas import CurrentUser
from tuition.db.session import Base, get_db
from tuition.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_USERNAME = "admin"


@pytest.fixture()
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite DB per test; StaticPool keeps every session on the same connection."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(sqlite_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a test and override the FastAPI dependency."""
    async_session = async_sessionmaker(
        bind=sqlite_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app, authenticated as TEST_USERNAME."""

    async def override_current_user() -> CurrentUser:
        return CurrentUser(username=TEST_USERNAME, role="admin")

    app.dependency_overrides[get_current_user] = override_current_user
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture()
async def anonymous_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Client with the real token check in place."""
    app.dependency_overrides.pop(get_current_user, None)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
async def course_setup(client: AsyncClient) -> dict:
    """Batch, course with two months (fees 1000 and 2000), institution and one enrolled student."""
    batch = (await client.post("/api/v1/batches", json={"name": "HSC 2026"})).json()
    course = (
        await client.post("/api/v1/courses", json={"name": "Physics", "batch_id": batch["id"]})
    ).json()
    jan = (
        await client.post(
            "/api/v1/months",
            json={"name": "January", "month_number": 1, "course_id": course["id"], "payment": "1000"},
        )
    ).json()
    feb = (
        await client.post(
            "/api/v1/months",
            json={"name": "February", "month_number": 2, "course_id": course["id"], "payment": "2000"},
        )
    ).json()
    institution = (
        await client.post(
            "/api/v1/institutions",
            json={"name": "City College", "address": "12 Lake Road"},
        )
    ).json()
    student = (
        await client.post(
            "/api/v1/students",
            json={
                "name": "Rahim Uddin",
                "institution_id": institution["id"],
                "gender": "Male",
                "phone": "01700000000",
                "guardian_name": "Karim Uddin",
                "guardian_phone": "01800000000",
                "batch_id": batch["id"],
                "enrolled_courses": [
                    {"course_id": course["id"], "starting_month_id": jan["id"]},
                ],
            },
        )
    ).json()
    return {
        "batch": batch,
        "course": course,
        "jan": jan,
        "feb": feb,
        "institution": institution,
        "student": student,
    }
