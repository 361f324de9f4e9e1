import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from jobtrack import models  # noqa: F401
from jobtrack.database import Base, get_db, session_scope
from jobtrack.errors import error_emitter
from jobtrack.main import app
from jobtrack.models.user import User
from jobtrack.services.auth_service import AuthService
from jobtrack.services.notification_service import notification_service


@pytest.fixture
async def engine():
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
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


async def _create_user(session_maker, email: str) -> User:
    async with session_maker() as session:
        user = User(email=email, display_name=email.split("@")[0], created_at=datetime(2024, 1, 1))
        session.add(user)
        await session.commit()
        return user


@pytest.fixture
async def user(session_maker):
    return await _create_user(session_maker, "ada@example.com")


@pytest.fixture
async def other_user(session_maker):
    return await _create_user(session_maker, "grace@example.com")


async def _auth_headers(session_maker, user: User) -> dict:
    async with session_maker() as session:
        auth_session = await AuthService(session).create_session(user.id)
        await session.commit()
        return {"Authorization": f"Bearer {auth_session.token}"}


@pytest.fixture
async def auth_headers(session_maker, user):
    return await _auth_headers(session_maker, user)


@pytest.fixture
async def other_auth_headers(session_maker, other_user):
    return await _auth_headers(session_maker, other_user)


@pytest.fixture
def notifications():
    notification_service.clear_notifications()
    notification_service.attach(error_emitter)
    yield notification_service
    notification_service.detach(error_emitter)
    notification_service.clear_notifications()


@pytest.fixture
async def client(session_maker):
    async def override_get_db():
        async with session_scope(session_maker) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def application_data():
    return {
        "company_name": "Initech",
        "title": "Backend Engineer",
        "source_name": "LinkedIn",
        "applied_at": "2024-05-06T09:30:00Z",
        "location": "Remote",
        "salary": "$120k",
        "url": "https://jobs.example.com/123",
        "tags": ["python", "remote"],
        "notes": "Referred by Sam",
    }
