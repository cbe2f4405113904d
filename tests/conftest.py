"""
Shared fixtures.

The app reads its settings at import time, so the environment is prepared
here before anything under ``app`` is imported.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("LOG_JSON", "false")
os.environ["GEMINI_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.dependencies import get_text_generator
from app.core.ai_text_generator import GeminiTextGenerator
from app.main import app
from tests.fakes import auth_headers


def _make_engine():
    # One shared connection, otherwise every checkout gets an empty in-memory db
    return create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


def _session_factory(engine):
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def _create_tables(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def engine():
    test_engine = _make_engine()
    await _create_tables(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db(engine):
    """A session on a fresh in-memory database."""
    async with _session_factory(engine)() as session:
        yield session


@pytest.fixture
def client():
    """
    TestClient on a fresh in-memory database.

    Everything (table creation, seeding, requests) runs on the client's
    portal so the aiosqlite connection stays on a single event loop.
    Seed data with ``client.portal.call(seed, client.session_factory, ...)``.
    """
    test_engine = _make_engine()
    session_factory = _session_factory(test_engine)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_text_generator] = lambda: GeminiTextGenerator(api_key=None)

    with TestClient(app) as test_client:
        test_client.portal.call(_create_tables, test_engine)
        test_client.session_factory = session_factory
        yield test_client
        test_client.portal.call(test_engine.dispose)

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return auth_headers("admin-1", "ADMIN", "admin")


@pytest.fixture
def teacher_headers():
    return auth_headers("teacher-1", "TEACHER", "profe")
