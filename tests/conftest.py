import os

# Settings are read at import time; give the test run its own values first
os.environ.setdefault("SECRET_KEY", "test-secret-key-do-not-use-in-production")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator

from main import app
from core.database import Base, build_engine
from services.session_manager import SessionManager
from utils.deps import build_session_manager, get_session_manager

TEST_PASSWORD = "TestPassword123!"


@pytest.fixture
def engine(tmp_path):
    """
    A fresh SQLite file database for each test.

    A file (not :memory:) so threads in the concurrency tests get their own
    connections to the same data.
    """
    test_engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def session(session_factory) -> Generator[Session, None, None]:
    """Session for inspecting rows directly."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def manager(session_factory) -> SessionManager:
    return build_session_manager(session_factory)


@pytest.fixture
def registered_user(manager):
    return manager.register("user@example.com", TEST_PASSWORD)


@pytest.fixture
async def client(manager):
    """
    Yields an HTTP client that talks to the app backed by the test database.
    """
    app.dependency_overrides[get_session_manager] = lambda: manager

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def access_token(client, registered_user):
    response = await client.post("/auth/token", data={
        "username": registered_user.email,
        "password": TEST_PASSWORD
    })
    assert response.status_code == 200
    return response.json()["access_token"]
