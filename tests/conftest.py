"""
- Spins up a temp in-memory test DB
- Create tables before tests run
- Override get_level_store so sessions save levels into the test DB
- Provide a client fixture (TestClient(app)) with the overrides applied
"""
import os
import pytest

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure the app does NOT run dev-only startup hooks (e.g., auto-create tables against real DB)
os.environ.setdefault("APP_ENV", "test")

from whatscolor.db import Base
from whatscolor.main import app, get_level_store, get_sessions
from whatscolor.repository import DBLevelStore
from whatscolor import models  # noqa: F401

TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"


@pytest.fixture(scope="session")
def engine():
    # StaticPool + check_same_thread=False lets Starlette's TestClient and SQLAlchemy
    # share ONE in-memory SQLite database across threads.
    engine = create_engine(
        TEST_DATABASE_URL,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture(autouse=True)
def _clean_db(engine):
    """Level rows are committed by the store, so wipe them before each test."""
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM levels"))
    yield


@pytest.fixture
def level_store(session_factory) -> DBLevelStore:
    return DBLevelStore(session_factory)


@pytest.fixture(autouse=True)
def override_dep(level_store):
    """Force the app to use the test DB for every request and start with no sessions."""
    app.dependency_overrides[get_level_store] = lambda: level_store
    get_sessions().clear()
    yield
    app.dependency_overrides.clear()
    get_sessions().clear()


@pytest.fixture
def client():
    return TestClient(app)


def fixed_randbelow(picks):
    """
    randbelow replacement that returns the given picks in order.
    With picks [0, 0, 0, 0] the secret is the first four palette colors.
    """
    queue = list(picks)

    def _randbelow(n: int) -> int:
        value = queue.pop(0)
        assert 0 <= value < n
        return value

    return _randbelow
