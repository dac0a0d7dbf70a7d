"""
- Spins up a temp test DB (SQLite in memory)
- Create tables before tests run
- Provide a db_session fixture and override FastAPI’s get_db so routes use the test session.
- Provide a client fixture (TestClient(app)) that already has the DB override applied.
- Provide a fixed-secret generator so rounds are predictable.
"""
import os
import pytest
from typing import Generator

# Must happen before anything imports mastermind.config / mastermind.db:
# no dev-only startup hooks, no SQLite file on disk, no secrets in the logs.
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["MASTERMIND_DEBUG_SECRET"] = "0"
os.environ["MASTERMIND_SECRET_SOURCE"] = "local"

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mastermind.db import Base, get_db
from mastermind.main import app
from mastermind import models  # noqa: F401

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
def db_session(engine) -> Generator:
    """Provide a clean session per test with rollback."""
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    db = TestingSessionLocal()
    try:
        yield db
        db.rollback()
    finally:
        db.close()

@pytest.fixture(autouse=True)
def _clean_db(engine):
    """The repository commits, so wipe rows before each test to keep tests independent."""
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM round_snapshots"))
    yield

@pytest.fixture(autouse=True)
def override_dep(db_session):
    """Force the app to use our test session for every request."""
    def _get_db_for_tests():
        yield db_session

    app.dependency_overrides[get_db] = _get_db_for_tests
    yield
    app.dependency_overrides.clear()

@pytest.fixture
def client():
    return TestClient(app)

@pytest.fixture
def fixed_secret():
    """Returns a generator factory: fixed_secret("0123")() -> "0123"."""
    def make(secret: str = "0123"):
        return lambda: secret
    return make
