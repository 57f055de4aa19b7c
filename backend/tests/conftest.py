"""Shared test fixtures: in-memory ledger, SQLite sessions and an API client."""

import os

# Settings are read at import time; keep tests off the PostgreSQL default
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from wealth import models  # noqa: E402,F401
from wealth.database import Base, get_db  # noqa: E402
from wealth.main import app  # noqa: E402
from wealth.rate_limiter import limiter  # noqa: E402
from wealth.services.ledger.memory_store import InMemoryLedgerStore  # noqa: E402


@pytest.fixture
def store():
    """Empty in-memory ledger store."""
    return InMemoryLedgerStore()


@pytest.fixture
def engine():
    """In-memory SQLite engine with every table created."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_maker(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture
def db(session_maker):
    """Database session on the in-memory engine."""
    session = session_maker()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def client(session_maker):
    """Test client whose requests share the in-memory database."""
    limiter.reset()

    def override_get_db():
        db = session_maker()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
