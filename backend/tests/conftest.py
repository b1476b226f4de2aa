"""Pytest configuration and fixtures."""

import os

# Must be set before footfall.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import datetime, timezone
from typing import Generator

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from footfall.config import settings
from footfall.db.base import Base
from footfall.db.session import get_db
from footfall.main import app
# Import all models so they're registered with Base.metadata
from footfall.models import *  # noqa: F401,F403
from footfall.models.store import Store
from footfall.services.footfall.types import SamplePayload
from footfall.services.store_service import create_store

OWNER_ID = "owner-1"
OTHER_OWNER_ID = "owner-2"
STORE_ID = "S1"

# Fixed clock for window/analytics tests
NOW = datetime(2026, 3, 10, 15, 30, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def db_engine():
    """In-memory SQLite shared by every connection of the test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db(db_engine) -> Generator[Session, None, None]:
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Test client whose requests share the test session."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_token(account_id: str) -> str:
    return jwt.encode({"userId": account_id}, settings.jwt_secret, algorithm=settings.jwt_algorithm)


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {make_token(OWNER_ID)}"}


@pytest.fixture
def other_headers() -> dict:
    return {"Authorization": f"Bearer {make_token(OTHER_OWNER_ID)}"}


@pytest.fixture
def store(db: Session) -> Store:
    """Active store S1 for OWNER_ID: 4 tills, capacity 100."""
    return create_store(db, OWNER_ID, store_id=STORE_ID, store_name="Main Street", till_count=4, capacity=100)


@pytest.fixture
def make_payload():
    """Factory for SamplePayload with sensible defaults."""
    def _make(
        entry_count: int = 0,
        exit_count: int = 0,
        pos_rate: float = 1.0,
        timestamp: datetime | None = None,
        till_queues: list[dict] | None = None,
        **extra,
    ) -> SamplePayload:
        data = {
            "store_id": STORE_ID,
            "entry_count": entry_count,
            "exit_count": exit_count,
            "pos_rate": pos_rate,
            "timestamp": timestamp,
            **extra,
        }
        if till_queues is not None:
            data["queue_data"] = {"till_queues": till_queues}
        return SamplePayload(**data)

    return _make
