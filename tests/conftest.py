"""
Test configuration for pytest
"""

import pytest
import os
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session
from typing import Generator

# Test environment variables
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"

import agenda.models  # noqa: E402,F401  registers table metadata
from agenda.core.config import Settings  # noqa: E402
from agenda.services.quotas import QuotaService  # noqa: E402
from tests.factories import make_tenant  # noqa: E402


# Create test engine using in-memory SQLite shared by every connection
test_engine = create_engine(
    "sqlite://",
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Monday 19 October 2026, before opening time
FIXED_NOW = datetime(2026, 10, 19, 8, 0)


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a clean database session for each test"""
    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        QuotaService(session).seed_plan_limits()
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def clock():
    return fixed_clock


@pytest.fixture
def tenant(db):
    return make_tenant(db)


@pytest.fixture
def other_tenant(db):
    return make_tenant(db, name="Other Salon", slug="other-salon")
