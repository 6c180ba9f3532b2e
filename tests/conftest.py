"""
Test configuration and fixtures for NutriGuard.

- In-memory SQLite engine shared across the session (StaticPool)
- Function-scoped session with tables recreated per test
- TestClient with database and Claude service dependency overrides
"""

import os
import tempfile
from typing import Generator

# Settings are read at import time; point them somewhere harmless first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="nutriguard-test-")
os.environ.setdefault("DEFAULT_LOCALE", "zh")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import nutriguard.models  # noqa: F401
from nutriguard.database import Base, get_db
from nutriguard.main import app
from nutriguard.services.ai_service import get_claude_service
from tests.fixtures.mocks import MockClaudeService


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def test_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def db(test_engine) -> Generator[Session, None, None]:
    """
    Provide a fresh database session.

    Tables are created before and dropped after each test, so history
    written by one test never leaks into the next.
    """
    Base.metadata.create_all(test_engine)
    TestingSessionLocal = sessionmaker(bind=test_engine, autoflush=False)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(test_engine)


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def mock_claude() -> MockClaudeService:
    return MockClaudeService()


@pytest.fixture
def upload_dir(tmp_path) -> str:
    path = tmp_path / "scans"
    return str(path)


# =============================================================================
# TestClient Fixtures
# =============================================================================


@pytest.fixture
def client(db: Session, mock_claude: MockClaudeService) -> Generator[TestClient, None, None]:
    """
    TestClient with database and AI dependency overrides.

    The database session is injected into the app's get_db dependency and
    every AI call goes to ``mock_claude``.
    """

    def override_get_db():
        try:
            yield db
        finally:
            pass  # Don't close - managed by db fixture

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_claude_service] = lambda: mock_claude

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
