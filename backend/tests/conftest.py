"""Pytest fixtures for tenancy testing.

Provides reusable test fixtures for:
- Database session on a file-backed SQLite database (tables created per test)
- Test client with the database dependency overridden
- Multi-organization data (see fixtures/multi_org.py)
- Pre-tenancy legacy databases for migration tests (see fixtures/legacy_schema.py)

Usage:
    def test_current_organization(client, multi_org_setup):
        org_a, org_b, user_a, user_b = multi_org_setup
        response = client.get("/api/v1/organizations/current", headers=auth_headers(user_a.id))
        assert response.status_code == 200
"""

import os
import sys
import tempfile
from pathlib import Path
from typing import Generator

# Set environment variables BEFORE any imports to ensure they take effect
_test_db_dir = tempfile.mkdtemp(prefix="orgscope-tests-")
os.environ["DATABASE_URL"] = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite:///{Path(_test_db_dir) / 'orgscope_test.db'}",
)

if "JWT_SECRET" not in os.environ:
    os.environ["JWT_SECRET"] = "test-jwt-secret-key-256-bits-minimum-length-required-for-security"

os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))
sys.path.insert(0, str(Path(__file__).parent))

from orgscope.database import engine as test_engine, SessionLocal, get_db as database_get_db
from orgscope.models import Base

from fixtures.multi_org import org_a, org_b, multi_org_setup, multi_member  # noqa: F401
from fixtures.legacy_schema import legacy_engine, seeded_legacy_engine  # noqa: F401


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    Each test gets a clean database state.
    """
    Base.metadata.create_all(bind=test_engine)

    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client sharing the test database session.

    Authentication is per request, see fixtures.multi_org.auth_headers.
    """
    from orgscope.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[database_get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()
