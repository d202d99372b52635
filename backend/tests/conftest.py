# backend/tests/conftest.py
"""
Pytest configuration for the Tourhub backend.

Tests run against an in-memory SQLite database. The environment must be
prepared BEFORE any tourhub import, because settings and the engine are
built at import time.
"""

import os

# CRITICAL: Set testing mode BEFORE any app imports!
os.environ["IS_TESTING"] = "true"
os.environ["TEST_DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = ""
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_tourhub")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_tourhub")
os.environ.setdefault("ADMIN_EMAIL", "")

from typing import Dict

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session

from tourhub.auth import ADMIN_SCOPE, USER_SCOPE, create_access_token
from tourhub.core.config import settings
from tourhub.core.enums import AdminRole
from tourhub.database import Base, SessionLocal, engine, get_db
from tourhub.main import app
from tourhub.models.booking import Booking
from tourhub.models.tenant import Tenant
from tourhub.models.tour import Tour
from tourhub.models.user import User
from tourhub.services.cache_service import CacheService

from tests.factories.builders import create_booking, create_tenant, create_tour, create_user

settings.is_testing = True


def _validate_test_database_url(database_url: str) -> None:
    """Refuse to run (and drop tables) anywhere but a disposable database."""
    if not database_url.startswith("sqlite"):
        if "test" not in database_url.lower():
            raise RuntimeError(
                "Tests drop every table after each test; TEST_DATABASE_URL must point at a test database"
            )


_validate_test_database_url(settings.get_database_url())


# ============================================================================
# Database and client
# ============================================================================


@pytest.fixture(autouse=True)
def _clear_memory_cache():
    """Tenant configs are cached process-wide; start every test cold."""
    CacheService().delete_pattern("*")
    yield
    CacheService().delete_pattern("*")


@pytest.fixture(scope="function")
def db() -> Session:
    """Fresh schema and session per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session):
    """TestClient sharing the test session with the app."""

    def override_get_db():
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def test_tenant(db: Session) -> Tenant:
    return create_tenant(db)


@pytest.fixture
def test_tour(db: Session, test_tenant: Tenant) -> Tour:
    return create_tour(db, test_tenant.tenant_id)


@pytest.fixture
def test_customer(db: Session) -> User:
    return create_user(db)


@pytest.fixture
def test_admin(db: Session) -> User:
    return create_user(db, email="admin@example.com", role=AdminRole.ADMIN.value, first_name="Ada")


@pytest.fixture
def test_super_admin(db: Session) -> User:
    return create_user(db, email="root@example.com", role=AdminRole.SUPER_ADMIN.value)


@pytest.fixture
def test_viewer(db: Session) -> User:
    return create_user(db, email="viewer@example.com", role=AdminRole.VIEWER.value)


@pytest.fixture
def test_booking(db: Session, test_tour: Tour, test_customer: User) -> Booking:
    return create_booking(db, test_tour, test_customer, booking_reference="DT-12345678-ABC123")


@pytest.fixture
def auth_headers_customer(test_customer: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(test_customer, USER_SCOPE)}"}


@pytest.fixture
def auth_headers_admin(test_admin: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(test_admin, ADMIN_SCOPE)}"}


@pytest.fixture
def auth_headers_viewer(test_viewer: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(test_viewer, ADMIN_SCOPE)}"}
