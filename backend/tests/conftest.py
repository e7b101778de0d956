"""
Shared fixtures for the WeddingLens test suite.

Every test gets a fresh in-memory SQLite database. The API client shares
the test's session so assertions see exactly what the routes wrote.
"""

from __future__ import annotations

from typing import Dict

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tests.factories.booking_builders import booking_request
from tests.helpers.fake_gateway import FakeGateway
from weddinglens import models  # noqa: F401
from weddinglens.api.dependencies.database import get_db
from weddinglens.api.dependencies.services import get_payment_gateway
from weddinglens.auth import create_access_token
from weddinglens.database import Base
from weddinglens.main import app
from weddinglens.models.booking import Booking
from weddinglens.services.booking_service import BookingService
from weddinglens.services.catalog_service import seed_catalog


@pytest.fixture(scope="function")
def engine():
    test_engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture(scope="function")
def db(session_factory):
    """Create a new database session for each test."""
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def catalog(db: Session) -> Dict[str, int]:
    """Seed the bundled catalog (photographers 1-3, services 1-8, packages 1-3)."""
    return seed_catalog(db)


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def client(db: Session, fake_gateway: FakeGateway):
    """Create a test client bound to the test session and the fake gateway."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: fake_gateway

    # Don't use context manager - startup would seed the configured database
    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


@pytest.fixture
def auth_headers() -> dict:
    """Bearer headers for customer 1."""
    token = create_access_token(data={"sub": 1})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers() -> dict:
    """Bearer headers for customer 2."""
    token = create_access_token(data={"sub": 2})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_booking(db: Session, catalog):
    """Create pending bookings through BookingService (package 1 by default)."""

    def _make(user_id: int = 1, **kwargs) -> Booking:
        return BookingService(db).create_booking(user_id, booking_request(**kwargs))

    return _make
