"""
Test configuration and shared fixtures for the Slot Booking test suite.

Uses an in-memory SQLite database per test: every test gets freshly created
tables, so services are free to commit. Tokens are minted with the same
JWT service the API verifies them with.
"""

import os

# Must be set before core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("TESTING", "1")

import pytest
from datetime import date, time
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.constants import ROLE_BUSINESS_OWNER, ROLE_CUSTOMER
from core.database import Base, get_db
from models import Business, OperatingHours
from services.jwt_service import jwt_service, TokenPayload


OWNER_ID = "owner-1"
OTHER_OWNER_ID = "owner-2"
CUSTOMER_ID = "customer-1"
OTHER_CUSTOMER_ID = "customer-2"

# 2030-01-07 is a Monday
MONDAY = date(2030, 1, 7)
SATURDAY = date(2030, 1, 12)
SUNDAY = date(2030, 1, 13)


@pytest.fixture(scope="function")
def db_engine():
    """
    Create an in-memory SQLite engine with all tables.

    StaticPool keeps the single in-memory connection alive across sessions,
    so the TestClient's threads see the same database as the test.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    @event.listens_for(engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session configured like the application's SessionLocal."""
    TestingSession = sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)
    session = TestingSession()

    yield session

    session.close()


@pytest.fixture
def client(db_session):
    """Test client with the database dependency pointed at the test session."""
    from main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def business(db_session) -> Business:
    """A business owned by OWNER_ID with no schedule yet."""
    business = Business(owner_id=OWNER_ID, name="Corner Barber")
    db_session.add(business)
    db_session.commit()
    return business


@pytest.fixture
def other_business(db_session) -> Business:
    business = Business(owner_id=OTHER_OWNER_ID, name="Other Shop")
    db_session.add(business)
    db_session.commit()
    return business


@pytest.fixture
def weekday_business(db_session, business) -> Business:
    """The business open Monday to Friday 09:00-17:00, closed at weekends."""
    for day in range(1, 6):
        db_session.add(OperatingHours(
            business_id=business.id, day_of_week=day,
            open_time=time(9, 0), close_time=time(17, 0), is_closed=False
        ))
    db_session.add(OperatingHours(business_id=business.id, day_of_week=6, is_closed=True))
    db_session.commit()
    return business


def make_token(sub: str, role: str) -> str:
    return jwt_service.create_access_token(TokenPayload(sub=sub, role=role))


def bearer(sub: str, role: str) -> dict:
    return {"Authorization": f"Bearer {make_token(sub, role)}"}


@pytest.fixture
def owner_headers() -> dict:
    return bearer(OWNER_ID, ROLE_BUSINESS_OWNER)


@pytest.fixture
def other_owner_headers() -> dict:
    return bearer(OTHER_OWNER_ID, ROLE_BUSINESS_OWNER)


@pytest.fixture
def customer_headers() -> dict:
    return bearer(CUSTOMER_ID, ROLE_CUSTOMER)


@pytest.fixture
def other_customer_headers() -> dict:
    return bearer(OTHER_CUSTOMER_ID, ROLE_CUSTOMER)
