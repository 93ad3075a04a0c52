"""Pytest fixtures — throwaway SQLite database for fast, isolated tests."""
import os
from typing import Optional

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from venue_booking.database import Base, get_db  # noqa: E402
from venue_booking.main import app  # noqa: E402

# Import all models so they register with Base.metadata
from venue_booking.models.user import User                          # noqa: F401,E402
from venue_booking.models.venue import Venue                        # noqa: F401,E402
from venue_booking.models.booking import Booking                    # noqa: F401,E402
from venue_booking.models.booking_mutation import BookingMutation   # noqa: F401,E402

SQLITE_URL = "sqlite:///./test.db"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session, closed after the test."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: create records via the API, return the JSON response dict
# ---------------------------------------------------------------------------
def create_test_user(client: TestClient, name: str = "Test User") -> dict:
    """Helper — POST /api/users and return response JSON."""
    resp = client.post("/api/users/", json={"display_name": name, "email": f"{name.lower().replace(' ', '.')}@example.com"})
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_venue(
    client: TestClient,
    owner_id: str,
    price_per_hour: float = 100,
    currency: str = "USD",
    tz: str = "UTC",
) -> dict:
    """Helper — POST /api/venues and return response JSON."""
    resp = client.post("/api/venues/", json={
        "owner_id": owner_id,
        "title": "Rooftop Hall",
        "price_per_hour": price_per_hour,
        "currency": currency,
        "timezone": tz,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_booking(
    client: TestClient,
    venue_id: str,
    user_id: str,
    event_date: str = "2024-01-01",
    start_time: str = "14:00",
    end_time: str = "18:00",
    confirm_as: Optional[str] = None,
) -> dict:
    """Helper — POST /api/bookings; when ``confirm_as`` names the venue owner, confirm it too."""
    resp = client.post("/api/bookings/", json={
        "venue_id": venue_id,
        "user_id": user_id,
        "event_date": event_date,
        "start_time": start_time,
        "end_time": end_time,
    })
    assert resp.status_code == 201, resp.text
    if confirm_as is None:
        return resp.json()

    resp = client.post(f"/api/bookings/{resp.json()['booking_id']}/status", json={
        "owner_id": confirm_as,
        "status": "confirmed",
    })
    assert resp.status_code == 200, resp.text
    return resp.json()


def setup_booking(client: TestClient, confirmed: bool = True, **booking_kwargs) -> tuple[dict, dict, dict, dict]:
    """Owner, guest, a 100/h venue and a 14:00-18:00 booking, confirmed by the owner unless told otherwise."""
    owner = create_test_user(client, name="Owner")
    guest = create_test_user(client, name="Guest")
    venue = create_test_venue(client, owner_id=owner["user_id"])
    booking = create_test_booking(
        client, venue["venue_id"], guest["user_id"],
        confirm_as=owner["user_id"] if confirmed else None, **booking_kwargs,
    )
    return owner, guest, venue, booking
