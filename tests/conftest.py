"""
Shared pytest fixtures.

Each test gets its own in-memory SQLite database; the Google adapters are
replaced with in-memory fakes unless a test builds real ones over
httpx.MockTransport.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CALENDAR_TIMEZONE", "UTC")

from datetime import date  # noqa: E402
from zoneinfo import ZoneInfo  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from rentalcore import models  # noqa: E402
from rentalcore.database import Base, get_db  # noqa: E402
from rentalcore.domain.scheduling.integration_service import CalendarSyncService  # noqa: E402
from rentalcore.domain.scheduling.router import get_calendar_sync_service  # noqa: E402

from .fakes.fake_calendar_client import FakeCalendarClient  # noqa: E402
from .fakes.fake_credential_service import FakeCredentialService  # noqa: E402

TENANT_ID = "11111111-1111-1111-1111-111111111111"
OTHER_TENANT_ID = "22222222-2222-2222-2222-222222222222"
UTC = ZoneInfo("UTC")


@pytest.fixture
def db():
    """Fresh in-memory database per test"""
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def fake_calendar():
    return FakeCalendarClient()


@pytest.fixture
def fake_credentials():
    return FakeCredentialService()


@pytest.fixture
def sync_service(db, fake_credentials, fake_calendar):
    return CalendarSyncService(db, fake_credentials, fake_calendar, zone=UTC)


@pytest.fixture
def make_crew(db):
    def _make(tenant_id: str = TENANT_ID, **fields) -> models.CrewMember:
        data = {"name": "Alex Rivera", "role": "Own Crew"}
        data.update(fields)
        crew_member = models.CrewMember(tenant_id=tenant_id, **data)
        db.add(crew_member)
        db.commit()
        db.refresh(crew_member)
        return crew_member

    return _make


@pytest.fixture
def make_connected_crew(make_crew):
    def _make(**fields) -> models.CrewMember:
        fields.setdefault("google_calendar_refresh_token", "stored-refresh-token")
        fields.setdefault("google_calendar_connected", True)
        return make_crew(**fields)

    return _make


@pytest.fixture
def make_event(db):
    def _make(
        start_date: date = date(2024, 6, 1),
        end_date: date = None,
        tenant_id: str = TENANT_ID,
        **fields,
    ) -> models.Event:
        data = {"name": "Summer Festival", "location": "Riverside Park"}
        data.update(fields)
        event = models.Event(
            tenant_id=tenant_id,
            start_date=start_date,
            end_date=end_date or start_date,
            **data,
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _make


@pytest.fixture
def make_assignment(db):
    def _make(event, crew_member, role: str = "Rigger", **fields) -> models.EventCrew:
        fields.setdefault("external_event_ids", [])
        assignment = models.EventCrew(
            tenant_id=event.tenant_id,
            event_id=event.id,
            crew_member_id=crew_member.id,
            role=role,
            **fields,
        )
        db.add(assignment)
        db.commit()
        db.refresh(assignment)
        return assignment

    return _make


@pytest.fixture
def client(db, fake_credentials, fake_calendar):
    """API client bound to the test database and the fake calendar adapters"""
    from rentalcore.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_calendar_sync_service] = lambda: CalendarSyncService(
        db, fake_credentials, fake_calendar, zone=UTC
    )
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
