"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Test database (SQLite in-memory for speed)
- Test client (FastAPI TestClient)
- In-memory calendar backend, identity provider and email transport
- Sample data factories
"""

import os

# Settings are read at import time; point them at test values first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("PUBLIC_BASE_URL", "https://secretary.test")

import pytest
from datetime import datetime, timedelta, timezone
from typing import Dict, Generator, List, Optional
from uuid import uuid4

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from secretary.main import app
from secretary.db.base import Base
from secretary.db.session import get_db
from secretary.environments.base import (
    APIError,
    CalendarBackend,
    EmailDeliveryError,
    EmailMessage,
    EmailTransport,
    IdentityProvider,
    OAuthTokens,
    ProviderError,
)
from secretary.environments.canvas import AssignmentRecord
from secretary.environments.google.calendar import (
    CalendarEvent,
    CalendarEventPayload,
    ASSIGNMENT_ID_KEY,
)
from secretary.models.digest_user import DigestUser


# ---------------------------------------------------------------------------
# TEST DATABASE SETUP
# ---------------------------------------------------------------------------
# Use SQLite in-memory for fast tests (no PostgreSQL dependency)
# StaticPool keeps the same connection across all operations

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},  # Required for SQLite
    poolclass=StaticPool,  # Keep connection alive across operations
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ---------------------------------------------------------------------------
# FAKE COLLABORATORS
# ---------------------------------------------------------------------------


class FakeCalendarBackend(CalendarBackend):
    """
    In-memory calendar keyed by event id.

    Stores the API body each write would have sent, so tests can inspect
    exactly what reached the provider.
    """

    def __init__(self):
        self.events: Dict[str, dict] = {}
        self.calls: List[tuple] = []
        self.tokens: List[str] = []
        self.fail_summaries: set = set()
        self.fail_lookup = False
        self.window_events: List[CalendarEvent] = []
        self.window_error: Optional[Exception] = None
        self.window_args: Optional[dict] = None
        self._next_id = 1

    def factory(self, access_token: str) -> "FakeCalendarBackend":
        self.tokens.append(access_token)
        return self

    def event_for(self, assignment_id: int) -> Optional[dict]:
        for body in self.events.values():
            if body["extendedProperties"]["private"].get(ASSIGNMENT_ID_KEY) == str(assignment_id):
                return body
        return None

    async def find_by_external_id(self, key: str, value: str) -> Optional[str]:
        self.calls.append(("find", value))
        if self.fail_lookup:
            raise APIError("Backend Error", status_code=500)
        for event_id, body in self.events.items():
            if body["extendedProperties"]["private"].get(key) == value:
                return event_id
        return None

    async def create_event(self, payload: CalendarEventPayload) -> CalendarEvent:
        self.calls.append(("create", payload.private_tags.get(ASSIGNMENT_ID_KEY)))
        if payload.summary in self.fail_summaries:
            raise ProviderError("Calendar API error: Rate Limit Exceeded", status_code=403)

        event_id = f"evt{self._next_id}"
        self._next_id += 1
        self.events[event_id] = payload.to_api_body()
        return CalendarEvent(id=event_id, summary=payload.summary)

    async def update_event(self, event_id: str, payload: CalendarEventPayload) -> CalendarEvent:
        self.calls.append(("update", payload.private_tags.get(ASSIGNMENT_ID_KEY)))
        if payload.summary in self.fail_summaries:
            raise ProviderError("Calendar API error: Rate Limit Exceeded", status_code=403)
        if event_id not in self.events:
            raise ProviderError("Calendar API error: Not Found", status_code=404)

        self.events[event_id] = payload.to_api_body()
        return CalendarEvent(id=event_id, summary=payload.summary)

    async def list_events_in_window(self, time_min, time_max, time_zone) -> List[CalendarEvent]:
        self.window_args = {"time_min": time_min, "time_max": time_max, "time_zone": time_zone}
        if self.window_error is not None:
            raise self.window_error
        return list(self.window_events)


class FakeIdentityProvider(IdentityProvider):
    """Hands out numbered access tokens and counts exchanges."""

    provider_name = "fake"

    def __init__(self, expires_in: int = 3600, error: Optional[Exception] = None):
        self.expires_in = expires_in
        self.error = error
        self.refresh_calls: List[str] = []

    async def refresh_access_token(self, refresh_token: str) -> OAuthTokens:
        self.refresh_calls.append(refresh_token)
        if self.error is not None:
            raise self.error
        return OAuthTokens(
            access_token=f"access-{len(self.refresh_calls)}",
            refresh_token=refresh_token,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=self.expires_in),
        )


class FakeEmailTransport(EmailTransport):
    """Collects sent messages; optionally rejects given recipients."""

    def __init__(self, fail_for: Optional[set] = None):
        self.sent: List[EmailMessage] = []
        self.fail_for = fail_for or set()

    async def send(self, message: EmailMessage) -> str:
        if message.to in self.fail_for:
            raise EmailDeliveryError("Email send failed (422): invalid recipient", status_code=422)
        self.sent.append(message)
        return f"msg-{len(self.sent)}"


# ---------------------------------------------------------------------------
# DATABASE FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Create a fresh database for each test function.

    - Creates all tables
    - Yields a session for the test
    - Drops all tables after test (clean slate)
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database.

    Overrides the get_db dependency to use our test database.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# COLLABORATOR FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def calendar() -> FakeCalendarBackend:
    return FakeCalendarBackend()


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def email_transport() -> FakeEmailTransport:
    return FakeEmailTransport()


# ---------------------------------------------------------------------------
# USER FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def digest_user(db: Session) -> DigestUser:
    """
    Enrolled user with no cached access token.

    Returns:
        DigestUser "student@example.edu" in America/Los_Angeles
    """
    user = DigestUser(
        id=uuid4(),
        email="student@example.edu",
        google_refresh_token="1//refresh-token",
        timezone="America/Los_Angeles",
        digest_enabled=True,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


# ---------------------------------------------------------------------------
# DATA FACTORIES
# ---------------------------------------------------------------------------

@pytest.fixture
def make_record():
    """Factory for AssignmentRecord with sensible defaults."""
    def _make(
        id: int = 1,
        name: str = "Problem Set",
        due_at: Optional[datetime] = datetime(2025, 1, 16, 7, 59, tzinfo=timezone.utc),
        **overrides,
    ) -> AssignmentRecord:
        data = {
            "id": id,
            "name": name,
            "due_at": due_at,
            "points_possible": 10.0,
            "html_url": f"https://canvas.example.edu/courses/1/assignments/{id}",
            "description": None,
            "course_id": 1,
            "course_name": "Intro to CS",
            "course_code": "CS101",
        }
        data.update(overrides)
        return AssignmentRecord(**data)

    return _make


@pytest.fixture
def make_event():
    """Factory for CalendarEvent as the provider returns it."""
    def _make(
        id: str,
        summary: str,
        start: Optional[str] = None,
        date: Optional[str] = None,
        assignment_id: Optional[str] = None,
        source_url: Optional[str] = None,
    ) -> CalendarEvent:
        data: dict = {"id": id, "summary": summary}
        if start is not None:
            data["start"] = {"dateTime": start}
        elif date is not None:
            data["start"] = {"date": date}
        if assignment_id is not None:
            data["extendedProperties"] = {"private": {ASSIGNMENT_ID_KEY: assignment_id}}
        if source_url is not None:
            data["source"] = {"title": "Canvas Assignment", "url": source_url}
        return CalendarEvent.model_validate(data)

    return _make
