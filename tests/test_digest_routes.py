"""
Tests for the /digest endpoints.

Covers:
- Signup validation, upsert by email, and best-effort welcome email
- Settings and unsubscribe links authenticated by signed tokens
- The cron-protected scheduled run
"""

import pytest
from datetime import timedelta
from uuid import uuid4

from secretary.core.config import settings
from secretary.core.security import build_unsubscribe_url, create_link_token, decode_link_token
from secretary.deps import (
    get_credential_cache,
    get_digest_fetcher,
    get_email_transport,
)
from secretary.environments.base import FetchError
from secretary.main import app
from secretary.models.digest_user import DigestUser
from secretary.services.credential_cache import CredentialCache
from secretary.services.digest_fetcher import DigestFetcher
from secretary.services.digest_user_repository import DigestUserRepository


@pytest.fixture
def transport_override(client, email_transport):
    app.dependency_overrides[get_email_transport] = lambda: email_transport
    return email_transport


def _signup_body(**overrides):
    body = {
        "email": "student@example.edu",
        "google_refresh_token": "1//0gRefresh",
    }
    body.update(overrides)
    return body


# ---------------------------------------------------------------------------
# SIGNUP
# ---------------------------------------------------------------------------

class TestSignup:

    def test_signup_creates_user_with_default_zone(self, client, db, transport_override):
        response = client.post("/digest/signup", json=_signup_body())

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True

        user = DigestUserRepository(db).get_by_email("student@example.edu")
        assert str(user.id) == data["user_id"]
        assert user.timezone == "America/Los_Angeles"
        assert user.digest_enabled is True

    def test_signup_sends_welcome_email(self, client, transport_override):
        client.post("/digest/signup", json=_signup_body())

        assert [m.to for m in transport_override.sent] == ["student@example.edu"]

    def test_welcome_failure_does_not_fail_signup(self, client, transport_override):
        transport_override.fail_for = {"student@example.edu"}

        response = client.post("/digest/signup", json=_signup_body())

        assert response.status_code == 200

    def test_resignup_updates_existing_user(self, client, db, transport_override):
        first = client.post("/digest/signup", json=_signup_body()).json()
        repo = DigestUserRepository(db)
        repo.update(repo.get_by_email("student@example.edu"), digest_enabled=False, google_access_token="old")

        second = client.post(
            "/digest/signup",
            json=_signup_body(google_refresh_token="1//0gNewer", timezone="America/Chicago"),
        ).json()

        assert second["user_id"] == first["user_id"]
        db.expire_all()
        user = repo.get_by_email("student@example.edu")
        assert user.google_refresh_token == "1//0gNewer"
        assert user.timezone == "America/Chicago"
        assert user.digest_enabled is True
        assert user.google_access_token is None
        assert db.query(DigestUser).count() == 1

    def test_access_token_rejected(self, client, db, transport_override):
        response = client.post(
            "/digest/signup", json=_signup_body(google_refresh_token="ya29.a0AfB")
        )

        assert response.status_code == 422
        assert db.query(DigestUser).count() == 0

    def test_invalid_email_rejected(self, client, transport_override):
        response = client.post("/digest/signup", json=_signup_body(email="not-an-email"))
        assert response.status_code == 422

    def test_unknown_zone_rejected(self, client, transport_override):
        response = client.post("/digest/signup", json=_signup_body(timezone="Moon/Base"))
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# LINK TOKENS
# ---------------------------------------------------------------------------

class TestLinkTokens:

    def test_round_trip(self):
        user_id = uuid4()
        assert decode_link_token(create_link_token(user_id)) == user_id

    def test_expired_token_rejected(self):
        assert decode_link_token(create_link_token(uuid4(), timedelta(seconds=-1))) is None

    def test_garbage_rejected(self):
        assert decode_link_token("not-a-jwt") is None

    def test_unsubscribe_url(self, monkeypatch):
        monkeypatch.setattr(settings, "PUBLIC_BASE_URL", "https://api.example.com/")
        user_id = uuid4()

        url = build_unsubscribe_url(user_id)

        assert url.startswith("https://api.example.com/digest/unsubscribe?token=")
        assert decode_link_token(url.split("token=")[1]) == user_id


# ---------------------------------------------------------------------------
# SETTINGS & UNSUBSCRIBE
# ---------------------------------------------------------------------------

class TestSettingsLinks:

    def test_read_settings(self, client, digest_user):
        token = create_link_token(digest_user.id)

        response = client.get("/digest/settings", params={"token": token})

        assert response.status_code == 200
        assert response.json() == {
            "email": "student@example.edu",
            "timezone": "America/Los_Angeles",
            "digest_enabled": True,
        }

    def test_invalid_token(self, client, digest_user):
        response = client.get("/digest/settings", params={"token": "bogus"})
        assert response.status_code == 401

    def test_token_for_missing_user(self, client, db):
        response = client.get("/digest/settings", params={"token": create_link_token(uuid4())})
        assert response.status_code == 404

    def test_disable_then_enable(self, client, db, digest_user):
        token = create_link_token(digest_user.id)

        disabled = client.post("/digest/settings/disable", params={"token": token})
        assert disabled.json()["digest_enabled"] is False

        enabled = client.post("/digest/settings/enable", params={"token": token})
        assert enabled.json()["digest_enabled"] is True

    def test_unsubscribe_keeps_record(self, client, db, digest_user):
        response = client.get(
            "/digest/unsubscribe", params={"token": create_link_token(digest_user.id)}
        )

        assert response.status_code == 200
        assert response.json()["success"] is True
        db.expire_all()
        user = db.get(DigestUser, digest_user.id)
        assert user is not None
        assert user.digest_enabled is False
        assert DigestUserRepository(db).list_enabled() == []


# ---------------------------------------------------------------------------
# SCHEDULED RUN
# ---------------------------------------------------------------------------

class TestRunDigest:

    @pytest.fixture
    def wired(self, client, db, calendar, identity_provider, email_transport, monkeypatch):
        monkeypatch.setattr(settings, "CRON_SECRET", "cron-secret")
        app.dependency_overrides[get_credential_cache] = lambda: CredentialCache(
            DigestUserRepository(db), identity_provider=identity_provider
        )
        app.dependency_overrides[get_digest_fetcher] = lambda: DigestFetcher(
            backend_factory=calendar.factory
        )
        app.dependency_overrides[get_email_transport] = lambda: email_transport
        return client

    def test_requires_cron_secret(self, wired):
        assert wired.post("/digest/run").status_code == 403
        assert wired.post("/digest/run", headers={"X-Cron-Secret": "wrong"}).status_code == 403

    def test_unconfigured_secret(self, client, monkeypatch):
        monkeypatch.setattr(settings, "CRON_SECRET", "")
        response = client.post("/digest/run", headers={"X-Cron-Secret": "anything"})
        assert response.status_code == 503

    def test_runs_enabled_users_only(self, wired, db, digest_user, email_transport):
        DigestUserRepository(db).upsert_by_email("paused@example.edu", "1//other", "UTC")
        paused = DigestUserRepository(db).get_by_email("paused@example.edu")
        DigestUserRepository(db).update(paused, digest_enabled=False)

        response = wired.post("/digest/run", headers={"X-Cron-Secret": "cron-secret"})

        assert response.status_code == 200
        assert response.json() == {"processed": 1, "failed": 0, "total": 1, "errors": []}
        assert [m.to for m in email_transport.sent] == ["student@example.edu"]

    def test_failures_reported_in_body(self, wired, db, digest_user, calendar):
        calendar.window_error = FetchError("Calendar fetch failed (500): boom", status_code=500)

        response = wired.post("/digest/run", headers={"X-Cron-Secret": "cron-secret"})

        assert response.status_code == 200
        assert response.json()["failed"] == 1
        assert response.json()["errors"] == [
            "student@example.edu: Calendar fetch failed (500): boom"
        ]
