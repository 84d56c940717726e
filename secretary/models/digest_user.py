"""
DigestUser model - a person enrolled in the morning assignment digest.

Each record carries everything a backend-triggered digest needs without
the user being present: the Google refresh token, the cached short-lived
access token with its expiry, and the time zone the digest is rendered in.

Lifecycle:
==========
- Created on first signup (upsert by unique email)
- Updated on every successful token refresh and every enable/disable
- Never hard-deleted; unsubscribing flips digest_enabled to False
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from secretary.db.base import Base


class DigestUser(Base):
    """
    SQLAlchemy ORM model for the 'digest_users' table.
    """

    __tablename__ = "digest_users"

    # ---------------------------------------------------------------------------
    # PRIMARY KEY
    # ---------------------------------------------------------------------------
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # ---------------------------------------------------------------------------
    # IDENTITY
    # ---------------------------------------------------------------------------
    # email: Digest recipient and the upsert key for signups
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)

    # ---------------------------------------------------------------------------
    # GOOGLE CREDENTIALS
    # ---------------------------------------------------------------------------
    # google_refresh_token: Long-lived exchange token, never leaves the backend
    google_refresh_token: Mapped[str] = mapped_column(Text, nullable=False)

    # google_access_token / token_expires_at: Cached short-lived credential
    # - Written by CredentialCache after each refresh
    # - NULL until the first digest run for this user
    google_access_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    token_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # ---------------------------------------------------------------------------
    # DIGEST PREFERENCES
    # ---------------------------------------------------------------------------
    # timezone: IANA zone the digest is bucketed and rendered in
    timezone: Mapped[str] = mapped_column(String(64), default="America/Los_Angeles")

    digest_enabled: Mapped[bool] = mapped_column(default=True, index=True)

    # ---------------------------------------------------------------------------
    # TIMESTAMPS
    # ---------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def cached_token_expiry(self) -> Optional[datetime]:
        """
        Expiry of the cached access token as an aware UTC datetime.

        SQLite hands back naive datetimes even for timezone-aware columns,
        so a missing tzinfo is read as UTC.
        """
        if self.token_expires_at is None:
            return None
        if self.token_expires_at.tzinfo is None:
            return self.token_expires_at.replace(tzinfo=timezone.utc)
        return self.token_expires_at

    def __repr__(self) -> str:
        return f"<DigestUser(email='{self.email}', enabled={self.digest_enabled})>"
