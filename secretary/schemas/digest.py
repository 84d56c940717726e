"""
Digest schemas - request and response bodies for the /digest endpoints.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from secretary.core.config import settings
from secretary.core.timezones import resolve_time_zone
from secretary.environments.base import ValidationError
from secretary.services.credential_cache import RefreshCredential


class DigestSignup(BaseModel):
    """
    Body of POST /digest/signup.

    Example request:
    {
        "email": "student@example.edu",
        "google_refresh_token": "1//0gAbC...",
        "timezone": "America/Chicago"
    }
    """

    email: EmailStr

    # google_refresh_token: Long-lived token from the extension's OAuth grant
    # - An access token ("ya29.") here is rejected with 422
    google_refresh_token: str = Field(..., min_length=1)

    # timezone: IANA zone; defaults to DEFAULT_TIMEZONE when omitted
    timezone: Optional[str] = None

    @field_validator("google_refresh_token")
    @classmethod
    def _must_be_refresh_token(cls, value: str) -> str:
        try:
            RefreshCredential.parse(value)
        except ValidationError as e:
            raise ValueError(str(e))
        return value

    @field_validator("timezone")
    @classmethod
    def _known_time_zone(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            resolve_time_zone(value)
        except ValidationError as e:
            raise ValueError(str(e))
        return value

    def resolved_timezone(self) -> str:
        return self.timezone or settings.DEFAULT_TIMEZONE


class DigestSignupOut(BaseModel):
    success: bool = True
    user_id: uuid.UUID


class DigestSettingsOut(BaseModel):
    """Digest preferences shown on the settings link."""
    email: EmailStr
    timezone: str
    digest_enabled: bool

    class Config:
        from_attributes = True


class DigestRunOut(BaseModel):
    """Aggregate of one scheduled run."""
    processed: int
    failed: int
    total: int
    errors: List[str] = Field(default_factory=list)
