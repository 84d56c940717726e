"""
Google OAuth Schemas - Data structures for Google authentication.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, List
from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# OAUTH SCOPE CONSTANTS
# ---------------------------------------------------------------------------
# Reference: https://developers.google.com/identity/protocols/oauth2/scopes

# Sync writes events and the digest reads them back
CALENDAR_SCOPES = [
    "https://www.googleapis.com/auth/calendar.events",
]

# Google access tokens carry this prefix; refresh tokens start with "1//"
ACCESS_TOKEN_PREFIX = "ya29."


# ---------------------------------------------------------------------------
# TOKEN RESPONSES
# ---------------------------------------------------------------------------

class GoogleTokenResponse(BaseModel):
    """
    Response from Google's token endpoint for a refresh-token grant.

    Example response from Google:
    {
        "access_token": "ya29.a0AfB_byC...",
        "expires_in": 3599,
        "scope": "https://www.googleapis.com/auth/calendar.events",
        "token_type": "Bearer"
    }
    """
    access_token: Optional[str] = Field(None, description="OAuth access token")
    token_type: str = Field(default="Bearer", description="Token type (usually Bearer)")
    expires_in: Optional[int] = Field(None, description="Seconds until expiration")
    refresh_token: Optional[str] = Field(None, description="Rotated refresh token, rarely sent")
    scope: Optional[str] = Field(None, description="Space-separated scopes granted")

    def get_scopes_list(self) -> List[str]:
        """Convert space-separated scope string to list."""
        if self.scope:
            return self.scope.split()
        return []

    def get_expires_at(self, now: Optional[datetime] = None) -> Optional[datetime]:
        """Calculate the absolute expiry from expires_in seconds."""
        if self.expires_in is None:
            return None
        now = now or datetime.now(timezone.utc)
        return now + timedelta(seconds=self.expires_in)
