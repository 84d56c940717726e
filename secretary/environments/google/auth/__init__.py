"""
Google Auth Module - refresh-token exchange for Google APIs.

Signup stores the user's refresh token; every backend-triggered digest
exchanges it here for a short-lived access token.
"""

from secretary.environments.google.auth.client import GoogleAuthClient
from secretary.environments.google.auth.schemas import (
    GoogleTokenResponse,
    CALENDAR_SCOPES,
    ACCESS_TOKEN_PREFIX,
)

__all__ = [
    "GoogleAuthClient",
    "GoogleTokenResponse",
    "CALENDAR_SCOPES",
    "ACCESS_TOKEN_PREFIX",
]
