"""
Google Environment Module - Google integration

Architecture:
=============
google/
├── __init__.py           # Module exports
├── auth/                 # Refresh-token exchange
└── calendar/             # Calendar API client

Usage:
======
    from secretary.environments.google import GoogleAuthClient, GoogleCalendarClient

    tokens = await GoogleAuthClient().refresh_access_token(refresh_token)
    calendar = GoogleCalendarClient(access_token=tokens.access_token)
"""

from secretary.environments.google.auth import GoogleAuthClient, CALENDAR_SCOPES
from secretary.environments.google.calendar import GoogleCalendarClient, CalendarEvent

__all__ = [
    "GoogleAuthClient",
    "GoogleCalendarClient",
    "CalendarEvent",
    "CALENDAR_SCOPES",
]
