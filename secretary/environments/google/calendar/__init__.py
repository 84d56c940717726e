"""
Google Calendar Module - Calendar API Integration

Features:
=========
- Create or replace assignment events tagged with private properties
- Look up an event by its private assignment tag
- List the digest window (single occurrences, ascending start)
"""

from secretary.environments.google.calendar.client import GoogleCalendarClient
from secretary.environments.google.calendar.schemas import (
    CalendarEvent,
    CalendarEventPayload,
    CalendarEventsResponse,
    EventSource,
    EventTime,
    ExtendedProperties,
    ASSIGNMENT_ID_KEY,
    COURSE_ID_KEY,
)

__all__ = [
    "GoogleCalendarClient",
    "CalendarEvent",
    "CalendarEventPayload",
    "CalendarEventsResponse",
    "EventSource",
    "EventTime",
    "ExtendedProperties",
    "ASSIGNMENT_ID_KEY",
    "COURSE_ID_KEY",
]
