"""
Google Calendar Schemas - Data structures for calendar operations.

These Pydantic models represent Google Calendar API resources in a clean,
typed format. CalendarEventPayload is the write side: the event body this
system sends for a synced assignment.

Reference: https://developers.google.com/calendar/api/v3/reference
"""

from datetime import datetime, date, timezone
from typing import Optional, List, Dict, Any
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# PRIVATE TAG KEYS
# ---------------------------------------------------------------------------
# Stored in extendedProperties.private of every event this system creates.
# canvasAssignmentId is the correlation key between an assignment and its
# calendar event.
ASSIGNMENT_ID_KEY = "canvasAssignmentId"
COURSE_ID_KEY = "canvasCourseId"


class EventTime(BaseModel):
    """
    Event start or end time.

    Google Calendar API returns times in one of two formats:
    - dateTime: For timed events (e.g., "2024-01-15T10:00:00-05:00")
    - date: For all-day events (e.g., "2024-01-15")
    """
    date_time: Optional[datetime] = Field(None, alias="dateTime")
    date: Optional[str] = Field(None)  # YYYY-MM-DD format for all-day events
    time_zone: Optional[str] = Field(None, alias="timeZone")

    def is_all_day(self) -> bool:
        """Check if this is an all-day event (date only, no time)."""
        return self.date is not None and self.date_time is None

    def has_value(self) -> bool:
        return self.date_time is not None or self.date is not None

    def local_date(self, tz: ZoneInfo) -> Optional[date]:
        """
        Calendar date of this time as seen in `tz`.

        All-day dates are already calendar dates and are returned as is.
        A naive dateTime is read as UTC.
        """
        if self.date_time is not None:
            moment = self.date_time
            if moment.tzinfo is None:
                moment = moment.replace(tzinfo=timezone.utc)
            return moment.astimezone(tz).date()
        if self.date:
            return date.fromisoformat(self.date)
        return None

    class Config:
        populate_by_name = True


class EventSource(BaseModel):
    """Link back to the resource the event was created from."""
    title: Optional[str] = Field(None)
    url: Optional[str] = Field(None)


class ExtendedProperties(BaseModel):
    """
    Extended properties for a calendar event.

    - private: Only visible to the user who set them
    - shared: Visible to all attendees
    """
    private: Optional[Dict[str, Optional[str]]] = Field(None)
    shared: Optional[Dict[str, Optional[str]]] = Field(None)

    class Config:
        populate_by_name = True

    def get_assignment_id(self) -> Optional[str]:
        """The Canvas assignment id this event was synced from, if any."""
        if self.private:
            return self.private.get(ASSIGNMENT_ID_KEY)
        return None


class CalendarEvent(BaseModel):
    """
    A Google Calendar event.

    Reference: https://developers.google.com/calendar/api/v3/reference/events
    """
    id: str = Field(..., description="Unique event identifier")
    summary: Optional[str] = Field(None, description="Event title")
    description: Optional[str] = Field(None, description="Event description")

    start: Optional[EventTime] = Field(None, description="Event start time")
    end: Optional[EventTime] = Field(None, description="Event end time")

    status: Optional[str] = Field(None, description="confirmed, tentative, cancelled")
    html_link: Optional[str] = Field(None, alias="htmlLink")

    source: Optional[EventSource] = Field(None)
    extended_properties: Optional[ExtendedProperties] = Field(None, alias="extendedProperties")

    class Config:
        populate_by_name = True

    def is_all_day(self) -> bool:
        """Check if this is an all-day event."""
        if self.start:
            return self.start.is_all_day()
        return False

    def get_display_title(self) -> str:
        """Get a display-friendly title (with fallback)."""
        return self.summary or "(No title)"

    def get_assignment_id(self) -> Optional[str]:
        if self.extended_properties:
            return self.extended_properties.get_assignment_id()
        return None

    def is_assignment(self) -> bool:
        """True for events this system created (tagged with an assignment id)."""
        return self.get_assignment_id() is not None

    def get_source_url(self) -> Optional[str]:
        if self.source:
            return self.source.url
        return None


class CalendarEventsResponse(BaseModel):
    """
    Response from the Calendar Events list API.
    """
    kind: Optional[str] = Field(None)
    summary: Optional[str] = Field(None, description="Calendar title")
    time_zone: Optional[str] = Field(None, alias="timeZone")
    items: List[CalendarEvent] = Field(default_factory=list)
    next_page_token: Optional[str] = Field(None, alias="nextPageToken")

    class Config:
        populate_by_name = True


# ---------------------------------------------------------------------------
# EVENT WRITE SCHEMA
# ---------------------------------------------------------------------------

class CalendarEventPayload(BaseModel):
    """
    The event body sent for one synced assignment.

    Derived from an AssignmentRecord, never persisted. Timed only: there is
    no all-day path because assignments without a due time are not synced.

    Example:
        payload = CalendarEventPayload(
            summary="[CS101] Problem Set 3",
            description="Course: CS101 - Intro to CS",
            start=datetime(2025, 1, 15, 22, 59, tzinfo=timezone.utc),
            end=datetime(2025, 1, 15, 23, 59, tzinfo=timezone.utc),
            time_zone="America/Los_Angeles",
            source_url="https://canvas.example.edu/courses/1/assignments/2",
            private_tags={"canvasAssignmentId": "2", "canvasCourseId": "1"},
        )
    """
    summary: str
    description: str = ""
    start: datetime
    end: datetime
    time_zone: str = "UTC"
    source_title: str = "Canvas Assignment"
    source_url: Optional[str] = None
    private_tags: Dict[str, str] = Field(default_factory=dict)

    class Config:
        frozen = True

    def _local(self, moment: datetime) -> str:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(ZoneInfo(self.time_zone)).isoformat()

    def to_api_body(self) -> Dict[str, Any]:
        """Event resource body for events.insert / events.update."""
        body: Dict[str, Any] = {
            "summary": self.summary,
            "description": self.description,
            "start": {
                "dateTime": self._local(self.start),
                "timeZone": self.time_zone,
            },
            "end": {
                "dateTime": self._local(self.end),
                "timeZone": self.time_zone,
            },
            "extendedProperties": {"private": dict(self.private_tags)},
        }
        if self.source_url:
            body["source"] = {"title": self.source_title, "url": self.source_url}
        return body
