"""
Digest Bucketer - splits the window into "today" and "this week".

Only events this system created (private canvasAssignmentId tag present)
are kept; a user's personal calendar entries never reach the digest.
"Today" is the calendar date in the user's own time zone, so an
assignment due at 23:30 in Los Angeles is still today there even though
it is tomorrow in UTC.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from secretary.core.timezones import resolve_time_zone
from secretary.environments.google.calendar import CalendarEvent


@dataclass
class DigestBucketSet:
    """Events of one digest run, each list in provider (start-time) order."""
    today: List[CalendarEvent] = field(default_factory=list)
    this_week: List[CalendarEvent] = field(default_factory=list)


def filter_assignment_events(events: Iterable[CalendarEvent]) -> List[CalendarEvent]:
    return [event for event in events if event.is_assignment()]


def bucket(
    events: Iterable[CalendarEvent],
    time_zone: str,
    now: Optional[datetime] = None,
) -> DigestBucketSet:
    """
    Partition tagged events by local date.

    Events with no start value are dropped.

    Raises:
        ValidationError: If the time zone is unknown
    """
    tz = resolve_time_zone(time_zone)
    now = now or datetime.now(timezone.utc)
    today = now.astimezone(tz).date()

    buckets = DigestBucketSet()
    for event in filter_assignment_events(events):
        if event.start is None or not event.start.has_value():
            continue

        if event.start.local_date(tz) == today:
            buckets.today.append(event)
        else:
            buckets.this_week.append(event)

    return buckets
