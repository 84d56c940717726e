"""
Digest Renderer - turns bucketed events into the plaintext email body.

Pure formatting: no I/O, and every timestamp is shown in the recipient's
time zone. The same inputs (and the same `now`) always render the same
text.
"""

from datetime import date, datetime, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo

from secretary.core.timezones import resolve_time_zone
from secretary.environments.google.calendar import CalendarEvent


RULE = "━" * 20

GREETING = "Good morning!"
NOTHING_TODAY = "Nothing due today — enjoy your day!"
NOTHING_THIS_WEEK = "Nothing else this week."
CLOSING = "Have a focused day."
SIGNATURE = "—school-secretary"


def _section_header(title: str) -> List[str]:
    return [RULE, title, RULE, ""]


def format_due_time(event: CalendarEvent, tz: ZoneInfo) -> str:
    """'9:05 PM' style local time, or 'all day' for date-only events."""
    if event.start is None or event.start.date_time is None:
        return "all day"

    moment = event.start.date_time
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz).strftime("%I:%M %p").lstrip("0")


def format_short_date(day: date) -> str:
    """'Wed, Jan 15' style date."""
    return f"{day.strftime('%a')}, {day.strftime('%b')} {day.day}"


def render(
    today: List[CalendarEvent],
    this_week: List[CalendarEvent],
    time_zone: str,
    unsubscribe_url: str,
) -> str:
    """
    Build the digest body.

    Raises:
        ValidationError: If the time zone is unknown
    """
    tz = resolve_time_zone(time_zone)

    lines = [GREETING, ""]

    lines.extend(_section_header("TODAY"))
    if not today:
        lines.append(NOTHING_TODAY)
    else:
        for event in today:
            lines.append(f"{event.get_display_title()} — due {format_due_time(event, tz)}")
            source_url = event.get_source_url()
            if source_url:
                lines.append(f"   → {source_url}")
            lines.append("")

    lines.append("")
    lines.extend(_section_header("THIS WEEK"))
    if not this_week:
        lines.append(NOTHING_THIS_WEEK)
    else:
        for event in this_week:
            day = event.start.local_date(tz) if event.start else None
            label = format_short_date(day) if day else "TBD"
            lines.append(f"{label} · {event.get_display_title()}")

    lines.extend([
        "",
        RULE,
        "",
        CLOSING,
        "",
        SIGNATURE,
        "",
        f"Unsubscribe: {unsubscribe_url}",
    ])
    return "\n".join(lines)


def subject(time_zone: str, now: Optional[datetime] = None) -> str:
    """'Your Monday, Oct 19' in the recipient's zone."""
    tz = resolve_time_zone(time_zone)
    local = (now or datetime.now(timezone.utc)).astimezone(tz)
    return f"Your {local.strftime('%A')}, {local.strftime('%b')} {local.day}"
