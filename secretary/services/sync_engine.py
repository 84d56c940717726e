"""
Sync Engine - pushes Canvas assignments into Google Calendar.

For each assignment with a due date, in input order:
1. Build the event payload (one-hour block ending at the due time)
2. Ask the correlator whether an event already exists for this assignment
3. Update that event, or create a new one
4. Count the outcome; a failing record never stops the batch

Requests are strictly sequential with a fixed pause between records; the
calendar provider rate-limits per user, so concurrency would only earn
403s. Running the same batch twice therefore yields one event per
assignment: the second run only updates.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import timedelta, timezone
from typing import Iterable, List, Optional

from secretary.core.config import settings
from secretary.core.timezones import resolve_time_zone
from secretary.environments.base import APIError
from secretary.environments.canvas.schemas import AssignmentRecord
from secretary.environments.google.calendar import (
    CalendarEventPayload,
    GoogleCalendarClient,
    ASSIGNMENT_ID_KEY,
    COURSE_ID_KEY,
)
from secretary.services.event_correlator import EventCorrelator, BackendFactory


logger = logging.getLogger("secretary.services.sync_engine")


# The event occupies the hour before the deadline
EVENT_LEAD = timedelta(hours=1)


@dataclass
class SyncResult:
    """Outcome of one sync batch."""
    success_count: int = 0
    failed_count: int = 0
    errors: List[str] = field(default_factory=list)


def strip_html(text: str) -> str:
    """
    Remove <...> spans and trim.

    Lossy on purpose: entities stay encoded and block structure is lost. A
    '<' with no closing '>' is kept as text.
    """
    parts: List[str] = []
    i = 0
    length = len(text)
    while i < length:
        start = text.find("<", i)
        if start == -1:
            parts.append(text[i:])
            break
        end = text.find(">", start + 1)
        if end == -1:
            parts.append(text[i:])
            break
        parts.append(text[i:start])
        i = end + 1
    return "".join(parts).strip()


def _format_points(points: float) -> str:
    # 1000000.0 -> "1000000", 2.5 -> "2.5"
    if float(points).is_integer():
        return str(int(points))
    return str(points)


def build_event_payload(record: AssignmentRecord, time_zone: str) -> CalendarEventPayload:
    """
    Calendar event for an assignment that has a due date.

    Raises:
        ValueError: If the record has no due date
    """
    if record.due_at is None:
        raise ValueError(f"Assignment {record.id} has no due date")

    due = record.due_at
    if due.tzinfo is None:
        due = due.replace(tzinfo=timezone.utc)

    lines = [f"Course: {record.course_code} - {record.course_name}"]
    if record.points_possible:
        lines.append(f"Points: {_format_points(record.points_possible)}")
    lines.append(f"Canvas Link: {record.html_url}")

    if record.description:
        stripped = strip_html(record.description)
        if stripped:
            lines.extend(["---", stripped])

    return CalendarEventPayload(
        summary=f"[{record.course_code}] {record.name}",
        description="\n".join(lines),
        start=due - EVENT_LEAD,
        end=due,
        time_zone=time_zone,
        source_url=record.html_url,
        private_tags={
            ASSIGNMENT_ID_KEY: str(record.id),
            COURSE_ID_KEY: str(record.course_id),
        },
    )


class SyncEngine:
    """
    Idempotent create-or-update of assignment events.

    Example:
        engine = SyncEngine()
        result = await engine.sync_assignments(access_token, records, "America/Los_Angeles")
        print(result.success_count, result.failed_count, result.errors)
    """

    def __init__(
        self,
        backend_factory: Optional[BackendFactory] = None,
        correlator: Optional[EventCorrelator] = None,
        request_delay: Optional[float] = None,
    ):
        """
        Args:
            backend_factory: Builds a CalendarBackend for an access token
                (defaults to GoogleCalendarClient)
            correlator: Existing-event lookup (defaults to one sharing the
                backend factory)
            request_delay: Seconds between records (defaults to
                SYNC_REQUEST_DELAY_MS)
        """
        self.backend_factory = backend_factory or GoogleCalendarClient
        self.correlator = correlator or EventCorrelator(self.backend_factory)
        self.request_delay = (
            request_delay
            if request_delay is not None
            else settings.SYNC_REQUEST_DELAY_MS / 1000
        )

    async def sync_assignments(
        self,
        access_token: str,
        records: Iterable[AssignmentRecord],
        time_zone: str,
    ) -> SyncResult:
        """
        Sync every dated record, in order.

        Records without a due date are skipped and counted nowhere.

        Raises:
            ValidationError: If the time zone is unknown (before any request)
        """
        resolve_time_zone(time_zone)

        backend = self.backend_factory(access_token)
        result = SyncResult()
        processed = 0

        for record in records:
            if record.due_at is None:
                logger.debug("Skipping assignment without due date", extra={"assignment_id": record.id})
                continue

            if processed and self.request_delay:
                await asyncio.sleep(self.request_delay)
            processed += 1

            payload = build_event_payload(record, time_zone)

            try:
                existing_id = await self.correlator.find_existing(access_token, record.id)
                if existing_id:
                    await backend.update_event(existing_id, payload)
                else:
                    await backend.create_event(payload)
            except APIError as e:
                result.failed_count += 1
                result.errors.append(f"{record.name}: {e}")
                logger.warning(
                    f"Failed to sync assignment: {e}",
                    extra={"assignment_id": record.id, "status_code": e.status_code},
                )
                continue

            result.success_count += 1

        logger.info(
            "Sync finished",
            extra={
                "success_count": result.success_count,
                "failed_count": result.failed_count,
            },
        )
        return result
