"""
Digest Fetcher - pulls the rolling 7-day calendar window for a digest.

Unlike correlation lookups, a failed fetch is not softened: the FetchError
propagates and aborts that user's digest for this run.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from secretary.core.timezones import resolve_time_zone
from secretary.environments.google.calendar import CalendarEvent, GoogleCalendarClient
from secretary.services.event_correlator import BackendFactory


logger = logging.getLogger("secretary.services.digest_fetcher")


DIGEST_WINDOW = timedelta(days=7)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DigestFetcher:
    """Reads [now, now + 7 days) from the user's calendar."""

    def __init__(
        self,
        backend_factory: Optional[BackendFactory] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.backend_factory = backend_factory or GoogleCalendarClient
        self._clock = clock

    async def fetch_window(self, access_token: str, time_zone: str) -> List[CalendarEvent]:
        """
        Events in the digest window, ascending by start time.

        Raises:
            ValidationError: If the time zone is unknown
            FetchError: If the calendar provider request fails
        """
        resolve_time_zone(time_zone)

        now = self._clock()
        backend = self.backend_factory(access_token)
        events = await backend.list_events_in_window(
            time_min=now,
            time_max=now + DIGEST_WINDOW,
            time_zone=time_zone,
        )

        logger.info(f"Fetched {len(events)} events for digest window")
        return events
