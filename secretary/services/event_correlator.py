"""
Event Correlator - maps an assignment to the calendar event made for it.

Lookup is by the private canvasAssignmentId tag set at creation. Any
provider failure is read as "not found": a broken lookup degrades to
creating a new event instead of aborting the sync.
"""

import logging
from typing import Callable, Optional

from secretary.environments.base import APIError, CalendarBackend
from secretary.environments.google.calendar import GoogleCalendarClient, ASSIGNMENT_ID_KEY


logger = logging.getLogger("secretary.services.event_correlator")


BackendFactory = Callable[[str], CalendarBackend]


class EventCorrelator:
    """Finds existing events by external assignment id."""

    def __init__(self, backend_factory: Optional[BackendFactory] = None):
        self.backend_factory = backend_factory or GoogleCalendarClient

    async def find_existing(self, access_token: str, assignment_id: int) -> Optional[str]:
        """
        Returns:
            The calendar event id for this assignment, or None when there is
            none or the lookup failed
        """
        backend = self.backend_factory(access_token)
        try:
            return await backend.find_by_external_id(ASSIGNMENT_ID_KEY, str(assignment_id))
        except APIError as e:
            logger.warning(
                f"Correlation lookup failed, treating as not found: {e}",
                extra={"assignment_id": assignment_id, "status_code": e.status_code},
            )
            return None
