"""
Google Calendar API Client - tagged assignment events and digest windows.

This client implements the CalendarBackend capability set against the
Google Calendar v3 REST API:

1. Find the event already created for an assignment (private tag query)
2. Create an event (POST)
3. Replace an event (PUT)
4. List single-occurrence events in a time window, ascending by start

API Reference:
==============
- Events API: https://developers.google.com/calendar/api/v3/reference/events
- Private properties: https://developers.google.com/calendar/api/guides/extended-properties

Usage Example:
==============
    client = GoogleCalendarClient(access_token="ya29.xxx")

    event_id = await client.find_by_external_id("canvasAssignmentId", "42")
    if event_id:
        await client.update_event(event_id, payload)
    else:
        await client.create_event(payload)
"""

import logging
from datetime import datetime
from typing import List, Optional

import httpx
from pydantic import BaseModel, ValidationError as SchemaError

from secretary.core.config import settings
from secretary.environments.base import (
    CalendarBackend,
    APIError,
    FetchError,
    ProviderError,
)
from secretary.environments.google.calendar.schemas import (
    CalendarEvent,
    CalendarEventPayload,
    CalendarEventsResponse,
)


logger = logging.getLogger("secretary.environments.google.calendar")


class GoogleCalendarClient(CalendarBackend):
    """
    Google Calendar API client bound to one user's access token.

    Requires the calendar.events scope. Every operation targets a single
    calendar ("primary" unless told otherwise).
    """

    BASE_URL = "https://www.googleapis.com/calendar/v3"

    def __init__(
        self,
        access_token: str,
        calendar_id: str = "primary",
        timeout: Optional[float] = None,
    ):
        """
        Initialize the Calendar client.

        Args:
            access_token: Valid Google OAuth access token with calendar scope
            calendar_id: Calendar identifier ("primary" for the user's main one)
            timeout: Request timeout in seconds (defaults to settings)
        """
        self.access_token = access_token
        self.calendar_id = calendar_id
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS

    # -------------------------------------------------------------------------
    # HTTP CLIENT MANAGEMENT
    # -------------------------------------------------------------------------

    def _get_headers(self) -> dict:
        """Get authorization headers for API requests."""
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        }

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Google's error.message when the body is the usual JSON envelope."""
        try:
            data = response.json()
        except ValueError:
            return response.text or str(response.status_code)
        if isinstance(data, dict) and isinstance(data.get("error"), dict):
            message = data["error"].get("message")
            if message:
                return message
        return response.text or str(response.status_code)

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json_body: Optional[dict] = None,
    ) -> dict:
        """
        Make an authenticated request to the Calendar API.

        Args:
            method: HTTP method (GET, POST, PUT)
            endpoint: API endpoint path (e.g., "/calendars/primary/events")
            params: Query parameters
            json_body: JSON body for writes

        Returns:
            Parsed JSON response

        Raises:
            APIError: If the request fails; `response` holds the raw body
        """
        url = f"{self.BASE_URL}{endpoint}"

        async with httpx.AsyncClient() as client:
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self._get_headers(),
                    params=params,
                    json=json_body,
                    timeout=self.timeout,
                )
            except httpx.RequestError as e:
                logger.error(f"Network error in Calendar API: {e}")
                raise APIError(f"Network error: {e}")

        if response.status_code == 401:
            logger.error("Calendar API: Unauthorized (token may be expired)")
        elif response.status_code == 403:
            logger.error("Calendar API: Forbidden (scope may be missing or rate limited)")

        if response.status_code not in (200, 201):
            logger.error(f"Calendar API error: {response.status_code} - {response.text}")
            raise APIError(
                self._error_message(response),
                status_code=response.status_code,
                response=response.text,
            )

        try:
            return response.json()
        except ValueError:
            logger.error(f"Calendar API returned a non-JSON body: {response.status_code}")
            raise APIError(
                f"Malformed response body ({response.status_code})",
                status_code=response.status_code,
                response=response.text,
            )

    @staticmethod
    def _parse(model: type[BaseModel], data) -> BaseModel:
        """
        Validate a response body against `model`.

        Raises:
            APIError: If the body does not fit the schema
        """
        if not isinstance(data, dict):
            raise APIError(f"Unexpected response body: {type(data).__name__}", response=data)
        try:
            return model(**data)
        except SchemaError as e:
            raise APIError(f"Unexpected response body: {e.error_count()} invalid fields", response=data) from e

    # -------------------------------------------------------------------------
    # CORRELATION
    # -------------------------------------------------------------------------

    async def find_by_external_id(self, key: str, value: str) -> Optional[str]:
        """
        Find the event carrying private tag `key=value`.

        Returns:
            The first matching event id, or None

        Raises:
            APIError: If the request fails
        """
        params = {
            "privateExtendedProperty": f"{key}={value}",
            "maxResults": 1,
        }

        response_data = await self._make_request(
            method="GET",
            endpoint=f"/calendars/{self.calendar_id}/events",
            params=params,
        )

        events_response = self._parse(CalendarEventsResponse, response_data)
        if not events_response.items:
            return None
        return events_response.items[0].id

    # -------------------------------------------------------------------------
    # EVENT WRITES
    # -------------------------------------------------------------------------

    async def create_event(self, payload: CalendarEventPayload) -> CalendarEvent:
        """
        Create a timed event from the payload.

        Raises:
            ProviderError: If event creation fails
        """
        logger.info(
            "Creating calendar event",
            extra={"summary": payload.summary, "calendar_id": self.calendar_id},
        )

        try:
            response_data = await self._make_request(
                method="POST",
                endpoint=f"/calendars/{self.calendar_id}/events",
                json_body=payload.to_api_body(),
            )
            created = self._parse(CalendarEvent, response_data)
        except APIError as e:
            raise ProviderError(
                f"Calendar API error: {e}",
                status_code=e.status_code,
                response=e.response,
            ) from e

        logger.info(f"Created event: {created.id}")
        return created

    async def update_event(self, event_id: str, payload: CalendarEventPayload) -> CalendarEvent:
        """
        Replace an existing event with the payload (PUT, full resource).

        Raises:
            ProviderError: If the update fails
        """
        logger.info(
            "Updating calendar event",
            extra={"event_id": event_id, "calendar_id": self.calendar_id},
        )

        try:
            response_data = await self._make_request(
                method="PUT",
                endpoint=f"/calendars/{self.calendar_id}/events/{event_id}",
                json_body=payload.to_api_body(),
            )
            updated = self._parse(CalendarEvent, response_data)
        except APIError as e:
            raise ProviderError(
                f"Calendar API error: {e}",
                status_code=e.status_code,
                response=e.response,
            ) from e

        logger.info(f"Updated event: {event_id}")
        return updated

    # -------------------------------------------------------------------------
    # WINDOW LISTING
    # -------------------------------------------------------------------------

    async def list_events_in_window(
        self,
        time_min: datetime,
        time_max: datetime,
        time_zone: str,
    ) -> List[CalendarEvent]:
        """
        List events between time_min and time_max.

        Recurring events are expanded into single occurrences and the
        result is ordered by start time. Follows nextPageToken until the
        window is exhausted.

        Raises:
            FetchError: If any page request fails (status and raw body in
                the message)
        """
        params = {
            "timeMin": time_min.isoformat(),
            "timeMax": time_max.isoformat(),
            "singleEvents": "true",
            "orderBy": "startTime",
            "timeZone": time_zone,
            "maxResults": 250,
        }

        logger.info(
            "Fetching calendar window",
            extra={
                "calendar_id": self.calendar_id,
                "time_min": params["timeMin"],
                "time_max": params["timeMax"],
            },
        )

        events: List[CalendarEvent] = []
        while True:
            try:
                response_data = await self._make_request(
                    method="GET",
                    endpoint=f"/calendars/{self.calendar_id}/events",
                    params=params,
                )
                events_response = self._parse(CalendarEventsResponse, response_data)
            except APIError as e:
                raise FetchError(
                    f"Calendar fetch failed ({e.status_code}): {e.response}",
                    status_code=e.status_code,
                    response=e.response,
                ) from e

            events.extend(events_response.items)

            if not events_response.next_page_token:
                break
            params = {**params, "pageToken": events_response.next_page_token}

        logger.info(f"Fetched {len(events)} calendar events")
        return events
