"""
Base classes and interfaces for Environment integrations.

This module defines the abstract contracts that every external
collaborator (identity provider, calendar provider, email transport)
must implement, plus the exception taxonomy shared by all of them.

Design Pattern: Strategy
========================
- IdentityProvider: exchanges a refresh credential for an access credential
- CalendarBackend: the capability set sync and digest need from a calendar
- EmailTransport: delivers a plaintext message

SyncEngine, EventCorrelator and DigestFetcher only talk to these
interfaces, so an alternate calendar backend can be substituted without
touching them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from secretary.environments.google.calendar.schemas import (
        CalendarEvent,
        CalendarEventPayload,
    )


# ---------------------------------------------------------------------------
# CUSTOM EXCEPTIONS
# ---------------------------------------------------------------------------


class EnvironmentError(Exception):
    """Base exception for all environment-related errors."""
    pass


class AuthError(EnvironmentError):
    """
    Raised when the credential exchange fails.

    Fatal to the current operation for that user; the next run retries.
    """
    pass


class ValidationError(EnvironmentError):
    """Raised for malformed input, before any network call is made."""
    pass


class APIError(EnvironmentError):
    """Raised when an API call to the provider fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class FetchError(APIError):
    """Calendar read failed; aborts that user's digest only."""
    pass


class ProviderError(APIError):
    """Event create/update failed; recorded per record, batch continues."""
    pass


class EmailDeliveryError(APIError):
    """The email transport rejected a message."""
    pass


# ---------------------------------------------------------------------------
# DATA STRUCTURES
# ---------------------------------------------------------------------------


@dataclass
class OAuthTokens:
    """
    Standardized token data returned by an identity provider refresh.
    """
    access_token: str
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    scopes: Optional[List[str]] = None


@dataclass(frozen=True)
class EmailMessage:
    """A plaintext message handed to an EmailTransport."""
    from_address: str
    to: str
    subject: str
    text: str


# ---------------------------------------------------------------------------
# ABSTRACT BASE CLASSES
# ---------------------------------------------------------------------------


class IdentityProvider(ABC):
    """
    Abstract base class for OAuth identity providers.
    """

    # Unique identifier for this provider (e.g., "google")
    provider_name: str = ""

    @abstractmethod
    async def refresh_access_token(self, refresh_token: str) -> OAuthTokens:
        """
        Use a refresh token to get a new access token.

        Raises:
            AuthError: If the provider rejects the exchange
        """
        pass


class CalendarBackend(ABC):
    """
    Capability interface over a calendar provider.

    One instance is bound to one user's access token.
    """

    @abstractmethod
    async def find_by_external_id(self, key: str, value: str) -> Optional[str]:
        """
        Return the id of the first event whose private tag `key` equals
        `value`, or None when there is no such event.

        Raises:
            APIError: If the provider request fails
        """
        pass

    @abstractmethod
    async def create_event(self, payload: "CalendarEventPayload") -> "CalendarEvent":
        """
        Raises:
            ProviderError: If the provider rejects the event
        """
        pass

    @abstractmethod
    async def update_event(self, event_id: str, payload: "CalendarEventPayload") -> "CalendarEvent":
        """
        Replace an existing event with the payload.

        Raises:
            ProviderError: If the provider rejects the update
        """
        pass

    @abstractmethod
    async def list_events_in_window(
        self,
        time_min: datetime,
        time_max: datetime,
        time_zone: str,
    ) -> List["CalendarEvent"]:
        """
        List single-occurrence events in [time_min, time_max), ascending by
        start time.

        Raises:
            FetchError: If the provider request fails
        """
        pass


class EmailTransport(ABC):
    """Delivers plaintext email."""

    @abstractmethod
    async def send(self, message: EmailMessage) -> str:
        """
        Send one message and return the transport's message id.

        Raises:
            EmailDeliveryError: If the transport rejects the message
        """
        pass
