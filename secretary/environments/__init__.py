"""
Environments Module - External Service Integrations

Architecture Overview:
======================
environments/
├── __init__.py           # Module exports
├── base.py               # Interfaces and exception taxonomy
├── google/               # Google integration
│   ├── auth/             # OAuth refresh-token exchange
│   └── calendar/         # Calendar API client (sync + digest window)
├── canvas/               # Canvas LMS assignment source
└── resend/               # Resend email transport

Design Principles:
==================
1. Each external service has its own module
2. Services depend only on the interfaces in base.py
3. Every outbound call uses the configured HTTP timeout
"""

from secretary.environments.base import (
    CalendarBackend,
    EmailTransport,
    IdentityProvider,
    EmailMessage,
    OAuthTokens,
    EnvironmentError,
    AuthError,
    ValidationError,
    APIError,
    FetchError,
    ProviderError,
    EmailDeliveryError,
)

__all__ = [
    "CalendarBackend",
    "EmailTransport",
    "IdentityProvider",
    "EmailMessage",
    "OAuthTokens",
    "EnvironmentError",
    "AuthError",
    "ValidationError",
    "APIError",
    "FetchError",
    "ProviderError",
    "EmailDeliveryError",
]
