"""
Credential Cache - keeps a user's Google access token fresh.

The hot path is free: while the cached access token is still valid
(now + buffer < expiry) it is returned as is, without any network call.
Otherwise the refresh token is exchanged once, the new access token and
its absolute expiry are written to the user's record, and the new token
is returned.

Access and refresh credentials are distinct types. A short-lived access
token stored where a refresh token belongs is rejected with
ValidationError before any exchange is attempted.

No retries happen here; the caller decides (the digest runner simply
records the failure and moves on to the next user).
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from secretary.core.config import settings
from secretary.environments.base import IdentityProvider, ValidationError
from secretary.environments.google.auth import GoogleAuthClient, ACCESS_TOKEN_PREFIX
from secretary.models.digest_user import DigestUser
from secretary.services.digest_user_repository import DigestUserRepository


logger = logging.getLogger("secretary.services.credential_cache")


@dataclass(frozen=True)
class RefreshCredential:
    """Long-lived exchange token. Never sent anywhere but the token endpoint."""
    token: str

    @classmethod
    def parse(cls, raw: Optional[str]) -> "RefreshCredential":
        """
        Raises:
            ValidationError: If `raw` is empty or is an access token
        """
        if not raw or not raw.strip():
            raise ValidationError("No refresh token on record")
        if raw.startswith(ACCESS_TOKEN_PREFIX):
            raise ValidationError(
                "Stored credential is a short-lived access token, not a refresh token"
            )
        return cls(token=raw)

    def __repr__(self) -> str:
        return "RefreshCredential(token=***)"


@dataclass(frozen=True)
class AccessCredential:
    """Short-lived bearer token with its absolute expiry."""
    token: str
    expires_at: datetime

    def is_valid(self, now: datetime, buffer: timedelta) -> bool:
        return now + buffer < self.expires_at

    def __repr__(self) -> str:
        return f"AccessCredential(token=***, expires_at={self.expires_at.isoformat()})"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialCache:
    """
    Per-user access token cache backed by the DigestUser record.

    Example:
        cache = CredentialCache(DigestUserRepository(db))
        token = await cache.get_valid_access_token(user)
    """

    def __init__(
        self,
        repository: DigestUserRepository,
        identity_provider: Optional[IdentityProvider] = None,
        buffer_seconds: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if buffer_seconds is None:
            buffer_seconds = settings.TOKEN_REFRESH_BUFFER_SECONDS
        if buffer_seconds < 60:
            raise ValueError("buffer_seconds must be at least 60")

        self.repository = repository
        self.identity_provider = identity_provider or GoogleAuthClient()
        self.buffer = timedelta(seconds=buffer_seconds)
        self._clock = clock

    @staticmethod
    def cached_credential(user: DigestUser) -> Optional[AccessCredential]:
        expires_at = user.cached_token_expiry()
        if not user.google_access_token or expires_at is None:
            return None
        return AccessCredential(token=user.google_access_token, expires_at=expires_at)

    async def get_valid_access_token(self, user: DigestUser) -> str:
        """
        Return a usable access token for `user`, refreshing if needed.

        Raises:
            ValidationError: No usable refresh credential on the record
            AuthError: The identity provider rejected the exchange
        """
        now = self._clock()

        cached = self.cached_credential(user)
        if cached is not None and cached.is_valid(now, self.buffer):
            return cached.token

        refresh = RefreshCredential.parse(user.google_refresh_token)

        logger.info("Refreshing access token", extra={"user_id": str(user.id)})
        tokens = await self.identity_provider.refresh_access_token(refresh.token)

        expires_at = tokens.expires_at or now
        fresh = AccessCredential(token=tokens.access_token, expires_at=expires_at)

        fields = {
            "google_access_token": fresh.token,
            "token_expires_at": fresh.expires_at,
        }
        if tokens.refresh_token and tokens.refresh_token != refresh.token:
            fields["google_refresh_token"] = tokens.refresh_token

        self.repository.update(user, **fields)

        return fresh.token
