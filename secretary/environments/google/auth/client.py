"""
Google OAuth Client - exchanges refresh tokens for access tokens.

The digest runs from the backend while the user is away, so the only
credential available is the long-lived refresh token captured at signup.
This client trades it for a short-lived access token at Google's token
endpoint.

References:
===========
- OAuth 2.0: https://developers.google.com/identity/protocols/oauth2
- Token endpoint: https://oauth2.googleapis.com/token
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import httpx

from secretary.core.config import settings
from secretary.environments.base import (
    IdentityProvider,
    OAuthTokens,
    AuthError,
)
from secretary.environments.google.auth.schemas import GoogleTokenResponse


logger = logging.getLogger("secretary.environments.google.auth")


class GoogleAuthClient(IdentityProvider):
    """
    Google OAuth 2.0 refresh-token client.

    Example Usage:
        client = GoogleAuthClient()
        tokens = await client.refresh_access_token(user.google_refresh_token)
        calendar = GoogleCalendarClient(access_token=tokens.access_token)
    """

    provider_name = "google"

    TOKEN_URL = "https://oauth2.googleapis.com/token"

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the Google OAuth client.

        Args:
            client_id: Google OAuth Client ID (defaults to settings)
            client_secret: Google OAuth Client Secret (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
        """
        self.client_id = client_id or settings.GOOGLE_CLIENT_ID
        self.client_secret = client_secret or settings.GOOGLE_CLIENT_SECRET
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS

        if not self.client_id or not self.client_secret:
            logger.warning(
                "Google OAuth not configured. Set GOOGLE_CLIENT_ID and "
                "GOOGLE_CLIENT_SECRET in environment variables."
            )

    # -------------------------------------------------------------------------
    # TOKEN REFRESH
    # -------------------------------------------------------------------------

    async def refresh_access_token(self, refresh_token: str) -> OAuthTokens:
        """
        Use refresh token to get a new access token.

        Args:
            refresh_token: The refresh token captured at signup

        Returns:
            OAuthTokens with the new access_token and its absolute expiry
            (refresh_token is the rotated one if Google sent it, else the
            one passed in)

        Raises:
            AuthError: On non-success status, a response without an
                access token, or a network failure. The message carries
                the status code and raw body.
        """
        refresh_data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }

        logger.info("Refreshing access token")

        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    self.TOKEN_URL,
                    data=refresh_data,
                    timeout=self.timeout,
                )
            except httpx.RequestError as e:
                logger.error(f"Network error during token refresh: {e}")
                raise AuthError(f"Token refresh failed (network): {e}")

        if response.status_code != 200:
            logger.error(f"Token refresh failed: {response.status_code}")
            raise AuthError(
                f"Token refresh failed ({response.status_code}): {response.text}"
            )

        token_response = GoogleTokenResponse(**response.json())

        if not token_response.access_token:
            logger.error("Token refresh response had no access token")
            raise AuthError(
                f"No access token in refresh response ({response.status_code}): {response.text}"
            )

        logger.info(
            "Successfully refreshed access token",
            extra={"expires_in": token_response.expires_in}
        )

        return OAuthTokens(
            access_token=token_response.access_token,
            token_type=token_response.token_type,
            refresh_token=token_response.refresh_token or refresh_token,
            expires_at=token_response.get_expires_at(datetime.now(timezone.utc)),
            scopes=token_response.get_scopes_list(),
        )
