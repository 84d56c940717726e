"""
Dependencies module - reusable FastAPI dependencies for route handlers.

- get_google_access_token: bearer Google access token for /sync calls
- require_cron_secret: guards the scheduler trigger
- get_link_user: digest user named by a signed settings/unsubscribe link
- get_canvas_client: Canvas client for the X-Canvas-Token header
- get_repository / get_credential_cache: per-request service wiring
"""

import hmac
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Query, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from secretary.core.config import settings
from secretary.core.security import decode_link_token
from secretary.db.session import get_db
from secretary.environments.base import EmailTransport, ValidationError
from secretary.environments.canvas import CanvasClient
from secretary.environments.resend import ResendEmailTransport
from secretary.models.digest_user import DigestUser
from secretary.services.credential_cache import CredentialCache
from secretary.services.digest_fetcher import DigestFetcher
from secretary.services.digest_user_repository import DigestUserRepository
from secretary.services.sync_engine import SyncEngine

# ---------------------------------------------------------------------------
# SECURITY SCHEME
# ---------------------------------------------------------------------------
# HTTPBearer: Extracts tokens from the "Authorization: Bearer <token>" header
# - Here the bearer is the caller's Google access token, passed through to
#   the Calendar API untouched
security = HTTPBearer()


def get_google_access_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    """
    Google access token supplied by the browser extension.

    Raises:
        401 Unauthorized: If the bearer value is empty
    """
    token = credentials.credentials
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Google access token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


def require_cron_secret(x_cron_secret: str | None = Header(None)) -> None:
    """
    Only the external scheduler may trigger a digest run.

    Raises:
        503 Service Unavailable: If CRON_SECRET is not configured
        403 Forbidden: If the header is missing or wrong
    """
    if not settings.CRON_SECRET:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Digest runs are not configured. Please set CRON_SECRET.",
        )

    # compare_digest: constant-time comparison of the shared secret
    if not x_cron_secret or not hmac.compare_digest(x_cron_secret, settings.CRON_SECRET):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid cron secret",
        )


def get_repository(db: Session = Depends(get_db)) -> DigestUserRepository:
    return DigestUserRepository(db)


def get_credential_cache(
    repository: DigestUserRepository = Depends(get_repository),
) -> CredentialCache:
    return CredentialCache(repository)


def get_email_transport() -> EmailTransport:
    return ResendEmailTransport()


def get_link_user(
    token: str = Query(..., description="Signed link token from a digest email"),
    repository: DigestUserRepository = Depends(get_repository),
) -> DigestUser:
    """
    Resolve the digest user named by a link token.

    Raises:
        401 Unauthorized: If the token is invalid or expired
        404 Not Found: If the user no longer exists
    """
    user_id: UUID | None = decode_link_token(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired link",
        )

    user = repository.get(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


# ---------------------------------------------------------------------------
# SERVICE WIRING
# ---------------------------------------------------------------------------
# Each one is replaceable through app.dependency_overrides.


def get_sync_engine() -> SyncEngine:
    return SyncEngine()


def get_digest_fetcher() -> DigestFetcher:
    return DigestFetcher()


def get_canvas_client(
    x_canvas_token: str = Header(..., description="Canvas API access token"),
) -> CanvasClient:
    """
    Raises:
        503 Service Unavailable: If CANVAS_BASE_URL is not configured
    """
    try:
        return CanvasClient(api_token=x_canvas_token)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )
