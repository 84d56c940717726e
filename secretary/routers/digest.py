"""
Digest Router - enrollment and delivery of the morning digest.

Endpoints:
==========
- POST /digest/signup                 → Enroll (or re-enroll) by email
- GET  /digest/settings?token=        → Current preferences for a link
- POST /digest/settings/enable?token= → Turn the digest back on
- POST /digest/settings/disable?token=→ Pause the digest
- GET  /digest/unsubscribe?token=     → One-click unsubscribe from the email
- POST /digest/run                    → Scheduler trigger (X-Cron-Secret)

Settings and unsubscribe links carry a signed token instead of a login;
see secretary.core.security.
"""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends

from secretary.deps import (
    get_credential_cache,
    get_digest_fetcher,
    get_email_transport,
    get_link_user,
    get_repository,
    require_cron_secret,
)
from secretary.environments.base import EmailTransport
from secretary.models.digest_user import DigestUser
from secretary.schemas.digest import (
    DigestRunOut,
    DigestSettingsOut,
    DigestSignup,
    DigestSignupOut,
)
from secretary.services.credential_cache import CredentialCache
from secretary.services.digest_fetcher import DigestFetcher
from secretary.services.digest_runner import DigestRunner
from secretary.services.digest_user_repository import DigestUserRepository
from secretary.services.welcome_email import send_welcome_email


logger = logging.getLogger("secretary.routers.digest")


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/digest", tags=["digest"])


# ---------------------------------------------------------------------------
# ENROLLMENT
# ---------------------------------------------------------------------------


@router.post("/signup", response_model=DigestSignupOut)
async def signup(
    body: DigestSignup,
    repository: DigestUserRepository = Depends(get_repository),
    transport: EmailTransport = Depends(get_email_transport),
):
    """
    Enroll a user in the morning digest.

    Signing up again with the same email replaces the stored refresh
    token and time zone and re-enables the digest. A welcome email is
    attempted afterwards; if it cannot be delivered the signup still
    succeeds.

    Returns:
        {"success": true, "user_id": "<uuid>"}
    """
    user = repository.upsert_by_email(
        email=body.email,
        google_refresh_token=body.google_refresh_token,
        timezone=body.resolved_timezone(),
    )

    await send_welcome_email(transport, user.email)

    return DigestSignupOut(user_id=user.id)


# ---------------------------------------------------------------------------
# SETTINGS LINKS
# ---------------------------------------------------------------------------


@router.get("/settings", response_model=DigestSettingsOut)
def read_settings(user: DigestUser = Depends(get_link_user)):
    return user


@router.post("/settings/enable", response_model=DigestSettingsOut)
def enable_digest(
    user: DigestUser = Depends(get_link_user),
    repository: DigestUserRepository = Depends(get_repository),
):
    logger.info("Digest enabled", extra={"user_id": str(user.id)})
    return repository.update(user, digest_enabled=True)


@router.post("/settings/disable", response_model=DigestSettingsOut)
def disable_digest(
    user: DigestUser = Depends(get_link_user),
    repository: DigestUserRepository = Depends(get_repository),
):
    logger.info("Digest disabled", extra={"user_id": str(user.id)})
    return repository.update(user, digest_enabled=False)


@router.get("/unsubscribe")
def unsubscribe(
    user: DigestUser = Depends(get_link_user),
    repository: DigestUserRepository = Depends(get_repository),
):
    """
    Stop the digest for the user named by the link.

    The record is kept; signing up again turns the digest back on.
    """
    repository.update(user, digest_enabled=False)
    logger.info("User unsubscribed", extra={"user_id": str(user.id)})
    return {
        "success": True,
        "message": "You've been unsubscribed from the daily digest.",
    }


# ---------------------------------------------------------------------------
# SCHEDULED RUN
# ---------------------------------------------------------------------------


@router.post(
    "/run",
    response_model=DigestRunOut,
    dependencies=[Depends(require_cron_secret)],
)
async def run_digest(
    repository: DigestUserRepository = Depends(get_repository),
    credential_cache: CredentialCache = Depends(get_credential_cache),
    fetcher: DigestFetcher = Depends(get_digest_fetcher),
    transport: EmailTransport = Depends(get_email_transport),
):
    """
    Send today's digest to every enabled user.

    Called once a morning by the external scheduler. Per-user failures
    are reported in the body; the response is 200 as long as the run
    itself completed.
    """
    runner = DigestRunner(
        credential_cache=credential_cache,
        fetcher=fetcher,
        transport=transport,
    )
    result = await runner.run_all(repository.list_enabled())
    return DigestRunOut(**asdict(result))
