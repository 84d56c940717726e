"""
Digest Runner - sends the morning digest to every enabled user.

Per user, strictly in sequence:
    credential -> fetch window -> bucket -> render -> send

Users are processed one after another. Whatever goes wrong for one user
(refresh rejected, calendar unreachable, email bounced) is recorded as
"<email>: <message>" and the run moves on; one bad account never costs
anyone else their digest.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, List
from uuid import UUID

from secretary.core.config import settings
from secretary.core.security import build_unsubscribe_url
from secretary.environments.base import EmailMessage, EmailTransport
from secretary.models.digest_user import DigestUser
from secretary.services import digest_bucketer, digest_renderer
from secretary.services.credential_cache import CredentialCache
from secretary.services.digest_fetcher import DigestFetcher


logger = logging.getLogger("secretary.services.digest_runner")


@dataclass
class DigestRunResult:
    """Aggregate outcome of one scheduled run."""
    processed: int = 0
    failed: int = 0
    total: int = 0
    errors: List[str] = field(default_factory=list)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DigestRunner:
    """
    Orchestrates one digest run over a list of users.

    Example:
        runner = DigestRunner(
            credential_cache=CredentialCache(repository),
            fetcher=DigestFetcher(),
            transport=ResendEmailTransport(),
        )
        result = await runner.run_all(repository.list_enabled())
    """

    def __init__(
        self,
        credential_cache: CredentialCache,
        fetcher: DigestFetcher,
        transport: EmailTransport,
        unsubscribe_url_builder: Callable[[UUID], str] = build_unsubscribe_url,
        from_address: str | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.credential_cache = credential_cache
        self.fetcher = fetcher
        self.transport = transport
        self.unsubscribe_url_builder = unsubscribe_url_builder
        self.from_address = from_address or settings.DIGEST_FROM_ADDRESS
        self._clock = clock

    async def send_digest(self, user: DigestUser) -> None:
        """
        Run the whole pipeline for one user.

        Raises:
            Whatever a step raises; run_all records it.
        """
        access_token = await self.credential_cache.get_valid_access_token(user)
        events = await self.fetcher.fetch_window(access_token, user.timezone)

        now = self._clock()
        buckets = digest_bucketer.bucket(events, user.timezone, now=now)

        body = digest_renderer.render(
            buckets.today,
            buckets.this_week,
            user.timezone,
            self.unsubscribe_url_builder(user.id),
        )

        await self.transport.send(EmailMessage(
            from_address=self.from_address,
            to=user.email,
            subject=digest_renderer.subject(user.timezone, now=now),
            text=body,
        ))

        logger.info(
            f"Digest sent: {len(buckets.today)} today, {len(buckets.this_week)} this week",
            extra={"user_id": str(user.id)},
        )

    async def run_all(self, users: Iterable[DigestUser]) -> DigestRunResult:
        """Send a digest to each user; failures are counted, never raised."""
        users = list(users)
        result = DigestRunResult(total=len(users))

        logger.info(f"Starting digest run for {result.total} users")

        for user in users:
            try:
                await self.send_digest(user)
            except Exception as e:
                result.failed += 1
                result.errors.append(f"{user.email}: {e}")
                logger.error(
                    f"Digest failed for user: {e}",
                    extra={"user_id": str(user.id)},
                )
                continue

            result.processed += 1

        logger.info(
            "Digest run finished",
            extra={"processed": result.processed, "failed": result.failed},
        )
        return result
