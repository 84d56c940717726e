"""
Digest User Repository - keyed store for DigestUser records.

A thin layer over a SQLAlchemy session with the operations the digest
pipeline and the signup/settings endpoints need:

- list_enabled():       every user with digest_enabled=True
- get(user_id):         read by primary key
- get_by_email(email):  read by unique email
- upsert_by_email(...): create on first signup, refresh credentials after
- update(user, **kw):   partial update by key, always committed

Records are never deleted here; unsubscribing is update(digest_enabled=False).
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from secretary.models.digest_user import DigestUser


logger = logging.getLogger("secretary.services.digest_user_repository")


class DigestUserRepository:
    """Read/write access to the digest_users table."""

    def __init__(self, db: Session):
        self.db = db

    def _commit(self) -> None:
        """
        Commit, or roll back and re-raise.

        The session is shared across a whole digest run; a failed commit
        must not leave it unusable for the next user.
        """
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.error("Commit failed, session rolled back")
            raise

    def list_enabled(self) -> List[DigestUser]:
        stmt = (
            select(DigestUser)
            .where(DigestUser.digest_enabled.is_(True))
            .order_by(DigestUser.created_at)
        )
        return list(self.db.scalars(stmt))

    def get(self, user_id: UUID) -> Optional[DigestUser]:
        return self.db.get(DigestUser, user_id)

    def get_by_email(self, email: str) -> Optional[DigestUser]:
        stmt = select(DigestUser).where(DigestUser.email == email)
        return self.db.scalars(stmt).first()

    def upsert_by_email(
        self,
        email: str,
        google_refresh_token: str,
        timezone: str,
    ) -> DigestUser:
        """
        Create the user or, when the email is already enrolled, replace its
        refresh token and time zone and re-enable the digest.

        The cached access token is cleared on re-signup: it belonged to the
        previous grant.
        """
        user = self.get_by_email(email)

        if user is None:
            user = DigestUser(
                email=email,
                google_refresh_token=google_refresh_token,
                timezone=timezone,
                digest_enabled=True,
            )
            self.db.add(user)
            logger.info("Enrolled new digest user", extra={"email": email})
        else:
            user.google_refresh_token = google_refresh_token
            user.google_access_token = None
            user.token_expires_at = None
            user.timezone = timezone
            user.digest_enabled = True
            logger.info("Re-enrolled digest user", extra={"email": email})

        self._commit()
        self.db.refresh(user)
        return user

    def update(self, user: DigestUser, **fields) -> DigestUser:
        """
        Set the given columns on `user` and commit.

        Raises:
            AttributeError: If a field is not a DigestUser column
        """
        for name, value in fields.items():
            if not hasattr(DigestUser, name):
                raise AttributeError(f"DigestUser has no field '{name}'")
            setattr(user, name, value)

        self._commit()
        self.db.refresh(user)
        return user
