"""
Security utilities - signed link tokens for digest emails.

Every digest carries links (unsubscribe, settings) that must work without
a login. The link embeds a JWT that names the digest user and is signed
with SECRET_KEY, so a link for one user cannot be forged for another.

Usage:
    token = create_link_token(user.id)
    url = build_unsubscribe_url(user.id)

    user_id = decode_link_token(token)  # None if invalid or expired
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlencode
from uuid import UUID

from jose import JWTError, jwt

from secretary.core.config import settings


LINK_TOKEN_TYPE = "digest_link"


def create_link_token(user_id: UUID, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed token identifying a digest user.

    Args:
        user_id: The digest user's ID, stored in the "sub" claim
        expires_delta: Optional custom lifetime
                      (defaults to UNSUBSCRIBE_TOKEN_EXPIRE_DAYS)

    Returns:
        A signed JWT string
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta
        if expires_delta
        else timedelta(days=settings.UNSUBSCRIBE_TOKEN_EXPIRE_DAYS)
    )

    to_encode = {"sub": str(user_id), "type": LINK_TOKEN_TYPE, "exp": expire}

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_link_token(token: str) -> Optional[UUID]:
    """
    Validate a link token and extract the user ID.

    Returns:
        User ID if valid, None if invalid, expired, or of another type
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    if payload.get("type") != LINK_TOKEN_TYPE:
        return None

    user_id_str = payload.get("sub")
    if not user_id_str:
        return None

    try:
        return UUID(user_id_str)
    except ValueError:
        return None


def build_unsubscribe_url(user_id: UUID) -> str:
    """Absolute unsubscribe link placed in the digest footer."""
    query = urlencode({"token": create_link_token(user_id)})
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/digest/unsubscribe?{query}"
