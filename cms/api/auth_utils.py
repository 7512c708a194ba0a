"""
Bearer tokens.

The CMS does not log anyone in; tokens come from the identity provider (or
`cms seed-user`) and carry the user id as `sub`. Verification yields that id
and nothing else, since role and name are always read fresh from the users
table.
"""

import logging
import os
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from uuid import UUID

from jose import jwt

logger = logging.getLogger(__name__)

SECRET_ENV = "CMS_SECRET_KEY"
DEV_SECRET = "dev-secret-unsafe"
ALGORITHM = "HS256"
ACCESS_TOKEN_TTL = timedelta(hours=24)

_DECODE_OPTIONS = {"require_exp": True, "require_sub": True}


@lru_cache(maxsize=1)
def _secret_key() -> str:
    secret = os.environ.get(SECRET_ENV)
    if not secret:
        logger.warning("%s is not set; using the development secret", SECRET_ENV)
        return DEV_SECRET
    return secret


def create_access_token(
    user_id: UUID,
    expires_delta: timedelta = ACCESS_TOKEN_TTL,
    now_utc: datetime | None = None,
    secret: str | None = None,
) -> str:
    """
    Mint a token for `user_id`.

    Args:
        user_id: Becomes the `sub` claim
        expires_delta: Lifetime; 24 hours unless given
        now_utc: Issue time (for tests). Defaults to datetime.now(UTC).
        secret: Signing key. Defaults to $CMS_SECRET_KEY.
    """
    issued = now_utc if now_utc is not None else datetime.now(UTC)
    claims = {"sub": str(user_id), "iat": issued, "exp": issued + expires_delta}
    encoded: str = jwt.encode(claims, secret or _secret_key(), algorithm=ALGORITHM)
    return encoded


def read_subject(token: str, secret: str | None = None) -> UUID | None:
    """User id of a valid, unexpired token, or None."""
    try:
        payload = jwt.decode(
            token, secret or _secret_key(), algorithms=[ALGORITHM], options=_DECODE_OPTIONS
        )
    except jwt.JWTError:
        return None

    sub = payload.get("sub")
    if not isinstance(sub, str):
        return None
    try:
        return UUID(sub)
    except ValueError:
        return None
