"""Password hashing and bearer-token issuance/verification.

Two token families share one claim layout:

- user sessions, signed with ``JWT_SECRET`` and valid for seven days
- administrator sessions, signed with ``ADMIN_JWT_SECRET``, valid for 24 hours
  and carrying ``isAdmin: true``

Expiry is enforced by PyJWT during decoding. ``verify_token`` is a pure
check: every failure collapses to ``None`` so callers reject uniformly.
"""

import hmac
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt

from devit.core.config import settings
from devit.core.logging import get_logger

logger = get_logger(__name__)

ADMIN_IDENTITY_ID = "admin-1"
BEARER_PREFIX = "Bearer "
# bcrypt ignores everything past 72 bytes; truncate explicitly so newer
# releases that reject longer input behave the same for hash and check
BCRYPT_MAX_BYTES = 72


@dataclass(frozen=True)
class Identity:
    """Who a verified token says the caller is."""

    id: str
    username: str
    email: str | None = None
    is_admin: bool = False


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Stored password hash is malformed")
        return False


def _sign(claims: dict[str, Any], secret: str, ttl: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {**claims, "iat": now, "exp": now + ttl}
    return jwt.encode(payload, secret, algorithm=settings.jwt_algorithm)


def issue_user_token(user_id: str, username: str, email: str) -> str:
    """Sign a user-session token for login and signup."""
    return _sign(
        {"id": user_id, "username": username, "email": email},
        settings.jwt_secret,
        timedelta(hours=settings.user_token_ttl_hours),
    )


def issue_admin_token(username: str) -> str:
    """Sign an administrator token; only issued after check_admin_credentials."""
    return _sign(
        {"id": ADMIN_IDENTITY_ID, "username": username, "role": "admin", "isAdmin": True},
        settings.admin_jwt_secret,
        timedelta(hours=settings.admin_token_ttl_hours),
    )


def check_admin_credentials(username: str, password: str) -> bool:
    """Exact match against the configured administrator pair."""
    username_ok = hmac.compare_digest(username.encode("utf-8"), settings.admin_username.encode("utf-8"))
    password_ok = hmac.compare_digest(password.encode("utf-8"), settings.admin_password.encode("utf-8"))
    return username_ok and password_ok


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def verify_token(token: str | None, secret: str) -> Identity | None:
    """Decode and verify a signed token.

    Returns:
        The embedded Identity, or None for a missing, malformed, expired or
        badly signed token, or one lacking the ``id``/``username`` claims.
    """
    if not token:
        return None
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp"]},
        )
    except jwt.PyJWTError as e:
        logger.debug("Token verification failed", error_type=type(e).__name__)
        return None

    user_id = claims.get("id")
    username = claims.get("username")
    if not isinstance(user_id, str) or not isinstance(username, str):
        return None

    return Identity(
        id=user_id,
        username=username,
        email=claims.get("email"),
        is_admin=claims.get("isAdmin") is True,
    )
