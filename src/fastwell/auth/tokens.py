"""Signed session tokens."""

from datetime import datetime, timedelta
from uuid import uuid4

import jwt

from ..exceptions import AuthenticationError
from ..models.timestamps import utc_now

ALGORITHM = "HS256"


def issue_token(
    user_id: str,
    secret_key: str,
    ttl_hours: int = 24,
    now: datetime | None = None,
) -> tuple[str, datetime]:
    """Create a signed token for a user.

    Returns:
        The encoded token and its expiry instant
    """
    issued_at = now or utc_now()
    expires_at = issued_at + timedelta(hours=ttl_hours)
    payload = {
        "sub": user_id,
        "jti": uuid4().hex,
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(payload, secret_key, algorithm=ALGORITHM), expires_at


def decode_token(token: str, secret_key: str) -> dict:
    """Verify a token and return its claims."""
    try:
        claims = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Session expired, sign in again")
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid authentication credentials")

    if not claims.get("sub") or not claims.get("jti"):
        raise AuthenticationError("Invalid authentication credentials")
    return claims
