"""
JWT Service — access token generation and verification.

Access token: 7 days (configurable via JWT_ACCESS_EXPIRES)
Algorithm:    HS256

Token payload:
{
    "sub": "<user_id>",
    "type": "access",
    "iat": <issued_at>,
    "exp": <expires_at>,
    "jti": <unique_id>
}
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app

from gcg_hub.core.exceptions import TokenExpiredError, TokenInvalidError


# ─── Defaults ────────────────────────────────────────────────
DEFAULT_ACCESS_EXPIRES = 7 * 24 * 3600   # 7 days
ALGORITHM = "HS256"


def _get_secret():
    """Get the JWT secret key from app config."""
    return current_app.config.get("JWT_SECRET_KEY") or current_app.config["SECRET_KEY"]


def _get_access_expires():
    return current_app.config.get("JWT_ACCESS_EXPIRES", DEFAULT_ACCESS_EXPIRES)


# ═══════════════════════════════════════════════════════════════
# Token Generation
# ═══════════════════════════════════════════════════════════════
def generate_access_token(user_id: int) -> str:
    """Generate a signed, time-limited access token for ``user_id``."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "type": "access",
        "iat": now,
        "exp": now + timedelta(seconds=_get_access_expires()),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, _get_secret(), algorithm=ALGORITHM)


def token_response(token: str) -> dict:
    """Standard token envelope returned by login."""
    return {
        "token": token,
        "token_type": "Bearer",
        "expires_in": _get_access_expires(),
    }


# ═══════════════════════════════════════════════════════════════
# Token Verification
# ═══════════════════════════════════════════════════════════════
def decode_access_token(token: str) -> int:
    """
    Decode and verify an access token, returning the user id.

    Raises TokenExpiredError / TokenInvalidError instead of PyJWT exceptions
    so callers only deal with the platform taxonomy.
    """
    try:
        payload = jwt.decode(token, _get_secret(), algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError() from None
    except jwt.InvalidTokenError:
        raise TokenInvalidError() from None

    if payload.get("type") != "access":
        raise TokenInvalidError()
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise TokenInvalidError() from None
