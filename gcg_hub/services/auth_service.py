"""
Auth Service — credential checks, token verification, password policy.

Rules:
  - Login failures read identically whether the username or the password
    was wrong.
  - ``verify`` re-reads the user on every call so deleted accounts and
    changed org-unit attributes take effect immediately.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from flask import current_app
from sqlalchemy import or_

from gcg_hub.core.exceptions import (
    InvalidCredentialsError,
    NotFoundError,
    UserNotFoundError,
    ValidationError,
    WrongCurrentPasswordError,
)
from gcg_hub.models import db
from gcg_hub.models.auth import ROLE_ADMIN, User
from gcg_hub.services.jwt_service import decode_access_token, generate_access_token
from gcg_hub.utils.crypto import DUMMY_HASH, hash_password, verify_password
from gcg_hub.utils.helpers import commit_or_raise

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
SPECIAL_CHARS = '!@#$%^&*(),.?":{}|<>'
_SPECIAL_RE = re.compile("[" + re.escape(SPECIAL_CHARS) + "]")


@dataclass(frozen=True)
class Identity:
    """Authenticated caller projection used for authorization decisions."""

    id: int
    username: str
    email: str
    name: str
    role: str
    directorate: str | None = None
    sub_directorate: str | None = None
    division: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @classmethod
    def from_user(cls, user: User) -> "Identity":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            name=user.name,
            role=user.role,
            directorate=user.directorate,
            sub_directorate=user.sub_directorate,
            division=user.division,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "directorate": self.directorate,
            "sub_directorate": self.sub_directorate,
            "division": self.division,
        }


# ═══════════════════════════════════════════════════════════════
# Password policy
# ═══════════════════════════════════════════════════════════════
def check_password_strength(password: str) -> dict:
    """Evaluate ``password`` against the policy.

    Returns ``{"valid": bool, "strength": int, "message": str | None}`` where
    strength counts the character classes present (upper, lower, digit,
    special).
    """
    password = password or ""
    strength = sum((
        bool(re.search(r"[A-Z]", password)),
        bool(re.search(r"[a-z]", password)),
        bool(re.search(r"\d", password)),
        bool(_SPECIAL_RE.search(password)),
    ))
    if len(password) < MIN_PASSWORD_LENGTH:
        return {
            "valid": False,
            "strength": strength,
            "message": f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
        }
    if strength < 2:
        return {
            "valid": False,
            "strength": strength,
            "message": "Password is too weak. Include uppercase, lowercase, numbers, and special characters",
        }
    return {"valid": True, "strength": strength, "message": None}


def enforce_password_policy(password: str) -> None:
    result = check_password_strength(password)
    if not result["valid"]:
        raise ValidationError(result["message"], details={"password": "weak"})


def hash_for_storage(password: str) -> str:
    return hash_password(password, rounds=current_app.config.get("BCRYPT_ROUNDS", 12))


# ═══════════════════════════════════════════════════════════════
# Authentication
# ═══════════════════════════════════════════════════════════════
def authenticate(username_or_email: str, password: str) -> tuple[str, Identity]:
    """Check credentials and issue an access token.

    Raises:
        ValidationError: username or password missing.
        InvalidCredentialsError: unknown user or wrong password.
    """
    login = (username_or_email or "").strip()
    if not login or not password:
        raise ValidationError("Username and password are required")

    user = User.query.filter(or_(User.username == login, User.email == login)).first()
    if user is None:
        verify_password(password, DUMMY_HASH)
        logger.info("Login failed: unknown account")
        raise InvalidCredentialsError()
    if not verify_password(password, user.password_hash):
        logger.info("Login failed: bad password user_id=%s", user.id)
        raise InvalidCredentialsError()

    logger.info("Login succeeded user_id=%s", user.id)
    return generate_access_token(user.id), Identity.from_user(user)


def verify(token: str) -> Identity:
    """Resolve a bearer token to the caller's current identity.

    Raises:
        TokenExpiredError / TokenInvalidError: bad token.
        UserNotFoundError: the token's user has been deleted.
    """
    user_id = decode_access_token(token)
    user = db.session.get(User, user_id)
    if user is None:
        raise UserNotFoundError()
    return Identity.from_user(user)


def change_password(identity: Identity, current_password: str, new_password: str) -> None:
    """Replace the caller's password after re-checking the current one."""
    if not current_password or not new_password:
        raise ValidationError("Current password and new password are required")

    user = db.session.get(User, identity.id)
    if user is None:
        raise NotFoundError("User", identity.id)
    if not verify_password(current_password, user.password_hash):
        raise WrongCurrentPasswordError()
    enforce_password_policy(new_password)

    user.password_hash = hash_for_storage(new_password)
    commit_or_raise("User")
    logger.info("Password changed user_id=%s", user.id)
