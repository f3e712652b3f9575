"""
Crypto utilities — bcrypt password hashing and password generation.

bcrypt.checkpw compares in constant time; ``verify_password`` is also run
against ``DUMMY_HASH`` when a login names an unknown user so the response
time does not reveal whether the account exists.
"""

import secrets

import bcrypt

DEFAULT_ROUNDS = 12

# Hash of a random throwaway secret, used only to equalise login timing.
DUMMY_HASH = bcrypt.hashpw(secrets.token_bytes(16), bcrypt.gensalt(rounds=4)).decode("utf-8")

_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_LOWER = "abcdefghijklmnopqrstuvwxyz"
_DIGITS = "0123456789"
_SPECIAL = "!@#$%^&*"


def hash_password(plain_password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a plain-text password with bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(plain_password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    """Verify a plain-text password against its bcrypt hash."""
    if not password_hash or plain_password is None:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            password_hash.encode("utf-8"),
        )
    except ValueError:
        # Malformed stored hash
        return False


def generate_password(length: int = 12) -> str:
    """Random password with at least one upper, lower, digit and special char."""
    charset = _UPPER + _LOWER + _DIGITS + _SPECIAL
    chars = [
        secrets.choice(_UPPER),
        secrets.choice(_LOWER),
        secrets.choice(_DIGITS),
        secrets.choice(_SPECIAL),
    ]
    chars += [secrets.choice(charset) for _ in range(max(length, 4) - 4)]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)
