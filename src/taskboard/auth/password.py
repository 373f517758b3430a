"""Password hashing and strength policy.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The work factor (TASKBOARD_BCRYPT_ROUNDS, default 12) takes ~100ms per
hash on modern hardware.

Hashes are never compared by equality; only verify_password() may
look at them.
"""

import bcrypt

from taskboard.config import settings
from taskboard.errors import InvalidInputError

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    """Hash a password with bcrypt.

    Learn: bcrypt includes a random salt automatically and produces
    hashes starting with "$2b$". Passwords are truncated to 72 bytes
    (bcrypt's limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash. Never raises on mismatch."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError):
        return False


def is_strong_password(password: str) -> bool:
    """Length >= 8 with at least one lowercase, uppercase, digit and symbol."""
    if len(password) < MIN_PASSWORD_LENGTH:
        return False
    return (
        any(c.islower() for c in password)
        and any(c.isupper() for c in password)
        and any(c.isdigit() for c in password)
        and any(not c.isalnum() for c in password)
    )


def validate_password_strength(password: str) -> str:
    """Return the password unchanged, or raise InvalidInputError."""
    if not isinstance(password, str) or not is_strong_password(password):
        raise InvalidInputError("Password too weak")
    return password
