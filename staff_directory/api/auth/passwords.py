"""
Password Hashing

bcrypt hashing and verification for identity credentials and staff PINs.
"""

from functools import lru_cache
from typing import List, Optional

import bcrypt

from staff_directory.api.config import settings


BCRYPT_MAX_BYTES = 72
_SPECIAL_CHARACTERS = set('!@#$%^&*(),.?":{}|<>')


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """
    Hash a secret with a fresh salt.

    Args:
        password: Plain text secret
        rounds: bcrypt cost factor (defaults to settings.BCRYPT_ROUNDS)

    Returns:
        bcrypt hash string
    """
    salt = bcrypt.gensalt(rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a secret against a stored hash.

    bcrypt's comparison runs in constant time. Malformed hashes and
    over-long secrets fail rather than raise.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        return False


@lru_cache()
def dummy_hash() -> str:
    """Hash checked against when the username is unknown, to even out timing."""
    return hash_password("staff-directory-unknown-user")


def validate_password_strength(password: str) -> List[str]:
    """
    Validate password strength.

    Returns:
        List of problems, empty if the password is acceptable
    """
    errors: List[str] = []

    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")

    if len(password.encode()) > BCRYPT_MAX_BYTES:
        errors.append(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")

    if not any(c.isupper() for c in password):
        errors.append("Password must contain at least one uppercase letter")

    if not any(c.islower() for c in password):
        errors.append("Password must contain at least one lowercase letter")

    if not any(c.isdigit() for c in password):
        errors.append("Password must contain at least one number")

    if not any(c in _SPECIAL_CHARACTERS for c in password):
        errors.append("Password must contain at least one special character")

    return errors
