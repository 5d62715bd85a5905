"""Security utilities for password hashing and verification.

This module provides password hashing using bcrypt through passlib, with the
work factor taken from ``settings.BCRYPT_ROUNDS``.
"""

import secrets

from passlib.context import CryptContext

from chatauth.core.config.settings import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

# Verified against when the email is unknown so that both login failure paths
# spend the same bcrypt time.
DUMMY_PASSWORD_HASH = pwd_context.hash(secrets.token_urlsafe(32))


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        str: Bcrypt-hashed password
    """
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    Args:
        password: Plain text password to verify
        hashed_password: Bcrypt hash to verify against

    Returns:
        bool: True if password matches hash. Malformed hashes never match.
    """
    try:
        return pwd_context.verify(password, hashed_password)
    except ValueError:
        return False


def hash_unusable_password() -> str:
    """Hash of a random secret nobody knows, for accounts created through OAuth."""
    return pwd_context.hash(secrets.token_urlsafe(32))
