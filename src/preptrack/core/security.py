"""Secret hashing and random code generation.

Passwords and pattern-lock secrets are hashed with bcrypt. Session tokens,
access codes, temporary passwords and premium codes come from `secrets`.
"""

from __future__ import annotations

import secrets
import string

import bcrypt

from preptrack.config.app_config import load_app_config

# bcrypt only considers the first 72 bytes of input
BCRYPT_MAX_BYTES = 72

PREMIUM_CODE_LENGTH = 8
ACCESS_CODE_LENGTH = 6
TEMP_PASSWORD_LENGTH = 10

_UPPER_ALNUM = string.ascii_uppercase + string.digits
_TEMP_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def hash_secret(secret: str) -> str:
    """Hash a password or pattern string with bcrypt."""
    rounds = load_app_config().auth.bcrypt_rounds
    hashed = bcrypt.hashpw(
        secret.encode("utf-8")[:BCRYPT_MAX_BYTES], bcrypt.gensalt(rounds=rounds)
    )
    return hashed.decode("utf-8")


def verify_secret(secret: str, hashed: str | None) -> bool:
    """Check a plain secret against a stored bcrypt hash."""
    if not hashed:
        return False
    return bcrypt.checkpw(
        secret.encode("utf-8")[:BCRYPT_MAX_BYTES], hashed.encode("utf-8")
    )


def generate_token() -> str:
    """Opaque bearer token for an authenticated session."""
    return secrets.token_urlsafe(32)


def generate_access_code() -> str:
    """Six-digit code an admin uses to upgrade a demo account."""
    return "".join(secrets.choice(string.digits) for _ in range(ACCESS_CODE_LENGTH))


def generate_temp_password() -> str:
    """Temporary password for accounts created from the admin console."""
    return "".join(
        secrets.choice(_TEMP_PASSWORD_ALPHABET) for _ in range(TEMP_PASSWORD_LENGTH)
    )


def generate_premium_code() -> str:
    """Eight-character uppercase alphanumeric redemption code."""
    return "".join(secrets.choice(_UPPER_ALNUM) for _ in range(PREMIUM_CODE_LENGTH))
