"""Sign-in, session tokens and quick unlock.

A user signs in with email plus either a password or a pattern-lock string
("1-5-9"). A successful sign-in issues an opaque bearer token stored in
the auth_tokens table. The four-digit PIN only unlocks an existing session.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

import structlog

from preptrack.config.app_config import load_app_config
from preptrack.core import pattern_lock
from preptrack.core.errors import AuthenticationError, ConflictError
from preptrack.core.security import generate_token, hash_secret, verify_secret
from preptrack.core.users import UserProfile, require_user, row_to_profile
from preptrack.db.database import get_db
from preptrack.utils import clock

logger = structlog.get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password."


@dataclass
class Session:
    """An issued bearer token."""

    token: str
    uid: str
    expires_at: str


def login(email: str, secret: str) -> tuple[Session, UserProfile]:
    """Authenticate with a password or a pattern string.

    Args:
        email: Account email
        secret: Password, or a pattern encoded as "1-5-9"

    Returns:
        Tuple of (new session, profile)

    Raises:
        AuthenticationError: Unknown email, wrong secret or deleted account
    """
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE lower(email) = lower(?)", ((email or "").strip(),)
        ).fetchone()

    if row is None:
        raise AuthenticationError(INVALID_CREDENTIALS)

    matched = verify_secret(secret, row["password_hash"]) or verify_secret(
        secret, row["pattern_hash"]
    )
    if not matched:
        logger.info("auth.login_failed", uid=row["uid"])
        raise AuthenticationError(INVALID_CREDENTIALS)

    profile = row_to_profile(row)
    if profile.is_deleted:
        raise AuthenticationError("This account has been deleted by an administrator.")

    session = create_session(profile.uid)
    logger.info("auth.login", uid=profile.uid)
    return session, profile


def create_session(uid: str) -> Session:
    """Issue a bearer token for a user."""
    ttl = load_app_config().auth.token_ttl_hours
    now = clock.utc_now()
    session = Session(
        token=generate_token(),
        uid=uid,
        expires_at=(now + timedelta(hours=ttl)).isoformat(),
    )
    with get_db() as conn:
        conn.execute(
            "INSERT INTO auth_tokens (token, uid, created_at, expires_at) VALUES (?, ?, ?, ?)",
            (session.token, uid, now.isoformat(), session.expires_at),
        )
    return session


def resolve_token(token: str) -> UserProfile | None:
    """Profile owning a live token, or None if unknown or expired."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT uid, expires_at FROM auth_tokens WHERE token = ?", (token,)
        ).fetchone()
        if row is None:
            return None
        if clock.parse_iso(row["expires_at"]) <= clock.utc_now():
            conn.execute("DELETE FROM auth_tokens WHERE token = ?", (token,))
            return None
        user_row = conn.execute("SELECT * FROM users WHERE uid = ?", (row["uid"],)).fetchone()

    return row_to_profile(user_row) if user_row else None


def logout(token: str) -> None:
    """Revoke a token."""
    with get_db() as conn:
        conn.execute("DELETE FROM auth_tokens WHERE token = ?", (token,))


def set_pattern(uid: str, pattern: str) -> None:
    """Store a pattern-lock secret as an alternative to the password."""
    path = pattern_lock.require_storable(pattern)
    require_user(uid)
    with get_db() as conn:
        conn.execute(
            "UPDATE users SET pattern_hash = ? WHERE uid = ?",
            (hash_secret(pattern_lock.encode(path)), uid),
        )
    logger.info("auth.pattern_set", uid=uid, dots=len(path))


def unlock_with_pin(uid: str, pin: str) -> UserProfile:
    """Check the quick-unlock PIN.

    Raises:
        ConflictError: No PIN has been set
        AuthenticationError: PIN does not match
    """
    profile = require_user(uid)
    if profile.login_code is None:
        raise ConflictError("No PIN has been set for this account.")
    if (pin or "").strip() != profile.login_code:
        raise AuthenticationError("Incorrect PIN.")
    return profile
