"""Premium codes and account activation.

Admins generate single-use redemption codes; a student redeeming one is
upgraded to premium/active and the code disappears in the same
transaction. Admins can also upgrade demo accounts directly by the
student's six-digit access code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from preptrack.core.errors import ConflictError, NotFoundError, ValidationError
from preptrack.core.security import ACCESS_CODE_LENGTH, generate_premium_code
from preptrack.core.users import UserProfile, require_staff, require_user, row_to_profile
from preptrack.db.database import get_db, transaction
from preptrack.utils import clock
from preptrack.utils.validators import require_digits

logger = structlog.get_logger(__name__)

INVALID_CODE = "This code is invalid or has already been used."
NO_DEMO_USER = "No demo user found with this access code."

# Regenerate on the (unlikely) collision with an unredeemed code
MAX_GENERATE_ATTEMPTS = 5


@dataclass
class PremiumCode:
    """An unredeemed premium code."""

    code: str
    created_at: str
    created_by: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"code": self.code, "created_at": self.created_at, "created_by": self.created_by}


def generate_code(admin: UserProfile) -> PremiumCode:
    """Create a new eight-character code (staff only)."""
    require_staff(admin)
    with get_db() as conn:
        for _ in range(MAX_GENERATE_ATTEMPTS):
            code = PremiumCode(
                code=generate_premium_code(),
                created_at=clock.now_iso(),
                created_by=admin.uid,
            )
            cursor = conn.execute(
                "INSERT OR IGNORE INTO premium_codes (code, created_at, created_by) VALUES (?, ?, ?)",
                (code.code, code.created_at, code.created_by),
            )
            if cursor.rowcount == 1:
                logger.info("premium.code_generated", by=admin.uid)
                return code

    raise ConflictError("Could not generate a unique code. Please try again.")


def list_codes(admin: UserProfile) -> list[PremiumCode]:
    """Unredeemed codes, newest first (staff only)."""
    require_staff(admin)
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM premium_codes ORDER BY created_at DESC, rowid DESC"
        ).fetchall()
    return [PremiumCode(**dict(row)) for row in rows]


def delete_code(admin: UserProfile, code: str) -> None:
    """Revoke an unredeemed code (staff only)."""
    require_staff(admin)
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM premium_codes WHERE code = ?", (code,))
    if cursor.rowcount == 0:
        raise NotFoundError(f"Code '{code}' not found")
    logger.info("premium.code_deleted", by=admin.uid)


def redeem_code(uid: str, code: str) -> UserProfile:
    """Redeem a premium code for a user.

    The code lookup, its deletion and the user upgrade run in one
    transaction, so a code can be redeemed only once.

    Raises:
        ValidationError: Blank code
        NotFoundError: Unknown or already redeemed code
    """
    normalized = (code or "").strip().upper()
    if not normalized:
        raise ValidationError("Please enter a code.", {"field": "code"})
    require_user(uid)

    with transaction() as conn:
        row = conn.execute(
            "SELECT code FROM premium_codes WHERE code = ?", (normalized,)
        ).fetchone()
        if row is None:
            raise NotFoundError(INVALID_CODE)
        conn.execute("DELETE FROM premium_codes WHERE code = ?", (normalized,))
        conn.execute(
            "UPDATE users SET is_premium = 1, account_status = 'active' WHERE uid = ?",
            (uid,),
        )

    logger.info("premium.code_redeemed", uid=uid)
    return require_user(uid)


def activate_by_access_code(admin: UserProfile, access_code: str) -> list[UserProfile]:
    """Upgrade every demo account holding this access code (staff only).

    Raises:
        ValidationError: Code is not six digits
        NotFoundError: No demo account has the code
    """
    require_staff(admin)
    access_code = require_digits(access_code, ACCESS_CODE_LENGTH, "Access code")

    with transaction() as conn:
        rows = conn.execute(
            "SELECT uid FROM users WHERE access_code = ? AND account_status = 'demo'",
            (access_code,),
        ).fetchall()
        if not rows:
            raise NotFoundError(NO_DEMO_USER)
        uids = [row["uid"] for row in rows]
        conn.executemany(
            "UPDATE users SET is_premium = 1, account_status = 'active' WHERE uid = ?",
            [(uid,) for uid in uids],
        )
        updated = [
            row_to_profile(conn.execute("SELECT * FROM users WHERE uid = ?", (uid,)).fetchone())
            for uid in uids
        ]

    logger.info("premium.activated_by_access_code", by=admin.uid, users=len(updated))
    return updated
