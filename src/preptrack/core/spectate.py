"""Admin spectate sessions.

A student grants staff a time-limited permission to view their dashboard.
While the permission is valid a staff member may start a read-only
session on that account; every session is logged.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

import structlog

from preptrack.config.app_config import load_app_config
from preptrack.core.errors import ConflictError, PermissionDeniedError, ValidationError
from preptrack.core.users import UserProfile, require_staff, require_user
from preptrack.db.database import get_db, transaction
from preptrack.utils import clock
from preptrack.utils.validators import new_id

logger = structlog.get_logger(__name__)


@dataclass
class SpectateLog:
    """Audit entry for one spectate session."""

    log_id: str
    admin_id: str
    admin_name: str
    uid: str
    user_name: str
    started_at: str
    ended_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "log_id": self.log_id,
            "admin_id": self.admin_id,
            "admin_name": self.admin_name,
            "uid": self.uid,
            "user_name": self.user_name,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
        }


def is_granted(profile: UserProfile, now: datetime | None = None) -> bool:
    """Permission is granted and not yet expired."""
    expires = clock.parse_iso(profile.spectate_expires_at)
    return (
        profile.spectate_status == "granted"
        and expires is not None
        and expires > (now or clock.utc_now())
    )


def _close_open_logs(conn, uid: str, ended_at: str) -> None:
    conn.execute(
        "UPDATE spectate_logs SET ended_at = ? WHERE uid = ? AND ended_at IS NULL",
        (ended_at, uid),
    )


def grant(uid: str, hours: int) -> UserProfile:
    """Allow staff to view this account for `hours` hours.

    Any admin currently recorded as spectating is cleared and their open
    session is closed.
    """
    max_hours = load_app_config().tracker.spectate_max_hours
    if not 1 <= hours <= max_hours:
        raise ValidationError(
            f"Duration must be between 1 and {max_hours} hours.", {"field": "hours"}
        )
    now = clock.utc_now()
    with transaction() as conn:
        conn.execute(
            """
            UPDATE users SET spectate_status = 'granted', spectate_granted_at = ?,
                spectate_expires_at = ?, spectating_admin_id = NULL
            WHERE uid = ?
            """,
            (now.isoformat(), clock.hours_from(now, hours).isoformat(), uid),
        )
        _close_open_logs(conn, uid, now.isoformat())
    logger.info("spectate.granted", uid=uid, hours=hours)
    return require_user(uid)


def revoke(uid: str) -> UserProfile:
    """Withdraw spectate permission, closing any open session."""
    with transaction() as conn:
        conn.execute(
            """
            UPDATE users SET spectate_status = 'none', spectate_granted_at = NULL,
                spectate_expires_at = NULL, spectating_admin_id = NULL
            WHERE uid = ?
            """,
            (uid,),
        )
        _close_open_logs(conn, uid, clock.now_iso())
    logger.info("spectate.revoked", uid=uid)
    return require_user(uid)


def start(admin: UserProfile, target_uid: str) -> SpectateLog:
    """Begin a read-only session on a user who granted permission.

    Raises:
        PermissionDeniedError: Caller is not staff, targets themself, or the
            user has not granted (or let expire) permission
    """
    require_staff(admin)
    if admin.uid == target_uid:
        raise PermissionDeniedError("You cannot spectate your own account.")
    target = require_user(target_uid)
    if not is_granted(target):
        raise PermissionDeniedError(f"{target.display_name} has not granted spectate permission.")

    log = SpectateLog(
        log_id=new_id("spc"),
        admin_id=admin.uid,
        admin_name=admin.display_name,
        uid=target.uid,
        user_name=target.display_name,
        started_at=clock.now_iso(),
    )
    with transaction() as conn:
        conn.execute(
            "UPDATE users SET spectating_admin_id = ? WHERE uid = ?", (admin.uid, target.uid)
        )
        conn.execute(
            """
            INSERT INTO spectate_logs (log_id, admin_id, admin_name, uid, user_name, started_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (log.log_id, log.admin_id, log.admin_name, log.uid, log.user_name, log.started_at),
        )

    logger.info("spectate.started", admin_id=admin.uid, uid=target.uid)
    return log


def stop(admin: UserProfile, target_uid: str) -> SpectateLog:
    """End the admin's open session on a user.

    Raises:
        ConflictError: The admin has no open session on this user
    """
    require_staff(admin)
    with transaction() as conn:
        row = conn.execute(
            """
            SELECT * FROM spectate_logs
            WHERE admin_id = ? AND uid = ? AND ended_at IS NULL
            ORDER BY started_at DESC, rowid DESC
            """,
            (admin.uid, target_uid),
        ).fetchone()
        if row is None:
            raise ConflictError("You are not spectating this user.")
        log = SpectateLog(**dict(row))
        log.ended_at = clock.now_iso()
        conn.execute(
            "UPDATE spectate_logs SET ended_at = ? WHERE log_id = ?", (log.ended_at, log.log_id)
        )
        conn.execute(
            "UPDATE users SET spectating_admin_id = NULL WHERE uid = ? AND spectating_admin_id = ?",
            (target_uid, admin.uid),
        )

    logger.info("spectate.stopped", admin_id=admin.uid, uid=target_uid)
    return log


def resolve_view(admin: UserProfile, target_uid: str) -> UserProfile:
    """Profile an admin may currently view read-only.

    Raises:
        NotFoundError: Unknown user
        PermissionDeniedError: No active session or permission expired
    """
    require_staff(admin)
    target = require_user(target_uid)
    if target.spectating_admin_id != admin.uid or not is_granted(target):
        raise PermissionDeniedError("No active spectate session for this user.")
    return target


def list_logs(admin: UserProfile, limit: int = 100) -> list[SpectateLog]:
    """Recent spectate sessions, newest first (staff only)."""
    require_staff(admin)
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM spectate_logs ORDER BY started_at DESC, rowid DESC LIMIT ?",
            (limit,),
        ).fetchall()
    return [SpectateLog(**dict(row)) for row in rows]
