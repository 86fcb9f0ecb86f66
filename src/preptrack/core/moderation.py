"""Unban requests.

A banned user may submit one appeal at a time. Staff review pending
appeals oldest first; approving also lifts the ban.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

import structlog

from preptrack.core.errors import ConflictError, NotFoundError
from preptrack.core.users import UserProfile, require_staff, require_user
from preptrack.db.database import get_db, transaction
from preptrack.utils import clock
from preptrack.utils.validators import new_id, require_text

logger = structlog.get_logger(__name__)

RequestStatus = Literal["pending", "reviewed"]


@dataclass
class UnbanRequest:
    """A banned user's appeal."""

    request_id: str
    uid: str
    user_name: str
    user_email: str
    reason: str
    status: RequestStatus
    created_at: str
    reviewed_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "request_id": self.request_id,
            "uid": self.uid,
            "user_name": self.user_name,
            "user_email": self.user_email,
            "reason": self.reason,
            "status": self.status,
            "created_at": self.created_at,
            "reviewed_at": self.reviewed_at,
        }


def submit_unban_request(uid: str, reason: str) -> UnbanRequest:
    """File an appeal for the user's active ban.

    Raises:
        ValidationError: Blank reason
        ConflictError: User is not banned or already has a pending request
    """
    reason = require_text(reason, "Reason")
    profile = require_user(uid)
    if not profile.ban_is_active():
        raise ConflictError("Your account is not banned.")
    if profile.has_pending_unban_request:
        raise ConflictError("You already have a pending unban request.")

    request = UnbanRequest(
        request_id=new_id("unb"),
        uid=uid,
        user_name=profile.display_name,
        user_email=profile.email,
        reason=reason,
        status="pending",
        created_at=clock.now_iso(),
    )
    with transaction() as conn:
        conn.execute(
            """
            INSERT INTO unban_requests (request_id, uid, user_name, user_email, reason, status, created_at)
            VALUES (?, ?, ?, ?, ?, 'pending', ?)
            """,
            (
                request.request_id,
                uid,
                request.user_name,
                request.user_email,
                reason,
                request.created_at,
            ),
        )
        conn.execute(
            "UPDATE users SET has_pending_unban_request = 1 WHERE uid = ?", (uid,)
        )

    logger.info("moderation.unban_requested", uid=uid, request_id=request.request_id)
    return request


def list_pending(admin: UserProfile) -> list[UnbanRequest]:
    """Pending appeals, oldest first (staff only)."""
    require_staff(admin)
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM unban_requests WHERE status = 'pending' ORDER BY created_at, rowid"
        ).fetchall()
    return [UnbanRequest(**dict(row)) for row in rows]


def resolve(admin: UserProfile, request_id: str, approve: bool) -> UnbanRequest:
    """Approve or reject an appeal (staff only).

    Either way the request is marked reviewed and the user's pending flag
    cleared; approval also lifts the ban.
    """
    require_staff(admin)
    with transaction() as conn:
        row = conn.execute(
            "SELECT * FROM unban_requests WHERE request_id = ?", (request_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError(f"Unban request '{request_id}' not found")
        request = UnbanRequest(**dict(row))
        if request.status != "pending":
            raise ConflictError("This request has already been reviewed.")

        request.status = "reviewed"
        request.reviewed_at = clock.now_iso()
        conn.execute(
            "UPDATE unban_requests SET status = 'reviewed', reviewed_at = ? WHERE request_id = ?",
            (request.reviewed_at, request_id),
        )
        if approve:
            conn.execute(
                """
                UPDATE users SET has_pending_unban_request = 0, is_banned = 0, ban_expires_at = NULL
                WHERE uid = ?
                """,
                (request.uid,),
            )
        else:
            conn.execute(
                "UPDATE users SET has_pending_unban_request = 0 WHERE uid = ?",
                (request.uid,),
            )

    logger.info("moderation.unban_resolved", request_id=request_id, approved=approve, by=admin.uid)
    return request
