"""Contact form submissions and the admin inbox."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from preptrack.core.errors import NotFoundError
from preptrack.core.users import UserProfile, require_staff
from preptrack.db.database import get_db
from preptrack.utils import clock
from preptrack.utils.validators import new_id, require_email, require_text

logger = structlog.get_logger(__name__)


@dataclass
class ContactSubmission:
    """A message sent through the public contact form."""

    submission_id: str
    name: str
    email: str
    message: str
    created_at: str
    is_read: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "submission_id": self.submission_id,
            "name": self.name,
            "email": self.email,
            "message": self.message,
            "created_at": self.created_at,
            "is_read": self.is_read,
        }


def _from_row(row) -> ContactSubmission:
    data = dict(row)
    data["is_read"] = bool(data["is_read"])
    return ContactSubmission(**data)


def submit(name: str, email: str, message: str) -> ContactSubmission:
    """Store a contact form message as unread."""
    submission = ContactSubmission(
        submission_id=new_id("cnt"),
        name=require_text(name, "Name"),
        email=require_email(email),
        message=require_text(message, "Message"),
        created_at=clock.now_iso(),
    )
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO contact_submissions (submission_id, name, email, message, created_at, is_read)
            VALUES (?, ?, ?, ?, ?, 0)
            """,
            (
                submission.submission_id,
                submission.name,
                submission.email,
                submission.message,
                submission.created_at,
            ),
        )
    logger.info("contact.submitted", submission_id=submission.submission_id)
    return submission


def list_submissions(admin: UserProfile) -> list[ContactSubmission]:
    """All submissions, newest first (staff only)."""
    require_staff(admin)
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM contact_submissions ORDER BY created_at DESC, rowid DESC"
        ).fetchall()
    return [_from_row(row) for row in rows]


def toggle_read(admin: UserProfile, submission_id: str) -> ContactSubmission:
    """Flip the read flag (staff only)."""
    require_staff(admin)
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM contact_submissions WHERE submission_id = ?", (submission_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError(f"Submission '{submission_id}' not found")
        submission = _from_row(row)
        submission.is_read = not submission.is_read
        conn.execute(
            "UPDATE contact_submissions SET is_read = ? WHERE submission_id = ?",
            (int(submission.is_read), submission_id),
        )
    return submission


def delete_submission(admin: UserProfile, submission_id: str) -> None:
    """Delete a submission (staff only)."""
    require_staff(admin)
    with get_db() as conn:
        cursor = conn.execute(
            "DELETE FROM contact_submissions WHERE submission_id = ?", (submission_id,)
        )
    if cursor.rowcount == 0:
        raise NotFoundError(f"Submission '{submission_id}' not found")
    logger.info("contact.deleted", submission_id=submission_id)
