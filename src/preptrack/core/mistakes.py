"""Mistake notebook repository.

Students log a question they got wrong, what went wrong and the correct
concept, tagged with one or more error categories.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from typing import Any, Literal

import structlog

from preptrack.core.errors import NotFoundError
from preptrack.db.database import get_db
from preptrack.utils import clock
from preptrack.utils.validators import new_id, require_text

logger = structlog.get_logger(__name__)

PRESET_TAGS = [
    "Conceptual Error",
    "Silly Mistake",
    "Calculation Error",
    "Misinterpretation",
    "Formula Error",
    "Time Pressure",
]

MAX_QUESTION_LENGTH = 150
MIN_EXPLANATION_LENGTH = 10

# Filter value meaning "no filter"
ALL = "all"

MistakeStatus = Literal["active", "reviewed"]


@dataclass
class Mistake:
    """A logged mistake."""

    mistake_id: str
    uid: str
    subject: str
    chapter: str
    question: str
    my_mistake: str
    correct_concept: str
    tags: list[str] = field(default_factory=list)
    status: MistakeStatus = "active"
    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "mistake_id": self.mistake_id,
            "uid": self.uid,
            "subject": self.subject,
            "chapter": self.chapter,
            "question": self.question,
            "my_mistake": self.my_mistake,
            "correct_concept": self.correct_concept,
            "tags": list(self.tags),
            "status": self.status,
            "created_at": self.created_at,
        }


def _row_to_mistake(row: sqlite3.Row) -> Mistake:
    return Mistake(
        mistake_id=row["mistake_id"],
        uid=row["uid"],
        subject=row["subject"],
        chapter=row["chapter"],
        question=row["question"],
        my_mistake=row["my_mistake"],
        correct_concept=row["correct_concept"],
        tags=json.loads(row["tags"]),
        status=row["status"],
        created_at=row["created_at"],
    )


def add_mistake(
    uid: str,
    subject: str,
    chapter: str,
    question: str,
    my_mistake: str,
    correct_concept: str,
    tags: list[str] | None = None,
) -> Mistake:
    """Log a new mistake.

    Raises:
        ValidationError: Missing subject/chapter, question outside 1-150
            chars, or explanations shorter than 10 chars
    """
    mistake = Mistake(
        mistake_id=new_id("mis"),
        uid=uid,
        subject=require_text(subject, "Subject"),
        chapter=require_text(chapter, "Chapter"),
        question=require_text(question, "Question", max_length=MAX_QUESTION_LENGTH),
        my_mistake=require_text(my_mistake, "My mistake", min_length=MIN_EXPLANATION_LENGTH),
        correct_concept=require_text(
            correct_concept, "Correct concept", min_length=MIN_EXPLANATION_LENGTH
        ),
        # Deduplicate, keep order
        tags=list(dict.fromkeys(t.strip() for t in (tags or []) if t and t.strip())),
        created_at=clock.now_iso(),
    )

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO mistakes (
                mistake_id, uid, subject, chapter, question,
                my_mistake, correct_concept, tags, status, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                mistake.mistake_id,
                uid,
                mistake.subject,
                mistake.chapter,
                mistake.question,
                mistake.my_mistake,
                mistake.correct_concept,
                json.dumps(mistake.tags),
                mistake.status,
                mistake.created_at,
            ),
        )

    logger.info("mistakes.added", uid=uid, mistake_id=mistake.mistake_id)
    return mistake


def list_mistakes(uid: str, subject: str = ALL, tag: str = ALL) -> list[Mistake]:
    """A user's mistakes, newest first, optionally filtered.

    Args:
        uid: Owner
        subject: Subject to keep, or "all"
        tag: Tag that must be present, or "all"
    """
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM mistakes WHERE uid = ? ORDER BY created_at DESC, rowid DESC",
            (uid,),
        ).fetchall()

    mistakes = [_row_to_mistake(row) for row in rows]
    if subject != ALL:
        mistakes = [m for m in mistakes if m.subject == subject]
    if tag != ALL:
        mistakes = [m for m in mistakes if tag in m.tags]
    return mistakes


def facets(uid: str) -> dict[str, list[str]]:
    """Distinct subjects and tags across a user's mistakes (filter options)."""
    mistakes = list_mistakes(uid)
    return {
        "subjects": sorted({m.subject for m in mistakes}),
        "tags": sorted({t for m in mistakes for t in m.tags}),
    }


def _get_owned(uid: str, mistake_id: str) -> Mistake:
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM mistakes WHERE mistake_id = ? AND uid = ?", (mistake_id, uid)
        ).fetchone()
    if row is None:
        raise NotFoundError(f"Mistake '{mistake_id}' not found")
    return _row_to_mistake(row)


def toggle_status(uid: str, mistake_id: str) -> Mistake:
    """Flip a mistake between active and reviewed."""
    mistake = _get_owned(uid, mistake_id)
    mistake.status = "reviewed" if mistake.status == "active" else "active"
    with get_db() as conn:
        conn.execute(
            "UPDATE mistakes SET status = ? WHERE mistake_id = ?",
            (mistake.status, mistake_id),
        )
    logger.debug("mistakes.status_toggled", mistake_id=mistake_id, status=mistake.status)
    return mistake


def delete_mistake(uid: str, mistake_id: str) -> None:
    """Delete one of the user's mistakes."""
    _get_owned(uid, mistake_id)
    with get_db() as conn:
        conn.execute("DELETE FROM mistakes WHERE mistake_id = ?", (mistake_id,))
    logger.info("mistakes.deleted", uid=uid, mistake_id=mistake_id)
