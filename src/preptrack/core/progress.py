"""Chapter progress tracking.

Each (user, subject, chapter) has a completion flag, a solved-question
count, a 0-100 confidence score and a list of revision timestamps (epoch
ms). Only chapters that were touched have a row; everything else reads as
the default state.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from typing import Any

import structlog

from preptrack.core.errors import ValidationError
from preptrack.core.syllabus import Syllabus, load_syllabus
from preptrack.db.database import get_db, transaction
from preptrack.utils import clock

logger = structlog.get_logger(__name__)

DEFAULT_CONFIDENCE = 50
MIN_CONFIDENCE = 0
MAX_CONFIDENCE = 100


@dataclass
class ChapterProgress:
    """Progress on a single chapter."""

    completed: bool = False
    questions: int = 0
    confidence: int = DEFAULT_CONFIDENCE
    revisions: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "completed": self.completed,
            "questions": self.questions,
            "confidence": self.confidence,
            "revisions": list(self.revisions),
        }


@dataclass
class SubjectRevision:
    """A subject-level revision session logged from the revision hub."""

    timestamp: int
    questions: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"timestamp": self.timestamp, "questions": self.questions}


Progress = dict[str, dict[str, ChapterProgress]]


def initial_state(syllabus: Syllabus) -> Progress:
    """Default progress for every chapter of a syllabus."""
    return {
        subject: {chapter: ChapterProgress() for chapter in chapters}
        for subject, chapters in syllabus.items()
    }


def _row_to_progress(row: sqlite3.Row) -> ChapterProgress:
    return ChapterProgress(
        completed=bool(row["completed"]),
        questions=row["questions"],
        confidence=row["confidence"],
        revisions=json.loads(row["revisions"]),
    )


def load_progress(uid: str, exam: str, syllabus: Syllabus | None = None) -> Progress:
    """Stored progress merged over the defaults for the exam's syllabus.

    Rows for chapters no longer in the syllabus are ignored.

    Args:
        uid: User id
        exam: NEET or JEE
        syllabus: Pre-loaded syllabus (loaded from the store if omitted)

    Returns:
        subject -> chapter -> ChapterProgress
    """
    if syllabus is None:
        syllabus = load_syllabus(exam)
    progress = initial_state(syllabus)

    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM chapter_progress WHERE uid = ?", (uid,)
        ).fetchall()

    for row in rows:
        subject_progress = progress.get(row["subject"])
        if subject_progress is not None and row["chapter"] in subject_progress:
            subject_progress[row["chapter"]] = _row_to_progress(row)

    return progress


def _require_chapter(exam: str, subject: str, chapter: str) -> None:
    chapters = load_syllabus(exam).get(subject)
    if chapters is None:
        raise ValidationError(f"Unknown subject '{subject}' for {exam}.", {"field": "subject"})
    if chapter not in chapters:
        raise ValidationError(
            f"Chapter '{chapter}' is not part of {subject}.", {"field": "chapter"}
        )


def _get_chapter(conn: sqlite3.Connection, uid: str, subject: str, chapter: str) -> ChapterProgress:
    row = conn.execute(
        "SELECT * FROM chapter_progress WHERE uid = ? AND subject = ? AND chapter = ?",
        (uid, subject, chapter),
    ).fetchone()
    return _row_to_progress(row) if row else ChapterProgress()


def _put_chapter(
    conn: sqlite3.Connection, uid: str, subject: str, chapter: str, progress: ChapterProgress
) -> None:
    conn.execute(
        """
        INSERT INTO chapter_progress (uid, subject, chapter, completed, questions, confidence, revisions)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(uid, subject, chapter) DO UPDATE SET
            completed = excluded.completed,
            questions = excluded.questions,
            confidence = excluded.confidence,
            revisions = excluded.revisions
        """,
        (
            uid,
            subject,
            chapter,
            int(progress.completed),
            progress.questions,
            progress.confidence,
            json.dumps(progress.revisions),
        ),
    )


def update_progress(
    uid: str,
    exam: str,
    subject: str,
    chapter: str,
    completed: bool | None = None,
    questions: int | None = None,
    confidence: int | None = None,
) -> ChapterProgress:
    """Merge partial values into a chapter's progress.

    Fields left as None keep their current value.

    Raises:
        ValidationError: Unknown chapter, negative question count or
            confidence outside 0-100
    """
    _require_chapter(exam, subject, chapter)
    if questions is not None and questions < 0:
        raise ValidationError("Questions solved cannot be negative.", {"field": "questions"})
    if confidence is not None and not MIN_CONFIDENCE <= confidence <= MAX_CONFIDENCE:
        raise ValidationError("Confidence must be between 0 and 100.", {"field": "confidence"})

    with transaction() as conn:
        current = _get_chapter(conn, uid, subject, chapter)
        if completed is not None:
            current.completed = completed
        if questions is not None:
            current.questions = questions
        if confidence is not None:
            current.confidence = confidence
        _put_chapter(conn, uid, subject, chapter, current)

    logger.debug("progress.updated", uid=uid, subject=subject, chapter=chapter)
    return current


def mark_completed(conn: sqlite3.Connection, uid: str, subject: str, chapter: str) -> None:
    """Mark a chapter completed using an open connection (goal completion)."""
    current = _get_chapter(conn, uid, subject, chapter)
    current.completed = True
    _put_chapter(conn, uid, subject, chapter, current)


def revise_chapter(uid: str, exam: str, subject: str, chapter: str) -> ChapterProgress:
    """Record a revision of a chapter at the current time."""
    _require_chapter(exam, subject, chapter)
    with transaction() as conn:
        current = _get_chapter(conn, uid, subject, chapter)
        current.revisions.append(clock.now_ms())
        _put_chapter(conn, uid, subject, chapter, current)

    logger.info("progress.chapter_revised", uid=uid, subject=subject, chapter=chapter)
    return current


def log_revision(uid: str, subject: str, questions: int) -> SubjectRevision:
    """Append a subject-level revision session."""
    if questions < 0:
        raise ValidationError("Questions solved cannot be negative.", {"field": "questions"})

    entry = SubjectRevision(timestamp=clock.now_ms(), questions=questions)
    with transaction() as conn:
        conn.execute(
            "INSERT INTO subject_revisions (uid, subject, timestamp, questions) VALUES (?, ?, ?, ?)",
            (uid, subject, entry.timestamp, entry.questions),
        )

    logger.info("progress.revision_logged", uid=uid, subject=subject, questions=questions)
    return entry


def list_revisions(uid: str) -> dict[str, list[SubjectRevision]]:
    """Subject-level revision log, oldest first per subject."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT subject, timestamp, questions FROM subject_revisions WHERE uid = ? ORDER BY id",
            (uid,),
        ).fetchall()

    result: dict[str, list[SubjectRevision]] = {}
    for row in rows:
        result.setdefault(row["subject"], []).append(
            SubjectRevision(timestamp=row["timestamp"], questions=row["questions"])
        )
    return result


def reset_progress(uid: str) -> None:
    """Drop all stored progress and revision logs for a user."""
    with get_db() as conn:
        conn.execute("DELETE FROM chapter_progress WHERE uid = ?", (uid,))
        conn.execute("DELETE FROM subject_revisions WHERE uid = ?", (uid,))

    logger.info("progress.reset", uid=uid)


def progress_to_dict(progress: Progress) -> dict[str, dict[str, dict[str, Any]]]:
    """Serialize a full progress tree."""
    return {
        subject: {chapter: item.to_dict() for chapter, item in chapters.items()}
        for subject, chapters in progress.items()
    }
