"""Daily goals, streaks and points.

A day's goals are a list of sub-goals, each either a syllabus chapter or a
short custom task. Completing the last open sub-goal of *today* extends the
streak and awards points inside a single write-locked transaction.
"""

from __future__ import annotations

import calendar
import json
import sqlite3
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Literal

import structlog

from preptrack.config.app_config import load_app_config
from preptrack.core import progress as progress_store
from preptrack.core.errors import ConflictError, NotFoundError, ValidationError
from preptrack.core.syllabus import load_syllabus
from preptrack.db.database import get_db, transaction
from preptrack.utils import clock

logger = structlog.get_logger(__name__)

GoalType = Literal["chapter", "custom"]

MAX_CUSTOM_TEXT = 100

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class SubGoal:
    """One item of a day's goal list."""

    type: GoalType
    subject: str | None = None
    chapter: str | None = None
    text: str | None = None
    completed: bool = False

    @property
    def label(self) -> str:
        """Text shown for the goal."""
        return (self.chapter if self.type == "chapter" else self.text) or "Unnamed Goal"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"type": self.type, "completed": self.completed}
        if self.type == "chapter":
            result["subject"] = self.subject
            result["chapter"] = self.chapter
        else:
            result["text"] = self.text
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SubGoal:
        """Create from dictionary."""
        return cls(
            type=data["type"],
            subject=data.get("subject"),
            chapter=data.get("chapter"),
            text=data.get("text"),
            completed=bool(data.get("completed", False)),
        )


@dataclass
class DailyGoal:
    """All sub-goals for one calendar day."""

    uid: str
    date: str
    goals: list[SubGoal] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        """A day counts as completed once it has goals and all are done."""
        return bool(self.goals) and all(g.completed for g in self.goals)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "uid": self.uid,
            "date": self.date,
            "goals": [g.to_dict() for g in self.goals],
            "completed": self.completed,
        }


@dataclass
class StreakUpdate:
    """Outcome of completing all of today's goals."""

    current_streak: int
    longest_streak: int
    total_points: int
    points_earned: int
    bonus: int
    last_goal_completed_date: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "total_points": self.total_points,
            "points_earned": self.points_earned,
            "bonus": self.bonus,
            "last_goal_completed_date": self.last_goal_completed_date,
        }


@dataclass
class CompletionResult:
    """Result of completing a sub-goal."""

    goal: DailyGoal
    streak: StreakUpdate | None = None


# =============================================================================
# STREAK RULE
# =============================================================================


def compute_streak_update(
    current_streak: int,
    longest_streak: int,
    total_points: int,
    last_completed: str | None,
    today: date,
    base_points: int = 10,
    milestones: dict[int, int] | None = None,
) -> StreakUpdate | None:
    """Apply the streak rule for a day whose goals were just all completed.

    - last completion yesterday: streak + 1
    - last completion today: nothing changes (returns None)
    - otherwise: streak restarts at 1

    Each counted day earns `base_points`, plus a bonus when the new streak
    hits a milestone.
    """
    if milestones is None:
        milestones = {7: 50, 14: 100, 30: 200}

    today_str = clock.format_date(today)
    yesterday_str = clock.format_date(today - timedelta(days=1))

    if last_completed == today_str:
        return None
    if last_completed == yesterday_str:
        new_streak = current_streak + 1
    else:
        new_streak = 1

    bonus = milestones.get(new_streak, 0)
    earned = base_points + bonus

    return StreakUpdate(
        current_streak=new_streak,
        longest_streak=max(longest_streak, new_streak),
        total_points=total_points + earned,
        points_earned=earned,
        bonus=bonus,
        last_goal_completed_date=today_str,
    )


def _apply_streak(conn: sqlite3.Connection, uid: str, today: date) -> StreakUpdate | None:
    row = conn.execute(
        """
        SELECT current_streak, longest_streak, total_points, last_goal_completed_date
        FROM users WHERE uid = ?
        """,
        (uid,),
    ).fetchone()
    if row is None:
        raise NotFoundError(f"User '{uid}' not found")

    config = load_app_config().tracker
    update = compute_streak_update(
        current_streak=row["current_streak"],
        longest_streak=row["longest_streak"],
        total_points=row["total_points"],
        last_completed=row["last_goal_completed_date"],
        today=today,
        base_points=config.streak_base_points,
        milestones=config.streak_milestones,
    )
    if update is None:
        return None

    conn.execute(
        """
        UPDATE users SET current_streak = ?, longest_streak = ?, total_points = ?,
            last_goal_completed_date = ?
        WHERE uid = ?
        """,
        (
            update.current_streak,
            update.longest_streak,
            update.total_points,
            update.last_goal_completed_date,
            uid,
        ),
    )
    return update


# =============================================================================
# VALIDATION
# =============================================================================


def validate_sub_goal(goal: SubGoal) -> SubGoal:
    """Check a sub-goal's fields.

    Raises:
        ValidationError: Chapter goal without subject/chapter, or custom goal
            with blank or over-long text
    """
    if goal.type == "chapter":
        if not goal.subject or not goal.chapter:
            raise ValidationError("Please select a subject and a chapter.", {"field": "chapter"})
        return SubGoal(type="chapter", subject=goal.subject, chapter=goal.chapter, completed=goal.completed)
    if goal.type == "custom":
        text = (goal.text or "").strip()
        if not text:
            raise ValidationError("Please enter your custom goal.", {"field": "text"})
        if len(text) > MAX_CUSTOM_TEXT:
            raise ValidationError(
                f"Custom goals must be {MAX_CUSTOM_TEXT} characters or less.", {"field": "text"}
            )
        return SubGoal(type="custom", text=text, completed=goal.completed)
    raise ValidationError(f"Unknown goal type '{goal.type}'.", {"field": "type"})


def _parse_day(day: str) -> date:
    try:
        return clock.parse_date(day)
    except ValueError as e:
        raise ValidationError(f"Invalid date '{day}'. Use YYYY-MM-DD.", {"field": "date"}) from e


# =============================================================================
# STORAGE
# =============================================================================


def _row_to_goal(row: sqlite3.Row) -> DailyGoal:
    return DailyGoal(
        uid=row["uid"],
        date=row["date"],
        goals=[SubGoal.from_dict(g) for g in json.loads(row["goals"])],
    )


def _save(conn: sqlite3.Connection, goal: DailyGoal) -> None:
    conn.execute(
        """
        INSERT INTO daily_goals (uid, date, goals, completed, updated_at)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(uid, date) DO UPDATE SET
            goals = excluded.goals,
            completed = excluded.completed,
            updated_at = excluded.updated_at
        """,
        (
            goal.uid,
            goal.date,
            json.dumps([g.to_dict() for g in goal.goals]),
            int(goal.completed),
            clock.now_iso(),
        ),
    )


def get_daily_goal(uid: str, day: str) -> DailyGoal | None:
    """Goals for a date, or None if none were set."""
    _parse_day(day)
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM daily_goals WHERE uid = ? AND date = ?", (uid, day)
        ).fetchone()
    return _row_to_goal(row) if row else None


def set_daily_goals(uid: str, day: str, goals: list[SubGoal], today: date | None = None) -> DailyGoal:
    """Create or replace the goal list for a date.

    Raises:
        ValidationError: Past date, empty list or invalid sub-goal
        ConflictError: The day's goals are already all completed
    """
    today = today or clock.today()
    if _parse_day(day) < today:
        raise ValidationError("Goals cannot be set for past dates.", {"field": "date"})
    if not goals:
        raise ValidationError("Add at least one goal.", {"field": "goals"})

    cleaned = [validate_sub_goal(g) for g in goals]

    with transaction() as conn:
        row = conn.execute(
            "SELECT * FROM daily_goals WHERE uid = ? AND date = ?", (uid, day)
        ).fetchone()
        if row is not None and _row_to_goal(row).completed:
            raise ConflictError("Goals for this day are already completed and can no longer be edited.")
        goal = DailyGoal(uid=uid, date=day, goals=cleaned)
        _save(conn, goal)

    logger.info("goals.set", uid=uid, date=day, count=len(cleaned))
    return goal


def complete_sub_goal(uid: str, day: str, index: int, today: date | None = None) -> CompletionResult:
    """Mark one sub-goal done.

    Completing an already completed sub-goal changes nothing. A chapter goal
    also marks its chapter completed. When this completes the whole day for
    the first time and the day is today, the streak transaction runs in the
    same database transaction.

    Raises:
        ValidationError: Past date
        NotFoundError: No goals for the date or index out of range
    """
    today = today or clock.today()
    day_date = _parse_day(day)
    if day_date < today:
        raise ValidationError("Goals from past dates cannot be changed.", {"field": "date"})

    with transaction() as conn:
        row = conn.execute(
            "SELECT * FROM daily_goals WHERE uid = ? AND date = ?", (uid, day)
        ).fetchone()
        if row is None:
            raise NotFoundError(f"No goals set for {day}.")
        goal = _row_to_goal(row)
        if not 0 <= index < len(goal.goals):
            raise NotFoundError(f"Goal #{index} does not exist for {day}.")

        target = goal.goals[index]
        if target.completed:
            return CompletionResult(goal=goal)

        was_completed = goal.completed
        target.completed = True
        if target.type == "chapter" and target.subject and target.chapter:
            progress_store.mark_completed(conn, uid, target.subject, target.chapter)
        _save(conn, goal)

        streak = None
        if goal.completed and not was_completed and day_date == today:
            streak = _apply_streak(conn, uid, today)

    logger.info(
        "goals.sub_goal_completed",
        uid=uid,
        date=day,
        index=index,
        day_completed=goal.completed,
        streak=streak.current_streak if streak else None,
    )
    return CompletionResult(goal=goal, streak=streak)


def month_goals(uid: str, year: int, month: int) -> list[DailyGoal]:
    """All goal days within a calendar month, in date order."""
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12.", {"field": "month"})
    last_day = calendar.monthrange(year, month)[1]
    start = date(year, month, 1).isoformat()
    end = date(year, month, last_day).isoformat()

    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM daily_goals WHERE uid = ? AND date BETWEEN ? AND ? ORDER BY date",
            (uid, start, end),
        ).fetchall()
    return [_row_to_goal(row) for row in rows]


def completed_days(uid: str, year: int, month: int) -> list[str]:
    """Dates in the month on which every goal was completed."""
    return [g.date for g in month_goals(uid, year, month) if g.completed]


def uncompleted_chapters(uid: str, exam: str) -> dict[str, list[str]]:
    """Chapters still open per subject, for the chapter-goal picker.

    Subjects with nothing left are omitted.
    """
    syllabus = load_syllabus(exam)
    progress = progress_store.load_progress(uid, exam, syllabus)
    result = {}
    for subject, chapters in syllabus.items():
        remaining = [c for c in chapters if not progress[subject][c].completed]
        if remaining:
            result[subject] = remaining
    return result
