"""Exam date calendar and countdown arithmetic.

Dates are local wall-clock times: NEET on the first Sunday of May, JEE
main sessions on 24 January and 4 April at 09:00.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from preptrack.utils.validators import require_exam


@dataclass
class ExamDate:
    """A named exam sitting."""

    name: str
    date: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"name": self.name, "date": self.date.isoformat()}


@dataclass
class TimeLeft:
    """Remaining time, both as running totals and as display components."""

    total: int = 0
    total_weeks: int = 0
    total_days: int = 0
    total_hours: int = 0
    total_minutes: int = 0
    total_seconds: int = 0
    weeks: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


def first_sunday_of_may(year: int) -> int:
    """Day of month of the first Sunday in May."""
    # weekday(): Monday=0 ... Sunday=6
    offset = (6 - datetime(year, 5, 1).weekday()) % 7
    return 1 + offset


def exam_dates(exam: str, year: int) -> list[ExamDate]:
    """Sittings for an exam in a given year, in calendar order."""
    require_exam(exam)
    if exam == "NEET":
        return [ExamDate(name="NEET", date=datetime(year, 5, first_sunday_of_may(year)))]
    return [
        ExamDate(name="Jan Attempt", date=datetime(year, 1, 24, 9)),
        ExamDate(name="Apr Attempt", date=datetime(year, 4, 4, 9)),
    ]


def time_left(target: datetime, now: datetime | None = None) -> TimeLeft:
    """Break the interval until `target` into units; all zero once passed.

    `total` is in milliseconds.
    """
    now = now or datetime.now()
    difference_ms = int((target - now).total_seconds() * 1000)
    if difference_ms <= 0:
        return TimeLeft()

    total_seconds = difference_ms // 1000
    total_minutes = total_seconds // 60
    total_hours = total_minutes // 60
    total_days = total_hours // 24

    return TimeLeft(
        total=difference_ms,
        total_weeks=total_days // 7,
        total_days=total_days,
        total_hours=total_hours,
        total_minutes=total_minutes,
        total_seconds=total_seconds,
        weeks=total_days // 7,
        days=total_days % 7,
        hours=total_hours % 24,
        minutes=total_minutes % 60,
        seconds=total_seconds % 60,
    )


def countdowns(exam: str, year: int, now: datetime | None = None) -> list[tuple[ExamDate, TimeLeft]]:
    """Each sitting with its remaining time."""
    return [(sitting, time_left(sitting.date, now)) for sitting in exam_dates(exam, year)]
