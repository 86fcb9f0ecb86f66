"""Tests for the exam countdown (F5)."""

from datetime import datetime, timedelta

import pytest

from preptrack.core.countdown import countdowns, exam_dates, first_sunday_of_may, time_left
from preptrack.core.errors import ValidationError


class TestExamDates:
    """Tests for the exam calendar."""

    @pytest.mark.parametrize(
        "year,day",
        [(2024, 5), (2025, 4), (2026, 3), (2027, 2), (2022, 1)],
    )
    def test_first_sunday_of_may(self, year, day):
        assert first_sunday_of_may(year) == day
        assert datetime(year, 5, day).weekday() == 6

    def test_neet_single_sitting(self):
        sittings = exam_dates("NEET", 2025)
        assert [s.name for s in sittings] == ["NEET"]
        assert sittings[0].date == datetime(2025, 5, 4)

    def test_jee_two_sittings(self):
        sittings = exam_dates("JEE", 2026)
        assert [s.date for s in sittings] == [
            datetime(2026, 1, 24, 9),
            datetime(2026, 4, 4, 9),
        ]

    def test_unknown_exam(self):
        with pytest.raises(ValidationError):
            exam_dates("CAT", 2026)


class TestTimeLeft:
    """Tests for time_left."""

    def test_components(self):
        now = datetime(2026, 1, 1)
        target = now + timedelta(days=9, hours=3, minutes=2, seconds=1)
        left = time_left(target, now)

        assert left.weeks == 1
        assert left.days == 2
        assert left.hours == 3
        assert left.minutes == 2
        assert left.seconds == 1
        assert left.total_days == 9
        assert left.total == int(timedelta(days=9, hours=3, minutes=2, seconds=1).total_seconds()) * 1000

    def test_passed_is_zero(self):
        now = datetime(2026, 6, 1)
        left = time_left(datetime(2026, 5, 3), now)
        assert left.to_dict() == {key: 0 for key in left.to_dict()}

    def test_countdowns_pairs_each_sitting(self):
        now = datetime(2026, 2, 1)
        pairs = countdowns("JEE", 2026, now)
        assert pairs[0][1].total == 0
        assert pairs[1][1].total_days == 62
