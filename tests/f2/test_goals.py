"""Tests for daily goals and the streak rule (F2)."""

from datetime import date

import pytest

from preptrack.core import goals, progress, users
from preptrack.core.errors import ConflictError, NotFoundError, ValidationError
from preptrack.core.goals import SubGoal, compute_streak_update

TODAY = date(2030, 1, 10)
DAY = "2030-01-10"
PHYSICS_1 = "1. Units and Measurements"


def chapter_goal(chapter=PHYSICS_1, subject="physics"):
    return SubGoal(type="chapter", subject=subject, chapter=chapter)


def custom_goal(text="Solve 20 MCQs"):
    return SubGoal(type="custom", text=text)


class TestComputeStreakUpdate:
    """Tests for the pure streak rule."""

    def test_first_completion(self):
        update = compute_streak_update(0, 0, 0, None, TODAY)
        assert update.current_streak == 1
        assert update.longest_streak == 1
        assert update.points_earned == 10
        assert update.total_points == 10
        assert update.last_goal_completed_date == DAY

    def test_consecutive_day_extends(self):
        update = compute_streak_update(3, 5, 40, "2030-01-09", TODAY)
        assert update.current_streak == 4
        assert update.longest_streak == 5
        assert update.total_points == 50

    def test_gap_resets(self):
        update = compute_streak_update(6, 6, 60, "2030-01-07", TODAY)
        assert update.current_streak == 1
        assert update.longest_streak == 6

    def test_same_day_is_noop(self):
        assert compute_streak_update(2, 2, 20, DAY, TODAY) is None

    @pytest.mark.parametrize("previous,bonus", [(6, 50), (13, 100), (29, 200), (7, 0)])
    def test_milestone_bonus(self, previous, bonus):
        update = compute_streak_update(previous, previous, 0, "2030-01-09", TODAY)
        assert update.bonus == bonus
        assert update.points_earned == 10 + bonus

    def test_custom_milestones(self):
        update = compute_streak_update(1, 1, 0, "2030-01-09", TODAY, base_points=5, milestones={2: 1})
        assert update.points_earned == 6


class TestSubGoalValidation:
    """Tests for validate_sub_goal."""

    def test_chapter_requires_subject_and_chapter(self):
        with pytest.raises(ValidationError, match="select a subject"):
            goals.validate_sub_goal(SubGoal(type="chapter", subject="physics"))

    def test_custom_text_trimmed(self):
        assert goals.validate_sub_goal(custom_goal("  Revise  ")).text == "Revise"

    def test_custom_text_limit(self):
        with pytest.raises(ValidationError, match="100 characters"):
            goals.validate_sub_goal(custom_goal("x" * 101))

    def test_label(self):
        assert chapter_goal().label == PHYSICS_1
        assert SubGoal(type="custom").label == "Unnamed Goal"


class TestSetDailyGoals:
    """Tests for set_daily_goals."""

    def test_set_and_get(self, student):
        goals.set_daily_goals(student.uid, DAY, [chapter_goal(), custom_goal()], today=TODAY)
        stored = goals.get_daily_goal(student.uid, DAY)
        assert len(stored.goals) == 2
        assert stored.completed is False

    def test_replace(self, student):
        goals.set_daily_goals(student.uid, DAY, [custom_goal("a")], today=TODAY)
        goals.set_daily_goals(student.uid, DAY, [custom_goal("b")], today=TODAY)
        assert [g.text for g in goals.get_daily_goal(student.uid, DAY).goals] == ["b"]

    def test_past_date_rejected(self, student):
        with pytest.raises(ValidationError, match="past dates"):
            goals.set_daily_goals(student.uid, "2030-01-09", [custom_goal()], today=TODAY)

    def test_empty_list_rejected(self, student):
        with pytest.raises(ValidationError):
            goals.set_daily_goals(student.uid, DAY, [], today=TODAY)

    def test_bad_date(self, student):
        with pytest.raises(ValidationError, match="YYYY-MM-DD"):
            goals.set_daily_goals(student.uid, "10/01/2030", [custom_goal()], today=TODAY)

    def test_completed_day_locked(self, student):
        goals.set_daily_goals(student.uid, DAY, [custom_goal()], today=TODAY)
        goals.complete_sub_goal(student.uid, DAY, 0, today=TODAY)
        with pytest.raises(ConflictError):
            goals.set_daily_goals(student.uid, DAY, [custom_goal("new")], today=TODAY)


class TestCompleteSubGoal:
    """Tests for complete_sub_goal and the streak transaction."""

    def test_partial_completion_no_streak(self, student):
        goals.set_daily_goals(student.uid, DAY, [custom_goal("a"), custom_goal("b")], today=TODAY)
        result = goals.complete_sub_goal(student.uid, DAY, 0, today=TODAY)
        assert result.streak is None
        assert result.goal.completed is False

    def test_full_completion_awards_points(self, student):
        goals.set_daily_goals(student.uid, DAY, [custom_goal()], today=TODAY)
        result = goals.complete_sub_goal(student.uid, DAY, 0, today=TODAY)
        assert result.goal.completed is True
        assert result.streak.current_streak == 1
        profile = users.require_user(student.uid)
        assert profile.current_streak == 1
        assert profile.total_points == 10
        assert profile.last_goal_completed_date == DAY

    def test_streak_extends_over_consecutive_days(self, student):
        for offset in range(3):
            today = date(2030, 1, 10 + offset)
            day = today.isoformat()
            goals.set_daily_goals(student.uid, day, [custom_goal()], today=today)
            goals.complete_sub_goal(student.uid, day, 0, today=today)
        profile = users.require_user(student.uid)
        assert profile.current_streak == 3
        assert profile.longest_streak == 3
        assert profile.total_points == 30

    def test_repeat_completion_is_noop(self, student):
        goals.set_daily_goals(student.uid, DAY, [custom_goal()], today=TODAY)
        goals.complete_sub_goal(student.uid, DAY, 0, today=TODAY)
        again = goals.complete_sub_goal(student.uid, DAY, 0, today=TODAY)
        assert again.streak is None
        assert users.require_user(student.uid).total_points == 10

    def test_future_day_completion_has_no_streak(self, student):
        goals.set_daily_goals(student.uid, "2030-01-12", [custom_goal()], today=TODAY)
        result = goals.complete_sub_goal(student.uid, "2030-01-12", 0, today=TODAY)
        assert result.goal.completed is True
        assert result.streak is None

    def test_chapter_goal_marks_progress(self, student):
        goals.set_daily_goals(student.uid, DAY, [chapter_goal()], today=TODAY)
        goals.complete_sub_goal(student.uid, DAY, 0, today=TODAY)
        item = progress.load_progress(student.uid, "NEET")["physics"][PHYSICS_1]
        assert item.completed is True

    def test_missing_day(self, student):
        with pytest.raises(NotFoundError):
            goals.complete_sub_goal(student.uid, DAY, 0, today=TODAY)

    def test_index_out_of_range(self, student):
        goals.set_daily_goals(student.uid, DAY, [custom_goal()], today=TODAY)
        with pytest.raises(NotFoundError):
            goals.complete_sub_goal(student.uid, DAY, 3, today=TODAY)

    def test_past_day_rejected(self, student):
        goals.set_daily_goals(student.uid, DAY, [custom_goal()], today=TODAY)
        with pytest.raises(ValidationError):
            goals.complete_sub_goal(student.uid, DAY, 0, today=date(2030, 1, 11))


class TestCalendar:
    """Tests for month views and the chapter picker."""

    def test_month_goals_and_completed_days(self, student):
        goals.set_daily_goals(student.uid, DAY, [custom_goal()], today=TODAY)
        goals.set_daily_goals(student.uid, "2030-01-20", [custom_goal()], today=TODAY)
        goals.set_daily_goals(student.uid, "2030-02-01", [custom_goal()], today=TODAY)
        goals.complete_sub_goal(student.uid, DAY, 0, today=TODAY)
        assert [g.date for g in goals.month_goals(student.uid, 2030, 1)] == [DAY, "2030-01-20"]
        assert goals.completed_days(student.uid, 2030, 1) == [DAY]

    def test_invalid_month(self, student):
        with pytest.raises(ValidationError):
            goals.month_goals(student.uid, 2030, 13)

    def test_uncompleted_chapters(self, student):
        progress.update_progress(student.uid, "NEET", "physics", PHYSICS_1, completed=True)
        remaining = goals.uncompleted_chapters(student.uid, "NEET")
        assert PHYSICS_1 not in remaining["physics"]
        assert "biology" in remaining
