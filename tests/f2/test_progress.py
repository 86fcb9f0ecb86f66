"""Tests for chapter progress (F2)."""

import pytest

from preptrack.core import progress
from preptrack.core.errors import ValidationError

PHYSICS_1 = "1. Units and Measurements"


class TestLoadProgress:
    """Tests for load_progress."""

    def test_defaults_for_every_chapter(self, student):
        data = progress.load_progress(student.uid, "NEET")
        item = data["physics"][PHYSICS_1]
        assert item.completed is False
        assert item.questions == 0
        assert item.confidence == 50
        assert item.revisions == []

    def test_rows_for_removed_chapters_are_ignored(self, student):
        progress.update_progress(student.uid, "NEET", "physics", PHYSICS_1, completed=True)
        data = progress.load_progress(student.uid, "NEET", {"physics": ["Other"]})
        assert list(data["physics"]) == ["Other"]


class TestUpdateProgress:
    """Tests for update_progress."""

    def test_partial_update_keeps_other_fields(self, student):
        progress.update_progress(student.uid, "NEET", "physics", PHYSICS_1, questions=40)
        progress.update_progress(student.uid, "NEET", "physics", PHYSICS_1, confidence=80)
        item = progress.load_progress(student.uid, "NEET")["physics"][PHYSICS_1]
        assert item.questions == 40
        assert item.confidence == 80
        assert item.completed is False

    def test_unknown_chapter(self, student):
        with pytest.raises(ValidationError, match="not part of physics"):
            progress.update_progress(student.uid, "NEET", "physics", "Astrology", completed=True)

    def test_unknown_subject(self, student):
        with pytest.raises(ValidationError, match="Unknown subject"):
            progress.update_progress(student.uid, "NEET", "mathematics", PHYSICS_1)

    def test_negative_questions(self, student):
        with pytest.raises(ValidationError):
            progress.update_progress(student.uid, "NEET", "physics", PHYSICS_1, questions=-1)

    @pytest.mark.parametrize("confidence", [-1, 101])
    def test_confidence_range(self, student, confidence):
        with pytest.raises(ValidationError):
            progress.update_progress(
                student.uid, "NEET", "physics", PHYSICS_1, confidence=confidence
            )


class TestRevisions:
    """Tests for chapter and subject revisions."""

    def test_revise_chapter_appends_timestamp(self, student):
        first = progress.revise_chapter(student.uid, "NEET", "physics", PHYSICS_1)
        second = progress.revise_chapter(student.uid, "NEET", "physics", PHYSICS_1)
        assert len(first.revisions) == 1
        assert len(second.revisions) == 2
        assert second.revisions[1] >= second.revisions[0]

    def test_log_revision(self, student):
        progress.log_revision(student.uid, "physics", 25)
        progress.log_revision(student.uid, "physics", 5)
        progress.log_revision(student.uid, "biology", 0)
        logged = progress.list_revisions(student.uid)
        assert [e.questions for e in logged["physics"]] == [25, 5]
        assert len(logged["biology"]) == 1

    def test_log_revision_negative(self, student):
        with pytest.raises(ValidationError):
            progress.log_revision(student.uid, "physics", -3)

    def test_reset_clears_everything(self, student):
        progress.update_progress(student.uid, "NEET", "physics", PHYSICS_1, completed=True)
        progress.log_revision(student.uid, "physics", 1)
        progress.reset_progress(student.uid)
        assert progress.load_progress(student.uid, "NEET")["physics"][PHYSICS_1].completed is False
        assert progress.list_revisions(student.uid) == {}
