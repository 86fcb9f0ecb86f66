"""Tests for the mistake notebook (F3)."""

import pytest

from preptrack.core import mistakes
from preptrack.core.errors import NotFoundError, ValidationError


def add(uid, **overrides):
    fields = {
        "subject": "physics",
        "chapter": "Kinematics",
        "question": "A ball is thrown upwards...",
        "my_mistake": "Used g as positive upwards",
        "correct_concept": "Take upward as positive, g = -9.8",
        "tags": ["Conceptual Error"],
    }
    fields.update(overrides)
    return mistakes.add_mistake(uid, **fields)


class TestAddMistake:
    """Tests for add_mistake."""

    def test_defaults(self, student):
        mistake = add(student.uid)
        assert mistake.status == "active"
        assert mistake.mistake_id.startswith("mis_")

    def test_tags_deduplicated(self, student):
        mistake = add(student.uid, tags=["Silly Mistake", " Silly Mistake", "", "Formula Error"])
        assert mistake.tags == ["Silly Mistake", "Formula Error"]

    def test_question_length(self, student):
        with pytest.raises(ValidationError):
            add(student.uid, question="q" * 151)

    def test_explanation_min_length(self, student):
        with pytest.raises(ValidationError, match="at least 10"):
            add(student.uid, my_mistake="too short")

    def test_missing_chapter(self, student):
        with pytest.raises(ValidationError):
            add(student.uid, chapter=" ")


class TestListAndFilter:
    """Tests for list_mistakes and facets."""

    def test_newest_first_and_filters(self, student):
        first = add(student.uid, subject="physics", tags=["Silly Mistake"])
        second = add(student.uid, subject="biology", tags=["Memory Lapse"])
        assert [m.mistake_id for m in mistakes.list_mistakes(student.uid)] == [
            second.mistake_id,
            first.mistake_id,
        ]
        assert [m.subject for m in mistakes.list_mistakes(student.uid, subject="physics")] == ["physics"]
        assert [m.subject for m in mistakes.list_mistakes(student.uid, tag="Memory Lapse")] == ["biology"]

    def test_facets(self, student):
        add(student.uid, subject="physics", tags=["B"])
        add(student.uid, subject="biology", tags=["A", "B"])
        assert mistakes.facets(student.uid) == {
            "subjects": ["biology", "physics"],
            "tags": ["A", "B"],
        }


class TestStatusAndDelete:
    """Tests for toggle_status and delete_mistake."""

    def test_toggle(self, student):
        mistake = add(student.uid)
        assert mistakes.toggle_status(student.uid, mistake.mistake_id).status == "reviewed"
        assert mistakes.toggle_status(student.uid, mistake.mistake_id).status == "active"

    def test_delete(self, student):
        mistake = add(student.uid)
        mistakes.delete_mistake(student.uid, mistake.mistake_id)
        assert mistakes.list_mistakes(student.uid) == []

    def test_other_users_mistake_not_found(self, student, admin):
        mistake = add(student.uid)
        with pytest.raises(NotFoundError):
            mistakes.toggle_status(admin.uid, mistake.mistake_id)
