"""Tests for the syllabus store (F1)."""

import pytest

from preptrack.core import syllabus
from preptrack.core.errors import ValidationError


class TestDefaults:
    """Tests for the built-in chapter lists."""

    def test_neet_subjects(self):
        assert set(syllabus.flatten("NEET")) == {
            "physics",
            "physical-chemistry",
            "organic-chemistry",
            "inorganic-chemistry",
            "biology",
        }

    def test_jee_has_mathematics(self):
        assert "mathematics" in syllabus.flatten("JEE")
        assert "biology" not in syllabus.flatten("JEE")

    def test_flatten_keeps_unit_order(self):
        physics = syllabus.flatten("NEET")["physics"]
        assert physics[0] == "1. Units and Measurements"

    def test_units(self):
        units = syllabus.get_units("NEET", "physics")
        assert "Mechanics" in units
        assert syllabus.get_units("NEET", "mathematics") is None

    def test_unknown_exam(self):
        with pytest.raises(ValidationError):
            syllabus.flatten("GATE")

    def test_subject_title(self):
        assert syllabus.subject_title("physical-chemistry") == "Physical Chemistry"

    def test_parse_chapter_text(self):
        assert syllabus.parse_chapter_text(" A \n\n B\n  \nC ") == ["A", "B", "C"]


class TestStore:
    """Tests for seeding and editing stored syllabuses."""

    def test_load_falls_back_to_defaults(self, db):
        """Unseeded store returns the default syllabus."""
        assert not syllabus.is_seeded()
        assert syllabus.load_syllabus("NEET") == syllabus.flatten("NEET")

    def test_seed(self, db):
        rows = syllabus.seed_default_syllabus()
        assert rows == len(syllabus.flatten("NEET")) + len(syllabus.flatten("JEE"))
        assert syllabus.is_seeded()
        assert {r.exam for r in syllabus.list_records()} == {"NEET", "JEE"}

    def test_seed_is_idempotent(self, db):
        first = syllabus.seed_default_syllabus()
        assert syllabus.seed_default_syllabus() == first
        assert len(syllabus.list_records()) == first

    def test_save_subject_chapters_from_text(self, seeded_db):
        record = syllabus.save_subject_chapters("NEET", "physics", "Kinematics\n\nOptics\n")
        assert record.id == "neet-physics"
        assert syllabus.load_syllabus("NEET")["physics"] == ["Kinematics", "Optics"]

    def test_save_subject_chapters_from_list(self, seeded_db):
        syllabus.save_subject_chapters("JEE", "mathematics", [" Sets ", "", "Limits"])
        assert syllabus.load_syllabus("JEE")["mathematics"] == ["Sets", "Limits"]
