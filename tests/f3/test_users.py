"""Tests for user profiles, access gating and moderation (F3)."""

import threading
from datetime import date, datetime, timedelta, timezone

import pytest

from preptrack.core import progress, users
from preptrack.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

PHYSICS_1 = "1. Units and Measurements"


class TestCreateUser:
    """Tests for signup."""

    def test_defaults(self, seeded_db):
        profile = users.create_user("Ravi", "ravi@example.com", "longenough")
        assert profile.role == "user"
        assert profile.effective_account_status == "demo"
        assert profile.effective_is_premium is False
        assert profile.onboarding_completed is False
        assert len(profile.access_code) == 6 and profile.access_code.isdigit()

    def test_duplicate_email_case_insensitive(self, seeded_db):
        users.create_user("Ravi", "ravi@example.com", "longenough")
        with pytest.raises(ConflictError):
            users.create_user("Other", "RAVI@example.com", "longenough")

    def test_concurrent_signups_same_email(self, seeded_db):
        barrier = threading.Barrier(8)
        created, errors = [], []

        def signup():
            barrier.wait()
            try:
                created.append(users.create_user("Ravi", "race@example.com", "longenough"))
            except ConflictError as e:
                errors.append(e)

        threads = [threading.Thread(target=signup) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(created) == 1
        assert len(errors) == 7

    def test_short_password(self, seeded_db):
        with pytest.raises(ValidationError, match="at least 8"):
            users.create_user("Ravi", "ravi@example.com", "short")

    def test_invalid_email(self, seeded_db):
        with pytest.raises(ValidationError):
            users.create_user("Ravi", "not-an-email", "longenough")

    def test_to_dict_hides_secrets(self, student):
        data = student.to_dict()
        assert "password_hash" not in data
        assert "login_code" not in data
        assert data["has_pin"] is False
        assert data["spectate_permission"]["status"] == "none"


class TestEffectiveFlags:
    """Tests for role-derived status and premium flags."""

    def test_admin_defaults_active_premium(self, admin):
        assert admin.effective_account_status == "active"
        assert admin.effective_is_premium is True

    def test_admin_demo_preview(self, admin):
        updated = users.update_settings(admin.uid, account_status="demo")
        assert updated.effective_account_status == "demo"
        assert updated.effective_is_premium is False

    def test_subadmin_always_premium(self, subadmin):
        assert subadmin.effective_is_premium is True

    def test_non_admin_cannot_change_status(self, student):
        with pytest.raises(PermissionDeniedError):
            users.update_settings(student.uid, account_status="active")


class TestOnboardingAndProfile:
    """Tests for onboarding, profile edits and settings."""

    def test_onboarding(self, seeded_db):
        profile = users.create_user("Ravi", "ravi@example.com", "longenough")
        done = users.complete_onboarding(profile.uid, "JEE", "11", 2031, today=date(2030, 6, 1))
        assert done.onboarding_completed
        assert done.exam == "JEE"
        assert done.target_year == 2031

    def test_target_year_in_past(self, seeded_db):
        profile = users.create_user("Ravi", "ravi@example.com", "longenough")
        with pytest.raises(ValidationError, match="Target year"):
            users.complete_onboarding(profile.uid, "NEET", "12", 2029, today=date(2030, 6, 1))

    def test_onboarding_resets_progress(self, student):
        progress.update_progress(student.uid, "NEET", "physics", PHYSICS_1, completed=True)
        users.complete_onboarding(student.uid, "NEET", "12", date.today().year + 1)
        assert progress.load_progress(student.uid, "NEET")["physics"][PHYSICS_1].completed is False

    def test_update_profile(self, student):
        updated = users.update_profile(student.uid, display_name="  Asha R ")
        assert updated.display_name == "Asha R"
        assert updated.class_level == "12"

    def test_settings(self, student):
        updated = users.update_settings(student.uid, theme="violet", dark_mode=False)
        assert updated.theme == "violet"
        assert updated.dark_mode is False

    def test_unknown_theme(self, student):
        with pytest.raises(ValidationError):
            users.update_settings(student.uid, theme="neon")

    def test_pin(self, student):
        assert users.set_pin(student.uid, "4321").to_dict()["has_pin"] is True
        with pytest.raises(ValidationError):
            users.set_pin(student.uid, "12")

    def test_switch_exam_resets_progress(self, student):
        progress.update_progress(student.uid, "NEET", "physics", PHYSICS_1, completed=True)
        switched = users.switch_exam(student.uid)
        assert switched.exam == "JEE"
        jee_physics = progress.load_progress(student.uid, "JEE")["physics"]
        assert PHYSICS_1 not in jee_physics
        assert jee_physics["1. Physics and Measurement"].completed is False

        assert users.switch_exam(student.uid).exam == "NEET"
        assert progress.load_progress(student.uid, "NEET")["physics"][PHYSICS_1].completed is False

    def test_switch_exam_without_exam(self, seeded_db):
        profile = users.create_user("Ravi", "ravi@example.com", "longenough")
        with pytest.raises(ConflictError):
            users.switch_exam(profile.uid)


class TestSearch:
    """Tests for search_users."""

    def test_prefix_case_sensitive(self, student, admin):
        users.create_user("Ashok", "ashok@example.com", "longenough")
        assert [p.display_name for p in users.search_users("Ash")] == ["Asha Rao", "Ashok"]
        assert users.search_users("ash") == []

    def test_exclude_and_blank(self, student):
        assert users.search_users("Asha", exclude=[student.uid]) == []
        assert users.search_users("  ") == []


class TestEvaluateAccess:
    """Tests for evaluate_access ordering."""

    def test_ok(self, student):
        assert users.evaluate_access(student) == "ok"

    def test_onboarding(self, seeded_db):
        profile = users.create_user("Ravi", "ravi@example.com", "longenough")
        assert users.evaluate_access(profile) == "onboarding"

    def test_banned_before_everything_but_deleted(self, student, admin):
        banned = users.ban_user(admin, student.uid, 2)
        assert users.evaluate_access(banned) == "banned"
        deleted = users.delete_user(admin, student.uid)
        assert users.evaluate_access(deleted) == "deleted"

    def test_expired_ban_is_not_active(self, student, admin):
        banned = users.ban_user(admin, student.uid, 1)
        later = datetime.now(timezone.utc) + timedelta(hours=2)
        assert banned.ban_is_active(later) is False
        assert users.evaluate_access(banned, later) == "ok"

    def test_admin_skips_onboarding(self, admin):
        assert admin.onboarding_completed is False
        assert users.evaluate_access(admin) == "ok"

    def test_pending_approval(self, student):
        pending = users.UserProfile(**{**student.__dict__, "account_status": "pending_approval"})
        assert users.evaluate_access(pending) == "pending_approval"


class TestModeration:
    """Tests for bans, deletion and role changes."""

    def test_default_ban_duration(self, student, admin):
        banned = users.ban_user(admin, student.uid)
        assert banned.is_banned
        assert banned.ban_is_active()

    def test_ban_hours_validated(self, student, admin):
        with pytest.raises(ValidationError):
            users.ban_user(admin, student.uid, 0)

    def test_cannot_ban_self(self, admin):
        with pytest.raises(PermissionDeniedError):
            users.ban_user(admin, admin.uid, 1)

    def test_subadmin_cannot_ban_staff(self, admin, subadmin):
        with pytest.raises(PermissionDeniedError):
            users.ban_user(subadmin, admin.uid, 1)

    def test_student_cannot_ban(self, student, admin):
        with pytest.raises(PermissionDeniedError):
            users.ban_user(student, admin.uid, 1)

    def test_unban(self, student, admin):
        users.ban_user(admin, student.uid, 5)
        assert users.unban_user(admin, student.uid).is_banned is False

    def test_delete_is_soft_and_admin_only(self, student, admin, subadmin):
        with pytest.raises(PermissionDeniedError):
            users.delete_user(subadmin, student.uid)
        users.delete_user(admin, student.uid)
        assert users.require_user(student.uid).is_deleted
        assert student.uid not in [p.uid for p in users.list_users()]

    def test_change_role(self, student, admin):
        assert users.change_role(admin, student.uid, "subadmin").role == "subadmin"
        with pytest.raises(ValidationError):
            users.change_role(admin, student.uid, "owner")

    def test_unknown_target(self, admin):
        with pytest.raises(NotFoundError):
            users.ban_user(admin, "usr_missing", 1)

    def test_admin_create_user(self, admin):
        profile, temp_password = users.admin_create_user(admin, "New Kid", "kid@example.com")
        assert len(temp_password) == 10
        assert profile.effective_account_status == "demo"
        with pytest.raises(ValidationError):
            users.admin_create_user(admin, "Al", "al@example.com")
