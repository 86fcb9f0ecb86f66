"""User profiles, access gating and admin moderation.

Responsibilities:
- Signup and admin-created accounts
- Onboarding, profile edits, settings and PIN
- Effective account status / premium flags derived from role
- Access evaluation (banned, deleted, pending approval, onboarding)
- Ban, unban, soft delete and role changes from the admin console
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Literal

import structlog

from preptrack.config.app_config import load_app_config
from preptrack.core import progress as progress_store
from preptrack.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from preptrack.core.security import (
    generate_access_code,
    generate_temp_password,
    hash_secret,
)
from preptrack.db.database import get_db, transaction
from preptrack.utils import clock
from preptrack.utils.validators import (
    new_id,
    require_digits,
    require_email,
    require_exam,
    require_text,
)

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

Role = Literal["admin", "subadmin", "user"]
AccountStatus = Literal["pending_approval", "active", "demo"]
AccessState = Literal["deleted", "banned", "pending_approval", "onboarding", "ok"]

ROLES = ("admin", "subadmin", "user")
STAFF_ROLES = ("admin", "subadmin")
THEMES = ("default", "rose", "violet", "green", "orange", "blue", "purple", "teal", "crimson")
FONTS = ("poppins",)

MIN_PASSWORD_LENGTH = 8
MIN_ADMIN_DISPLAY_NAME = 3
PIN_LENGTH = 4


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class UserProfile:
    """A user's stored profile."""

    uid: str
    display_name: str
    email: str
    photo_url: str | None = None
    class_level: str | None = None
    target_year: int | None = None
    exam: str | None = None
    onboarding_completed: bool = False
    role: str = "user"
    is_banned: bool = False
    ban_expires_at: str | None = None
    has_pending_unban_request: bool = False
    is_deleted: bool = False
    theme: str = "default"
    font: str = "poppins"
    dark_mode: bool = True
    current_streak: int = 0
    longest_streak: int = 0
    last_goal_completed_date: str | None = None
    total_points: int = 0
    is_premium: bool = False
    access_code: str | None = None
    account_status: str | None = None
    login_code: str | None = None
    spectate_status: str = "none"
    spectate_granted_at: str | None = None
    spectate_expires_at: str | None = None
    spectating_admin_id: str | None = None
    created_at: str = ""

    @property
    def is_staff(self) -> bool:
        """Admins and sub-admins may open the admin console."""
        return self.role in STAFF_ROLES

    @property
    def effective_account_status(self) -> str:
        """Stored status, else 'active' for staff and 'demo' for users."""
        if self.account_status:
            return self.account_status
        return "active" if self.is_staff else "demo"

    @property
    def effective_is_premium(self) -> bool:
        """Premium flag as seen by feature gates.

        Admins are premium unless they switched themselves to demo;
        sub-admins always are.
        """
        if self.role == "admin":
            return self.effective_account_status != "demo"
        if self.role == "subadmin":
            return True
        return self.is_premium

    def ban_is_active(self, now: datetime | None = None) -> bool:
        """A ban without expiry, or with an expiry still ahead, is active."""
        if not self.is_banned:
            return False
        expires = clock.parse_iso(self.ban_expires_at)
        return expires is None or expires > (now or clock.utc_now())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses (no secrets)."""
        return {
            "uid": self.uid,
            "display_name": self.display_name,
            "email": self.email,
            "photo_url": self.photo_url,
            "class_level": self.class_level,
            "target_year": self.target_year,
            "exam": self.exam,
            "onboarding_completed": self.onboarding_completed,
            "role": self.role,
            "is_banned": self.is_banned,
            "ban_expires_at": self.ban_expires_at,
            "has_pending_unban_request": self.has_pending_unban_request,
            "is_deleted": self.is_deleted,
            "theme": self.theme,
            "font": self.font,
            "dark_mode": self.dark_mode,
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "last_goal_completed_date": self.last_goal_completed_date,
            "total_points": self.total_points,
            "is_premium": self.effective_is_premium,
            "access_code": self.access_code,
            "account_status": self.effective_account_status,
            "has_pin": self.login_code is not None,
            "spectate_permission": {
                "status": self.spectate_status,
                "granted_at": self.spectate_granted_at,
                "expires_at": self.spectate_expires_at,
                "spectating_admin_id": self.spectating_admin_id,
            },
            "created_at": self.created_at,
        }


_BOOL_FIELDS = (
    "onboarding_completed",
    "is_banned",
    "has_pending_unban_request",
    "is_deleted",
    "dark_mode",
    "is_premium",
)


def row_to_profile(row: sqlite3.Row) -> UserProfile:
    """Build a UserProfile from a users row."""
    data = dict(row)
    data.pop("password_hash", None)
    data.pop("pattern_hash", None)
    for key in _BOOL_FIELDS:
        data[key] = bool(data[key])
    return UserProfile(**data)


# =============================================================================
# LOOKUPS
# =============================================================================


def get_user(uid: str) -> UserProfile | None:
    """Get a profile by uid.

    Returns:
        UserProfile if found, None otherwise
    """
    with get_db() as conn:
        row = conn.execute("SELECT * FROM users WHERE uid = ?", (uid,)).fetchone()
    return row_to_profile(row) if row else None


def require_user(uid: str) -> UserProfile:
    """Get a profile by uid or raise NotFoundError."""
    profile = get_user(uid)
    if profile is None:
        raise NotFoundError(f"User '{uid}' not found")
    return profile


def get_user_by_email(email: str) -> UserProfile | None:
    """Get a profile by email (case-insensitive)."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE lower(email) = lower(?)", (email.strip(),)
        ).fetchone()
    return row_to_profile(row) if row else None


def list_users() -> list[UserProfile]:
    """All non-deleted users ordered by display name."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM users WHERE is_deleted = 0 ORDER BY display_name"
        ).fetchall()
    return [row_to_profile(row) for row in rows]


def search_users(prefix: str, exclude: list[str] | None = None, limit: int = 10) -> list[UserProfile]:
    """Users whose display name starts with `prefix` (case-sensitive).

    Args:
        prefix: Display-name prefix; blank returns nothing
        exclude: uids to leave out (e.g. current group members)
        limit: Maximum results
    """
    prefix = prefix.strip()
    if not prefix:
        return []
    excluded = set(exclude or [])

    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM users
            WHERE is_deleted = 0 AND substr(display_name, 1, ?) = ?
            ORDER BY display_name
            """,
            (len(prefix), prefix),
        ).fetchall()

    results = [row_to_profile(row) for row in rows if row["uid"] not in excluded]
    return results[:limit]


# =============================================================================
# ACCOUNT CREATION
# =============================================================================


def _insert_user(
    display_name: str,
    email: str,
    password: str,
    role: str = "user",
    onboarding_completed: bool = False,
) -> UserProfile:
    duplicate = ConflictError(
        f"An account with email '{email}' already exists.", {"field": "email"}
    )
    uid = new_id("usr")
    now = clock.now_iso()
    password_hash = hash_secret(password)

    # Lookup and insert run under one write lock
    try:
        with transaction() as conn:
            existing = conn.execute(
                "SELECT uid FROM users WHERE lower(email) = lower(?)", (email,)
            ).fetchone()
            if existing is not None:
                raise duplicate
            conn.execute(
                """
                INSERT INTO users (
                    uid, display_name, email, password_hash, role,
                    onboarding_completed, is_premium, access_code, account_status, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, 0, ?, ?, ?)
                """,
                (
                    uid,
                    display_name,
                    email,
                    password_hash,
                    role,
                    int(onboarding_completed),
                    generate_access_code(),
                    "demo" if role == "user" else None,
                    now,
                ),
            )
    except sqlite3.IntegrityError as e:
        raise duplicate from e

    logger.info("users.created", uid=uid, role=role)
    return require_user(uid)


def create_user(display_name: str, email: str, password: str) -> UserProfile:
    """Sign up a new student account.

    New accounts are role 'user', not premium, in 'demo' status, and carry a
    random six-digit access code for admin activation.

    Raises:
        ValidationError: Missing name, bad email or short password
        ConflictError: Email already registered
    """
    name = require_text(display_name, "Name")
    email = require_email(email)
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters.",
            {"field": "password"},
        )
    return _insert_user(name, email, password)


def create_staff_user(display_name: str, email: str, password: str, role: str = "admin") -> UserProfile:
    """Create an admin or sub-admin account (CLI bootstrap)."""
    if role not in STAFF_ROLES:
        raise ValidationError(f"Role must be one of {', '.join(STAFF_ROLES)}.", {"field": "role"})
    name = require_text(display_name, "Name")
    email = require_email(email)
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters.",
            {"field": "password"},
        )
    return _insert_user(name, email, password, role=role)


def admin_create_user(actor: UserProfile, display_name: str, email: str) -> tuple[UserProfile, str]:
    """Create an account from the admin console with a temporary password.

    Returns:
        Tuple of (new profile, temporary password to hand to the student)
    """
    require_staff(actor)
    name = require_text(display_name, "Display name", min_length=MIN_ADMIN_DISPLAY_NAME)
    email = require_email(email)
    temp_password = generate_temp_password()
    profile = _insert_user(name, email, temp_password)
    logger.info("users.admin_created", uid=profile.uid, by=actor.uid)
    return profile, temp_password


# =============================================================================
# SELF-SERVICE
# =============================================================================


def _update_fields(uid: str, **fields: Any) -> UserProfile:
    if not fields:
        return require_user(uid)
    assignments = ", ".join(f"{key} = ?" for key in fields)
    with get_db() as conn:
        cursor = conn.execute(
            f"UPDATE users SET {assignments} WHERE uid = ?",
            (*fields.values(), uid),
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"User '{uid}' not found")
    return require_user(uid)


def _require_target_year(target_year: int, today: date | None) -> int:
    current_year = (today or clock.today()).year
    if target_year < current_year:
        raise ValidationError(
            f"Target year must be {current_year} or later.", {"field": "target_year"}
        )
    return target_year


def complete_onboarding(
    uid: str,
    exam: str,
    class_level: str,
    target_year: int,
    today: date | None = None,
) -> UserProfile:
    """Record exam, class and target year and start fresh progress."""
    require_exam(exam)
    class_level = require_text(class_level, "Class")
    _require_target_year(target_year, today)

    progress_store.reset_progress(uid)
    profile = _update_fields(
        uid,
        exam=exam,
        class_level=class_level,
        target_year=target_year,
        onboarding_completed=1,
    )
    logger.info("users.onboarded", uid=uid, exam=exam)
    return profile


def update_profile(
    uid: str,
    display_name: str | None = None,
    class_level: str | None = None,
    target_year: int | None = None,
    today: date | None = None,
) -> UserProfile:
    """Edit the profile card fields."""
    fields: dict[str, Any] = {}
    if display_name is not None:
        fields["display_name"] = require_text(display_name, "Name")
    if class_level is not None:
        fields["class_level"] = require_text(class_level, "Class")
    if target_year is not None:
        fields["target_year"] = _require_target_year(target_year, today)
    return _update_fields(uid, **fields)


def update_settings(
    uid: str,
    theme: str | None = None,
    font: str | None = None,
    dark_mode: bool | None = None,
    account_status: str | None = None,
) -> UserProfile:
    """Persist appearance settings.

    `account_status` lets an admin preview the app as a demo account; it is
    refused for everyone else.
    """
    fields: dict[str, Any] = {}
    if theme is not None:
        if theme not in THEMES:
            raise ValidationError(f"Unknown theme '{theme}'.", {"field": "theme"})
        fields["theme"] = theme
    if font is not None:
        if font not in FONTS:
            raise ValidationError(f"Unknown font '{font}'.", {"field": "font"})
        fields["font"] = font
    if dark_mode is not None:
        fields["dark_mode"] = int(dark_mode)
    if account_status is not None:
        profile = require_user(uid)
        if profile.role != "admin":
            raise PermissionDeniedError("Only admins can change their account status.")
        if account_status not in ("active", "demo"):
            raise ValidationError("Account status must be 'active' or 'demo'.", {"field": "account_status"})
        fields["account_status"] = account_status
    return _update_fields(uid, **fields)


def set_pin(uid: str, pin: str) -> UserProfile:
    """Set the four-digit quick-unlock PIN."""
    pin = require_digits(pin, PIN_LENGTH, "PIN")
    profile = _update_fields(uid, login_code=pin)
    logger.info("users.pin_set", uid=uid)
    return profile


def switch_exam(uid: str) -> UserProfile:
    """Toggle NEET <-> JEE and reset progress to the new exam's defaults."""
    profile = require_user(uid)
    if profile.exam is None:
        raise ConflictError("Complete onboarding before switching exams.")
    new_exam = "JEE" if profile.exam == "NEET" else "NEET"

    progress_store.reset_progress(uid)
    profile = _update_fields(uid, exam=new_exam)
    logger.info("users.exam_switched", uid=uid, exam=new_exam)
    return profile


# =============================================================================
# ACCESS
# =============================================================================


def evaluate_access(profile: UserProfile, now: datetime | None = None) -> AccessState:
    """Decide which gate, if any, applies to a signed-in user.

    Order: deleted, active ban, admin bypass, pending approval, onboarding.
    """
    if profile.is_deleted:
        return "deleted"
    if profile.ban_is_active(now):
        return "banned"
    if profile.role == "admin":
        return "ok"
    if profile.effective_account_status == "pending_approval":
        return "pending_approval"
    if not profile.onboarding_completed:
        return "onboarding"
    return "ok"


def require_staff(actor: UserProfile) -> None:
    """Raise unless the actor is an admin or sub-admin."""
    if not actor.is_staff:
        raise PermissionDeniedError("Admin console access requires an admin or sub-admin role.")


def require_admin(actor: UserProfile) -> None:
    """Raise unless the actor is a full admin."""
    if actor.role != "admin":
        raise PermissionDeniedError("This action requires the admin role.")


# =============================================================================
# MODERATION
# =============================================================================


def _moderation_target(actor: UserProfile, target_uid: str) -> UserProfile:
    require_staff(actor)
    if actor.uid == target_uid:
        raise PermissionDeniedError("You cannot perform this action on your own account.")
    return require_user(target_uid)


def _require_can_ban(actor: UserProfile, target: UserProfile) -> None:
    if actor.role == "admin":
        return
    if target.role != "user":
        raise PermissionDeniedError("Sub-admins can only ban or unban regular users.")


def ban_user(actor: UserProfile, target_uid: str, hours: int | None = None) -> UserProfile:
    """Ban a user for a number of hours.

    Raises:
        ValidationError: hours < 1
        PermissionDeniedError: Self-ban, or a sub-admin banning staff
    """
    if hours is None:
        hours = load_app_config().tracker.default_ban_hours
    if hours < 1:
        raise ValidationError("Ban duration must be at least 1 hour.", {"field": "hours"})

    target = _moderation_target(actor, target_uid)
    _require_can_ban(actor, target)

    expires = clock.hours_from(clock.utc_now(), hours)
    profile = _update_fields(target_uid, is_banned=1, ban_expires_at=expires.isoformat())
    logger.info("users.banned", uid=target_uid, by=actor.uid, hours=hours)
    return profile


def unban_user(actor: UserProfile, target_uid: str) -> UserProfile:
    """Lift a ban."""
    target = _moderation_target(actor, target_uid)
    _require_can_ban(actor, target)
    profile = _update_fields(target_uid, is_banned=0, ban_expires_at=None)
    logger.info("users.unbanned", uid=target_uid, by=actor.uid)
    return profile


def delete_user(actor: UserProfile, target_uid: str) -> UserProfile:
    """Soft-delete a user (admin only). The record is kept but hidden."""
    require_admin(actor)
    _moderation_target(actor, target_uid)
    profile = _update_fields(target_uid, is_deleted=1)
    with get_db() as conn:
        conn.execute("DELETE FROM auth_tokens WHERE uid = ?", (target_uid,))
    logger.info("users.deleted", uid=target_uid, by=actor.uid)
    return profile


def change_role(actor: UserProfile, target_uid: str, role: str) -> UserProfile:
    """Change a user's role (admin only)."""
    require_admin(actor)
    if role not in ROLES:
        raise ValidationError(f"Role must be one of {', '.join(ROLES)}.", {"field": "role"})
    target = _moderation_target(actor, target_uid)
    if target.role == role:
        return target
    profile = _update_fields(target_uid, role=role)
    logger.info("users.role_changed", uid=target_uid, by=actor.uid, role=role)
    return profile
