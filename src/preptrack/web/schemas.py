"""Pydantic schemas for the web API.

Request bodies plus response models for profiles, goals, the mistake
notebook, groups, posts and the admin console.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


# =============================================================================
# COMMON
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    database: str
    syllabus_seeded: bool


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


# =============================================================================
# AUTH AND PROFILE SCHEMAS
# =============================================================================


class SignupRequest(BaseModel):
    """Request body for creating an account."""

    display_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=200)
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    """Email plus a password or an encoded pattern ("1-5-9")."""

    email: str
    password: str


class SpectatePermissionResponse(BaseModel):
    """A user's spectate grant."""

    status: str
    granted_at: str | None = None
    expires_at: str | None = None
    spectating_admin_id: str | None = None


class UserResponse(BaseModel):
    """Public view of a user profile."""

    uid: str
    display_name: str
    email: str
    photo_url: str | None = None
    class_level: str | None = None
    target_year: int | None = None
    exam: str | None = None
    onboarding_completed: bool
    role: str
    is_banned: bool
    ban_expires_at: str | None = None
    has_pending_unban_request: bool
    is_deleted: bool
    theme: str
    font: str
    dark_mode: bool
    current_streak: int
    longest_streak: int
    last_goal_completed_date: str | None = None
    total_points: int
    is_premium: bool
    access_code: str | None = None
    account_status: str
    has_pin: bool
    spectate_permission: SpectatePermissionResponse
    created_at: str


class UserListResponse(BaseModel):
    """Response for list of users."""

    users: list[UserResponse]
    count: int


class SessionResponse(BaseModel):
    """Issued bearer token with the signed-in profile."""

    token: str
    expires_at: str
    access: str
    user: UserResponse


class AccessResponse(BaseModel):
    """Which gate applies to the current user."""

    access: str
    user: UserResponse


class OnboardingRequest(BaseModel):
    """Exam, class and target year chosen at onboarding."""

    exam: Literal["NEET", "JEE"]
    class_level: str = Field(..., min_length=1, max_length=50)
    target_year: int


class ProfileUpdate(BaseModel):
    """Editable profile card fields."""

    display_name: str | None = Field(default=None, max_length=100)
    class_level: str | None = Field(default=None, max_length=50)
    target_year: int | None = None


class SettingsUpdate(BaseModel):
    """Appearance settings; account_status is admin-only."""

    theme: str | None = None
    font: str | None = None
    dark_mode: bool | None = None
    account_status: str | None = None


class PinRequest(BaseModel):
    """Four-digit quick-unlock PIN."""

    pin: str


class PatternRequest(BaseModel):
    """Pattern lock encoded as dot numbers joined by '-'."""

    pattern: str


class SpectateGrantRequest(BaseModel):
    """Duration of a spectate grant."""

    hours: int = Field(..., ge=1)


# =============================================================================
# SYLLABUS AND PROGRESS SCHEMAS
# =============================================================================


class SyllabusRecordResponse(BaseModel):
    """Stored chapter list for one exam and subject."""

    id: str
    exam: str
    subject: str
    chapters: list[str]
    updated_at: str


class SyllabusUpdate(BaseModel):
    """Syllabus editor body: newline-separated text or a list."""

    chapters: str | list[str]


class ChapterProgressResponse(BaseModel):
    """Progress on a single chapter."""

    completed: bool
    questions: int
    confidence: int
    revisions: list[int]


class ProgressUpdate(BaseModel):
    """Partial update of one chapter's progress."""

    subject: str
    chapter: str
    completed: bool | None = None
    questions: int | None = None
    confidence: int | None = None


class ChapterRef(BaseModel):
    """Identifies a chapter."""

    subject: str
    chapter: str


class RevisionLogRequest(BaseModel):
    """Subject-level revision session."""

    subject: str
    questions: int = Field(default=0)


class SubjectRevisionResponse(BaseModel):
    """A logged revision session."""

    timestamp: int
    questions: int


class TimetableRequest(BaseModel):
    """Subject for which to generate a revision timetable."""

    subject: str


class TimetableResponse(BaseModel):
    """Generated timetable HTML."""

    subject: str
    timetable_html: str


# =============================================================================
# GOAL SCHEMAS
# =============================================================================


class SubGoalSchema(BaseModel):
    """One item of a day's goal list."""

    type: Literal["chapter", "custom"]
    subject: str | None = None
    chapter: str | None = None
    text: str | None = None
    completed: bool = False


class DailyGoalRequest(BaseModel):
    """Replace the goal list for a date."""

    goals: list[SubGoalSchema]


class DailyGoalResponse(BaseModel):
    """All sub-goals for one date."""

    uid: str
    date: str
    goals: list[SubGoalSchema]
    completed: bool


class StreakResponse(BaseModel):
    """Streak and points after completing the day."""

    current_streak: int
    longest_streak: int
    total_points: int
    points_earned: int
    bonus: int
    last_goal_completed_date: str


class CompletionResponse(BaseModel):
    """Result of completing a sub-goal."""

    goal: DailyGoalResponse
    streak: StreakResponse | None = None


class MonthGoalsResponse(BaseModel):
    """Goal days within a month plus the fully completed ones."""

    goals: list[DailyGoalResponse]
    completed_days: list[str]


# =============================================================================
# MISTAKE SCHEMAS
# =============================================================================


class MistakeCreate(BaseModel):
    """Request body for logging a mistake."""

    subject: str
    chapter: str
    question: str
    my_mistake: str
    correct_concept: str
    tags: list[str] = Field(default_factory=list)


class MistakeResponse(BaseModel):
    """A mistake notebook entry."""

    mistake_id: str
    uid: str
    subject: str
    chapter: str
    question: str
    my_mistake: str
    correct_concept: str
    tags: list[str]
    status: str
    created_at: str


class MistakeListResponse(BaseModel):
    """Filtered mistakes with the available filter values."""

    mistakes: list[MistakeResponse]
    count: int
    subjects: list[str]
    tags: list[str]


# =============================================================================
# GROUP AND SOCIAL SCHEMAS
# =============================================================================


class GroupCreate(BaseModel):
    """Request body for creating a study group."""

    name: str
    description: str = ""


class GroupResponse(BaseModel):
    """A study group."""

    group_id: str
    name: str
    description: str
    admin_id: str
    created_at: str
    last_message: str | None = None
    last_message_at: str
    member_ids: list[str]


class GroupMessageCreate(BaseModel):
    """Chat message body."""

    text: str


class GroupMessageResponse(BaseModel):
    """A chat message."""

    message_id: str
    group_id: str
    sender_id: str
    sender_name: str
    sender_photo_url: str | None = None
    text: str
    created_at: str


class MemberRequest(BaseModel):
    """User to add to a group."""

    uid: str


class PostCreate(BaseModel):
    """Photo post body."""

    image_url: str
    caption: str = ""


class PostResponse(BaseModel):
    """A photo feed post."""

    post_id: str
    uid: str
    user_display_name: str
    user_photo_url: str | None = None
    image_url: str
    caption: str
    likes: list[str]
    like_count: int
    created_at: str


class FollowResponse(BaseModel):
    """Follow state between the caller and another user."""

    uid: str
    following: bool


# =============================================================================
# ADMIN CONSOLE SCHEMAS
# =============================================================================


class RedeemRequest(BaseModel):
    """Premium code to redeem."""

    code: str


class PremiumCodeResponse(BaseModel):
    """An unredeemed premium code."""

    code: str
    created_at: str
    created_by: str


class AccessCodeRequest(BaseModel):
    """Student access code for direct activation."""

    access_code: str


class AdminUserCreate(BaseModel):
    """Admin-created account."""

    display_name: str
    email: str


class AdminUserCreated(BaseModel):
    """New account plus the temporary password to share."""

    user: UserResponse
    temporary_password: str


class BanRequest(BaseModel):
    """Ban duration; the configured default applies when omitted."""

    hours: int | None = None


class RoleRequest(BaseModel):
    """New role for a user."""

    role: Literal["admin", "subadmin", "user"]


class UnbanRequestCreate(BaseModel):
    """Appeal from a banned user."""

    reason: str


class UnbanRequestResponse(BaseModel):
    """A banned user's appeal."""

    request_id: str
    uid: str
    user_name: str
    user_email: str
    reason: str
    status: str
    created_at: str
    reviewed_at: str | None = None


class UnbanDecision(BaseModel):
    """Approve or reject an appeal."""

    approve: bool


class SpectateLogResponse(BaseModel):
    """Audit entry for a spectate session."""

    log_id: str
    admin_id: str
    admin_name: str
    uid: str
    user_name: str
    started_at: str
    ended_at: str | None = None


class ContactCreate(BaseModel):
    """Public contact form."""

    name: str
    email: str
    message: str


class ContactResponse(BaseModel):
    """A contact form submission."""

    submission_id: str
    name: str
    email: str
    message: str
    created_at: str
    is_read: bool


# =============================================================================
# COUNTDOWN SCHEMAS
# =============================================================================


class CountdownEntry(BaseModel):
    """One exam sitting with remaining time."""

    name: str
    date: str
    time_left: dict[str, int]


class CountdownResponse(BaseModel):
    """Countdowns for the user's exam and target year."""

    exam: str
    year: int
    sittings: list[CountdownEntry]


def dump(items: list[Any]) -> list[dict[str, Any]]:
    """Serialize a list of domain objects exposing to_dict()."""
    return [item.to_dict() for item in items]
