"""Admin console endpoints.

Staff (admin or sub-admin) may manage users, codes, appeals, the contact
inbox, the syllabus and spectate sessions. Deleting users and changing
roles is reserved for admins.
"""

from fastapi import APIRouter, Depends, status

from preptrack.core import contact, moderation, premium, spectate, syllabus, users
from preptrack.core.users import UserProfile
from preptrack.web.deps import get_admin_user, get_staff_user
from preptrack.web.schemas import (
    AccessCodeRequest,
    AdminUserCreate,
    AdminUserCreated,
    BanRequest,
    ContactResponse,
    PremiumCodeResponse,
    RoleRequest,
    SpectateLogResponse,
    SyllabusRecordResponse,
    SyllabusUpdate,
    UnbanDecision,
    UnbanRequestResponse,
    UserListResponse,
    UserResponse,
    dump,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


# =============================================================================
# USERS
# =============================================================================


@router.get("/users", response_model=UserListResponse)
def list_users(admin: UserProfile = Depends(get_staff_user)) -> UserListResponse:
    """All non-deleted users."""
    profiles = users.list_users()
    return UserListResponse(
        users=[UserResponse(**p.to_dict()) for p in profiles],
        count=len(profiles),
    )


@router.post("/users", response_model=AdminUserCreated, status_code=status.HTTP_201_CREATED)
def create_user(body: AdminUserCreate, admin: UserProfile = Depends(get_staff_user)) -> AdminUserCreated:
    """Create an account with a temporary password."""
    profile, temp_password = users.admin_create_user(admin, body.display_name, body.email)
    return AdminUserCreated(user=UserResponse(**profile.to_dict()), temporary_password=temp_password)


@router.post("/users/{uid}/ban", response_model=UserResponse)
def ban(uid: str, body: BanRequest, admin: UserProfile = Depends(get_staff_user)) -> dict:
    """Ban a user for a number of hours."""
    return users.ban_user(admin, uid, body.hours).to_dict()


@router.post("/users/{uid}/unban", response_model=UserResponse)
def unban(uid: str, admin: UserProfile = Depends(get_staff_user)) -> dict:
    """Lift a ban."""
    return users.unban_user(admin, uid).to_dict()


@router.delete("/users/{uid}", response_model=UserResponse)
def delete_user(uid: str, admin: UserProfile = Depends(get_admin_user)) -> dict:
    """Soft-delete a user."""
    return users.delete_user(admin, uid).to_dict()


@router.put("/users/{uid}/role", response_model=UserResponse)
def change_role(uid: str, body: RoleRequest, admin: UserProfile = Depends(get_admin_user)) -> dict:
    """Change a user's role."""
    return users.change_role(admin, uid, body.role).to_dict()


# =============================================================================
# PREMIUM CODES
# =============================================================================


@router.get("/codes", response_model=list[PremiumCodeResponse])
def list_codes(admin: UserProfile = Depends(get_staff_user)) -> list[dict]:
    """Unredeemed codes, newest first."""
    return dump(premium.list_codes(admin))


@router.post("/codes", response_model=PremiumCodeResponse, status_code=status.HTTP_201_CREATED)
def generate_code(admin: UserProfile = Depends(get_staff_user)) -> dict:
    """Generate a single-use premium code."""
    return premium.generate_code(admin).to_dict()


@router.delete("/codes/{code}", status_code=status.HTTP_204_NO_CONTENT)
def delete_code(code: str, admin: UserProfile = Depends(get_staff_user)) -> None:
    """Revoke an unredeemed code."""
    premium.delete_code(admin, code)


@router.post("/activate", response_model=UserListResponse)
def activate(body: AccessCodeRequest, admin: UserProfile = Depends(get_staff_user)) -> UserListResponse:
    """Upgrade demo accounts holding a six-digit access code."""
    profiles = premium.activate_by_access_code(admin, body.access_code)
    return UserListResponse(
        users=[UserResponse(**p.to_dict()) for p in profiles],
        count=len(profiles),
    )


# =============================================================================
# UNBAN REQUESTS
# =============================================================================


@router.get("/unban-requests", response_model=list[UnbanRequestResponse])
def pending_unban_requests(admin: UserProfile = Depends(get_staff_user)) -> list[dict]:
    """Pending appeals, oldest first."""
    return dump(moderation.list_pending(admin))


@router.post("/unban-requests/{request_id}", response_model=UnbanRequestResponse)
def resolve_unban_request(
    request_id: str, body: UnbanDecision, admin: UserProfile = Depends(get_staff_user)
) -> dict:
    """Approve (and unban) or reject an appeal."""
    return moderation.resolve(admin, request_id, body.approve).to_dict()


# =============================================================================
# CONTACT INBOX
# =============================================================================


@router.get("/contact", response_model=list[ContactResponse])
def inbox(admin: UserProfile = Depends(get_staff_user)) -> list[dict]:
    """Contact submissions, newest first."""
    return dump(contact.list_submissions(admin))


@router.post("/contact/{submission_id}/toggle-read", response_model=ContactResponse)
def toggle_read(submission_id: str, admin: UserProfile = Depends(get_staff_user)) -> dict:
    """Flip the read flag."""
    return contact.toggle_read(admin, submission_id).to_dict()


@router.delete("/contact/{submission_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_submission(submission_id: str, admin: UserProfile = Depends(get_staff_user)) -> None:
    """Delete a submission."""
    contact.delete_submission(admin, submission_id)


# =============================================================================
# SYLLABUS EDITOR
# =============================================================================


@router.put("/syllabus/{exam}/{subject}", response_model=SyllabusRecordResponse)
def save_syllabus(
    exam: str, subject: str, body: SyllabusUpdate, admin: UserProfile = Depends(get_staff_user)
) -> dict:
    """Replace a subject's chapter list."""
    return syllabus.save_subject_chapters(exam, subject, body.chapters).to_dict()


@router.post("/syllabus/seed")
def seed_syllabus(admin: UserProfile = Depends(get_admin_user)) -> dict[str, int]:
    """Overwrite every subject with the default chapter lists."""
    return {"rows": syllabus.seed_default_syllabus()}


# =============================================================================
# SPECTATE
# =============================================================================


@router.get("/spectate/logs", response_model=list[SpectateLogResponse])
def spectate_logs(admin: UserProfile = Depends(get_staff_user)) -> list[dict]:
    """Recent spectate sessions, newest first."""
    return dump(spectate.list_logs(admin))


@router.post("/spectate/{uid}/start", response_model=SpectateLogResponse)
def start_spectate(uid: str, admin: UserProfile = Depends(get_staff_user)) -> dict:
    """Begin a read-only session on a user who granted permission."""
    return spectate.start(admin, uid).to_dict()


@router.post("/spectate/{uid}/stop", response_model=SpectateLogResponse)
def stop_spectate(uid: str, admin: UserProfile = Depends(get_staff_user)) -> dict:
    """End the caller's session on a user."""
    return spectate.stop(admin, uid).to_dict()
