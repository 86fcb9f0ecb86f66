"""Request dependencies: authentication, access gates and spectate views."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from preptrack.core import auth, spectate
from preptrack.core.users import UserProfile, evaluate_access

SPECTATE_HEADER = "X-Spectate-User"
READ_METHODS = ("GET", "HEAD")

bearer_scheme = HTTPBearer(auto_error=False)

ACCESS_MESSAGES = {
    "deleted": "This account has been deleted by an administrator.",
    "banned": "Your account is banned. You can submit an unban request.",
    "pending_approval": "Your account is awaiting approval.",
    "onboarding": "Complete onboarding to continue.",
}


def reject_spectate_writes(request: Request) -> None:
    """Refuse any write made from a spectate view (registered app-wide)."""
    if request.headers.get(SPECTATE_HEADER) and request.method not in READ_METHODS:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Spectate sessions are read-only.",
        )


def get_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Bearer token from the Authorization header."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


def get_current_user(token: str = Depends(get_token)) -> UserProfile:
    """Signed-in user, whatever their account state."""
    profile = auth.resolve_token(token)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired or invalid",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return profile


def get_reachable_user(user: UserProfile = Depends(get_current_user)) -> UserProfile:
    """Signed-in user who is not deleted.

    Banned users pass so they can read their profile and appeal.
    """
    if user.is_deleted:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ACCESS_MESSAGES["deleted"])
    return user


def get_active_user(user: UserProfile = Depends(get_current_user)) -> UserProfile:
    """Signed-in user cleared for the main app."""
    access = evaluate_access(user)
    if access != "ok":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ACCESS_MESSAGES[access])
    return user


def get_staff_user(user: UserProfile = Depends(get_active_user)) -> UserProfile:
    """Admin or sub-admin."""
    if not user.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin console access requires an admin or sub-admin role.",
        )
    return user


def get_admin_user(user: UserProfile = Depends(get_staff_user)) -> UserProfile:
    """Full admin."""
    if user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This action requires the admin role.",
        )
    return user


def get_viewer(request: Request, user: UserProfile = Depends(get_active_user)) -> UserProfile:
    """Whose data a read shows.

    With an X-Spectate-User header, staff holding an active spectate
    session see that user; otherwise the caller sees themself.
    """
    target_uid = request.headers.get(SPECTATE_HEADER)
    if not target_uid:
        return user
    reject_spectate_writes(request)
    return spectate.resolve_view(user, target_uid)


def get_actor(request: Request, user: UserProfile = Depends(get_active_user)) -> UserProfile:
    """Caller of a write; refuses requests made from a spectate view."""
    if request.headers.get(SPECTATE_HEADER):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Spectate sessions are read-only.",
        )
    return user


def require_exam_selected(user: UserProfile) -> str:
    """The user's exam, or 409 if onboarding never chose one."""
    if not user.exam:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Choose an exam to continue.",
        )
    return user.exam


def get_premium_actor(user: UserProfile = Depends(get_actor)) -> UserProfile:
    """Caller with premium access; demo accounts are refused."""
    if not user.effective_is_premium:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This feature requires a premium account. Redeem a code to upgrade.",
        )
    return user


def get_premium_viewer(user: UserProfile = Depends(get_viewer)) -> UserProfile:
    """Read access to a premium feature for the viewed user."""
    if not user.effective_is_premium:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This feature requires a premium account. Redeem a code to upgrade.",
        )
    return user
