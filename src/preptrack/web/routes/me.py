"""Current user's profile, onboarding and settings."""

from fastapi import APIRouter, Depends, HTTPException, status

from preptrack.core import auth, spectate, users
from preptrack.core.users import UserProfile, evaluate_access
from preptrack.web.deps import get_active_user, get_actor, get_reachable_user
from preptrack.web.schemas import (
    MessageResponse,
    OnboardingRequest,
    PatternRequest,
    PinRequest,
    ProfileUpdate,
    SettingsUpdate,
    SpectateGrantRequest,
    UserResponse,
)

router = APIRouter(prefix="/api/me", tags=["me"])


@router.get("", response_model=UserResponse)
def get_me(user: UserProfile = Depends(get_reachable_user)) -> dict:
    """The caller's profile (available to banned users too)."""
    return user.to_dict()


@router.patch("", response_model=UserResponse)
def update_me(body: ProfileUpdate, user: UserProfile = Depends(get_reachable_user)) -> dict:
    """Edit display name, class or target year."""
    return users.update_profile(
        user.uid,
        display_name=body.display_name,
        class_level=body.class_level,
        target_year=body.target_year,
    ).to_dict()


@router.post("/onboarding", response_model=UserResponse)
def onboarding(body: OnboardingRequest, user: UserProfile = Depends(get_reachable_user)) -> dict:
    """Choose exam, class and target year; progress starts fresh."""
    if evaluate_access(user) not in ("ok", "onboarding"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Onboarding is not available for this account.",
        )
    return users.complete_onboarding(
        user.uid, body.exam, body.class_level, body.target_year
    ).to_dict()


@router.patch("/settings", response_model=UserResponse)
def update_settings(body: SettingsUpdate, user: UserProfile = Depends(get_actor)) -> dict:
    """Theme, font, dark mode, and (admins only) demo preview."""
    return users.update_settings(
        user.uid,
        theme=body.theme,
        font=body.font,
        dark_mode=body.dark_mode,
        account_status=body.account_status,
    ).to_dict()


@router.put("/pin", response_model=UserResponse)
def set_pin(body: PinRequest, user: UserProfile = Depends(get_actor)) -> dict:
    """Set the quick-unlock PIN."""
    return users.set_pin(user.uid, body.pin).to_dict()


@router.put("/pattern", response_model=MessageResponse)
def set_pattern(body: PatternRequest, user: UserProfile = Depends(get_actor)) -> MessageResponse:
    """Store a pattern lock usable in place of the password."""
    auth.set_pattern(user.uid, body.pattern)
    return MessageResponse(message="Pattern saved.")


@router.post("/switch-exam", response_model=UserResponse)
def switch_exam(user: UserProfile = Depends(get_actor)) -> dict:
    """Toggle between NEET and JEE; progress is reset."""
    return users.switch_exam(user.uid).to_dict()


@router.put("/spectate", response_model=UserResponse)
def grant_spectate(body: SpectateGrantRequest, user: UserProfile = Depends(get_actor)) -> dict:
    """Let staff view this account read-only for a number of hours."""
    return spectate.grant(user.uid, body.hours).to_dict()


@router.delete("/spectate", response_model=UserResponse)
def revoke_spectate(user: UserProfile = Depends(get_active_user)) -> dict:
    """Withdraw spectate permission."""
    return spectate.revoke(user.uid).to_dict()
