"""Sign-up, sign-in and session endpoints."""

from fastapi import APIRouter, Depends, status

from preptrack.core import auth
from preptrack.core.users import UserProfile, create_user, evaluate_access
from preptrack.web.deps import get_current_user, get_reachable_user, get_token
from preptrack.web.schemas import (
    AccessResponse,
    LoginRequest,
    PinRequest,
    SessionResponse,
    SignupRequest,
    UserResponse,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _session_response(session: auth.Session, profile: UserProfile) -> SessionResponse:
    return SessionResponse(
        token=session.token,
        expires_at=session.expires_at,
        access=evaluate_access(profile),
        user=UserResponse(**profile.to_dict()),
    )


@router.post("/signup", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def signup(body: SignupRequest) -> SessionResponse:
    """Create a student account and sign it in."""
    profile = create_user(body.display_name, body.email, body.password)
    return _session_response(auth.create_session(profile.uid), profile)


@router.post("/login", response_model=SessionResponse)
def login(body: LoginRequest) -> SessionResponse:
    """Sign in with a password or a pattern string."""
    session, profile = auth.login(body.email, body.password)
    return _session_response(session, profile)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(token: str = Depends(get_token)) -> None:
    """Revoke the current token."""
    auth.logout(token)


@router.get("/access", response_model=AccessResponse)
def access(user: UserProfile = Depends(get_current_user)) -> AccessResponse:
    """Report which gate (if any) applies to the caller."""
    return AccessResponse(access=evaluate_access(user), user=UserResponse(**user.to_dict()))


@router.post("/unlock", response_model=UserResponse)
def unlock(body: PinRequest, user: UserProfile = Depends(get_reachable_user)) -> dict:
    """Check the quick-unlock PIN for the signed-in user."""
    return auth.unlock_with_pin(user.uid, body.pin).to_dict()
