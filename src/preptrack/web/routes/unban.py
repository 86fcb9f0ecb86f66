"""Unban request submission (reachable while banned)."""

from fastapi import APIRouter, Depends, status

from preptrack.core import moderation
from preptrack.core.users import UserProfile
from preptrack.web.deps import get_reachable_user
from preptrack.web.schemas import UnbanRequestCreate, UnbanRequestResponse

router = APIRouter(prefix="/api/unban-requests", tags=["moderation"])


@router.post("", response_model=UnbanRequestResponse, status_code=status.HTTP_201_CREATED)
def submit(body: UnbanRequestCreate, user: UserProfile = Depends(get_reachable_user)) -> dict:
    """Appeal the caller's active ban."""
    return moderation.submit_unban_request(user.uid, body.reason).to_dict()
