"""Study group and chat endpoints."""

from fastapi import APIRouter, Depends, status

from preptrack.core import groups
from preptrack.core.users import UserProfile, search_users
from preptrack.web.deps import get_actor, get_viewer
from preptrack.web.schemas import (
    GroupCreate,
    GroupMessageCreate,
    GroupMessageResponse,
    GroupResponse,
    MemberRequest,
    UserResponse,
    dump,
)

router = APIRouter(prefix="/api/groups", tags=["groups"])


@router.get("", response_model=list[GroupResponse])
def list_groups(user: UserProfile = Depends(get_viewer)) -> list[dict]:
    """Groups the caller belongs to, most recent activity first."""
    return dump(groups.list_groups(user.uid))


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
def create_group(body: GroupCreate, user: UserProfile = Depends(get_actor)) -> dict:
    """Create a group administered by the caller."""
    return groups.create_group(user, body.name, body.description).to_dict()


@router.get("/{group_id}", response_model=GroupResponse)
def get_group(group_id: str, user: UserProfile = Depends(get_viewer)) -> dict:
    """A group the caller is a member of."""
    return groups.get_group(user.uid, group_id).to_dict()


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(group_id: str, user: UserProfile = Depends(get_actor)) -> None:
    """Delete a group (group admin only)."""
    groups.delete_group(user, group_id)


@router.get("/{group_id}/members", response_model=list[UserResponse])
def list_members(group_id: str, user: UserProfile = Depends(get_viewer)) -> list[dict]:
    """Member profiles."""
    return dump(groups.list_members(user.uid, group_id))


@router.get("/{group_id}/candidates", response_model=list[UserResponse])
def search_candidates(group_id: str, q: str = "", user: UserProfile = Depends(get_actor)) -> list[dict]:
    """Users whose name starts with `q` and who are not yet members."""
    group = groups.get_group(user.uid, group_id)
    return dump(search_users(q, exclude=group.member_ids))


@router.post("/{group_id}/members", response_model=GroupResponse)
def add_member(group_id: str, body: MemberRequest, user: UserProfile = Depends(get_actor)) -> dict:
    """Add a member (group admin only)."""
    return groups.add_member(user, group_id, body.uid).to_dict()


@router.delete("/{group_id}/members/{member_uid}", response_model=GroupResponse)
def remove_member(group_id: str, member_uid: str, user: UserProfile = Depends(get_actor)) -> dict:
    """Remove a member (group admin only)."""
    return groups.remove_member(user, group_id, member_uid).to_dict()


@router.get("/{group_id}/messages", response_model=list[GroupMessageResponse])
def list_messages(group_id: str, user: UserProfile = Depends(get_viewer)) -> list[dict]:
    """Chat history, oldest first."""
    return dump(groups.list_messages(user.uid, group_id))


@router.post(
    "/{group_id}/messages",
    response_model=GroupMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def send_message(
    group_id: str, body: GroupMessageCreate, user: UserProfile = Depends(get_actor)
) -> dict:
    """Post a chat message."""
    return groups.send_message(user, group_id, body.text).to_dict()
