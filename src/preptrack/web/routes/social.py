"""Photo feed and follow endpoints."""

from fastapi import APIRouter, Depends, status

from preptrack.core import social
from preptrack.core.users import UserProfile
from preptrack.web.deps import get_actor, get_viewer
from preptrack.web.schemas import FollowResponse, PostCreate, PostResponse, dump

router = APIRouter(prefix="/api", tags=["social"])


@router.get("/posts", response_model=list[PostResponse])
def feed(uid: str | None = None, user: UserProfile = Depends(get_viewer)) -> list[dict]:
    """All posts newest first, or one author's posts."""
    return dump(social.list_feed(uid))


@router.post("/posts", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(body: PostCreate, user: UserProfile = Depends(get_actor)) -> dict:
    """Share a photo post."""
    return social.create_post(user, body.image_url, body.caption).to_dict()


@router.post("/posts/{post_id}/like", response_model=PostResponse)
def like(post_id: str, user: UserProfile = Depends(get_actor)) -> dict:
    """Toggle the caller's like."""
    return social.toggle_like(user.uid, post_id).to_dict()


@router.delete("/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(post_id: str, user: UserProfile = Depends(get_actor)) -> None:
    """Delete one of the caller's posts."""
    social.delete_post(user, post_id)


@router.get("/users/{uid}/follow", response_model=FollowResponse)
def follow_state(uid: str, user: UserProfile = Depends(get_viewer)) -> FollowResponse:
    """Whether the caller follows a user."""
    return FollowResponse(uid=uid, following=social.is_following(user.uid, uid))


@router.put("/users/{uid}/follow", response_model=FollowResponse)
def follow(uid: str, user: UserProfile = Depends(get_actor)) -> FollowResponse:
    """Follow a user."""
    social.follow(user.uid, uid)
    return FollowResponse(uid=uid, following=True)


@router.delete("/users/{uid}/follow", response_model=FollowResponse)
def unfollow(uid: str, user: UserProfile = Depends(get_actor)) -> FollowResponse:
    """Stop following a user."""
    social.unfollow(user.uid, uid)
    return FollowResponse(uid=uid, following=False)
