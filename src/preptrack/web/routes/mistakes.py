"""Mistake notebook endpoints."""

from fastapi import APIRouter, Depends, status

from preptrack.core import mistakes
from preptrack.core.users import UserProfile
from preptrack.web.deps import get_actor, get_viewer
from preptrack.web.schemas import MistakeCreate, MistakeListResponse, MistakeResponse

router = APIRouter(prefix="/api/mistakes", tags=["mistakes"])


@router.get("", response_model=MistakeListResponse)
def list_mistakes(
    subject: str = mistakes.ALL,
    tag: str = mistakes.ALL,
    user: UserProfile = Depends(get_viewer),
) -> MistakeListResponse:
    """Mistakes newest first, filtered by subject and tag."""
    items = mistakes.list_mistakes(user.uid, subject=subject, tag=tag)
    options = mistakes.facets(user.uid)
    return MistakeListResponse(
        mistakes=[MistakeResponse(**m.to_dict()) for m in items],
        count=len(items),
        subjects=options["subjects"],
        tags=options["tags"],
    )


@router.post("", response_model=MistakeResponse, status_code=status.HTTP_201_CREATED)
def add_mistake(body: MistakeCreate, user: UserProfile = Depends(get_actor)) -> dict:
    """Log a mistake."""
    return mistakes.add_mistake(
        user.uid,
        subject=body.subject,
        chapter=body.chapter,
        question=body.question,
        my_mistake=body.my_mistake,
        correct_concept=body.correct_concept,
        tags=body.tags,
    ).to_dict()


@router.post("/{mistake_id}/toggle", response_model=MistakeResponse)
def toggle(mistake_id: str, user: UserProfile = Depends(get_actor)) -> dict:
    """Flip between active and reviewed."""
    return mistakes.toggle_status(user.uid, mistake_id).to_dict()


@router.delete("/{mistake_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete(mistake_id: str, user: UserProfile = Depends(get_actor)) -> None:
    """Delete a mistake."""
    mistakes.delete_mistake(user.uid, mistake_id)
