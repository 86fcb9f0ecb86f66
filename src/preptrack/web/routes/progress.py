"""Chapter progress endpoints."""

from typing import Any

from fastapi import APIRouter, Depends

from preptrack.core import progress
from preptrack.core.users import UserProfile
from preptrack.web.deps import get_actor, get_viewer, require_exam_selected
from preptrack.web.schemas import ChapterProgressResponse, ChapterRef, ProgressUpdate

router = APIRouter(prefix="/api/progress", tags=["progress"])


@router.get("")
def get_progress(user: UserProfile = Depends(get_viewer)) -> dict[str, Any]:
    """Full progress tree for the viewed user's exam."""
    exam = require_exam_selected(user)
    return {
        "exam": exam,
        "progress": progress.progress_to_dict(progress.load_progress(user.uid, exam)),
    }


@router.patch("", response_model=ChapterProgressResponse)
def update_progress(body: ProgressUpdate, user: UserProfile = Depends(get_actor)) -> dict:
    """Update completion, solved questions or confidence of a chapter."""
    exam = require_exam_selected(user)
    return progress.update_progress(
        user.uid,
        exam,
        body.subject,
        body.chapter,
        completed=body.completed,
        questions=body.questions,
        confidence=body.confidence,
    ).to_dict()


@router.post("/revise", response_model=ChapterProgressResponse)
def revise_chapter(body: ChapterRef, user: UserProfile = Depends(get_actor)) -> dict:
    """Record a chapter revision now."""
    exam = require_exam_selected(user)
    return progress.revise_chapter(user.uid, exam, body.subject, body.chapter).to_dict()
