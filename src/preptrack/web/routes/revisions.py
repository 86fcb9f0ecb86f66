"""Revision hub: logged sessions and AI timetables (premium only)."""

from fastapi import APIRouter, Depends, status

from preptrack.core import progress
from preptrack.core.analytics import completed_subjects
from preptrack.core.errors import ConflictError
from preptrack.core.syllabus import load_syllabus, subject_title
from preptrack.core.timetable import generate_revision_timetable
from preptrack.core.users import UserProfile
from preptrack.web.deps import get_premium_actor, get_premium_viewer, require_exam_selected
from preptrack.web.schemas import (
    RevisionLogRequest,
    SubjectRevisionResponse,
    TimetableRequest,
    TimetableResponse,
)

router = APIRouter(prefix="/api/revisions", tags=["revisions"])


def _require_completed(user: UserProfile, subject: str) -> str:
    """The user's exam, or 409 unless every chapter of `subject` is done."""
    exam = require_exam_selected(user)
    syllabus = load_syllabus(exam)
    done = completed_subjects(progress.load_progress(user.uid, exam, syllabus), syllabus)
    if subject not in done:
        raise ConflictError(
            "Complete every chapter of this subject to unlock its revision hub.",
            {"field": "subject"},
        )
    return exam


@router.get("")
def list_revisions(user: UserProfile = Depends(get_premium_viewer)) -> dict[str, list[dict]]:
    """Logged revision sessions per subject, oldest first."""
    return {
        subject: [entry.to_dict() for entry in entries]
        for subject, entries in progress.list_revisions(user.uid).items()
    }


@router.post("", response_model=SubjectRevisionResponse, status_code=status.HTTP_201_CREATED)
def log_revision(body: RevisionLogRequest, user: UserProfile = Depends(get_premium_actor)) -> dict:
    """Log a revision session for a completed subject."""
    _require_completed(user, body.subject)
    return progress.log_revision(user.uid, body.subject, body.questions).to_dict()


@router.post("/timetable", response_model=TimetableResponse)
def timetable(body: TimetableRequest, user: UserProfile = Depends(get_premium_actor)) -> TimetableResponse:
    """Generate a 7-day revision plan for a completed subject."""
    exam = _require_completed(user, body.subject)
    html = generate_revision_timetable(subject_title(body.subject), exam)
    return TimetableResponse(subject=body.subject, timetable_html=html)
