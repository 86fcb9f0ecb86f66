"""Analytics endpoints (interpretation charts, per-unit metrics)."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from preptrack.core import analytics
from preptrack.core.progress import load_progress
from preptrack.core.syllabus import load_syllabus
from preptrack.core.users import UserProfile
from preptrack.web.deps import get_viewer, require_exam_selected

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/interpretation")
def get_interpretation(user: UserProfile = Depends(get_viewer)) -> dict[str, Any]:
    """Completion, confidence and MCQ totals per subject and overall."""
    exam = require_exam_selected(user)
    syllabus = load_syllabus(exam)
    result = analytics.interpretation(load_progress(user.uid, exam, syllabus), syllabus)
    return result.to_dict()


@router.get("/subjects/{subject}")
def get_subject(subject: str, user: UserProfile = Depends(get_viewer)) -> dict[str, Any]:
    """Subject summary plus per-unit breakdown."""
    exam = require_exam_selected(user)
    syllabus = load_syllabus(exam)
    if subject not in syllabus and subject != analytics.CHEMISTRY:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Subject '{subject}' not found for {exam}",
        )
    progress = load_progress(user.uid, exam, syllabus)
    return {
        "summary": analytics.subject_completion(progress, syllabus, subject).to_dict(),
        "units": [u.to_dict() for u in analytics.unit_metrics(progress, exam, subject)],
    }


@router.get("/completed-subjects")
def get_completed_subjects(user: UserProfile = Depends(get_viewer)) -> dict[str, list[str]]:
    """Subjects whose every chapter is completed."""
    exam = require_exam_selected(user)
    syllabus = load_syllabus(exam)
    progress = load_progress(user.uid, exam, syllabus)
    return {"subjects": analytics.completed_subjects(progress, syllabus)}
