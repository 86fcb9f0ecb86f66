"""Syllabus endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from preptrack.core import syllabus
from preptrack.core.users import UserProfile
from preptrack.web.deps import get_active_user
from preptrack.web.schemas import SyllabusRecordResponse, dump

router = APIRouter(prefix="/api/syllabus", tags=["syllabus"])


@router.get("", response_model=list[SyllabusRecordResponse])
def list_syllabus(exam: str | None = None, user: UserProfile = Depends(get_active_user)) -> list[dict]:
    """Stored chapter lists, optionally for one exam."""
    return dump(syllabus.list_records(exam))


@router.get("/{exam}")
def get_syllabus(exam: str, user: UserProfile = Depends(get_active_user)) -> dict[str, list[str]]:
    """Subject -> chapters for an exam."""
    return syllabus.load_syllabus(exam)


@router.get("/{exam}/{subject}/units")
def get_units(
    exam: str, subject: str, user: UserProfile = Depends(get_active_user)
) -> dict[str, list[str]]:
    """Unit -> chapters tree for a subject."""
    units = syllabus.get_units(exam, subject)
    if units is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Subject '{subject}' not found for {exam}",
        )
    return units
