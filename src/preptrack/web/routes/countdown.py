"""Exam countdown endpoint."""

from fastapi import APIRouter, Depends

from preptrack.core.countdown import countdowns
from preptrack.core.users import UserProfile
from preptrack.utils import clock
from preptrack.web.deps import get_viewer, require_exam_selected
from preptrack.web.schemas import CountdownEntry, CountdownResponse

router = APIRouter(prefix="/api/countdown", tags=["countdown"])


@router.get("", response_model=CountdownResponse)
def get_countdown(year: int | None = None, user: UserProfile = Depends(get_viewer)) -> CountdownResponse:
    """Time left until each sitting of the user's exam in their target year."""
    exam = require_exam_selected(user)
    target_year = year or user.target_year or clock.today().year
    return CountdownResponse(
        exam=exam,
        year=target_year,
        sittings=[
            CountdownEntry(
                name=sitting.name,
                date=sitting.date.isoformat(),
                time_left=left.to_dict(),
            )
            for sitting, left in countdowns(exam, target_year)
        ],
    )
