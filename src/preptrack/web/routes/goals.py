"""Daily goal endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from preptrack.core import goals
from preptrack.core.users import UserProfile
from preptrack.web.deps import get_actor, get_viewer, require_exam_selected
from preptrack.web.schemas import (
    CompletionResponse,
    DailyGoalRequest,
    DailyGoalResponse,
    MonthGoalsResponse,
)

router = APIRouter(prefix="/api/goals", tags=["goals"])


@router.get("/chapters/open")
def open_chapters(user: UserProfile = Depends(get_viewer)) -> dict[str, list[str]]:
    """Chapters not yet completed, per subject (chapter-goal picker)."""
    return goals.uncompleted_chapters(user.uid, require_exam_selected(user))


@router.get("/month/{year}/{month}", response_model=MonthGoalsResponse)
def month(year: int, month: int, user: UserProfile = Depends(get_viewer)) -> MonthGoalsResponse:
    """Calendar view: goal days in a month and the fully completed ones."""
    days = goals.month_goals(user.uid, year, month)
    return MonthGoalsResponse(
        goals=[DailyGoalResponse(**g.to_dict()) for g in days],
        completed_days=[g.date for g in days if g.completed],
    )


@router.get("/{day}", response_model=DailyGoalResponse)
def get_day(day: str, user: UserProfile = Depends(get_viewer)) -> dict:
    """Goals set for a date."""
    goal = goals.get_daily_goal(user.uid, day)
    if goal is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No goals set for {day}.",
        )
    return goal.to_dict()


@router.put("/{day}", response_model=DailyGoalResponse)
def set_day(day: str, body: DailyGoalRequest, user: UserProfile = Depends(get_actor)) -> dict:
    """Create or replace the goal list for today or a future date."""
    sub_goals = [goals.SubGoal.from_dict(g.model_dump()) for g in body.goals]
    return goals.set_daily_goals(user.uid, day, sub_goals).to_dict()


@router.post("/{day}/items/{index}/complete", response_model=CompletionResponse)
def complete(day: str, index: int, user: UserProfile = Depends(get_actor)) -> CompletionResponse:
    """Complete one sub-goal; finishing today's list updates the streak."""
    result = goals.complete_sub_goal(user.uid, day, index)
    return CompletionResponse(
        goal=DailyGoalResponse(**result.goal.to_dict()),
        streak=result.streak.to_dict() if result.streak else None,
    )
