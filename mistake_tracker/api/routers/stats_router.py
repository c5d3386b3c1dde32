"""Weekly statistics router."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from mistake_tracker.api.deps import get_tracker
from mistake_tracker.api.schemas import WeeklyStatsOut
from mistake_tracker.service.tracker import MistakeTracker

router = APIRouter()


@router.get("", response_model=WeeklyStatsOut, summary="Weekly statistics")
def get_weekly_stats(tracker: MistakeTracker = Depends(get_tracker)) -> WeeklyStatsOut:
    """
    Statistics for the current Monday-Sunday week.

    Returns:
    - Mistakes logged and retests completed this week
    - Correct retests this week
    - Categories ranked by mistakes this week
    - Daily activity for the last 7 days
    """
    return WeeklyStatsOut.model_validate(tracker.weekly_stats())
