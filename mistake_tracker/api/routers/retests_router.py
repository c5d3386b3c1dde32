"""
Retests router.

Lists scheduled retests and records their outcomes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import Field

from mistake_tracker.api.deps import get_tracker
from mistake_tracker.api.schemas import (
    AgendaItemOut,
    CamelModel,
    MistakeOut,
    RetestAgendaOut,
    RetestOut,
)
from mistake_tracker.core.records import RetestResult
from mistake_tracker.service.agenda import AgendaItem
from mistake_tracker.service.tracker import MistakeTracker

router = APIRouter()


class RetestCompletion(CamelModel):
    """Body for completing a retest."""

    result: RetestResult = Field(..., description="correct or incorrect")


def _agenda_items(items: list[AgendaItem]) -> list[AgendaItemOut]:
    return [
        AgendaItemOut(
            retest=RetestOut.model_validate(item.retest),
            mistake=MistakeOut.model_validate(item.mistake),
        )
        for item in items
    ]


@router.get("", response_model=list[RetestOut], summary="List retests")
def list_retests(tracker: MistakeTracker = Depends(get_tracker)) -> list[RetestOut]:
    """All retests, earliest scheduled first."""
    return [RetestOut.model_validate(r) for r in tracker.list_retests()]


@router.get("/agenda", response_model=RetestAgendaOut, summary="Pending retests by due day")
def get_agenda(tracker: MistakeTracker = Depends(get_tracker)) -> RetestAgendaOut:
    """
    Pending retests grouped for review.

    Groups:
    - overdue: due on an earlier day
    - today: due today
    - upcoming: due on a later day
    """
    agenda = tracker.retest_agenda()
    return RetestAgendaOut(
        overdue=_agenda_items(agenda.overdue),
        today=_agenda_items(agenda.today),
        upcoming=_agenda_items(agenda.upcoming),
        due_count=agenda.due_count,
    )


@router.get("/{retest_id}", response_model=RetestOut, summary="Get retest")
def get_retest(retest_id: str, tracker: MistakeTracker = Depends(get_tracker)) -> RetestOut:
    return RetestOut.model_validate(tracker.get_retest(retest_id))


@router.put("/{retest_id}/complete", response_model=RetestOut, summary="Complete retest")
def complete_retest(
    retest_id: str,
    payload: RetestCompletion,
    tracker: MistakeTracker = Depends(get_tracker),
) -> RetestOut:
    """
    Record a retest outcome.

    An incorrect result on a mistake that is not yet mastered schedules a
    follow-up retest one day later.
    """
    return RetestOut.model_validate(tracker.complete_retest(retest_id, payload.result))
