"""
Mistakes router.

CRUD endpoints for logged mistakes. Creating a mistake also schedules its
retests; deleting one removes them.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from pydantic import Field

from mistake_tracker.api.deps import get_tracker
from mistake_tracker.api.schemas import CamelModel, MistakeOut, RetestOut
from mistake_tracker.core.exceptions import NotFoundError
from mistake_tracker.core.records import ErrorCategory
from mistake_tracker.service.tracker import MistakeTracker

router = APIRouter()


# ========================================
# Request Models
# ========================================


class MistakeRequest(CamelModel):
    """Body for creating or replacing a mistake."""

    title: str = Field(..., min_length=1, description="Short name of the mistake")
    description: str = Field(..., min_length=1, description="What went wrong")
    category: ErrorCategory = Field(..., description="conceptual, procedural, careless or knowledge")
    root_cause: str | None = Field(None, description="Why it happened")
    corrected_principle: str | None = Field(None, description="The rule to remember")


# ========================================
# Endpoints
# ========================================


@router.get("", response_model=list[MistakeOut], summary="List mistakes")
def list_mistakes(tracker: MistakeTracker = Depends(get_tracker)) -> list[MistakeOut]:
    """All mistakes, newest first."""
    return [MistakeOut.model_validate(m) for m in tracker.list_mistakes()]


@router.get("/{mistake_id}", response_model=MistakeOut, summary="Get mistake")
def get_mistake(mistake_id: str, tracker: MistakeTracker = Depends(get_tracker)) -> MistakeOut:
    return MistakeOut.model_validate(tracker.get_mistake(mistake_id))


@router.post(
    "",
    response_model=MistakeOut,
    status_code=status.HTTP_201_CREATED,
    summary="Log a mistake",
)
def create_mistake(
    payload: MistakeRequest,
    tracker: MistakeTracker = Depends(get_tracker),
) -> MistakeOut:
    """
    Log a mistake and schedule its retests.

    Retest cadence by category:
    - conceptual / procedural: 1, 3, 7 days
    - careless: 1, 3 days
    - knowledge: 1, 3, 7, 14 days
    """
    mistake = tracker.create_mistake(
        title=payload.title,
        description=payload.description,
        category=payload.category,
        root_cause=payload.root_cause,
        corrected_principle=payload.corrected_principle,
    )
    return MistakeOut.model_validate(mistake)


@router.put("/{mistake_id}", response_model=MistakeOut, summary="Update mistake")
def update_mistake(
    mistake_id: str,
    payload: MistakeRequest,
    tracker: MistakeTracker = Depends(get_tracker),
) -> MistakeOut:
    """Replace the editable fields. The retest schedule is not regenerated."""
    mistake = tracker.update_mistake(
        mistake_id,
        title=payload.title,
        description=payload.description,
        category=payload.category,
        root_cause=payload.root_cause,
        corrected_principle=payload.corrected_principle,
    )
    return MistakeOut.model_validate(mistake)


@router.delete(
    "/{mistake_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete mistake",
)
def delete_mistake(mistake_id: str, tracker: MistakeTracker = Depends(get_tracker)) -> Response:
    """Delete a mistake together with all of its retests."""
    if not tracker.delete_mistake(mistake_id):
        raise NotFoundError("Mistake", mistake_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{mistake_id}/retests",
    response_model=list[RetestOut],
    summary="List retests of a mistake",
)
def list_mistake_retests(
    mistake_id: str,
    tracker: MistakeTracker = Depends(get_tracker),
) -> list[RetestOut]:
    return [RetestOut.model_validate(r) for r in tracker.list_retests_for_mistake(mistake_id)]
