"""
Quiz router.

Builds a self-check quiz from the mistakes that are not yet mastered.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from mistake_tracker.api.deps import get_tracker
from mistake_tracker.api.schemas import QuizQuestionOut
from mistake_tracker.service.tracker import MistakeTracker

router = APIRouter()


@router.get("", response_model=list[QuizQuestionOut], summary="Generate quiz")
def get_quiz(
    limit: int | None = Query(None, ge=1, le=100, description="Maximum questions"),
    tracker: MistakeTracker = Depends(get_tracker),
) -> list[QuizQuestionOut]:
    """Newest unmastered mistakes as questions; the answer is the corrected principle."""
    return [QuizQuestionOut.model_validate(q) for q in tracker.quiz_questions(limit)]
