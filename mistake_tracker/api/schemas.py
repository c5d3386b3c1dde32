"""
Wire models shared by the API routers.

Field names are serialized in camelCase (rootCause, scheduledDate, ...),
which is the contract the web client depends on.
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from mistake_tracker.core.records import ErrorCategory, RetestResult


class CamelModel(BaseModel):
    """Base model: camelCase aliases, accepts snake_case too, reads from attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MistakeOut(CamelModel):
    """A logged mistake."""

    id: str
    title: str
    description: str
    category: ErrorCategory
    root_cause: str | None = None
    corrected_principle: str | None = None
    created_at: dt.datetime
    retest_count: int
    last_reviewed_at: dt.datetime | None = None
    mastered: bool


class RetestOut(CamelModel):
    """A scheduled or completed retest."""

    id: str
    mistake_id: str
    scheduled_date: dt.datetime
    completed: bool
    result: RetestResult | None = None
    completed_at: dt.datetime | None = None


class PatternCountOut(CamelModel):
    category: ErrorCategory
    count: int


class DailyActivityOut(CamelModel):
    date: dt.date
    mistakes: int
    retests: int


class WeeklyStatsOut(CamelModel):
    """Counts for the Monday-Sunday week containing the request time."""

    week_start: dt.datetime
    week_end: dt.datetime
    total_mistakes: int
    total_retests: int
    correct_retests: int
    top_patterns: list[PatternCountOut]
    recent_activity: list[DailyActivityOut]


class AgendaItemOut(CamelModel):
    retest: RetestOut
    mistake: MistakeOut


class RetestAgendaOut(CamelModel):
    """Pending retests grouped by due day."""

    overdue: list[AgendaItemOut]
    today: list[AgendaItemOut]
    upcoming: list[AgendaItemOut]
    due_count: int


class QuizQuestionOut(CamelModel):
    mistake_id: str
    question: str
    description: str
    category: ErrorCategory
    correct_principle: str | None = None
