"""
Canonical record types for mistakes and their retests.

Records are plain dataclasses. The tracker service is the only component
that mutates them; repositories store and return copies.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ErrorCategory(str, Enum):
    """
    Error categories a mistake can be filed under.

    Declaration order is significant: it is the tie-break order for
    weekly pattern rankings.
    """

    CONCEPTUAL = "conceptual"
    PROCEDURAL = "procedural"
    CARELESS = "careless"
    KNOWLEDGE = "knowledge"


class RetestResult(str, Enum):
    """Outcome of a completed retest."""

    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass
class Mistake:
    """A logged mistake with remediation notes and review progress."""

    id: str
    title: str
    description: str
    category: ErrorCategory
    created_at: datetime
    root_cause: str | None = None
    corrected_principle: str | None = None
    retest_count: int = 0
    last_reviewed_at: datetime | None = None
    mastered: bool = False


@dataclass
class Retest:
    """A scheduled check-in for one mistake."""

    id: str
    mistake_id: str
    scheduled_date: datetime
    completed: bool = False
    result: RetestResult | None = None
    completed_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return not self.completed
