"""
Review views derived from the record set: the retest agenda and quizzes.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, tzinfo

from loguru import logger

from mistake_tracker.core.records import ErrorCategory, Mistake, Retest


@dataclass(frozen=True)
class AgendaItem:
    """A pending retest joined with the mistake it checks."""

    retest: Retest
    mistake: Mistake


@dataclass
class RetestAgenda:
    overdue: list[AgendaItem] = field(default_factory=list)
    today: list[AgendaItem] = field(default_factory=list)
    upcoming: list[AgendaItem] = field(default_factory=list)

    @property
    def due_count(self) -> int:
        """Retests that should be taken now (overdue plus today)."""
        return len(self.overdue) + len(self.today)


@dataclass(frozen=True)
class QuizQuestion:
    mistake_id: str
    question: str
    description: str
    category: ErrorCategory
    correct_principle: str | None


def build_agenda(
    retests: Iterable[Retest],
    mistakes: Iterable[Mistake],
    now: datetime,
    tz: tzinfo,
) -> RetestAgenda:
    """
    Group pending retests by calendar day relative to `now`.

    Overdue means due on an earlier day than today; a retest due later
    today is still "today". Retests whose mistake no longer exists are
    dropped.
    """
    by_id = {m.id: m for m in mistakes}
    today = now.astimezone(tz).date()
    agenda = RetestAgenda()

    for retest in sorted(retests, key=lambda r: r.scheduled_date):
        if retest.completed:
            continue
        mistake = by_id.get(retest.mistake_id)
        if mistake is None:
            logger.warning(f"Skipping orphan retest {retest.id}")
            continue

        item = AgendaItem(retest=retest, mistake=mistake)
        due_day = retest.scheduled_date.astimezone(tz).date()
        if due_day < today:
            agenda.overdue.append(item)
        elif due_day == today:
            agenda.today.append(item)
        else:
            agenda.upcoming.append(item)

    return agenda


def build_quiz(mistakes: Iterable[Mistake], limit: int) -> list[QuizQuestion]:
    """
    Turn unmastered mistakes into quiz questions.

    Args:
        mistakes: Candidate mistakes, in the order questions should appear
        limit: Maximum number of questions

    Returns:
        At most `limit` questions, one per unmastered mistake
    """
    questions = []
    for mistake in mistakes:
        if mistake.mastered:
            continue
        questions.append(
            QuizQuestion(
                mistake_id=mistake.id,
                question=mistake.title,
                description=mistake.description,
                category=ErrorCategory(mistake.category),
                correct_principle=mistake.corrected_principle,
            )
        )
        if len(questions) >= limit:
            break
    return questions
