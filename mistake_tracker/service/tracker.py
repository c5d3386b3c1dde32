"""
Mistake tracker service.

Owns every mutation of mistakes and retests. Creating a mistake persists
its initial retest schedule; completing a retest updates the owning
mistake's review counters, applies the mastery rule and, after a failure,
schedules one remediation retest.

Each operation holds one lock and one repository transaction, so callers
never observe a half-applied change.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable
from datetime import UTC, datetime, tzinfo

from loguru import logger

from mistake_tracker.core.exceptions import NotFoundError, RetestAlreadyCompletedError
from mistake_tracker.core.mastery import MasteryEvaluator
from mistake_tracker.core.records import ErrorCategory, Mistake, Retest, RetestResult
from mistake_tracker.core.scheduler import RetestScheduler
from mistake_tracker.core.validation import validate_mistake_fields, validate_result
from mistake_tracker.service.agenda import QuizQuestion, RetestAgenda, build_agenda, build_quiz
from mistake_tracker.service.stats import WeeklyStats, weekly_stats
from mistake_tracker.storage.base import RecordRepository


def utc_now() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return str(uuid.uuid4())


class MistakeTracker:
    """
    Orchestrates the mistake/retest lifecycle over a repository.

    Construct one per process (or per test) and pass it to whatever needs
    it; there is no module-level instance.
    """

    def __init__(
        self,
        repository: RecordRepository,
        scheduler: RetestScheduler | None = None,
        evaluator: MasteryEvaluator | None = None,
        clock: Callable[[], datetime] = utc_now,
        timezone: tzinfo = UTC,
        quiz_limit: int = 10,
    ):
        self.repository = repository
        self.scheduler = scheduler or RetestScheduler()
        self.evaluator = evaluator or MasteryEvaluator()
        self.clock = clock
        self.timezone = timezone
        self.quiz_limit = quiz_limit
        self._lock = threading.RLock()

    # ========================================
    # Mistakes
    # ========================================

    def list_mistakes(self) -> list[Mistake]:
        """All mistakes, newest first."""
        with self._lock:
            mistakes = self.repository.list_mistakes()
        return sorted(mistakes, key=lambda m: m.created_at, reverse=True)

    def get_mistake(self, mistake_id: str) -> Mistake:
        with self._lock:
            mistake = self.repository.get_mistake(mistake_id)
        if mistake is None:
            raise NotFoundError("Mistake", mistake_id)
        return mistake

    def create_mistake(
        self,
        title: str,
        description: str,
        category: ErrorCategory | str,
        root_cause: str | None = None,
        corrected_principle: str | None = None,
    ) -> Mistake:
        """
        Log a mistake and schedule its initial retests.

        Args:
            title: Short name of the mistake
            description: What went wrong
            category: Error category, drives the retest cadence
            root_cause: Optional analysis of why it happened
            corrected_principle: Optional rule to remember

        Returns:
            The stored mistake

        Raises:
            ValidationError: If title/description are blank or the category is unknown
        """
        fields = validate_mistake_fields(
            title, description, category, root_cause, corrected_principle
        )

        with self._lock, self.repository.transaction():
            now = self.clock()
            mistake = Mistake(
                id=_new_id(),
                title=fields.title,
                description=fields.description,
                category=fields.category,
                root_cause=fields.root_cause,
                corrected_principle=fields.corrected_principle,
                created_at=now,
            )
            self.repository.add_mistake(mistake)

            due_dates = self.scheduler.initial_schedule(mistake.category, now)
            for due in due_dates:
                self.repository.add_retest(
                    Retest(id=_new_id(), mistake_id=mistake.id, scheduled_date=due)
                )

        logger.info(
            f"Logged mistake {mistake.id} ({mistake.category.value}) "
            f"with {len(due_dates)} retests scheduled"
        )
        return mistake

    def update_mistake(
        self,
        mistake_id: str,
        title: str,
        description: str,
        category: ErrorCategory | str,
        root_cause: str | None = None,
        corrected_principle: str | None = None,
    ) -> Mistake:
        """
        Replace the user-editable fields of a mistake.

        Timestamps, retest count and mastery are left alone, and the
        existing retest schedule is kept even when the category changes.

        Raises:
            NotFoundError: If no mistake has this id
            ValidationError: If the new fields are invalid
        """
        fields = validate_mistake_fields(
            title, description, category, root_cause, corrected_principle
        )

        with self._lock, self.repository.transaction():
            mistake = self.repository.get_mistake(mistake_id)
            if mistake is None:
                raise NotFoundError("Mistake", mistake_id)

            if mistake.category != fields.category:
                logger.debug(
                    f"Mistake {mistake_id} recategorised {mistake.category.value} -> "
                    f"{fields.category.value}; retest schedule unchanged"
                )

            mistake.title = fields.title
            mistake.description = fields.description
            mistake.category = fields.category
            mistake.root_cause = fields.root_cause
            mistake.corrected_principle = fields.corrected_principle
            self.repository.update_mistake(mistake)

        return mistake

    def delete_mistake(self, mistake_id: str) -> bool:
        """Delete a mistake and every retest referencing it. Returns whether it existed."""
        with self._lock, self.repository.transaction():
            retests = self.repository.retests_for_mistake(mistake_id)
            for retest in retests:
                self.repository.delete_retest(retest.id)
            existed = self.repository.delete_mistake(mistake_id)

        if existed:
            logger.info(f"Deleted mistake {mistake_id} and {len(retests)} retests")
        return existed

    # ========================================
    # Retests
    # ========================================

    def list_retests(self) -> list[Retest]:
        """All retests, earliest due first."""
        with self._lock:
            retests = self.repository.list_retests()
        return sorted(retests, key=lambda r: r.scheduled_date)

    def get_retest(self, retest_id: str) -> Retest:
        with self._lock:
            retest = self.repository.get_retest(retest_id)
        if retest is None:
            raise NotFoundError("Retest", retest_id)
        return retest

    def list_retests_for_mistake(self, mistake_id: str) -> list[Retest]:
        """Retests of one mistake, earliest due first."""
        with self._lock:
            if self.repository.get_mistake(mistake_id) is None:
                raise NotFoundError("Mistake", mistake_id)
            retests = self.repository.retests_for_mistake(mistake_id)
        return sorted(retests, key=lambda r: r.scheduled_date)

    def complete_retest(self, retest_id: str, result: RetestResult | str) -> Retest:
        """
        Record the outcome of a retest.

        The owning mistake's retest count and last-reviewed time are
        updated and the mastery rule is re-applied. Mastery is only ever
        granted here, never revoked. An incorrect result on a mistake that
        is still not mastered schedules exactly one follow-up retest.

        Raises:
            ValidationError: If the result is not correct/incorrect
            NotFoundError: If no retest has this id
            RetestAlreadyCompletedError: If the retest already has a result
        """
        outcome = validate_result(result)

        with self._lock, self.repository.transaction():
            retest = self.repository.get_retest(retest_id)
            if retest is None:
                raise NotFoundError("Retest", retest_id)
            if retest.completed:
                raise RetestAlreadyCompletedError(retest_id)

            now = self.clock()
            retest.completed = True
            retest.result = outcome
            retest.completed_at = now
            self.repository.update_retest(retest)

            mistake = self.repository.get_mistake(retest.mistake_id)
            if mistake is None:
                logger.warning(
                    f"Retest {retest_id} references missing mistake {retest.mistake_id}"
                )
                return retest

            mistake.retest_count += 1
            mistake.last_reviewed_at = now

            history = self.repository.retests_for_mistake(mistake.id)
            if not mistake.mastered and self.evaluator.is_mastered(history):
                mistake.mastered = True
                logger.info(
                    f"Mistake {mistake.id} mastered after {mistake.retest_count} retests"
                )

            if outcome == RetestResult.INCORRECT and not mistake.mastered:
                follow_up = Retest(
                    id=_new_id(),
                    mistake_id=mistake.id,
                    scheduled_date=self.scheduler.reschedule_after_failure(now),
                )
                self.repository.add_retest(follow_up)
                logger.debug(
                    f"Scheduled follow-up retest {follow_up.id} for "
                    f"{follow_up.scheduled_date.isoformat()}"
                )

            self.repository.update_mistake(mistake)

        logger.info(f"Completed retest {retest_id}: {outcome.value}")
        return retest

    # ========================================
    # Derived views
    # ========================================

    def weekly_stats(self, reference: datetime | None = None) -> WeeklyStats:
        """Statistics for the Monday-Sunday week containing `reference` (default: now)."""
        with self._lock:
            mistakes = self.repository.list_mistakes()
            retests = self.repository.list_retests()
        return weekly_stats(mistakes, retests, reference or self.clock(), self.timezone)

    def retest_agenda(self, now: datetime | None = None) -> RetestAgenda:
        """Pending retests grouped into overdue, today and upcoming."""
        with self._lock:
            mistakes = self.repository.list_mistakes()
            retests = self.repository.list_retests()
        return build_agenda(retests, mistakes, now or self.clock(), self.timezone)

    def quiz_questions(self, limit: int | None = None) -> list[QuizQuestion]:
        """Quiz built from the newest mistakes that are not yet mastered."""
        return build_quiz(self.list_mistakes(), limit or self.quiz_limit)

    def health(self) -> dict[str, object]:
        with self._lock:
            counts = self.repository.counts()
        return {"storage": self.repository.name, **counts}
