"""
Mastery evaluation for a single mistake.

A mistake is mastered once its most recently completed retests are all
correct. The evaluator only reports the rule; keeping the flag
one-directional is the tracker's job.
"""

from __future__ import annotations

from collections.abc import Iterable

from mistake_tracker.core.records import Retest, RetestResult


class MasteryEvaluator:
    """Checks the trailing run of completed retests for a mistake."""

    DEFAULT_STREAK = 3

    def __init__(self, streak: int = DEFAULT_STREAK):
        if streak < 1:
            raise ValueError("streak must be positive")
        self.streak = streak

    def recent_results(self, retests: Iterable[Retest]) -> list[Retest]:
        """
        Most recent completed retests, newest first.

        Pending retests are ignored. Equal completion times keep their
        input order.
        """
        completed = [r for r in retests if r.completed and r.completed_at is not None]
        completed.sort(key=lambda r: r.completed_at, reverse=True)
        return completed[: self.streak]

    def is_mastered(self, retests: Iterable[Retest]) -> bool:
        """
        Decide whether the trailing retests earn mastery.

        Args:
            retests: Retests belonging to one mistake (pending ones are skipped)

        Returns:
            True only if at least `streak` retests are completed and the
            `streak` most recent are all correct
        """
        recent = self.recent_results(retests)
        if len(recent) < self.streak:
            return False
        return all(r.result == RetestResult.CORRECT for r in recent)
