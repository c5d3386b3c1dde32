"""
Retest scheduler.

Derives due dates from a mistake's category when it is logged, and a
single remediation due date after a failed retest.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from mistake_tracker.core.categories import offsets_for
from mistake_tracker.core.records import ErrorCategory


class RetestScheduler:
    """
    Computes retest due dates.

    The remediation interval is fixed per scheduler and does not depend on
    the mistake's category.
    """

    DEFAULT_REMEDIATION_DAYS = 1

    def __init__(self, remediation_interval_days: int = DEFAULT_REMEDIATION_DAYS):
        if remediation_interval_days < 1:
            raise ValueError("remediation_interval_days must be positive")
        self.remediation_interval_days = remediation_interval_days

    def initial_schedule(
        self,
        category: ErrorCategory | str,
        reference: datetime,
    ) -> list[datetime]:
        """
        Due dates for a newly logged mistake.

        Args:
            category: Error category of the mistake
            reference: Instant the mistake was logged

        Returns:
            One due date per category offset, ascending
        """
        return [reference + timedelta(days=days) for days in offsets_for(category)]

    def reschedule_after_failure(self, reference: datetime) -> datetime:
        """Due date of the follow-up retest after an incorrect result."""
        return reference + timedelta(days=self.remediation_interval_days)
