"""
Core Module - Scheduling and mastery rules.

Components:
- records: Mistake and Retest records, ErrorCategory, RetestResult
- categories: Per-category retest cadence
- scheduler: Initial and remediation due dates
- mastery: Trailing-streak mastery rule
- validation: Boundary checks for user input
- exceptions: ValidationError, NotFoundError

Nothing in this package touches storage or I/O.
"""

from mistake_tracker.core.categories import CATEGORY_POLICIES, CategoryPolicy, offsets_for, policy_for
from mistake_tracker.core.exceptions import (
    NotFoundError,
    RetestAlreadyCompletedError,
    TrackerError,
    ValidationError,
)
from mistake_tracker.core.mastery import MasteryEvaluator
from mistake_tracker.core.records import ErrorCategory, Mistake, Retest, RetestResult
from mistake_tracker.core.scheduler import RetestScheduler

__all__ = [
    "CATEGORY_POLICIES",
    "CategoryPolicy",
    "ErrorCategory",
    "MasteryEvaluator",
    "Mistake",
    "NotFoundError",
    "Retest",
    "RetestAlreadyCompletedError",
    "RetestResult",
    "RetestScheduler",
    "TrackerError",
    "ValidationError",
    "offsets_for",
    "policy_for",
]
