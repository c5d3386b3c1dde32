"""
Service layer: the tracker orchestration and the views derived from it.

Components:
- tracker: MistakeTracker, the only mutator of mistakes and retests
- stats: Weekly statistics aggregation
- agenda: Retest agenda and quiz derivation
- factory: Builds a tracker from settings
"""

from mistake_tracker.service.agenda import AgendaItem, QuizQuestion, RetestAgenda
from mistake_tracker.service.factory import build_repository, build_tracker
from mistake_tracker.service.stats import DailyActivity, PatternCount, WeeklyStats
from mistake_tracker.service.tracker import MistakeTracker

__all__ = [
    "AgendaItem",
    "DailyActivity",
    "MistakeTracker",
    "PatternCount",
    "QuizQuestion",
    "RetestAgenda",
    "WeeklyStats",
    "build_repository",
    "build_tracker",
]
