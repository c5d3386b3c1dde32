"""Wiring: build a repository and tracker from settings."""

from __future__ import annotations

from zoneinfo import ZoneInfo

from loguru import logger

from config import Settings, get_settings
from mistake_tracker.core.mastery import MasteryEvaluator
from mistake_tracker.core.scheduler import RetestScheduler
from mistake_tracker.db.database import create_db_engine
from mistake_tracker.service.tracker import MistakeTracker
from mistake_tracker.storage.base import RecordRepository
from mistake_tracker.storage.memory import InMemoryRepository
from mistake_tracker.storage.sql import SqlRepository


def build_repository(settings: Settings) -> RecordRepository:
    """Create the repository selected by `storage_backend`."""
    if settings.uses_sql_storage():
        engine = create_db_engine(settings.database_url, echo=settings.log_level == "DEBUG")
        logger.info(f"Using SQL storage ({engine.url.render_as_string(hide_password=True)})")
        return SqlRepository(engine)
    logger.info("Using in-memory storage")
    return InMemoryRepository()


def build_tracker(
    settings: Settings | None = None,
    repository: RecordRepository | None = None,
) -> MistakeTracker:
    """Create a tracker configured from settings."""
    settings = settings or get_settings()
    return MistakeTracker(
        repository=repository or build_repository(settings),
        scheduler=RetestScheduler(settings.remediation_interval_days),
        evaluator=MasteryEvaluator(settings.mastery_streak),
        timezone=ZoneInfo(settings.stats_timezone),
        quiz_limit=settings.quiz_question_limit,
    )
