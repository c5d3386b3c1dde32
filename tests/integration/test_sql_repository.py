"""
Integration tests for the SQLAlchemy repository.

Runs the tracker against in-memory SQLite so the full create / complete /
delete lifecycle goes through real sessions and transactions.
"""

from datetime import UTC, timedelta

import pytest

from mistake_tracker.core.records import ErrorCategory, RetestResult
from mistake_tracker.db.database import check_database_health, create_db_engine
from mistake_tracker.service.tracker import MistakeTracker
from mistake_tracker.storage.sql import SqlRepository


@pytest.fixture
def sql_repository():
    engine = create_db_engine("sqlite://")
    yield SqlRepository(engine)
    engine.dispose()


@pytest.fixture
def sql_tracker(sql_repository, clock):
    return MistakeTracker(repository=sql_repository, clock=clock)


class TestSqlLifecycle:
    def test_create_round_trips_fields(self, sql_tracker, clock):
        mistake = sql_tracker.create_mistake("T", "D", "knowledge", "cause", "rule")
        stored = sql_tracker.get_mistake(mistake.id)

        assert stored == mistake
        assert stored.created_at.tzinfo is not None
        assert stored.category == ErrorCategory.KNOWLEDGE

        retests = sql_tracker.list_retests_for_mistake(mistake.id)
        assert [r.scheduled_date for r in retests] == [
            clock() + timedelta(days=d) for d in (1, 3, 7, 14)
        ]

    def test_completion_and_mastery(self, sql_tracker, clock):
        mistake = sql_tracker.create_mistake("T", "D", "careless")
        first, second = sql_tracker.list_retests_for_mistake(mistake.id)

        clock.advance(days=1)
        sql_tracker.complete_retest(first.id, RetestResult.INCORRECT)
        clock.advance(days=2)
        sql_tracker.complete_retest(second.id, RetestResult.CORRECT)

        stored = sql_tracker.get_mistake(mistake.id)
        assert stored.retest_count == 2
        assert stored.mastered is False
        assert stored.last_reviewed_at == clock()

        retests = sql_tracker.list_retests_for_mistake(mistake.id)
        assert len(retests) == 3
        done = sql_tracker.get_retest(first.id)
        assert done.result == RetestResult.INCORRECT
        assert done.completed_at.astimezone(UTC) == clock() - timedelta(days=2)

    def test_delete_cascades(self, sql_tracker, sql_repository):
        keep = sql_tracker.create_mistake("Keep", "D", "careless")
        drop = sql_tracker.create_mistake("Drop", "D", "knowledge")

        assert sql_tracker.delete_mistake(drop.id) is True
        assert sql_tracker.delete_mistake(drop.id) is False
        assert sql_repository.retests_for_mistake(drop.id) == []
        assert sql_repository.counts() == {"mistakes": 1, "retests": 2}
        assert sql_tracker.get_mistake(keep.id).title == "Keep"

    def test_failure_rolls_back(self, sql_tracker, sql_repository, monkeypatch):
        def broken_add(_retest):
            raise RuntimeError("constraint violated")

        monkeypatch.setattr(sql_repository, "add_retest", broken_add)

        with pytest.raises(RuntimeError):
            sql_tracker.create_mistake("T", "D", "careless")

        assert sql_repository.counts() == {"mistakes": 0, "retests": 0}

    def test_health_check(self, sql_repository):
        assert check_database_health(sql_repository.engine) == ("ok", None)
        assert sql_repository.name == "sql"
