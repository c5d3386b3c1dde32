"""
SQLAlchemy-backed record store.

Each repository call runs in its own session unless a transaction() is
open on the calling thread, in which case the call joins that session
and commits or rolls back with it.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import Engine, delete, func, select
from sqlalchemy.orm import Session

from mistake_tracker.core.records import ErrorCategory, Mistake, Retest, RetestResult
from mistake_tracker.db.database import init_db, make_session_factory, session_scope
from mistake_tracker.db.models import MistakeRow, RetestRow


def _as_utc(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo; stored values are always UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _to_mistake(row: MistakeRow) -> Mistake:
    return Mistake(
        id=row.id,
        title=row.title,
        description=row.description,
        category=ErrorCategory(row.category),
        created_at=_as_utc(row.created_at),
        root_cause=row.root_cause,
        corrected_principle=row.corrected_principle,
        retest_count=row.retest_count,
        last_reviewed_at=_as_utc(row.last_reviewed_at),
        mastered=row.mastered,
    )


def _to_retest(row: RetestRow) -> Retest:
    return Retest(
        id=row.id,
        mistake_id=row.mistake_id,
        scheduled_date=_as_utc(row.scheduled_date),
        completed=row.completed,
        result=RetestResult(row.result) if row.result else None,
        completed_at=_as_utc(row.completed_at),
    )


def _copy_mistake(mistake: Mistake, row: MistakeRow) -> None:
    row.title = mistake.title
    row.description = mistake.description
    row.category = ErrorCategory(mistake.category).value
    row.root_cause = mistake.root_cause
    row.corrected_principle = mistake.corrected_principle
    row.created_at = _as_utc(mistake.created_at)
    row.retest_count = mistake.retest_count
    row.last_reviewed_at = _as_utc(mistake.last_reviewed_at)
    row.mastered = mistake.mastered


def _copy_retest(retest: Retest, row: RetestRow) -> None:
    row.scheduled_date = _as_utc(retest.scheduled_date)
    row.completed = retest.completed
    row.result = RetestResult(retest.result).value if retest.result else None
    row.completed_at = _as_utc(retest.completed_at)


class SqlRepository:
    """Repository storing records in the `mistakes` and `retests` tables."""

    name = "sql"

    def __init__(self, engine: Engine, create_tables: bool = True):
        self.engine = engine
        self._factory = make_session_factory(engine)
        self._local = threading.local()
        if create_tables:
            init_db(engine)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if getattr(self._local, "session", None) is not None:
            yield
            return
        with session_scope(self._factory) as session:
            self._local.session = session
            try:
                yield
            finally:
                self._local.session = None

    @contextmanager
    def _session(self) -> Iterator[Session]:
        active = getattr(self._local, "session", None)
        if active is not None:
            yield active
            active.flush()
            return
        with session_scope(self._factory) as session:
            yield session

    # ========================================
    # Mistakes
    # ========================================

    def add_mistake(self, mistake: Mistake) -> None:
        with self._session() as session:
            row = MistakeRow(id=mistake.id)
            _copy_mistake(mistake, row)
            session.add(row)

    def get_mistake(self, mistake_id: str) -> Mistake | None:
        with self._session() as session:
            row = session.get(MistakeRow, mistake_id)
            return _to_mistake(row) if row else None

    def list_mistakes(self) -> list[Mistake]:
        with self._session() as session:
            rows = session.scalars(select(MistakeRow)).all()
            return [_to_mistake(row) for row in rows]

    def update_mistake(self, mistake: Mistake) -> None:
        with self._session() as session:
            row = session.get(MistakeRow, mistake.id)
            if row is None:
                raise KeyError(f"Unknown mistake id: {mistake.id}")
            _copy_mistake(mistake, row)

    def delete_mistake(self, mistake_id: str) -> bool:
        with self._session() as session:
            row = session.get(MistakeRow, mistake_id)
            if row is None:
                return False
            session.delete(row)
            logger.debug(f"Deleted mistake row {mistake_id}")
            return True

    # ========================================
    # Retests
    # ========================================

    def add_retest(self, retest: Retest) -> None:
        with self._session() as session:
            row = RetestRow(id=retest.id, mistake_id=retest.mistake_id)
            _copy_retest(retest, row)
            session.add(row)

    def get_retest(self, retest_id: str) -> Retest | None:
        with self._session() as session:
            row = session.get(RetestRow, retest_id)
            return _to_retest(row) if row else None

    def list_retests(self) -> list[Retest]:
        with self._session() as session:
            rows = session.scalars(select(RetestRow)).all()
            return [_to_retest(row) for row in rows]

    def update_retest(self, retest: Retest) -> None:
        with self._session() as session:
            row = session.get(RetestRow, retest.id)
            if row is None:
                raise KeyError(f"Unknown retest id: {retest.id}")
            if row.mistake_id != retest.mistake_id:
                raise ValueError("A retest cannot move to another mistake")
            _copy_retest(retest, row)

    def delete_retest(self, retest_id: str) -> bool:
        with self._session() as session:
            result = session.execute(delete(RetestRow).where(RetestRow.id == retest_id))
            return result.rowcount > 0

    def retests_for_mistake(self, mistake_id: str) -> list[Retest]:
        with self._session() as session:
            rows = session.scalars(
                select(RetestRow).where(RetestRow.mistake_id == mistake_id)
            ).all()
            return [_to_retest(row) for row in rows]

    def counts(self) -> dict[str, int]:
        with self._session() as session:
            return {
                "mistakes": session.scalar(select(func.count()).select_from(MistakeRow)) or 0,
                "retests": session.scalar(select(func.count()).select_from(RetestRow)) or 0,
            }
