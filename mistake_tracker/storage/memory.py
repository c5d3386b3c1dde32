"""
Volatile in-memory record store.

Records live in dicts keyed by id. A mistake-id -> retest-ids index is
maintained on every insert and delete so retests for one mistake are
found without a full scan. Stored records are copies; callers only ever
see copies too.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace

from loguru import logger

from mistake_tracker.core.records import Mistake, Retest


class InMemoryRepository:
    """Dict-backed repository with snapshot rollback."""

    name = "memory"

    def __init__(self) -> None:
        self._mistakes: dict[str, Mistake] = {}
        self._retests: dict[str, Retest] = {}
        self._retests_by_mistake: dict[str, list[str]] = {}
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Snapshot the maps on entry and restore them if the block raises.

        Nested transactions join the outermost one.
        """
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        snapshot = (
            dict(self._mistakes),
            dict(self._retests),
            {k: list(v) for k, v in self._retests_by_mistake.items()},
        )
        self._depth = 1
        try:
            yield
        except Exception:
            self._mistakes, self._retests, self._retests_by_mistake = snapshot
            logger.debug("In-memory transaction rolled back")
            raise
        finally:
            self._depth = 0

    # ========================================
    # Mistakes
    # ========================================

    def add_mistake(self, mistake: Mistake) -> None:
        if mistake.id in self._mistakes:
            raise KeyError(f"Duplicate mistake id: {mistake.id}")
        self._mistakes[mistake.id] = replace(mistake)

    def get_mistake(self, mistake_id: str) -> Mistake | None:
        mistake = self._mistakes.get(mistake_id)
        return replace(mistake) if mistake else None

    def list_mistakes(self) -> list[Mistake]:
        return [replace(m) for m in self._mistakes.values()]

    def update_mistake(self, mistake: Mistake) -> None:
        if mistake.id not in self._mistakes:
            raise KeyError(f"Unknown mistake id: {mistake.id}")
        self._mistakes[mistake.id] = replace(mistake)

    def delete_mistake(self, mistake_id: str) -> bool:
        return self._mistakes.pop(mistake_id, None) is not None

    # ========================================
    # Retests
    # ========================================

    def add_retest(self, retest: Retest) -> None:
        if retest.id in self._retests:
            raise KeyError(f"Duplicate retest id: {retest.id}")
        self._retests[retest.id] = replace(retest)
        self._retests_by_mistake.setdefault(retest.mistake_id, []).append(retest.id)

    def get_retest(self, retest_id: str) -> Retest | None:
        retest = self._retests.get(retest_id)
        return replace(retest) if retest else None

    def list_retests(self) -> list[Retest]:
        return [replace(r) for r in self._retests.values()]

    def update_retest(self, retest: Retest) -> None:
        existing = self._retests.get(retest.id)
        if existing is None:
            raise KeyError(f"Unknown retest id: {retest.id}")
        if existing.mistake_id != retest.mistake_id:
            raise ValueError("A retest cannot move to another mistake")
        self._retests[retest.id] = replace(retest)

    def delete_retest(self, retest_id: str) -> bool:
        retest = self._retests.pop(retest_id, None)
        if retest is None:
            return False
        siblings = self._retests_by_mistake.get(retest.mistake_id)
        if siblings is not None:
            siblings.remove(retest_id)
            if not siblings:
                del self._retests_by_mistake[retest.mistake_id]
        return True

    def retests_for_mistake(self, mistake_id: str) -> list[Retest]:
        ids = self._retests_by_mistake.get(mistake_id, [])
        return [replace(self._retests[rid]) for rid in ids]

    def counts(self) -> dict[str, int]:
        return {"mistakes": len(self._mistakes), "retests": len(self._retests)}
