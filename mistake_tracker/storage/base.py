"""
Storage contract required by the tracker.

Two independent record kinds (mistakes and retests) with insert, point
lookup, full scan, update-in-place and delete-by-id, plus a scan of
retests by owning mistake. Ordering is the tracker's concern, not the
store's.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol

from mistake_tracker.core.records import Mistake, Retest


class RecordRepository(Protocol):
    """Keyed record store for mistakes and retests."""

    name: str

    def transaction(self) -> AbstractContextManager[None]:
        """All-or-nothing scope: changes made inside are discarded on error."""
        ...

    # Mistakes
    def add_mistake(self, mistake: Mistake) -> None: ...

    def get_mistake(self, mistake_id: str) -> Mistake | None: ...

    def list_mistakes(self) -> list[Mistake]: ...

    def update_mistake(self, mistake: Mistake) -> None: ...

    def delete_mistake(self, mistake_id: str) -> bool: ...

    # Retests
    def add_retest(self, retest: Retest) -> None: ...

    def get_retest(self, retest_id: str) -> Retest | None: ...

    def list_retests(self) -> list[Retest]: ...

    def update_retest(self, retest: Retest) -> None: ...

    def delete_retest(self, retest_id: str) -> bool: ...

    def retests_for_mistake(self, mistake_id: str) -> list[Retest]: ...

    def counts(self) -> dict[str, int]:
        """Record totals per kind, for health reporting."""
        ...

