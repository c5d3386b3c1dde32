"""
Weekly statistics over mistakes and retests.

The week runs Monday 00:00 up to the next Monday 00:00 in the reporting
timezone. Recent activity covers the seven calendar days ending on the
reference day, independent of the week window.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo

from mistake_tracker.core.records import ErrorCategory, Mistake, Retest, RetestResult

ACTIVITY_DAYS = 7


@dataclass(frozen=True)
class PatternCount:
    category: ErrorCategory
    count: int


@dataclass(frozen=True)
class DailyActivity:
    date: date
    mistakes: int
    retests: int


@dataclass
class WeeklyStats:
    """Aggregated counts for one week."""

    week_start: datetime
    week_end: datetime
    total_mistakes: int = 0
    total_retests: int = 0
    correct_retests: int = 0
    top_patterns: list[PatternCount] = field(default_factory=list)
    recent_activity: list[DailyActivity] = field(default_factory=list)

    @property
    def accuracy(self) -> float | None:
        """Share of this week's completed retests that were correct."""
        if not self.total_retests:
            return None
        return self.correct_retests / self.total_retests


def week_window(reference: datetime, tz: tzinfo) -> tuple[datetime, datetime]:
    """
    Monday 00:00 (inclusive) to the following Monday 00:00 (exclusive).

    Args:
        reference: Any instant inside the week (aware)
        tz: Timezone whose calendar defines the week

    Returns:
        (start, end) as aware datetimes in `tz`
    """
    local = reference.astimezone(tz)
    monday = local.date() - timedelta(days=local.weekday())
    start = datetime.combine(monday, time.min, tzinfo=tz)
    return start, start + timedelta(days=7)


def _local_day(value: datetime, tz: tzinfo) -> date:
    return value.astimezone(tz).date()


def _completed(retests: Iterable[Retest]) -> list[Retest]:
    return [r for r in retests if r.completed and r.completed_at is not None]


def rank_patterns(mistakes: Iterable[Mistake]) -> list[PatternCount]:
    """
    Count mistakes per category, most frequent first.

    Categories with no mistakes are left out; equal counts keep the
    category declaration order.
    """
    counts = Counter(ErrorCategory(m.category) for m in mistakes)
    ranked = [PatternCount(c, counts[c]) for c in ErrorCategory if counts[c] > 0]
    ranked.sort(key=lambda p: p.count, reverse=True)
    return ranked


def weekly_stats(
    mistakes: Iterable[Mistake],
    retests: Iterable[Retest],
    reference: datetime,
    tz: tzinfo,
) -> WeeklyStats:
    """Compute statistics for the week containing `reference`."""
    mistakes = list(mistakes)
    completed = _completed(retests)
    start, end = week_window(reference, tz)

    week_mistakes = [m for m in mistakes if start <= m.created_at < end]
    week_retests = [r for r in completed if start <= r.completed_at < end]

    mistakes_per_day = Counter(_local_day(m.created_at, tz) for m in mistakes)
    retests_per_day = Counter(_local_day(r.completed_at, tz) for r in completed)

    today = _local_day(reference, tz)
    activity = []
    for offset in range(ACTIVITY_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        activity.append(
            DailyActivity(date=day, mistakes=mistakes_per_day[day], retests=retests_per_day[day])
        )

    return WeeklyStats(
        week_start=start,
        week_end=end,
        total_mistakes=len(week_mistakes),
        total_retests=len(week_retests),
        correct_retests=sum(1 for r in week_retests if r.result == RetestResult.CORRECT),
        top_patterns=rank_patterns(week_mistakes),
        recent_activity=activity,
    )
