"""
Unit tests for weekly statistics, the retest agenda and quiz derivation.
"""

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

from mistake_tracker.core.records import ErrorCategory, Mistake, Retest, RetestResult
from mistake_tracker.service.agenda import build_agenda, build_quiz
from mistake_tracker.service.stats import rank_patterns, week_window, weekly_stats

WEDNESDAY = datetime(2024, 5, 15, 10, 0, tzinfo=UTC)
MONDAY = datetime(2024, 5, 13, tzinfo=UTC)


def _mistake(mid: str, created_at: datetime, category=ErrorCategory.CONCEPTUAL, **kwargs) -> Mistake:
    return Mistake(
        id=mid,
        title=f"Mistake {mid}",
        description="desc",
        category=category,
        created_at=created_at,
        **kwargs,
    )


def _retest(rid: str, mistake_id: str, scheduled: datetime, result=None, completed_at=None) -> Retest:
    return Retest(
        id=rid,
        mistake_id=mistake_id,
        scheduled_date=scheduled,
        completed=result is not None,
        result=result,
        completed_at=completed_at,
    )


class TestWeekWindow:
    def test_monday_to_monday(self):
        start, end = week_window(WEDNESDAY, UTC)
        assert start == MONDAY
        assert end == MONDAY + timedelta(days=7)

    def test_sunday_belongs_to_previous_monday(self):
        sunday_night = datetime(2024, 5, 19, 23, 59, 59, tzinfo=UTC)
        assert week_window(sunday_night, UTC)[0] == MONDAY

    def test_monday_midnight_starts_new_week(self):
        assert week_window(MONDAY, UTC)[0] == MONDAY

    def test_uses_reporting_timezone(self):
        # 02:00 Monday UTC is still Sunday evening in New York
        tz = ZoneInfo("America/New_York")
        start, _ = week_window(datetime(2024, 5, 20, 2, 0, tzinfo=UTC), tz)
        assert start == datetime(2024, 5, 13, tzinfo=tz)


class TestWeeklyStats:
    def test_counts_only_this_week(self):
        mistakes = [
            _mistake("a", MONDAY),
            _mistake("b", WEDNESDAY, ErrorCategory.CARELESS),
            _mistake("c", MONDAY - timedelta(seconds=1)),  # last Sunday
            _mistake("d", MONDAY + timedelta(days=7)),  # next Monday
        ]
        stats = weekly_stats(mistakes, [], WEDNESDAY, UTC)

        assert stats.total_mistakes == 2
        assert stats.week_start == MONDAY

    def test_scenario_two_mistakes_three_retests(self):
        mistakes = [_mistake("a", MONDAY + timedelta(hours=9)), _mistake("b", WEDNESDAY)]
        retests = [
            _retest("r1", "a", MONDAY, RetestResult.CORRECT, MONDAY + timedelta(days=1)),
            _retest("r2", "a", MONDAY, RetestResult.CORRECT, WEDNESDAY),
            _retest("r3", "b", MONDAY, RetestResult.INCORRECT, WEDNESDAY),
            _retest("r4", "b", WEDNESDAY),  # pending
            _retest("r5", "b", MONDAY, RetestResult.CORRECT, MONDAY - timedelta(days=1)),
        ]
        stats = weekly_stats(mistakes, retests, WEDNESDAY, UTC)

        assert stats.total_mistakes == 2
        assert stats.total_retests == 3
        assert stats.correct_retests == 2
        assert stats.accuracy == 2 / 3

    def test_top_patterns_descending_without_zero_counts(self):
        mistakes = [
            _mistake("a", WEDNESDAY, ErrorCategory.CARELESS),
            _mistake("b", WEDNESDAY, ErrorCategory.KNOWLEDGE),
            _mistake("c", WEDNESDAY, ErrorCategory.KNOWLEDGE),
            _mistake("old", MONDAY - timedelta(days=3), ErrorCategory.PROCEDURAL),
        ]
        stats = weekly_stats(mistakes, [], WEDNESDAY, UTC)

        assert [(p.category, p.count) for p in stats.top_patterns] == [
            (ErrorCategory.KNOWLEDGE, 2),
            (ErrorCategory.CARELESS, 1),
        ]

    def test_pattern_ties_follow_category_order(self):
        mistakes = [
            _mistake("a", WEDNESDAY, ErrorCategory.KNOWLEDGE),
            _mistake("b", WEDNESDAY, ErrorCategory.CONCEPTUAL),
            _mistake("c", WEDNESDAY, ErrorCategory.CARELESS),
        ]
        ranked = rank_patterns(mistakes)
        assert [p.category for p in ranked] == [
            ErrorCategory.CONCEPTUAL,
            ErrorCategory.CARELESS,
            ErrorCategory.KNOWLEDGE,
        ]

    def test_recent_activity_covers_trailing_seven_days(self):
        # Monday reference: trailing window reaches into the previous week
        reference = MONDAY + timedelta(hours=12)
        mistakes = [
            _mistake("a", MONDAY - timedelta(days=6, hours=-1)),
            _mistake("b", MONDAY - timedelta(days=7)),  # outside the 7 days
            _mistake("c", MONDAY + timedelta(hours=1)),
        ]
        retests = [
            _retest("r1", "a", MONDAY, RetestResult.CORRECT, MONDAY - timedelta(days=2)),
            _retest("r2", "a", MONDAY, RetestResult.INCORRECT, MONDAY + timedelta(hours=2)),
        ]
        stats = weekly_stats(mistakes, retests, reference, UTC)

        days = [a.date for a in stats.recent_activity]
        assert days == [date(2024, 5, 7) + timedelta(days=i) for i in range(7)]
        by_day = {a.date: (a.mistakes, a.retests) for a in stats.recent_activity}
        assert by_day[date(2024, 5, 7)] == (1, 0)
        assert by_day[date(2024, 5, 11)] == (0, 1)
        assert by_day[date(2024, 5, 13)] == (1, 1)
        # Week-scoped totals ignore last week's activity
        assert stats.total_mistakes == 1
        assert stats.total_retests == 1

    def test_recent_activity_uses_local_calendar_days(self):
        tz = ZoneInfo("America/New_York")
        # 00:30 EDT on Wednesday 15 May
        reference = datetime(2024, 5, 15, 4, 30, tzinfo=UTC)
        mistakes = [
            _mistake("late", datetime(2024, 5, 15, 3, 30, tzinfo=UTC)),  # 23:30 EDT on the 14th
            _mistake("fresh", datetime(2024, 5, 15, 4, 10, tzinfo=UTC)),  # 00:10 EDT on the 15th
        ]
        stats = weekly_stats(mistakes, [], reference, tz)

        assert stats.recent_activity[-1].date == date(2024, 5, 15)
        by_day = {a.date: a.mistakes for a in stats.recent_activity}
        assert by_day[date(2024, 5, 14)] == 1
        assert by_day[date(2024, 5, 15)] == 1

    def test_empty(self):
        stats = weekly_stats([], [], WEDNESDAY, UTC)
        assert stats.total_mistakes == stats.total_retests == stats.correct_retests == 0
        assert stats.top_patterns == []
        assert len(stats.recent_activity) == 7
        assert stats.accuracy is None


class TestAgenda:
    def test_groups_by_calendar_day(self):
        m = _mistake("m", MONDAY)
        retests = [
            _retest("later", "m", WEDNESDAY + timedelta(days=2)),
            _retest("overdue", "m", WEDNESDAY - timedelta(days=1)),
            _retest("tonight", "m", WEDNESDAY + timedelta(hours=8)),
            _retest("this-morning", "m", WEDNESDAY - timedelta(hours=3)),
            _retest("done", "m", WEDNESDAY - timedelta(days=1), RetestResult.CORRECT, WEDNESDAY),
        ]
        agenda = build_agenda(retests, [m], WEDNESDAY, UTC)

        assert [i.retest.id for i in agenda.overdue] == ["overdue"]
        assert [i.retest.id for i in agenda.today] == ["this-morning", "tonight"]
        assert [i.retest.id for i in agenda.upcoming] == ["later"]
        assert agenda.due_count == 3
        assert agenda.today[0].mistake is m

    def test_groups_by_local_calendar_day(self):
        tz = ZoneInfo("America/New_York")
        now = datetime(2024, 5, 15, 4, 30, tzinfo=UTC)  # 00:30 EDT on the 15th
        m = _mistake("m", MONDAY)
        retests = [
            _retest("yesterday-local", "m", datetime(2024, 5, 15, 3, 30, tzinfo=UTC)),
            _retest("tonight-local", "m", datetime(2024, 5, 16, 3, 0, tzinfo=UTC)),
            _retest("tomorrow-local", "m", datetime(2024, 5, 16, 4, 10, tzinfo=UTC)),
        ]

        agenda = build_agenda(retests, [m], now, tz)
        assert [i.retest.id for i in agenda.overdue] == ["yesterday-local"]
        assert [i.retest.id for i in agenda.today] == ["tonight-local"]
        assert [i.retest.id for i in agenda.upcoming] == ["tomorrow-local"]

        # Same instants bucketed on the UTC calendar
        utc_agenda = build_agenda(retests, [m], now, UTC)
        assert [i.retest.id for i in utc_agenda.today] == ["yesterday-local"]
        assert len(utc_agenda.upcoming) == 2

    def test_drops_orphans(self):
        agenda = build_agenda([_retest("r", "gone", WEDNESDAY)], [], WEDNESDAY, UTC)
        assert agenda.due_count == 0
        assert agenda.upcoming == []


class TestQuiz:
    def test_skips_mastered_and_respects_limit(self):
        mistakes = [
            _mistake("a", WEDNESDAY, corrected_principle="Check units"),
            _mistake("b", WEDNESDAY, mastered=True),
            _mistake("c", WEDNESDAY),
            _mistake("d", WEDNESDAY),
        ]
        questions = build_quiz(mistakes, limit=2)

        assert [q.mistake_id for q in questions] == ["a", "c"]
        assert questions[0].question == "Mistake a"
        assert questions[0].correct_principle == "Check units"
        assert questions[1].correct_principle is None
