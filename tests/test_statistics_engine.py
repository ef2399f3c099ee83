"""Tests for StatisticsEngine - streaks and completion statistics.

Pure logic, no HA fixtures needed.
"""

from __future__ import annotations

from datetime import date
from zoneinfo import ZoneInfo

from custom_components.routine_tracker import const
from custom_components.routine_tracker.engines.statistics_engine import StatisticsEngine
from custom_components.routine_tracker.utils import dt_utils
from tests.helpers import make_log

TODAY = date(2026, 1, 10)


def _logs_on(*days: int, hour: int = 10, **fields) -> list[dict]:
    return [
        make_log(completed_at=f"2026-01-{day:02d}T{hour:02d}:00:00+00:00", **fields)
        for day in days
    ]


# =============================================================================
# TEST: CONSISTENCY
# =============================================================================


class TestConsistency:
    """Current streak, longest streak and active days."""

    def setup_method(self) -> None:
        """Create a fresh engine per test."""
        self.stats = StatisticsEngine()

    def test_no_logs(self) -> None:
        """Empty history gives zeros."""
        assert self.stats.compute_consistency([], TODAY) == {
            const.STATS_CURRENT_STREAK: 0,
            const.STATS_LONGEST_STREAK: 0,
            const.STATS_TOTAL_ACTIVE_DAYS: 0,
        }

    def test_run_ending_today(self) -> None:
        """Logs on D, D-1, D-2 give a streak of 3."""
        result = self.stats.compute_consistency(_logs_on(8, 9, 10), TODAY)
        assert result[const.STATS_CURRENT_STREAK] == 3
        assert result[const.STATS_LONGEST_STREAK] == 3
        assert result[const.STATS_TOTAL_ACTIVE_DAYS] == 3

    def test_single_log_today(self) -> None:
        """One log today starts a streak of 1."""
        result = self.stats.compute_consistency(_logs_on(10), TODAY)
        assert result == {
            const.STATS_CURRENT_STREAK: 1,
            const.STATS_LONGEST_STREAK: 1,
            const.STATS_TOTAL_ACTIVE_DAYS: 1,
        }

    def test_single_log_two_days_ago(self) -> None:
        """A lone log on D-2 is history, not a current streak."""
        result = self.stats.compute_consistency(_logs_on(8), TODAY)
        assert result[const.STATS_CURRENT_STREAK] == 0
        assert result[const.STATS_LONGEST_STREAK] == 1

    def test_run_ending_yesterday_still_counts(self) -> None:
        """Today is not over, so a run ending yesterday is current."""
        result = self.stats.compute_consistency(_logs_on(7, 8, 9), TODAY)
        assert result[const.STATS_CURRENT_STREAK] == 3

    def test_gap_breaks_current_streak(self) -> None:
        """A run ending two days ago is no longer current."""
        result = self.stats.compute_consistency(_logs_on(6, 7, 8), TODAY)
        assert result[const.STATS_CURRENT_STREAK] == 0
        assert result[const.STATS_LONGEST_STREAK] == 3

    def test_longest_streak_in_the_past(self) -> None:
        """The longest run may be older than the current one."""
        result = self.stats.compute_consistency(_logs_on(1, 2, 3, 4, 9, 10), TODAY)
        assert result[const.STATS_CURRENT_STREAK] == 2
        assert result[const.STATS_LONGEST_STREAK] == 4
        assert result[const.STATS_TOTAL_ACTIVE_DAYS] == 6

    def test_several_logs_one_day_count_once(self) -> None:
        """Different log kinds on the same day are one active day."""
        logs = [
            *_logs_on(10, hour=8),
            *_logs_on(10, hour=9, type=const.LOG_TYPE_TASK),
            *_logs_on(10, hour=20, type=const.LOG_TYPE_PHOTO),
        ]
        result = self.stats.compute_consistency(logs, TODAY)
        assert result[const.STATS_TOTAL_ACTIVE_DAYS] == 1
        assert result[const.STATS_CURRENT_STREAK] == 1

    def test_days_bucket_in_local_time(self) -> None:
        """Late-evening local logs belong to the local day."""
        dt_utils.set_default_timezone(ZoneInfo("America/Chicago"))
        # 23:30 local on Jan 9 and Jan 10 -> two consecutive local days
        logs = [
            make_log(completed_at="2026-01-10T05:30:00+00:00"),
            make_log(completed_at="2026-01-11T05:30:00+00:00"),
        ]
        result = self.stats.compute_consistency(logs, TODAY)
        assert result[const.STATS_TOTAL_ACTIVE_DAYS] == 2
        assert result[const.STATS_CURRENT_STREAK] == 2

    def test_unparseable_logs_skipped(self) -> None:
        """Broken timestamps never count as activity."""
        logs = [*_logs_on(10), make_log(completed_at="not-a-time")]
        assert self.stats.compute_consistency(logs, TODAY)[
            const.STATS_TOTAL_ACTIVE_DAYS
        ] == 1


# =============================================================================
# TEST: SUPPLEMENTARY STATISTICS
# =============================================================================


class TestItemStats:
    """Per-item counters."""

    def test_counts_and_latest(self) -> None:
        """Counts per referenced item with the latest timestamp."""
        logs = [
            *_logs_on(3, 5, item_id="chin-tuck"),
            *_logs_on(4, activity_id="daily-guided-meditation"),
            make_log(const.LOG_TYPE_PHOTO, photo_uri="file://a.jpg"),
        ]
        result = StatisticsEngine().compute_item_stats(logs)
        assert set(result) == {"chin-tuck", "daily-guided-meditation"}
        assert result["chin-tuck"]["count"] == 2
        assert result["chin-tuck"]["last_completed_at"] == "2026-01-05T10:00:00+00:00"


class TestCategoryCounts:
    """Completions per category."""

    def test_unknown_items_are_custom(self) -> None:
        """Items without a category count as custom."""
        logs = [
            *_logs_on(1, 2, item_id="chin-tuck"),
            *_logs_on(3, item_id="gone"),
        ]
        result = StatisticsEngine().compute_category_counts(
            logs, {"chin-tuck": "Neck posture"}
        )
        assert result == {"Neck posture": 2, const.GOAL_CATEGORY_CUSTOM: 1}


class TestTimeSeries:
    """Daily completion series."""

    def test_continuous_axis(self) -> None:
        """Every day in the window is present, empty days as 0."""
        logs = [*_logs_on(8, 8, item_id="x"), *_logs_on(10, item_id="x"), *_logs_on(1)]
        series = StatisticsEngine().compute_time_series(logs, days=3, end=TODAY)
        assert series == {"2026-01-08": 2, "2026-01-09": 0, "2026-01-10": 1}


class TestTimingStats:
    """Hour-of-day histogram."""

    def test_histogram(self) -> None:
        """Completions are bucketed by local hour."""
        logs = [*_logs_on(1, 2, hour=7), *_logs_on(3, hour=21)]
        timing = StatisticsEngine().compute_timing_stats(logs)
        assert timing == {"by_hour": {7: 2, 21: 1}, "most_common_hour": 7, "total": 3}

    def test_empty(self) -> None:
        """No logs means no most common hour."""
        timing = StatisticsEngine().compute_timing_stats([])
        assert timing["most_common_hour"] is None
        assert timing["total"] == 0
