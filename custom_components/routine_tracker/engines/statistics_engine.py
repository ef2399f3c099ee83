"""Statistics Engine - consistency and completion statistics over log history.

This engine centralizes every statistic computed from the append-only log:
- Consistency: current streak, longest streak, active-day count
- Per-item completion counters
- Per-category completion counts
- Daily time series
- Completion timing (hour-of-day histogram)

Design Principles:
    - Stateless: operates on log lists passed in, never persists
    - Day bucketing always uses the log's local calendar date
    - Sorted-date-set streak walk: O(n log n) in log count, independent of
      how many calendar days the history spans
"""

from __future__ import annotations

from collections import Counter
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import as_local, dt_local_date, dt_now_utc, dt_parse

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ..type_defs import ConsistencyStats, ItemStats, TimingStats


class StatisticsEngine:
    """Stateless statistics over completion logs.

    Example:
        stats = StatisticsEngine()
        consistency = stats.compute_consistency(all_logs)
        consistency["current_streak"]  # 3
    """

    # ────────────────────────────────────────────────────────────────
    # Date helpers
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def _dt_today_local() -> date:
        """Return today's date in local timezone."""
        return as_local(dt_now_utc()).date()

    @staticmethod
    def active_dates(logs: Iterable[Mapping[str, Any]]) -> list[date]:
        """Return the distinct local dates with at least one log, ascending.

        Logs with an unparseable completed_at are skipped.
        """
        dates = {
            day
            for log in logs
            if (day := dt_local_date(log.get(const.DATA_LOG_COMPLETED_AT)))
            is not None
        }
        return sorted(dates)

    # ────────────────────────────────────────────────────────────────
    # Consistency
    # ────────────────────────────────────────────────────────────────

    def compute_consistency(
        self,
        logs: Iterable[Mapping[str, Any]],
        today: date | None = None,
    ) -> ConsistencyStats:
        """Compute streak statistics for a set of logs.

        Logs of different kinds on the same local date count as one active
        day. A run is a sequence of consecutive calendar days.

        The current streak is the run ending today when today has a log, or
        the run ending yesterday when only yesterday does (today is not over
        yet), otherwise 0.

        Args:
            logs: Logs of one scope (an item, a routine/goal, or everything)
            today: Local date to measure the current streak against.
                Defaults to today in the configured timezone.

        Returns:
            ConsistencyStats with current_streak, longest_streak and
            total_active_days.

        Example:
            Logs on D, D-1, D-2 -> {"current_streak": 3, "longest_streak": 3,
            "total_active_days": 3}
        """
        dates = self.active_dates(logs)
        if not dates:
            return {
                const.STATS_CURRENT_STREAK: 0,
                const.STATS_LONGEST_STREAK: 0,
                const.STATS_TOTAL_ACTIVE_DAYS: 0,
            }  # type: ignore[return-value]

        reference = today or self._dt_today_local()
        one_day = timedelta(days=1)

        run_ending: dict[date, int] = {}
        longest = 0
        run = 0
        previous: date | None = None
        for day in dates:
            run = run + 1 if previous is not None and day - previous == one_day else 1
            run_ending[day] = run
            longest = max(longest, run)
            previous = day

        current = run_ending.get(reference) or run_ending.get(reference - one_day) or 0

        return {
            const.STATS_CURRENT_STREAK: current,
            const.STATS_LONGEST_STREAK: longest,
            const.STATS_TOTAL_ACTIVE_DAYS: len(dates),
        }  # type: ignore[return-value]

    # ────────────────────────────────────────────────────────────────
    # Completion counters
    # ────────────────────────────────────────────────────────────────

    def compute_item_stats(
        self, logs: Iterable[Mapping[str, Any]]
    ) -> dict[str, ItemStats]:
        """Count completions and latest completion per referenced item.

        Returns:
            {item_id: {"item_id", "count", "last_completed_at"}}. Logs that
            reference no item (plain photo logs) are not counted.
        """
        result: dict[str, ItemStats] = {}
        latest: dict[str, Any] = {}
        for log in logs:
            item_id = log.get(const.DATA_LOG_ITEM_ID) or log.get(
                const.DATA_LOG_ACTIVITY_ID
            )
            if not item_id:
                continue
            completed_at = log.get(const.DATA_LOG_COMPLETED_AT)
            stats = result.setdefault(
                item_id,
                {"item_id": item_id, "count": 0, "last_completed_at": None},
            )
            stats["count"] += 1
            parsed = dt_parse(completed_at)
            if parsed is not None and (
                item_id not in latest or parsed > latest[item_id]
            ):
                latest[item_id] = parsed
                stats["last_completed_at"] = completed_at
        return result

    def compute_category_counts(
        self,
        logs: Iterable[Mapping[str, Any]],
        category_by_item: Mapping[str, str | None],
    ) -> dict[str, int]:
        """Count completions per item category (area for exercises).

        Items missing from `category_by_item` count under "custom".
        """
        counts: Counter[str] = Counter()
        for log in logs:
            item_id = log.get(const.DATA_LOG_ITEM_ID) or log.get(
                const.DATA_LOG_ACTIVITY_ID
            )
            if not item_id:
                continue
            counts[category_by_item.get(item_id) or const.GOAL_CATEGORY_CUSTOM] += 1
        return dict(counts)

    def compute_time_series(
        self,
        logs: Iterable[Mapping[str, Any]],
        days: int = const.STATS_TIME_SERIES_DAYS,
        end: date | None = None,
    ) -> dict[str, int]:
        """Return completions per local day for the `days` days ending at `end`.

        Days without logs are present with 0 so charts get a continuous axis.

        Example:
            >>> stats.compute_time_series(logs, days=3, end=date(2026, 1, 3))
            {"2026-01-01": 0, "2026-01-02": 2, "2026-01-03": 1}
        """
        last_day = end or self._dt_today_local()
        first_day = last_day - timedelta(days=max(days, 1) - 1)
        series = {
            (first_day + timedelta(days=offset)).isoformat(): 0
            for offset in range((last_day - first_day).days + 1)
        }
        for log in logs:
            day = dt_local_date(log.get(const.DATA_LOG_COMPLETED_AT))
            if day is not None and first_day <= day <= last_day:
                series[day.isoformat()] += 1
        return series

    def compute_timing_stats(self, logs: Iterable[Mapping[str, Any]]) -> TimingStats:
        """Return how completions distribute over local hours of the day."""
        hours: Counter[int] = Counter()
        for log in logs:
            parsed = dt_parse(log.get(const.DATA_LOG_COMPLETED_AT))
            if parsed is None:
                continue
            hours[as_local(parsed).hour] += 1

        most_common = hours.most_common(1)
        return {
            "by_hour": dict(sorted(hours.items())),
            "most_common_hour": most_common[0][0] if most_common else None,
            "total": sum(hours.values()),
        }
