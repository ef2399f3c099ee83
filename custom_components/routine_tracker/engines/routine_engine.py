"""Routine Engine - decides which scheduled items are still due today.

An item is due on a day when one of its schedule entries applies to that
day (daily entries always, weekly entries on their weekday). It is pending
when due and no log on that local calendar day references it. Completing an
item more than once a day is allowed and never brings it back.

Items with no schedule are backlog items: visible, loggable, never pending.
There is no "missed" state; a weekly item simply is not due on other days.

ARCHITECTURE: Pure logic, NO Home Assistant dependencies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import dt_local_date, dt_today_local
from .schedule_engine import RecurrenceEngine

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import date

    from .catalog_engine import ScheduledItem


class RoutineEngine:
    """Stateless pending-item resolution."""

    @staticmethod
    def log_item_ref(log: Mapping[str, Any]) -> str | None:
        """Return the catalog id a log references (item_id or activity_id)."""
        return log.get(const.DATA_LOG_ITEM_ID) or log.get(const.DATA_LOG_ACTIVITY_ID)

    @classmethod
    def log_matches_item(cls, log: Mapping[str, Any], item: ScheduledItem) -> bool:
        """Return True when `log` records a completion of `item`.

        The catalog id must match. When the log also names its owning
        routine/goal, that owner must match too, so the same exercise in two
        routines is tracked per routine.
        """
        if cls.log_item_ref(log) != item.item_id:
            return False
        owner_key = (
            const.DATA_LOG_GOAL_ID
            if item.owner_kind == const.OWNER_KIND_GOAL
            else const.DATA_LOG_ROUTINE_ID
        )
        log_owner = log.get(owner_key)
        return not log_owner or log_owner == item.owner_id

    @staticmethod
    def logs_on(logs: Iterable[Mapping[str, Any]], day: date) -> list[Mapping[str, Any]]:
        """Return the logs whose completed_at falls on local calendar `day`."""
        return [
            log
            for log in logs
            if dt_local_date(log.get(const.DATA_LOG_COMPLETED_AT)) == day
        ]

    @classmethod
    def pending_today(
        cls,
        items: Iterable[ScheduledItem],
        todays_logs: Iterable[Mapping[str, Any]],
        today: date | None = None,
    ) -> list[ScheduledItem]:
        """Return the items still due today, in reminder order.

        Args:
            items: Resolved items (any mix of routines and goals)
            todays_logs: Logs to reconcile against. Logs that do not fall on
                `today` are ignored, so a wider log set is also accepted.
            today: Local calendar date. Defaults to today in the configured
                timezone.

        Returns:
            Pending items sorted by earliest time of day, "random" last,
            ties broken by name. Each item instance appears at most once.

        Example:
            >>> RoutineEngine.pending_today([chin_tuck, hydration], [], today)
            [chin_tuck, hydration]
        """
        day = today or dt_today_local()
        day_logs = cls.logs_on(todays_logs, day)

        pending: list[tuple[tuple[int, int], str, ScheduledItem]] = []
        seen: set[tuple[str, str]] = set()
        for item in items:
            key = (item.owner_id, item.instance_id)
            if key in seen:
                continue
            seen.add(key)

            engine = RecurrenceEngine(item.rule)
            if not engine.is_due_on(day):
                continue
            if any(cls.log_matches_item(log, item) for log in day_logs):
                continue
            pending.append((engine.sort_key_for(day), item.name.casefold(), item))

        pending.sort(key=lambda entry: (entry[0], entry[1]))
        return [item for _, _, item in pending]
