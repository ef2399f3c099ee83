"""Schedule Engine for Routine Tracker.

Recurrence model and reminder planning:
- Parse persisted recurrence data (including corrupted or legacy shapes)
  into immutable RecurrenceRule / ScheduleEntry values
- Decide which entries apply on a given calendar day
- Compute next concrete reminder instants with `dateutil.rrule`

The "random" time-of-day sentinel is kept on the rule but never produces a
concrete instant; callers report it as unscheduled.

IMPORTANT: This module must NOT import from coordinator.py or Home Assistant.
Only import from const.py, type_defs.py, utils and standard libraries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
import json
from typing import TYPE_CHECKING, Any, ClassVar, cast

from dateutil.rrule import DAILY, FR, MO, SA, SU, TH, TU, WE, WEEKLY, rrule

from .. import const
from ..utils.dt_utils import as_local, dt_now_local, parse_time_of_day

if TYPE_CHECKING:
    from ..type_defs import ScheduleEntryData


# =============================================================================
# Recurrence Model
# =============================================================================


@dataclass(frozen=True)
class ScheduleEntry:
    """One time-of-day slot of a recurrence rule.

    Attributes:
        time_of_day: Zero-padded "HH:MM" or const.TIME_OF_DAY_RANDOM
        day_of_week: ISO weekday 1..7 (Monday..Sunday), weekly rules only
    """

    time_of_day: str
    day_of_week: int | None = None

    @property
    def is_random(self) -> bool:
        """Return True for the "random" sentinel."""
        return self.time_of_day == const.TIME_OF_DAY_RANDOM

    @property
    def clock_time(self) -> time | None:
        """Return the concrete clock time, or None for "random"."""
        if self.is_random:
            return None
        return parse_time_of_day(self.time_of_day)

    def to_dict(self) -> ScheduleEntryData:
        """Serialize for storage."""
        data: dict[str, Any] = {const.SCHEDULE_TIME_OF_DAY: self.time_of_day}
        if self.day_of_week is not None:
            data[const.SCHEDULE_DAY_OF_WEEK] = self.day_of_week
        return cast("ScheduleEntryData", data)


@dataclass(frozen=True)
class RecurrenceRule:
    """How often an item recurs and at which times of day.

    An empty `schedules` tuple means the item is unscheduled: it is shown
    and loggable but never pending and never reminded.
    """

    recurrence: str = const.RECURRENCE_DAILY
    schedules: tuple[ScheduleEntry, ...] = ()

    @property
    def is_scheduled(self) -> bool:
        """Return True when at least one schedule entry exists."""
        return bool(self.schedules)

    @property
    def is_weekly(self) -> bool:
        """Return True for weekly rules."""
        return self.recurrence == const.RECURRENCE_WEEKLY

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage."""
        return {
            const.DATA_ITEM_RECURRENCE: self.recurrence,
            const.DATA_ITEM_SCHEDULES: [entry.to_dict() for entry in self.schedules],
        }


UNSCHEDULED = RecurrenceRule()


# =============================================================================
# Recurrence Engine
# =============================================================================


class RecurrenceEngine:
    """Day-applicability and next-occurrence calculations for one rule.

    Parsing helpers are classmethods so persisted data can be normalized
    without constructing an engine.
    """

    # ISO weekday (1..7) -> rrule weekday constant
    WEEKDAY_TO_RRULE: ClassVar[dict[int, Any]] = {
        1: MO,
        2: TU,
        3: WE,
        4: TH,
        5: FR,
        6: SA,
        7: SU,
    }

    def __init__(self, rule: RecurrenceRule) -> None:
        """Initialize the engine for a normalized rule."""
        self._rule = rule

    @property
    def rule(self) -> RecurrenceRule:
        """Return the rule this engine evaluates."""
        return self._rule

    # =========================================================================
    # Day applicability
    # =========================================================================

    def entries_for(self, day: date) -> list[ScheduleEntry]:
        """Return the schedule entries that apply on `day`.

        Daily rules apply every day. Weekly rules apply only on the entries'
        day_of_week.
        """
        if not self._rule.is_weekly:
            return list(self._rule.schedules)
        weekday = day.isoweekday()
        return [e for e in self._rule.schedules if e.day_of_week == weekday]

    def is_due_on(self, day: date) -> bool:
        """Return True when at least one entry applies on `day`."""
        return bool(self.entries_for(day))

    def sort_key_for(self, day: date) -> tuple[int, int]:
        """Return an ordering key by earliest time of day on `day`.

        Concrete times sort by minutes since midnight. An item whose only
        entries are "random" sorts after every concrete time.
        """
        minutes = [
            clock.hour * 60 + clock.minute
            for entry in self.entries_for(day)
            if (clock := entry.clock_time) is not None
        ]
        if minutes:
            return (0, min(minutes))
        return (1, 0)

    # =========================================================================
    # Reminder planning
    # =========================================================================

    def concrete_entries(self) -> list[ScheduleEntry]:
        """Return entries that can become reminder triggers."""
        return [e for e in self._rule.schedules if e.clock_time is not None]

    def random_entries(self) -> list[ScheduleEntry]:
        """Return "random" entries, which are never scheduled."""
        return [e for e in self._rule.schedules if e.is_random]

    def get_next_occurrence(self, after: datetime | None = None) -> datetime | None:
        """Return the next concrete reminder instant strictly after `after`.

        Args:
            after: Reference datetime. Defaults to now in the local timezone.

        Returns:
            Local timezone-aware datetime, or None when the rule has no
            concrete entries.
        """
        reference = as_local(after) if after else dt_now_local()
        start_of_day = reference.replace(hour=0, minute=0, second=0, microsecond=0)

        candidates: list[datetime] = []
        for entry in self.concrete_entries():
            clock = entry.clock_time
            if clock is None:
                continue
            byweekday = None
            freq = DAILY
            if self._rule.is_weekly and entry.day_of_week is not None:
                freq = WEEKLY
                byweekday = [self.WEEKDAY_TO_RRULE[entry.day_of_week]]
            rule = rrule(
                freq,  # type: ignore[arg-type]
                dtstart=start_of_day.replace(hour=clock.hour, minute=clock.minute),
                byweekday=byweekday,
            )
            occurrence = rule.after(reference, inc=False)
            if occurrence:
                candidates.append(occurrence)

        return min(candidates) if candidates else None

    # =========================================================================
    # Parsing / normalization of persisted data
    # =========================================================================

    @classmethod
    def parse_rule(
        cls,
        recurrence: Any,
        schedules: Any,
        notification_times: Any = None,
    ) -> RecurrenceRule:
        """Build a normalized RecurrenceRule from persisted fields.

        Malformed input never raises: corrupted schedule arrays degrade to
        an empty schedule and individual bad entries are dropped, each with
        a warning.

        Normalization:
        - `schedules` may be a list or a JSON-encoded list
        - legacy `notification_times` strings are used when `schedules` is empty
        - missing recurrence is inferred (weekly iff every entry has a day)
        - daily entries lose any day_of_week; weekly entries without a valid
          day_of_week are dropped
        - duplicate entries are removed, first occurrence kept

        Args:
            recurrence: "daily" / "weekly" (case-insensitive) or None
            schedules: list[dict] or JSON string of one
            notification_times: Legacy list like ["09:00", "monday-09:00"]
        """
        raw_entries = cls._load_list(schedules, const.DATA_ITEM_SCHEDULES)
        entries = [
            entry
            for raw in raw_entries
            if (entry := cls.parse_schedule_entry(raw)) is not None
        ]
        if not entries and notification_times:
            entries = cls.parse_notification_times(notification_times)

        recurrence_value = cls._normalize_recurrence(recurrence, entries)

        normalized: list[ScheduleEntry] = []
        for entry in entries:
            if recurrence_value == const.RECURRENCE_DAILY:
                entry = ScheduleEntry(entry.time_of_day)
            elif entry.day_of_week is None:
                const.LOGGER.warning(
                    "WARNING: Skipping weekly schedule entry '%s' without day_of_week",
                    entry.time_of_day,
                )
                continue
            if entry not in normalized:
                normalized.append(entry)

        return RecurrenceRule(recurrence_value, tuple(normalized))

    @classmethod
    def parse_schedule_entry(cls, raw: Any) -> ScheduleEntry | None:
        """Parse one persisted schedule entry, or None if unusable.

        Accepts snake_case keys and the camelCase keys of older exports.
        """
        if not isinstance(raw, dict):
            const.LOGGER.warning("WARNING: Ignoring non-object schedule entry: %r", raw)
            return None

        time_value = raw.get(const.SCHEDULE_TIME_OF_DAY, raw.get("timeOfDay"))
        time_of_day = cls.normalize_time_of_day(time_value)
        if time_of_day is None:
            const.LOGGER.warning(
                "WARNING: Ignoring schedule entry with invalid time_of_day: %r",
                time_value,
            )
            return None

        day_value = raw.get(const.SCHEDULE_DAY_OF_WEEK, raw.get("dayOfWeek"))
        return ScheduleEntry(time_of_day, cls.normalize_day_of_week(day_value))

    @classmethod
    def parse_notification_times(cls, notification_times: Any) -> list[ScheduleEntry]:
        """Parse legacy notification time strings.

        Formats: "09:00" (daily), "monday-09:00" (weekly), "random".
        """
        raw_times = cls._load_list(notification_times, const.DATA_ITEM_NOTIFICATION_TIMES)
        entries: list[ScheduleEntry] = []
        for raw in raw_times:
            if not isinstance(raw, str):
                const.LOGGER.warning("WARNING: Ignoring notification time: %r", raw)
                continue
            day_of_week: int | None = None
            time_part = raw
            if const.NOTIFICATION_TIME_DAY_SEPARATOR in raw:
                day_part, time_part = raw.split(const.NOTIFICATION_TIME_DAY_SEPARATOR, 1)
                day_of_week = cls.normalize_day_of_week(day_part)
                if day_of_week is None:
                    const.LOGGER.warning(
                        "WARNING: Ignoring notification time with unknown day: %s", raw
                    )
                    continue
            time_of_day = cls.normalize_time_of_day(time_part)
            if time_of_day is None:
                continue
            entries.append(ScheduleEntry(time_of_day, day_of_week))
        return entries

    @staticmethod
    def normalize_time_of_day(value: Any) -> str | None:
        """Return a zero-padded "HH:MM", the random sentinel, or None."""
        if not isinstance(value, str):
            return None
        stripped = value.strip()
        if stripped.lower() == const.TIME_OF_DAY_RANDOM:
            return const.TIME_OF_DAY_RANDOM
        clock = parse_time_of_day(stripped)
        if clock is None:
            return None
        return f"{clock.hour:02d}:{clock.minute:02d}"

    @staticmethod
    def normalize_day_of_week(value: Any) -> int | None:
        """Return an ISO weekday 1..7 from an int, digit string or day name."""
        if isinstance(value, bool) or value is None:
            return None
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in const.WEEKDAY_NAMES:
                return const.WEEKDAY_NAMES.index(lowered) + 1
            if not lowered.isdigit():
                return None
            value = int(lowered)
        if isinstance(value, int) and (
            const.DAY_OF_WEEK_MIN <= value <= const.DAY_OF_WEEK_MAX
        ):
            return value
        return None

    @staticmethod
    def _normalize_recurrence(value: Any, entries: list[ScheduleEntry]) -> str:
        """Return a known recurrence, inferring it from entries if needed."""
        if isinstance(value, str) and value.strip().lower() in const.RECURRENCE_TYPES:
            return value.strip().lower()
        if value:
            const.LOGGER.warning(
                "WARNING: Unknown recurrence %r, inferring from schedule entries", value
            )
        if entries and all(e.day_of_week is not None for e in entries):
            return const.RECURRENCE_WEEKLY
        return const.RECURRENCE_DAILY

    @staticmethod
    def _load_list(value: Any, field: str) -> list[Any]:
        """Return `value` as a list, decoding JSON strings; [] on corruption."""
        if value is None:
            return []
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as err:
                const.LOGGER.warning(
                    "WARNING: Corrupted %s data treated as empty: %s", field, err
                )
                return []
        if not isinstance(value, list):
            const.LOGGER.warning(
                "WARNING: Expected a list for %s, got %s; treating as empty",
                field,
                type(value).__name__,
            )
            return []
        return value
