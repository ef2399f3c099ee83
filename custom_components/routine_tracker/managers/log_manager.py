"""Log Manager - the append-only completion log.

Responsibilities:
- Append log records (the only writer of the `logs` bucket)
- Turn "complete this item instance" into the right log kind and owner ids
- Query logs by item, by routine/goal and by local calendar day

Emits LOG_APPENDED after each successful append; the GamificationManager
grants per-log XP and queues a badge evaluation in response.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..engines.routine_engine import RoutineEngine
from ..utils.dt_utils import dt_local_date
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import date

    from ..type_defs import LogRecordData


class LogManager(BaseManager):
    """Manager for the append-only log store."""

    async def async_setup(self) -> None:
        """Set up the LogManager."""
        const.LOGGER.debug("LogManager async_setup complete: %d logs", len(self.logs))

    @property
    def logs(self) -> list[LogRecordData]:
        """Return every log record, in append order."""
        return self.coordinator.data_store[const.DATA_LOGS]

    # =========================================================================
    # Append
    # =========================================================================

    async def async_append_log(self, user_input: Mapping[str, Any]) -> LogRecordData:
        """Validate, append and persist one log record.

        Raises:
            ServiceValidationError: Invalid log payload.
            PersistenceError: The store could not be written. The record is
                removed from memory again so state matches disk.
        """
        record = db.build_log_record(user_input)
        self.logs.append(record)
        await self._async_persist_or_rollback(lambda: self.logs.remove(record))

        const.LOGGER.debug(
            "DEBUG: Appended %s log %s for item %s",
            record[const.DATA_LOG_TYPE],
            record[const.DATA_LOG_ID],
            RoutineEngine.log_item_ref(record),
        )
        self.coordinator.async_update_snapshot()
        self.emit(
            const.SIGNAL_SUFFIX_LOG_APPENDED,
            log_id=record[const.DATA_LOG_ID],
            log_type=record[const.DATA_LOG_TYPE],
        )
        return record

    async def async_log_item_completion(
        self,
        owner_id: str,
        instance_id: str,
        extra: Mapping[str, Any] | None = None,
    ) -> LogRecordData:
        """Log a completion of one item instance of a routine or goal.

        Tasks log as task logs; exercises and goal activities log as
        exercise logs. Goal activities reference the catalog id through
        activity_id and the owner through goal_id.

        Raises:
            NotFoundError: Unknown owner or instance.
        """
        owner_kind, _record, reference = (
            self.coordinator.routine_manager.get_reference(owner_id, instance_id)
        )
        item_type = reference.get(const.DATA_ITEM_TYPE, const.ITEM_TYPE_EXERCISE)
        item_id = reference.get(const.DATA_ITEM_ID)

        user_input: dict[str, Any] = dict(extra or {})
        user_input[const.DATA_LOG_TYPE] = const.ITEM_TYPE_TO_LOG_TYPE.get(
            item_type, const.LOG_TYPE_EXERCISE
        )
        if owner_kind == const.OWNER_KIND_GOAL:
            user_input[const.DATA_LOG_ACTIVITY_ID] = item_id
            user_input[const.DATA_LOG_GOAL_ID] = owner_id
        else:
            user_input[const.DATA_LOG_ITEM_ID] = item_id
            user_input[const.DATA_LOG_ROUTINE_ID] = owner_id
        return await self.async_append_log(user_input)

    # =========================================================================
    # Queries
    # =========================================================================

    def logs_for_item(self, item_id: str) -> list[LogRecordData]:
        """Return the logs referencing a catalog id (item_id or activity_id)."""
        return [log for log in self.logs if RoutineEngine.log_item_ref(log) == item_id]

    def logs_for_owner(self, owner_id: str) -> list[LogRecordData]:
        """Return the logs of one routine or goal.

        Logs that carry no owner id but reference one of the owner's items
        are included, so records appended before owner tracking still count.
        """
        item_ids: set[str] = set()
        routines = self.coordinator.data_store[const.DATA_ROUTINES]
        goals = self.coordinator.data_store[const.DATA_GOALS]
        record = routines.get(owner_id) or goals.get(owner_id) or {}
        for reference in record.get(const.DATA_ITEMS, []):
            if isinstance(reference, dict) and reference.get(const.DATA_ITEM_ID):
                item_ids.add(reference[const.DATA_ITEM_ID])

        result: list[LogRecordData] = []
        for log in self.logs:
            log_owner = log.get(const.DATA_LOG_ROUTINE_ID) or log.get(
                const.DATA_LOG_GOAL_ID
            )
            if log_owner == owner_id or (
                not log_owner and RoutineEngine.log_item_ref(log) in item_ids
            ):
                result.append(log)
        return result

    def logs_on_day(self, day: date) -> list[LogRecordData]:
        """Return the logs whose completed_at falls on local calendar `day`."""
        return [
            log
            for log in self.logs
            if dt_local_date(log.get(const.DATA_LOG_COMPLETED_AT)) == day
        ]
