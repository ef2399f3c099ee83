# File: notification_manager.py
"""Notification Manager for Routine Tracker integration.

This manager decides WHAT to remind about and owns the trigger set:
- schedule_all(): cancel every trigger, then add one per concrete schedule
  entry of every resolved item (daily, or weekly on its day)
- Reminder delivery through a Home Assistant notify service, with an
  OPEN_ITEM action the companion app sends back when tapped

Separation of concerns:
- NotificationManager = "The Voice" (OUTGOING reminders)
- notification_action_handler.py = "The Router" (INCOMING taps)

The trigger facility is Home Assistant's time tracker
(async_track_time_change, local time). Weekly triggers fire at the clock
time every day and only deliver on their ISO weekday.

"random" times of day are never scheduled. They are counted and logged in
the schedule summary so the gap stays visible. The summary also carries
next_reminder, the soonest instant any scheduled item fires.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.core import callback
from homeassistant.helpers.event import async_track_time_change
from homeassistant.helpers.start import async_at_started

from .. import const
from ..engines.schedule_engine import RecurrenceEngine
from ..exceptions import NotFoundError, NotificationPermissionError
from ..utils.dt_utils import as_local, dt_now_iso
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime, time

    from homeassistant.core import HomeAssistant

    from ..coordinator import RoutineTrackerCoordinator
    from ..engines.catalog_engine import ScheduledItem
    from ..type_defs import ScheduleSummary


# =============================================================================
# Module-level helper for testability
# =============================================================================


async def async_send_notification(
    hass: HomeAssistant,
    service: str,
    title: str,
    message: str,
    actions: list[dict[str, Any]] | None = None,
    extra_data: dict[str, Any] | None = None,
) -> None:
    """Send a notification via Home Assistant service call.

    Args:
        hass: Home Assistant instance
        service: Notification service as "notify.service_name" or just the name
        title: Notification title
        message: Notification message
        actions: Optional list of action button dictionaries
        extra_data: Optional extra data (e.g., tag)
    """
    domain, svc = split_notify_service(service)

    payload: dict[str, Any] = {
        const.NOTIFY_TITLE: title,
        const.NOTIFY_MESSAGE: message,
    }
    if actions:
        data = payload.setdefault(const.NOTIFY_DATA, {})
        data[const.NOTIFY_ACTIONS] = actions
    if extra_data:
        data = payload.setdefault(const.NOTIFY_DATA, {})
        data.update(extra_data)

    const.LOGGER.debug(
        "async_send_notification: %s.%s - title='%s', message='%s'",
        domain,
        svc,
        title,
        message,
    )
    await hass.services.async_call(domain, svc, payload, blocking=True)


def split_notify_service(service: str) -> tuple[str, str]:
    """Split "notify.mobile_app_x" into its domain and service parts."""
    if "." in service:
        domain, svc = service.split(".", 1)
        return domain, svc
    return const.NOTIFY_DOMAIN, service


class NotificationManager(BaseManager):
    """Manager for reminder triggers and their delivery.

    Trigger state is in memory only; every Home Assistant start rebuilds it
    from the persisted routines and goals.
    """

    def __init__(
        self, hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
    ) -> None:
        """Initialize notification manager."""
        super().__init__(hass, coordinator)
        self._unsubs: list[Callable[[], None]] = []
        self._triggers: list[dict[str, Any]] = []

    async def async_setup(self) -> None:
        """Set up the notification manager.

        Reschedules when:
        - Home Assistant has started (or immediately if it already has)
        - Routines, goals or items change
        - Onboarding status changes (initial setup gates scheduling)
        """
        self.listen(const.SIGNAL_SUFFIX_ROUTINES_CHANGED, self._async_on_reschedule)
        self.listen(const.SIGNAL_SUFFIX_ONBOARDING_CHANGED, self._async_on_reschedule)
        self.coordinator.config_entry.async_on_unload(
            async_at_started(self.hass, self._async_on_started)
        )
        self.coordinator.config_entry.async_on_unload(self.cancel_all)

    # =========================================================================
    # Trigger facility
    # =========================================================================

    @property
    def triggers(self) -> list[dict[str, Any]]:
        """Return the payloads of the currently scheduled triggers."""
        return list(self._triggers)

    @callback
    def cancel_all(self) -> None:
        """Cancel every scheduled reminder trigger."""
        for unsub in self._unsubs:
            unsub()
        self._unsubs.clear()
        self._triggers.clear()

    @callback
    def schedule_daily(self, clock: time, payload: dict[str, Any]) -> None:
        """Schedule a reminder every day at `clock` (local time)."""
        self._track(clock, None, payload)

    @callback
    def schedule_weekly(
        self, day_of_week: int, clock: time, payload: dict[str, Any]
    ) -> None:
        """Schedule a reminder on ISO weekday `day_of_week` at `clock`."""
        self._track(clock, day_of_week, payload)

    def _track(self, clock: time, day_of_week: int | None, payload: dict[str, Any]) -> None:
        async def _async_action(now: datetime) -> None:
            if day_of_week is not None and as_local(now).isoweekday() != day_of_week:
                return
            await self.async_send_reminder(payload)

        unsub = async_track_time_change(
            self.hass, _async_action, hour=clock.hour, minute=clock.minute, second=0
        )
        self._unsubs.append(unsub)
        self._triggers.append(
            {
                **payload,
                const.SCHEDULE_TIME_OF_DAY: f"{clock.hour:02d}:{clock.minute:02d}",
                const.SCHEDULE_DAY_OF_WEEK: day_of_week,
            }
        )

    # =========================================================================
    # Scheduling
    # =========================================================================

    async def async_schedule_all(
        self, items: Iterable[ScheduledItem] | None = None
    ) -> ScheduleSummary | None:
        """Replace the whole trigger set with one built from `items`.

        Args:
            items: Resolved items. Defaults to every item of every routine
                and goal.

        Returns:
            The schedule summary, or None when skipped because the initial
            setup flow is not finished yet. Existing triggers are cancelled
            either way.
        """
        if not self.coordinator.onboarding_manager.is_initial_setup_finished():
            self.cancel_all()
            const.LOGGER.debug(
                "DEBUG: Skipping reminder scheduling until initial setup is finished"
            )
            return None

        resolved = (
            list(items)
            if items is not None
            else self.coordinator.routine_manager.resolve_all()
        )
        self.cancel_all()

        skipped_random = 0
        failures: list[dict[str, Any]] = []
        permission_reported = False
        next_reminder: datetime | None = None

        for item in resolved:
            if not item.notifications_enabled or not item.rule.is_scheduled:
                continue
            engine = RecurrenceEngine(item.rule)
            random_count = len(engine.random_entries())
            if random_count:
                skipped_random += random_count
                const.LOGGER.info(
                    "INFO: '%s' has %d random reminder time(s), which are not scheduled",
                    item.name,
                    random_count,
                )
            if not engine.concrete_entries():
                continue
            try:
                upcoming = engine.get_next_occurrence()
                self._schedule_item(item, engine)
            except NotificationPermissionError as err:
                failures.append(self._failure(item, err))
                if not permission_reported:
                    const.LOGGER.error("ERROR: Reminders not scheduled: %s", err)
                    permission_reported = True
            except (ValueError, KeyError) as err:
                failures.append(self._failure(item, err))
                const.LOGGER.error(
                    "ERROR: Failed to schedule reminders for '%s': %s", item.name, err
                )
            else:
                if upcoming and (next_reminder is None or upcoming < next_reminder):
                    next_reminder = upcoming

        summary: ScheduleSummary = {  # type: ignore[misc]
            const.DATA_NOTIFICATIONS_LAST_SCHEDULED: dt_now_iso(),
            const.DATA_NOTIFICATIONS_TRIGGER_COUNT: len(self._triggers),
            const.DATA_NOTIFICATIONS_SKIPPED_RANDOM: skipped_random,
            const.DATA_NOTIFICATIONS_FAILURES: failures,
            const.DATA_NOTIFICATIONS_NEXT_REMINDER: (
                next_reminder.isoformat() if next_reminder else None
            ),
        }
        self.coordinator.data_store[const.DATA_NOTIFICATIONS] = dict(summary)
        self.coordinator._persist()
        const.LOGGER.info(
            "INFO: Scheduled %d reminder trigger(s), %d random skipped, %d failure(s)",
            summary["trigger_count"],
            skipped_random,
            len(failures),
        )
        self.emit(
            const.SIGNAL_SUFFIX_NOTIFICATIONS_SCHEDULED,
            trigger_count=summary["trigger_count"],
            failures=len(failures),
        )
        return summary

    def _schedule_item(self, item: ScheduledItem, engine: RecurrenceEngine) -> None:
        """Add the triggers of one item.

        Raises:
            NotificationPermissionError: The notify target cannot deliver.
        """
        self.ensure_can_notify()
        payload = {
            const.PAYLOAD_ITEM_ID: item.item_id,
            const.PAYLOAD_INSTANCE_ID: item.instance_id,
            const.PAYLOAD_OWNER_ID: item.owner_id,
            const.PAYLOAD_OWNER_KIND: item.owner_kind,
        }
        for entry in engine.concrete_entries():
            clock = entry.clock_time
            if clock is None:
                continue
            if item.rule.is_weekly and entry.day_of_week is not None:
                self.schedule_weekly(entry.day_of_week, clock, payload)
            else:
                self.schedule_daily(clock, payload)

    def ensure_can_notify(self) -> None:
        """Raise NotificationPermissionError unless the notify target exists."""
        service = self.coordinator.notify_service
        if not service:
            raise NotificationPermissionError(service)
        domain, svc = split_notify_service(service)
        if not self.hass.services.has_service(domain, svc):
            raise NotificationPermissionError(service)

    @staticmethod
    def _failure(item: ScheduledItem, err: Exception) -> dict[str, Any]:
        return {
            const.PAYLOAD_ITEM_ID: item.item_id,
            const.PAYLOAD_INSTANCE_ID: item.instance_id,
            const.PAYLOAD_OWNER_ID: item.owner_id,
            "error": str(err),
        }

    # =========================================================================
    # Delivery
    # =========================================================================

    def build_reminder(self, item: ScheduledItem) -> tuple[str, str, list[dict[str, str]]]:
        """Return (title, message, actions) for one item's reminder."""
        template = (
            const.NOTIFICATION_MESSAGE_TASK
            if item.is_task
            else const.NOTIFICATION_MESSAGE_PROGRESS
        )
        action = const.NOTIFICATION_ACTION_SEPARATOR.join(
            (
                const.ACTION_OPEN_ITEM,
                self.entry_id[: const.NOTIFICATION_ENTRY_ID_LENGTH],
                item.owner_id,
                item.item_id,
            )
        )
        return (
            const.NOTIFICATION_TITLE,
            template.format(name=item.name),
            [{const.NOTIFY_ACTION: action, "title": const.NOTIFICATION_ACTION_OPEN_TITLE}],
        )

    async def async_send_reminder(self, payload: dict[str, Any]) -> None:
        """Deliver the reminder for a fired trigger.

        The item is resolved again at fire time so edits made since
        scheduling (name, removal) are respected. Errors are logged; a
        failing reminder never affects other triggers.
        """
        owner_id = payload.get(const.PAYLOAD_OWNER_ID, "")
        instance_id = payload.get(const.PAYLOAD_INSTANCE_ID)
        try:
            items = self.coordinator.routine_manager.resolve(owner_id)
        except NotFoundError as err:
            const.LOGGER.warning("WARNING: Reminder for missing owner %s: %s", owner_id, err)
            return
        item = next((i for i in items if i.instance_id == instance_id), None)
        if item is None:
            const.LOGGER.warning("WARNING: Reminder for removed item %s", instance_id)
            return

        title, message, actions = self.build_reminder(item)
        try:
            self.ensure_can_notify()
            await async_send_notification(
                self.hass,
                self.coordinator.notify_service,
                title,
                message,
                actions=actions,
                extra_data={const.NOTIFY_TAG: f"{const.DOMAIN}_{item.instance_id}"},
            )
        except Exception as err:  # pylint: disable=broad-exception-caught
            # Fired from a time tracker callback with nobody awaiting it
            const.LOGGER.error(
                "ERROR: Failed to send reminder for '%s': %s", item.name, err
            )

    # =========================================================================
    # Event handlers
    # =========================================================================

    async def _async_on_started(self, _hass: HomeAssistant) -> None:
        await self._async_on_reschedule({})

    async def _async_on_reschedule(self, payload: dict[str, Any]) -> None:
        """Rebuild every trigger; errors are logged because nothing awaits this."""
        try:
            await self.async_schedule_all()
        except Exception:  # pylint: disable=broad-exception-caught
            const.LOGGER.exception("ERROR: Reminder scheduling failed (%s)", payload)
