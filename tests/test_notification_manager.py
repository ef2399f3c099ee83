"""Tests for reminder scheduling and delivery."""

from dataclasses import replace
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from homeassistant.core import HomeAssistant
import pytest
from pytest_homeassistant_custom_component.common import async_mock_service

from custom_components.routine_tracker import const
from custom_components.routine_tracker.coordinator import RoutineTrackerCoordinator
from custom_components.routine_tracker.engines.schedule_engine import (
    RecurrenceRule,
    ScheduleEntry,
)
from custom_components.routine_tracker.exceptions import NotificationPermissionError
from custom_components.routine_tracker.managers.notification_manager import (
    split_notify_service,
)
from tests.helpers import add_item, call_service, create_routine, finish_onboarding


@pytest.fixture
def notify_calls(hass: HomeAssistant):
    """Register the mock notify target used by the config entry."""
    return async_mock_service(hass, const.NOTIFY_DOMAIN, "mobile_app_test")


async def _schedule(hass: HomeAssistant) -> dict | None:
    response = await call_service(
        hass, const.SERVICE_SCHEDULE_NOTIFICATIONS, return_response=True
    )
    return response["summary"]


async def _unload(hass: HomeAssistant, coordinator: RoutineTrackerCoordinator) -> None:
    await hass.config_entries.async_unload(coordinator.config_entry.entry_id)
    await hass.async_block_till_done()


async def _build_morning(hass: HomeAssistant) -> str:
    """Routine with two daily, one weekly and one random reminder time."""
    routine_id = await create_routine(hass)
    await add_item(
        hass,
        routine_id,
        "chin-tuck",
        schedules=[{"time_of_day": "08:00"}, {"time_of_day": "20:00"}],
    )
    await add_item(
        hass,
        routine_id,
        "hydration",
        recurrence=const.RECURRENCE_WEEKLY,
        schedules=[{"time_of_day": "09:00", "day_of_week": 3}],
    )
    await add_item(hass, routine_id, "fish-face", schedules=[{"time_of_day": "random"}])
    await hass.async_block_till_done()
    return routine_id


def test_split_notify_service() -> None:
    """Both "notify.x" and bare "x" name a notify service."""
    assert split_notify_service("notify.mobile_app_pixel") == ("notify", "mobile_app_pixel")
    assert split_notify_service("mobile_app_pixel") == ("notify", "mobile_app_pixel")


# =============================================================================
# SCHEDULING
# =============================================================================


async def test_scheduling_waits_for_onboarding(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator, notify_calls
) -> None:
    """Nothing is scheduled before initial setup is finished."""
    await _build_morning(hass)

    assert await _schedule(hass) is None
    assert coordinator.notification_manager.triggers == []


async def test_schedule_all(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator, notify_calls
) -> None:
    """Concrete times become triggers; random times are only counted."""
    routine_id = await _build_morning(hass)
    await finish_onboarding(hass)

    summary = await _schedule(hass)

    assert summary["trigger_count"] == 3
    assert summary["skipped_random"] == 1
    assert summary["failures"] == []

    triggers = coordinator.notification_manager.triggers
    assert sorted(
        (t[const.PAYLOAD_ITEM_ID], t[const.SCHEDULE_TIME_OF_DAY], t[const.SCHEDULE_DAY_OF_WEEK])
        for t in triggers
    ) == [
        ("chin-tuck", "08:00", None),
        ("chin-tuck", "20:00", None),
        ("hydration", "09:00", 3),
    ]
    assert all(t[const.PAYLOAD_OWNER_ID] == routine_id for t in triggers)
    assert coordinator.data_store[const.DATA_NOTIFICATIONS]["trigger_count"] == 3

    await _unload(hass, coordinator)


async def test_schedule_all_replaces_triggers(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator, notify_calls
) -> None:
    """Rescheduling replaces the trigger set instead of adding to it."""
    await _build_morning(hass)
    await finish_onboarding(hass)

    await _schedule(hass)
    summary = await _schedule(hass)

    assert summary["trigger_count"] == 3
    assert len(coordinator.notification_manager.triggers) == 3

    await _unload(hass, coordinator)


async def test_item_changes_reschedule(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator, notify_calls
) -> None:
    """Adding an item after onboarding schedules it without a service call."""
    await finish_onboarding(hass)
    routine_id = await create_routine(hass)
    await add_item(hass, routine_id, "chin-tuck", schedules=[{"time_of_day": "07:30"}])
    await hass.async_block_till_done()

    [trigger] = coordinator.notification_manager.triggers
    assert trigger[const.SCHEDULE_TIME_OF_DAY] == "07:30"

    await _unload(hass, coordinator)


async def test_disabled_notifications_not_scheduled(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator, notify_calls
) -> None:
    """Items with notifications turned off get no triggers."""
    routine_id = await create_routine(hass)
    await add_item(
        hass,
        routine_id,
        "chin-tuck",
        schedules=[{"time_of_day": "08:00"}],
        notifications_enabled=False,
    )
    await finish_onboarding(hass)

    summary = await _schedule(hass)

    assert summary["trigger_count"] == 0
    assert coordinator.notification_manager.triggers == []


async def test_missing_notify_service(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
) -> None:
    """Without a deliverable notify target every item is reported as failed."""
    routine_id = await create_routine(hass)
    await add_item(hass, routine_id, "chin-tuck", schedules=[{"time_of_day": "08:00"}])
    await add_item(hass, routine_id, "chewing", schedules=[{"time_of_day": "12:00"}])
    await finish_onboarding(hass)

    summary = await _schedule(hass)

    assert summary["trigger_count"] == 0
    assert sorted(f[const.PAYLOAD_ITEM_ID] for f in summary["failures"]) == [
        "chewing",
        "chin-tuck",
    ]
    with pytest.raises(NotificationPermissionError):
        coordinator.notification_manager.ensure_can_notify()


async def test_unload_cancels_triggers(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator, notify_calls
) -> None:
    """Unloading the entry cancels every trigger."""
    await _build_morning(hass)
    await finish_onboarding(hass)
    await _schedule(hass)
    manager = coordinator.notification_manager
    assert manager.triggers

    await _unload(hass, coordinator)

    assert manager.triggers == []


async def test_reopened_onboarding_cancels_triggers(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator, notify_calls
) -> None:
    """Moving initial setup back to in progress cancels the live triggers."""
    await _build_morning(hass)
    await finish_onboarding(hass)
    manager = coordinator.notification_manager
    assert len(manager.triggers) == 3

    await call_service(
        hass,
        const.SERVICE_SET_ONBOARDING_STATUS,
        {const.FIELD_STATUS: const.ONBOARDING_STATUS_IN_PROGRESS},
    )
    await hass.async_block_till_done()

    assert await manager.async_schedule_all() is None
    assert manager.triggers == []


async def test_failing_item_does_not_block_others(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator, notify_calls
) -> None:
    """One item that cannot be scheduled is reported; the rest still get triggers."""
    routine_id = await create_routine(hass)
    await add_item(hass, routine_id, "chin-tuck", schedules=[{"time_of_day": "08:00"}])
    await finish_onboarding(hass)
    manager = coordinator.notification_manager
    [good] = coordinator.routine_manager.resolve(routine_id)
    broken = replace(
        good,
        instance_id="broken-instance",
        item_id="broken",
        rule=RecurrenceRule(
            const.RECURRENCE_WEEKLY, (ScheduleEntry("08:00", day_of_week=9),)
        ),
    )

    summary = await manager.async_schedule_all([broken, good])

    assert summary["trigger_count"] == 1
    assert [f[const.PAYLOAD_ITEM_ID] for f in summary["failures"]] == ["broken"]
    [trigger] = manager.triggers
    assert trigger[const.PAYLOAD_ITEM_ID] == "chin-tuck"

    await _unload(hass, coordinator)


async def test_random_only_item_is_not_a_failure(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
) -> None:
    """Items with only random times need no notify target."""
    routine_id = await create_routine(hass)
    await add_item(hass, routine_id, "fish-face", schedules=[{"time_of_day": "random"}])
    await finish_onboarding(hass)

    summary = await _schedule(hass)

    assert summary["trigger_count"] == 0
    assert summary["skipped_random"] == 1
    assert summary["failures"] == []
    assert summary["next_reminder"] is None


async def test_summary_reports_next_reminder(
    hass: HomeAssistant,
    coordinator: RoutineTrackerCoordinator,
    notify_calls,
    freezer: Any,
) -> None:
    """The summary carries the soonest upcoming reminder instant."""
    local_zone = ZoneInfo(hass.config.time_zone)
    freezer.move_to(datetime(2026, 1, 7, 4, 0, tzinfo=local_zone))
    await _build_morning(hass)
    await finish_onboarding(hass)

    summary = await _schedule(hass)

    assert datetime.fromisoformat(summary["next_reminder"]) == datetime(
        2026, 1, 7, 8, 0, tzinfo=local_zone
    )

    await _unload(hass, coordinator)


# =============================================================================
# DELIVERY
# =============================================================================


async def test_send_reminder_for_exercise(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator, notify_calls
) -> None:
    """Exercise reminders ask to log progress and carry an Open action."""
    routine_id = await create_routine(hass)
    instance_id = await add_item(hass, routine_id, "chin-tuck")

    await coordinator.notification_manager.async_send_reminder(
        {const.PAYLOAD_OWNER_ID: routine_id, const.PAYLOAD_INSTANCE_ID: instance_id}
    )

    assert len(notify_calls) == 1
    data = notify_calls[0].data
    assert data[const.NOTIFY_TITLE] == const.NOTIFICATION_TITLE
    assert data[const.NOTIFY_MESSAGE] == "Don't forget to log your progress for Chin Tucks!"
    assert data[const.NOTIFY_DATA][const.NOTIFY_ACTIONS] == [
        {
            const.NOTIFY_ACTION: f"OPEN_ITEM|test_ent|{routine_id}|chin-tuck",
            "title": "Open",
        }
    ]
    assert data[const.NOTIFY_DATA][const.NOTIFY_TAG] == f"routine_tracker_{instance_id}"


async def test_send_reminder_for_task(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator, notify_calls
) -> None:
    """Task reminders ask to complete the task, using the current name."""
    routine_id = await create_routine(hass)
    instance_id = await add_item(hass, routine_id, "hydration", name="Water")

    await coordinator.notification_manager.async_send_reminder(
        {const.PAYLOAD_OWNER_ID: routine_id, const.PAYLOAD_INSTANCE_ID: instance_id}
    )

    assert notify_calls[0].data[const.NOTIFY_MESSAGE] == (
        "Don't forget to complete your task: Water!"
    )


async def test_reminder_for_removed_item_not_sent(
    hass: HomeAssistant, coordinator: RoutineTrackerCoordinator, notify_calls
) -> None:
    """Items removed since scheduling are not reminded about."""
    routine_id = await create_routine(hass)
    instance_id = await add_item(hass, routine_id, "chin-tuck")
    await call_service(
        hass,
        const.SERVICE_REMOVE_ITEM,
        {const.FIELD_OWNER_ID: routine_id, const.FIELD_INSTANCE_ID: instance_id},
    )

    await coordinator.notification_manager.async_send_reminder(
        {const.PAYLOAD_OWNER_ID: routine_id, const.PAYLOAD_INSTANCE_ID: instance_id}
    )
    await coordinator.notification_manager.async_send_reminder(
        {const.PAYLOAD_OWNER_ID: "deleted-routine", const.PAYLOAD_INSTANCE_ID: "x"}
    )

    assert notify_calls == []
