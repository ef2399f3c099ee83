"""Tests for Routine Tracker sensors."""

from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.routine_tracker import const
from custom_components.routine_tracker.engines.gamification_engine import BADGES
from tests.helpers import add_item, create_routine, log_completion, sensor_state


async def test_initial_states(hass: HomeAssistant, init_integration: MockConfigEntry) -> None:
    """A fresh install reports zero everywhere."""
    assert sensor_state(hass, const.SENSOR_UID_SUFFIX_XP).state == "0"
    assert sensor_state(hass, const.SENSOR_UID_SUFFIX_PENDING_ITEMS).state == "0"

    streak = sensor_state(hass, const.SENSOR_UID_SUFFIX_CURRENT_STREAK)
    assert streak.state == "0"
    assert streak.attributes["icon"] == "mdi:fire-off"
    assert streak.attributes[const.ATTR_LONGEST_STREAK] == 0

    badges = sensor_state(hass, const.SENSOR_UID_SUFFIX_BADGES_EARNED)
    assert badges.state == "0"
    assert badges.attributes["total"] == len(BADGES)


async def test_pending_items_sensor(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Scheduled items show up as pending with their details."""
    routine_id = await create_routine(hass)
    await add_item(hass, routine_id, "chin-tuck", schedules=[{"time_of_day": "08:00"}])
    await add_item(hass, routine_id, "fish-face")  # unscheduled backlog item
    await hass.async_block_till_done()

    pending = sensor_state(hass, const.SENSOR_UID_SUFFIX_PENDING_ITEMS)
    assert pending.state == "1"
    [item] = pending.attributes[const.ATTR_PENDING_ITEMS]
    assert item[const.PAYLOAD_ITEM_ID] == "chin-tuck"
    assert item[const.PAYLOAD_OWNER_ID] == routine_id
    assert item[const.DATA_ITEM_TYPE] == const.ITEM_TYPE_EXERCISE


async def test_sensors_update_after_completion(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Logging a completion updates pending, streak, XP and badges."""
    routine_id = await create_routine(hass)
    instance_id = await add_item(
        hass, routine_id, "chin-tuck", schedules=[{"time_of_day": "08:00"}]
    )

    await log_completion(hass, routine_id, instance_id)

    assert sensor_state(hass, const.SENSOR_UID_SUFFIX_PENDING_ITEMS).state == "0"
    streak = sensor_state(hass, const.SENSOR_UID_SUFFIX_CURRENT_STREAK)
    assert streak.state == "1"
    assert streak.attributes["icon"] == "mdi:fire"
    # 10 for the exercise log + 10 for the bronze "testing-waters" badge
    assert sensor_state(hass, const.SENSOR_UID_SUFFIX_XP).state == "20"

    badges = sensor_state(hass, const.SENSOR_UID_SUFFIX_BADGES_EARNED)
    assert badges.state == "1"
    assert badges.attributes[const.ATTR_EARNED_BADGES] == [const.BADGE_TESTING_WATERS]
    assert badges.attributes[const.ATTR_TOAST_PENDING] == [const.BADGE_TESTING_WATERS]
