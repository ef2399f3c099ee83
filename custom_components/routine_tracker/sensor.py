# File: sensor.py
"""Sensors for the Routine Tracker integration.

Sensors Defined in This File (4):
01. XpSensor
02. CurrentStreakSensor
03. PendingItemsSensor
04. BadgesEarnedSensor

All of them read the coordinator snapshot, so their values change after
every mutation and on each periodic refresh (which also covers midnight).
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import const
from .coordinator import RoutineTrackerCoordinator
from .engines.gamification_engine import BADGES
from .entity import RoutineTrackerCoordinatorEntity


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Set up sensors for Routine Tracker integration."""
    coordinator: RoutineTrackerCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]
    async_add_entities(
        [
            XpSensor(coordinator, entry),
            CurrentStreakSensor(coordinator, entry),
            PendingItemsSensor(coordinator, entry),
            BadgesEarnedSensor(coordinator, entry),
        ]
    )


# ------------------------------------------------------------------------------------------
class XpSensor(RoutineTrackerCoordinatorEntity, SensorEntity):
    """XP running total. Never decreases."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_XP
    _attr_state_class = SensorStateClass.TOTAL_INCREASING
    _attr_native_unit_of_measurement = "XP"
    _attr_icon = "mdi:star-shooting"

    def __init__(self, coordinator: RoutineTrackerCoordinator, entry: ConfigEntry):
        """Initialize the sensor."""
        super().__init__(coordinator, entry, const.SENSOR_UID_SUFFIX_XP)

    @property
    def native_value(self) -> int:
        """Return the XP total."""
        return int(self.coordinator.data.get(const.SNAPSHOT_XP, const.DEFAULT_ZERO))


# ------------------------------------------------------------------------------------------
class CurrentStreakSensor(RoutineTrackerCoordinatorEntity, SensorEntity):
    """Consecutive active days ending today, or yesterday when today has no log yet.

    Longest streak and total active days are exposed as attributes.
    """

    _attr_translation_key = const.TRANS_KEY_SENSOR_CURRENT_STREAK
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = "d"

    def __init__(self, coordinator: RoutineTrackerCoordinator, entry: ConfigEntry):
        """Initialize the sensor."""
        super().__init__(coordinator, entry, const.SENSOR_UID_SUFFIX_CURRENT_STREAK)

    @property
    def _consistency(self) -> dict[str, Any]:
        return dict(self.coordinator.data.get(const.SNAPSHOT_CONSISTENCY) or {})

    @property
    def native_value(self) -> int:
        """Return the current streak in days."""
        return int(self._consistency.get(const.STATS_CURRENT_STREAK, const.DEFAULT_ZERO))

    @property
    def icon(self) -> str:
        """Return a flame once a streak is running."""
        return "mdi:fire" if self.native_value else "mdi:fire-off"

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose longest streak and total active days."""
        consistency = self._consistency
        return {
            const.ATTR_LONGEST_STREAK: consistency.get(
                const.STATS_LONGEST_STREAK, const.DEFAULT_ZERO
            ),
            const.ATTR_TOTAL_ACTIVE_DAYS: consistency.get(
                const.STATS_TOTAL_ACTIVE_DAYS, const.DEFAULT_ZERO
            ),
        }


# ------------------------------------------------------------------------------------------
class PendingItemsSensor(RoutineTrackerCoordinatorEntity, SensorEntity):
    """Number of items still due today.

    The ordered item list (earliest reminder first, "random" last) is the
    `items` attribute.
    """

    _attr_translation_key = const.TRANS_KEY_SENSOR_PENDING_ITEMS
    _attr_icon = "mdi:format-list-checks"

    def __init__(self, coordinator: RoutineTrackerCoordinator, entry: ConfigEntry):
        """Initialize the sensor."""
        super().__init__(coordinator, entry, const.SENSOR_UID_SUFFIX_PENDING_ITEMS)

    @property
    def native_value(self) -> int:
        """Return the pending item count."""
        return len(self.coordinator.data.get(const.SNAPSHOT_PENDING) or [])

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the pending items in order."""
        return {
            const.ATTR_PENDING_ITEMS: [
                {
                    const.PAYLOAD_OWNER_ID: item.owner_id,
                    const.PAYLOAD_OWNER_KIND: item.owner_kind,
                    const.PAYLOAD_INSTANCE_ID: item.instance_id,
                    const.PAYLOAD_ITEM_ID: item.item_id,
                    const.DATA_NAME: item.name,
                    const.DATA_ITEM_TYPE: item.type,
                }
                for item in self.coordinator.data.get(const.SNAPSHOT_PENDING) or []
            ]
        }


# ------------------------------------------------------------------------------------------
class BadgesEarnedSensor(RoutineTrackerCoordinatorEntity, SensorEntity):
    """Number of earned badges out of the fixed catalog."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_BADGES_EARNED
    _attr_icon = "mdi:medal"

    def __init__(self, coordinator: RoutineTrackerCoordinator, entry: ConfigEntry):
        """Initialize the sensor."""
        super().__init__(coordinator, entry, const.SENSOR_UID_SUFFIX_BADGES_EARNED)

    @property
    def native_value(self) -> int:
        """Return how many badges are earned."""
        return len(self.coordinator.data.get(const.SNAPSHOT_EARNED_BADGES) or [])

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose earned keys, pending toasts and the catalog size."""
        earned = list(self.coordinator.data.get(const.SNAPSHOT_EARNED_BADGES) or [])
        shown = set(self.coordinator.gamification_manager.shown_toasts)
        return {
            const.ATTR_EARNED_BADGES: earned,
            const.ATTR_TOAST_PENDING: [key for key in earned if key not in shown],
            "total": len(BADGES),
        }
