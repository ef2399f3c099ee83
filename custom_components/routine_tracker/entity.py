"""Base entity classes for Routine Tracker integration."""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .coordinator import RoutineTrackerCoordinator
from .helpers.entity_helpers import create_tracker_device_info


class RoutineTrackerCoordinatorEntity(CoordinatorEntity[RoutineTrackerCoordinator]):
    """Base entity class for Routine Tracker sensors with typed coordinator access.

    Every entity belongs to the entry's single service device and derives
    its unique id from the entry id plus a per-sensor suffix.
    """

    _attr_has_entity_name = True

    def __init__(
        self,
        coordinator: RoutineTrackerCoordinator,
        entry: ConfigEntry,
        unique_id_suffix: str,
    ) -> None:
        """Initialize the entity."""
        super().__init__(coordinator)
        self._attr_unique_id = f"{entry.entry_id}{unique_id_suffix}"
        self._attr_device_info = create_tracker_device_info(entry)

    @property
    def coordinator(self) -> RoutineTrackerCoordinator:
        """Return typed coordinator.

        Uses object.__getattribute__ to read the _coordinator attribute set
        by CoordinatorEntity.
        """
        return object.__getattribute__(self, "_coordinator")

    @coordinator.setter
    def coordinator(self, value: RoutineTrackerCoordinator) -> None:
        """Set coordinator with proper typing."""
        object.__setattr__(self, "_coordinator", value)
