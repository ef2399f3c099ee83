# File: helpers/entity_helpers.py
"""Entity and entry helper functions for Routine Tracker.

All functions here require a `hass` object or build HA-specific types.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.config_entries import ConfigEntryState
from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo

from .. import const

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from ..coordinator import RoutineTrackerCoordinator


# ==============================================================================
# Event Signal Helpers (Manager Communication)
# ==============================================================================


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build instance-scoped event signal name for dispatcher.

    Format: 'routine_tracker_{entry_id}_{suffix}'

    Example:
        >>> get_event_signal("abc123", const.SIGNAL_SUFFIX_LOG_APPENDED)
        'routine_tracker_abc123_log_appended'
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"


# ==============================================================================
# Config Entry Lookup
# ==============================================================================


def get_first_routine_tracker_entry(hass: HomeAssistant) -> str | None:
    """Get the entry_id of the first loaded Routine Tracker config entry.

    Returns:
        Config entry ID string, or None if no loaded entries
    """
    for entry in hass.config_entries.async_entries(const.DOMAIN):
        if entry.state is ConfigEntryState.LOADED:
            return entry.entry_id
    return None


def get_coordinator(hass: HomeAssistant) -> RoutineTrackerCoordinator | None:
    """Return the coordinator of the first loaded entry, if any."""
    entry_id = get_first_routine_tracker_entry(hass)
    if entry_id is None:
        return None
    entry_data = hass.data.get(const.DOMAIN, {}).get(entry_id)
    if not entry_data:
        return None
    return entry_data[const.COORDINATOR]


# ==============================================================================
# Device Info Construction
# ==============================================================================


def create_tracker_device_info(config_entry: ConfigEntry) -> DeviceInfo:
    """Create the service device every Routine Tracker entity belongs to."""
    return DeviceInfo(
        identifiers={(const.DOMAIN, config_entry.entry_id)},
        name=config_entry.title,
        manufacturer=const.ROUTINE_TRACKER_TITLE,
        model="Routine Tracker",
        entry_type=DeviceEntryType.SERVICE,
    )
