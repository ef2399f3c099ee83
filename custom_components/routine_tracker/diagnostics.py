"""Diagnostics support for Routine Tracker integration.

The config entry diagnostics return the raw storage data, identical to the
routine_tracker_data file, plus the live reminder triggers that are only
held in memory.
"""

from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from . import const
from .coordinator import RoutineTrackerCoordinator

TO_REDACT = {const.DATA_LOG_PHOTO_URI, const.DATA_LOG_MEDIA_URL}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry.

    Photo and media locations are redacted; everything else is the stored
    structure as-is.
    """
    coordinator: RoutineTrackerCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]

    return {
        "options": dict(entry.options),
        "storage": async_redact_data(coordinator.data_store, TO_REDACT),
        "triggers": coordinator.notification_manager.triggers,
    }
