# File: __init__.py
"""Initialization file for the Routine Tracker integration.

Handles setting up the integration, including loading the persisted
routines, goals and logs, preparing the coordinator and its managers, and
registering services.

Key Features:
- Config entry setup, unload and removal.
- Coordinator initialization for the entity snapshot.
- Storage management for persistent data handling.
- Routing of reminder taps from the companion app.
"""

from __future__ import annotations

from zoneinfo import ZoneInfo

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import Event, HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady

from . import const
from .coordinator import RoutineTrackerCoordinator
from .notification_action_handler import async_handle_notification_action
from .services import async_setup_services, async_unload_services
from .store import RoutineTrackerStore
from .utils.dt_utils import set_default_timezone


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info("INFO: Starting setup for Routine Tracker entry: %s", entry.entry_id)

    # Must happen before anything computes local dates
    set_default_timezone(ZoneInfo(hass.config.time_zone))

    store = RoutineTrackerStore(hass, const.STORAGE_KEY)
    await store.async_initialize()

    coordinator = RoutineTrackerCoordinator(hass, entry, store)

    try:
        await coordinator.async_config_entry_first_refresh()
    except ConfigEntryNotReady as e:
        const.LOGGER.error("ERROR: Failed to refresh coordinator data: %s", e)
        raise ConfigEntryNotReady from e

    hass.data.setdefault(const.DOMAIN, {})[entry.entry_id] = {
        const.COORDINATOR: coordinator,
        const.STORAGE_MANAGER: store,
    }

    # Subscriptions and startup scheduling; needs hass.data for the managers
    await coordinator.async_setup_managers()

    async_setup_services(hass)

    await hass.config_entries.async_forward_entry_setups(entry, const.PLATFORMS)

    async def handle_notification_event(event: Event) -> None:
        """Handle notification action events."""
        await async_handle_notification_action(hass, event)

    entry.async_on_unload(
        hass.bus.async_listen(const.NOTIFICATION_EVENT, handle_notification_event)
    )
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))

    const.LOGGER.info("INFO: Routine Tracker setup complete for entry: %s", entry.entry_id)
    return True


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry after its options change."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading Routine Tracker entry: %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, const.PLATFORMS)

    if unload_ok:
        hass.data[const.DOMAIN].pop(entry.entry_id)
        await async_unload_services(hass)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle removal of a config entry."""
    const.LOGGER.info("INFO: Removing Routine Tracker entry: %s", entry.entry_id)

    if const.DOMAIN in hass.data and entry.entry_id in hass.data[const.DOMAIN]:
        store: RoutineTrackerStore = hass.data[const.DOMAIN][entry.entry_id][
            const.STORAGE_MANAGER
        ]
    else:
        # Entry is not loaded; reach the file through a fresh store
        store = RoutineTrackerStore(hass, const.STORAGE_KEY)
    await store.async_delete_storage()

    const.LOGGER.info("INFO: Routine Tracker entry data cleared: %s", entry.entry_id)
