"""Tests for Routine Tracker setup, unload and removal."""

from unittest.mock import patch

from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.routine_tracker import const
from custom_components.routine_tracker.services import ALL_SERVICES
from custom_components.routine_tracker.utils import dt_utils


async def test_setup_entry(hass: HomeAssistant, init_integration: MockConfigEntry) -> None:
    """Setup loads the entry, registers services and stores the coordinator."""
    assert init_integration.state is ConfigEntryState.LOADED

    entry_data = hass.data[const.DOMAIN][init_integration.entry_id]
    assert const.COORDINATOR in entry_data
    assert const.STORAGE_MANAGER in entry_data

    for service in ALL_SERVICES:
        assert hass.services.has_service(const.DOMAIN, service)


async def test_setup_uses_hass_timezone(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Local dates are computed in the Home Assistant timezone."""
    assert str(dt_utils.dt_now_local().tzinfo) == hass.config.time_zone


async def test_setup_loads_stored_routines(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,
    mock_storage_data: dict,
) -> None:
    """Routines already in storage are available after setup."""
    mock_storage_data[const.DATA_ROUTINES]["r1"] = {
        const.DATA_INTERNAL_ID: "r1",
        const.DATA_NAME: "Evening",
        const.DATA_ITEMS: [],
    }
    mock_config_entry.add_to_hass(hass)
    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    coordinator = hass.data[const.DOMAIN][mock_config_entry.entry_id][const.COORDINATOR]
    assert coordinator.routine_manager.get_owner("r1")[0] == const.OWNER_KIND_ROUTINE


async def test_unload_entry(hass: HomeAssistant, init_integration: MockConfigEntry) -> None:
    """Unloading removes the entry data and every service."""
    assert await hass.config_entries.async_unload(init_integration.entry_id)
    await hass.async_block_till_done()

    assert init_integration.state is ConfigEntryState.NOT_LOADED
    assert init_integration.entry_id not in hass.data[const.DOMAIN]
    for service in ALL_SERVICES:
        assert not hass.services.has_service(const.DOMAIN, service)


async def test_remove_entry_deletes_storage(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Removing the entry deletes the storage file."""
    with patch(
        "custom_components.routine_tracker.store.RoutineTrackerStore.async_delete_storage"
    ) as mock_delete:
        await hass.config_entries.async_remove(init_integration.entry_id)
        await hass.async_block_till_done()

    mock_delete.assert_awaited_once()
    assert hass.config_entries.async_get_entry(init_integration.entry_id) is None
