"""Shared fixtures for Routine Tracker tests."""

from typing import Any
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.routine_tracker.const import (
    CONF_NOTIFY_SERVICE,
    CONF_UPDATE_INTERVAL,
    COORDINATOR,
    DOMAIN,
    ROUTINE_TRACKER_TITLE,
)
from custom_components.routine_tracker.coordinator import RoutineTrackerCoordinator
from custom_components.routine_tracker.store import RoutineTrackerStore
from custom_components.routine_tracker.utils import dt_utils

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name

TEST_NOTIFY_SERVICE = "notify.mobile_app_test"


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture(autouse=True)
def reset_default_timezone() -> Any:
    """Restore the UTC default after setup switched it to the hass zone."""
    yield
    dt_utils.set_default_timezone(ZoneInfo("UTC"))


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry."""
    return MockConfigEntry(
        domain=DOMAIN,
        title=ROUTINE_TRACKER_TITLE,
        data={},
        options={
            CONF_NOTIFY_SERVICE: TEST_NOTIFY_SERVICE,
            CONF_UPDATE_INTERVAL: 5,
        },
        entry_id="test_entry_id",
        unique_id="test_unique_id",
    )


@pytest.fixture
def mock_storage_data() -> dict[str, Any]:
    """Return an empty storage structure."""
    return RoutineTrackerStore.get_default_structure()


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    mock_storage_data: dict[str, Any],  # pylint: disable=redefined-outer-name
) -> MockConfigEntry:
    """Set up the Routine Tracker integration for testing with mocked storage."""
    mock_config_entry.add_to_hass(hass)

    # Mock the Store's async_load to return our test data
    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    return mock_config_entry


@pytest.fixture
def coordinator(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,  # pylint: disable=redefined-outer-name
) -> RoutineTrackerCoordinator:
    """Return the coordinator of the loaded entry."""
    return hass.data[DOMAIN][init_integration.entry_id][COORDINATOR]
