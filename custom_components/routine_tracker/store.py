# File: store.py
"""Handles persistent data storage for the Routine Tracker integration.

Uses Home Assistant's Storage helper to save and load routines, goals, the
completion log, gamification state and onboarding progress so everything
survives restarts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store

from . import const
from .exceptions import PersistenceError
from .utils.dt_utils import dt_now_iso

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class RoutineTrackerStore:
    """Handles persistent storage operations for Routine Tracker data.

    Thin wrapper around Home Assistant's Store API. Routines and goals are
    keyed by internal_id; logs are an append-only list.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).
        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = {}

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return canonical empty data structure for fresh installations."""
        return {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION,
                const.DATA_META_CREATED_AT: dt_now_iso(),
            },
            const.DATA_ROUTINES: {},
            const.DATA_GOALS: {},
            const.DATA_LOGS: [],
            const.DATA_GAMIFICATION: {
                const.DATA_GAMIFICATION_XP: 0,
                const.DATA_GAMIFICATION_BADGES: {},
                const.DATA_GAMIFICATION_SHOWN_TOASTS: [],
            },
            const.DATA_ONBOARDING: {},
            const.DATA_NOTIFICATIONS: {},
        }

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no data exists, initializes with an empty structure. Missing
        top-level buckets in existing data are filled from the defaults.
        """
        const.LOGGER.debug("DEBUG: RoutineTrackerStore: Loading data from storage")
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._data = RoutineTrackerStore.get_default_structure()
            return

        defaults = RoutineTrackerStore.get_default_structure()
        for key, value in defaults.items():
            if not isinstance(existing_data.get(key), type(value)):
                if key in existing_data:
                    const.LOGGER.warning(
                        "WARNING: Storage bucket '%s' has unexpected shape, resetting it",
                        key,
                    )
                existing_data[key] = value
        self._data = existing_data
        const.LOGGER.debug(
            "DEBUG: Loaded existing data from storage: %s",
            {
                "routines": len(self._data[const.DATA_ROUTINES]),
                "goals": len(self._data[const.DATA_GOALS]),
                "logs": len(self._data[const.DATA_LOGS]),
                "badges": len(
                    self._data[const.DATA_GAMIFICATION].get(
                        const.DATA_GAMIFICATION_BADGES, {}
                    )
                ),
            },
        )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    async def async_save(self) -> None:
        """Save the current data structure to storage asynchronously.

        Raises:
            PersistenceError: When the file system rejects the write or the
                data cannot be serialized. The failure is logged first.
        """
        try:
            await self._store.async_save(self._data)
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
            raise PersistenceError(str(err)) from err
        except TypeError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s",
                err,
            )
            raise PersistenceError(str(err)) from err
        except ValueError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to invalid data format: %s",
                err,
            )
            raise PersistenceError(str(err)) from err
        const.LOGGER.debug("DEBUG: Data saved successfully to storage")

    async def async_clear_data(self) -> None:
        """Clear all stored data and reset to default structure."""
        const.LOGGER.warning(
            "WARNING: Clearing all Routine Tracker data and resetting storage"
        )
        self._data = RoutineTrackerStore.get_default_structure()
        await self.async_save()

    async def async_delete_storage(self) -> None:
        """Delete the storage file completely from disk."""
        self._data = RoutineTrackerStore.get_default_structure()
        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s",
                self._store.path,
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )
