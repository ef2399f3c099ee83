# File: coordinator.py
"""Coordinator for the Routine Tracker integration.

Owns the in-memory data loaded by RoutineTrackerStore and the managers that
mutate it. The periodic refresh recomputes a read-only snapshot for
entities: today's pending items, global consistency, XP and earned badges.
Day rollover needs no special handling; the next refresh simply sees a
new local date.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.core import callback
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import const
from .engines.routine_engine import RoutineEngine
from .engines.statistics_engine import StatisticsEngine
from .exceptions import PersistenceError
from .managers import (
    GamificationManager,
    LogManager,
    NotificationManager,
    OnboardingManager,
    RoutineManager,
)
from .utils.dt_utils import dt_today_local

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .store import RoutineTrackerStore


class RoutineTrackerCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Coordinator for Routine Tracker integration.

    `data_store` is the persisted structure; `data` is the derived snapshot
    entities read.
    """

    config_entry: ConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        store: RoutineTrackerStore,
    ) -> None:
        """Initialize the RoutineTrackerCoordinator."""
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL,
            config_entry.data.get(
                const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
            ),
        )
        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.store = store
        self.stats = StatisticsEngine()

        self.routine_manager = RoutineManager(hass, self)
        self.log_manager = LogManager(hass, self)
        self.gamification_manager = GamificationManager(hass, self)
        self.onboarding_manager = OnboardingManager(hass, self)
        self.notification_manager = NotificationManager(hass, self)

    # -------------------------------------------------------------------------------------
    # Data access
    # -------------------------------------------------------------------------------------

    @property
    def data_store(self) -> dict[str, Any]:
        """Return the persisted data structure (routines, goals, logs, ...)."""
        return self.store.data

    @property
    def notify_service(self) -> str:
        """Return the configured notify service, options winning over data."""
        return str(
            self.config_entry.options.get(
                const.CONF_NOTIFY_SERVICE,
                self.config_entry.data.get(
                    const.CONF_NOTIFY_SERVICE, const.DEFAULT_NOTIFY_SERVICE
                ),
            )
            or ""
        )

    # -------------------------------------------------------------------------------------
    # Setup + refresh
    # -------------------------------------------------------------------------------------

    async def async_setup_managers(self) -> None:
        """Set up every manager (event subscriptions, startup scheduling)."""
        for manager in (
            self.routine_manager,
            self.log_manager,
            self.gamification_manager,
            self.onboarding_manager,
            self.notification_manager,
        ):
            await manager.async_setup()

    async def _async_update_data(self) -> dict[str, Any]:
        """Periodic update: recompute the entity snapshot."""
        try:
            return self.build_snapshot()
        except (KeyError, TypeError, ValueError) as err:
            raise UpdateFailed(f"Error updating Routine Tracker data: {err}") from err

    def build_snapshot(self) -> dict[str, Any]:
        """Compute pending items, consistency, XP and earned badges for today."""
        today = dt_today_local()
        items = self.routine_manager.resolve_all()
        pending = RoutineEngine.pending_today(
            items, self.log_manager.logs_on_day(today), today
        )
        return {
            const.SNAPSHOT_PENDING: pending,
            const.SNAPSHOT_CONSISTENCY: self.stats.compute_consistency(
                self.log_manager.logs, today
            ),
            const.SNAPSHOT_XP: self.gamification_manager.xp,
            const.SNAPSHOT_EARNED_BADGES: self.gamification_manager.earned_badges(),
        }

    @callback
    def async_update_snapshot(self) -> None:
        """Push a fresh snapshot to entities after a mutation."""
        self.async_set_updated_data(self.build_snapshot())

    # -------------------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------------------

    async def async_persist(self) -> None:
        """Save to persistent storage, raising PersistenceError on failure."""
        await self.store.async_save()

    def _persist(self) -> None:
        """Save bookkeeping in the background; failures are logged only."""
        self.hass.add_job(self._async_save_bookkeeping)

    async def _async_save_bookkeeping(self) -> None:
        try:
            await self.store.async_save()
        except PersistenceError as err:
            const.LOGGER.debug("DEBUG: Bookkeeping save deferred to next write: %s", err)
