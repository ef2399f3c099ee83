"""Shared plumbing for the Routine Tracker managers.

Managers talk to each other through dispatcher signals scoped to one config
entry ("routine_tracker_{entry_id}_{suffix}"), never through direct calls
for side effects. A log append, for example, is announced with LOG_APPENDED
and the GamificationManager reacts to it on its own task.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)

from .. import const
from ..exceptions import PersistenceError
from ..helpers.entity_helpers import get_event_signal

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant

    from ..coordinator import RoutineTrackerCoordinator


class BaseManager(ABC):
    """Common base of every Routine Tracker manager.

    Writes follow one pattern: mutate the in-memory bucket, then
    `_async_persist_or_rollback()` with a callable that undoes the mutation.
    Only after a successful write are the snapshot refreshed and signals
    emitted, so listeners never see state that is not on disk.
    """

    def __init__(
        self, hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
    ) -> None:
        """Bind the manager to one integration instance."""
        self.hass = hass
        self.coordinator = coordinator
        self.entry_id = coordinator.config_entry.entry_id

    @abstractmethod
    async def async_setup(self) -> None:
        """Subscribe to signals. Called once by the coordinator."""

    def emit(self, suffix: str, **payload: Any) -> None:
        """Send `payload` to every manager listening for `suffix` on this entry."""
        const.LOGGER.debug(
            "Emitting '%s' for %s: %s", suffix, self.entry_id, sorted(payload)
        )
        # one positional dict; the dispatcher has no keyword arguments
        async_dispatcher_send(
            self.hass, get_event_signal(self.entry_id, suffix), payload
        )

    def listen(self, suffix: str, callback: Callable[..., Any]) -> None:
        """Call `callback(payload)` for each `suffix` signal until unload.

        Coroutine callbacks run as separate tasks, so the emitter does not
        wait for them and their errors must be handled inside.
        """
        unsub = async_dispatcher_connect(
            self.hass, get_event_signal(self.entry_id, suffix), callback
        )
        self.coordinator.config_entry.async_on_unload(unsub)
        const.LOGGER.debug(
            "%s listening for '%s' on %s",
            type(self).__name__,
            suffix,
            self.entry_id,
        )

    async def _async_persist_or_rollback(self, rollback: Callable[[], None]) -> None:
        """Write the store; on PersistenceError run `rollback` and re-raise."""
        try:
            await self.coordinator.async_persist()
        except PersistenceError:
            rollback()
            const.LOGGER.warning(
                "WARNING: %s reverted an unsaved change", type(self).__name__
            )
            raise
