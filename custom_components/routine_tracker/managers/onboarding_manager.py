"""Onboarding Manager - progress through one-time onboarding flows.

Each flow key maps to {"step": int, "status": ...}. The initial setup flow
gates reminder scheduling: nothing is scheduled until it is completed or
skipped, so a half-configured first run never produces triggers.

Emits ONBOARDING_CHANGED with flow_key, status and previous_status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const
from .base_manager import BaseManager

if TYPE_CHECKING:
    from ..type_defs import OnboardingStatusData


class OnboardingManager(BaseManager):
    """Manager for onboarding flow statuses."""

    async def async_setup(self) -> None:
        """Set up the OnboardingManager."""
        const.LOGGER.debug(
            "OnboardingManager async_setup complete: initial setup finished=%s",
            self.is_initial_setup_finished(),
        )

    @property
    def _flows(self) -> dict[str, OnboardingStatusData]:
        return self.coordinator.data_store[const.DATA_ONBOARDING]

    def get_status(self, flow_key: str) -> OnboardingStatusData:
        """Return the status of `flow_key`, NOT_STARTED at step 0 by default."""
        stored = self._flows.get(flow_key)
        if not isinstance(stored, dict):
            return {
                const.DATA_ONBOARDING_STEP: 0,
                const.DATA_ONBOARDING_STATUS: const.ONBOARDING_STATUS_NOT_STARTED,
            }  # type: ignore[return-value]
        return stored

    def is_initial_setup_finished(self) -> bool:
        """Return True once the initial setup flow is completed or skipped."""
        status = self.get_status(const.ONBOARDING_FLOW_INITIAL_SETUP)
        return status.get(const.DATA_ONBOARDING_STATUS) in (
            const.ONBOARDING_FINISHED_STATUSES
        )

    async def async_set_status(
        self, flow_key: str, status: str, step: int | None = None
    ) -> OnboardingStatusData:
        """Persist a new status (and optionally step) for `flow_key`.

        The step is kept when not given. Emits ONBOARDING_CHANGED only when
        the status or step actually changes.
        """
        previous = dict(self.get_status(flow_key))
        updated: dict[str, Any] = {
            const.DATA_ONBOARDING_STEP: (
                int(step) if step is not None else previous[const.DATA_ONBOARDING_STEP]
            ),
            const.DATA_ONBOARDING_STATUS: status,
        }
        if updated == previous:
            return self.get_status(flow_key)

        stored = self._flows.get(flow_key)
        self._flows[flow_key] = updated  # type: ignore[assignment]

        def _restore() -> None:
            if stored is None:
                del self._flows[flow_key]
            else:
                self._flows[flow_key] = stored

        await self._async_persist_or_rollback(_restore)
        const.LOGGER.info(
            "INFO: Onboarding flow '%s': %s -> %s (step %s)",
            flow_key,
            previous[const.DATA_ONBOARDING_STATUS],
            status,
            updated[const.DATA_ONBOARDING_STEP],
        )
        self.emit(
            const.SIGNAL_SUFFIX_ONBOARDING_CHANGED,
            flow_key=flow_key,
            status=status,
            previous_status=previous[const.DATA_ONBOARDING_STATUS],
        )
        return self.get_status(flow_key)
