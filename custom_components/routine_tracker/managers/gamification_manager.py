"""Gamification Manager - serialized badge evaluation and the XP ledger.

This manager is the badge/XP service object of one integration instance:
- evaluate(): award every newly qualifying badge exactly once
- grant_xp(): add to the monotonic XP running total
- award_badge(): explicit awards (milestones such as "explorer")
- mark_toast_shown(): one-time "badge earned" toast bookkeeping

ARCHITECTURE:
- GamificationManager = STATEFUL orchestration (persistence, events, lock)
- GamificationEngine = Pure evaluation logic (STATELESS)

CONCURRENCY:
All mutations run under one asyncio.Lock, so evaluations triggered by rapid
log appends queue up instead of interleaving. Each evaluation reads the log
set at the moment it acquires the lock, never a snapshot taken earlier.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import ServiceValidationError

from .. import const
from ..engines.gamification_engine import BADGES, GamificationEngine
from ..engines.statistics_engine import StatisticsEngine
from ..utils.dt_utils import dt_now_iso
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import RoutineTrackerCoordinator
    from ..type_defs import BadgeStateData, GamificationData


class GamificationManager(BaseManager):
    """Manager for badge evaluation, XP and toast flags.

    NOT responsible for:
    - Appending logs (LogManager)
    - Computing streaks (StatisticsEngine, called here with the latest logs)
    """

    def __init__(
        self, hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
    ) -> None:
        """Initialize the GamificationManager."""
        super().__init__(hass, coordinator)
        self._lock = asyncio.Lock()
        self._stats = StatisticsEngine()

    async def async_setup(self) -> None:
        """Set up the GamificationManager.

        Subscribe to:
        - LOG_APPENDED: per-log XP and a queued badge evaluation
        - ONBOARDING_CHANGED: award new-beginnings when initial setup finishes
        """
        self.listen(const.SIGNAL_SUFFIX_LOG_APPENDED, self._async_on_log_appended)
        self.listen(
            const.SIGNAL_SUFFIX_ONBOARDING_CHANGED, self._async_on_onboarding_changed
        )

    # =========================================================================
    # Data access
    # =========================================================================

    @property
    def _gamification(self) -> GamificationData:
        return self.coordinator.data_store[const.DATA_GAMIFICATION]

    @property
    def xp(self) -> int:
        """Return the XP running total."""
        return int(self._gamification.get(const.DATA_GAMIFICATION_XP, 0))

    @property
    def badge_states(self) -> dict[str, BadgeStateData]:
        """Return the persisted {badge_key: state} map."""
        return self._gamification.setdefault(const.DATA_GAMIFICATION_BADGES, {})

    @property
    def shown_toasts(self) -> list[str]:
        """Return the badge keys whose toast was already shown."""
        return self._gamification.setdefault(const.DATA_GAMIFICATION_SHOWN_TOASTS, [])

    def earned_badges(self) -> list[str]:
        """Return earned badge keys in declaration order."""
        return [
            badge.key
            for badge in BADGES
            if GamificationEngine.is_earned(self.badge_states, badge.key)
        ]

    def get_badge_statuses(self) -> list[dict[str, Any]]:
        """Return every badge with its status, in declaration order."""
        result: list[dict[str, Any]] = []
        for badge in BADGES:
            state = self.badge_states.get(badge.key, {})
            earned = GamificationEngine.is_earned(self.badge_states, badge.key)
            result.append(
                {
                    **badge.to_dict(),
                    const.DATA_BADGE_STATUS: (
                        const.BADGE_STATUS_EARNED
                        if earned
                        else const.BADGE_STATUS_NOT_EARNED
                    ),
                    const.DATA_BADGE_EARNED_AT: state.get(const.DATA_BADGE_EARNED_AT),
                    const.ATTR_TOAST_PENDING: earned
                    and badge.key not in self.shown_toasts,
                }
            )
        return result

    # =========================================================================
    # Public operations
    # =========================================================================

    async def async_evaluate(self) -> list[str]:
        """Evaluate every badge against the latest logs.

        Returns:
            Keys awarded in this pass, in declaration order. Empty when
            nothing newly qualifies, so a repeated call is a no-op.
        """
        async with self._lock:
            logs = self.coordinator.log_manager.logs
            streak = self._stats.compute_consistency(logs)[const.STATS_CURRENT_STREAK]
            context = GamificationEngine.build_context(logs, current_streak=streak)
            newly_earned = GamificationEngine.evaluate(context, self.badge_states)
            if not newly_earned:
                const.LOGGER.debug("DEBUG: Badge evaluation found nothing new")
                return []

            previous = self._snapshot()
            for badge_key in newly_earned:
                self._apply_award(badge_key)
            await self._async_commit(newly_earned, previous)
            return newly_earned

    async def async_grant_xp(self, amount: int, source: str) -> int:
        """Add `amount` XP and return the new total.

        Non-positive amounts are ignored; the total never decreases.
        """
        if amount <= 0:
            const.LOGGER.warning(
                "WARNING: Ignoring non-positive XP grant %s from %s", amount, source
            )
            return self.xp
        async with self._lock:
            previous = self._snapshot()
            self._add_xp(amount, source)
            await self._async_commit([], previous)
            return self.xp

    async def async_award_badge(self, badge_key: str) -> bool:
        """Award one badge explicitly.

        Returns:
            True when the badge was newly earned, False when it already was.

        Raises:
            ServiceValidationError: Unknown badge key.
        """
        if GamificationEngine.get_badge(badge_key) is None:
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_UNKNOWN_BADGE,
                translation_placeholders={const.TRANS_PLACEHOLDER_BADGE_KEY: badge_key},
            )
        async with self._lock:
            if GamificationEngine.is_earned(self.badge_states, badge_key):
                const.LOGGER.debug("DEBUG: Badge '%s' already earned", badge_key)
                return False
            previous = self._snapshot()
            self._apply_award(badge_key)
            await self._async_commit([badge_key], previous)
            return True

    async def async_mark_toast_shown(self, badge_key: str) -> None:
        """Record that the earned-toast of `badge_key` was displayed."""
        if GamificationEngine.get_badge(badge_key) is None:
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_UNKNOWN_BADGE,
                translation_placeholders={const.TRANS_PLACEHOLDER_BADGE_KEY: badge_key},
            )
        async with self._lock:
            if badge_key in self.shown_toasts:
                return
            self.shown_toasts.append(badge_key)
            await self._async_persist_or_rollback(
                lambda: self.shown_toasts.remove(badge_key)
            )
            self.coordinator.async_update_snapshot()

    # =========================================================================
    # Event handlers
    # =========================================================================

    async def _async_on_log_appended(self, payload: dict[str, Any]) -> None:
        """Grant per-log XP, then queue an evaluation.

        Runs as a dispatcher task; errors are logged here because nothing
        awaits the task.
        """
        xp = GamificationEngine.xp_for_log(payload.get("log_type"))
        try:
            if xp:
                await self.async_grant_xp(xp, f"log:{payload.get('log_id')}")
            await self.async_evaluate()
        except Exception:  # pylint: disable=broad-exception-caught
            const.LOGGER.exception(
                "ERROR: Gamification update failed after log %s", payload.get("log_id")
            )

    async def _async_on_onboarding_changed(self, payload: dict[str, Any]) -> None:
        """Award new-beginnings when the initial setup flow finishes."""
        if payload.get("flow_key") != const.ONBOARDING_FLOW_INITIAL_SETUP:
            return
        if payload.get("status") not in const.ONBOARDING_FINISHED_STATUSES:
            return
        try:
            await self.async_award_badge(const.BADGE_NEW_BEGINNINGS)
        except Exception:  # pylint: disable=broad-exception-caught
            const.LOGGER.exception("ERROR: Failed to award onboarding badge")

    # =========================================================================
    # Internal (call with the lock held)
    # =========================================================================

    def _add_xp(self, amount: int, source: str) -> None:
        old_total = self.xp
        self._gamification[const.DATA_GAMIFICATION_XP] = old_total + amount
        const.LOGGER.debug(
            "DEBUG: XP %s -> %s (+%s from %s)", old_total, old_total + amount, amount, source
        )

    def _apply_award(self, badge_key: str) -> None:
        """Set EARNED and grant the badge's XP reward, in memory."""
        badge = GamificationEngine.get_badge(badge_key)
        self.badge_states[badge_key] = {
            const.DATA_BADGE_STATUS: const.BADGE_STATUS_EARNED,
            const.DATA_BADGE_EARNED_AT: dt_now_iso(),
        }
        if badge is not None:
            self._add_xp(badge.xp_reward, f"badge:{badge_key}")
        const.LOGGER.info("INFO: Badge earned: %s", badge_key)

    def _snapshot(self) -> tuple[int, dict[str, BadgeStateData]]:
        return self.xp, {key: dict(state) for key, state in self.badge_states.items()}

    async def _async_commit(
        self, awarded: list[str], previous: tuple[int, dict[str, BadgeStateData]]
    ) -> None:
        """Persist, then announce XP and each award.

        A failed save restores the XP total and badge states captured in
        `previous`, so the awards are retried by the next evaluation.
        """

        def _restore() -> None:
            xp, badge_states = previous
            self._gamification[const.DATA_GAMIFICATION_XP] = xp
            self._gamification[const.DATA_GAMIFICATION_BADGES] = badge_states

        await self._async_persist_or_rollback(_restore)
        self.coordinator.async_update_snapshot()
        self.emit(const.SIGNAL_SUFFIX_XP_CHANGED, xp=self.xp)
        for badge_key in awarded:
            badge = GamificationEngine.get_badge(badge_key)
            self.emit(
                const.SIGNAL_SUFFIX_BADGE_EARNED,
                badge_key=badge_key,
                level=badge.level if badge else None,
                xp_reward=badge.xp_reward if badge else 0,
                toast_pending=badge_key not in self.shown_toasts,
            )
            self.hass.bus.async_fire(
                const.EVENT_BADGE_EARNED,
                {
                    const.PAYLOAD_ENTRY_ID: self.entry_id,
                    const.FIELD_BADGE_KEY: badge_key,
                    const.ATTR_TOAST_PENDING: badge_key not in self.shown_toasts,
                },
            )
