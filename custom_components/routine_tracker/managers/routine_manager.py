"""Routine Manager - routines, goals and their item references.

Owns every mutation of the `routines` and `goals` buckets:
- Create/delete routines and goals
- Add, update (schedule, instructions, overrides) and remove item references
- Resolve an owner's references through the catalog join

Past logs are never touched here. Removing an item leaves its logs with a
dangling item_id, which the catalog join and statistics still handle.

Every change emits ROUTINES_CHANGED so the NotificationManager reschedules.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..engines.catalog_engine import CatalogEngine
from ..exceptions import NotFoundError
from ..utils.dt_utils import dt_now_iso
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Mapping

    from homeassistant.core import HomeAssistant

    from ..coordinator import RoutineTrackerCoordinator
    from ..engines.catalog_engine import ScheduledItem
    from ..type_defs import GoalData, ItemReferenceData, RoutineData


class RoutineManager(BaseManager):
    """Manager for routine/goal CRUD and the catalog join."""

    def __init__(
        self, hass: HomeAssistant, coordinator: RoutineTrackerCoordinator
    ) -> None:
        """Initialize the RoutineManager."""
        super().__init__(hass, coordinator)

    async def async_setup(self) -> None:
        """Set up the RoutineManager.

        Nothing to subscribe to; routines change only through services.
        """
        const.LOGGER.debug(
            "RoutineManager async_setup complete: %d routines, %d goals",
            len(self.routines),
            len(self.goals),
        )

    # =========================================================================
    # Data access
    # =========================================================================

    @property
    def routines(self) -> dict[str, RoutineData]:
        """Return the routines bucket keyed by internal_id."""
        return self.coordinator.data_store[const.DATA_ROUTINES]

    @property
    def goals(self) -> dict[str, GoalData]:
        """Return the goals bucket keyed by internal_id."""
        return self.coordinator.data_store[const.DATA_GOALS]

    def get_owner(self, owner_id: str) -> tuple[str, dict[str, Any]]:
        """Return (owner_kind, record) for a routine or goal id.

        Raises:
            NotFoundError: Neither a routine nor a goal has this id.
        """
        if owner_id in self.routines:
            return const.OWNER_KIND_ROUTINE, self.routines[owner_id]  # type: ignore[return-value]
        if owner_id in self.goals:
            return const.OWNER_KIND_GOAL, self.goals[owner_id]  # type: ignore[return-value]
        raise NotFoundError(const.ENTITY_TYPE_OWNER, owner_id)

    def get_reference(
        self, owner_id: str, instance_id: str
    ) -> tuple[str, dict[str, Any], ItemReferenceData]:
        """Return (owner_kind, owner record, reference) for one item instance.

        Raises:
            NotFoundError: Unknown owner, or no item with this instance_id.
        """
        owner_kind, record = self.get_owner(owner_id)
        for reference in record.get(const.DATA_ITEMS, []):
            if (
                isinstance(reference, dict)
                and reference.get(const.DATA_ITEM_INSTANCE_ID) == instance_id
            ):
                return owner_kind, record, reference  # type: ignore[return-value]
        raise NotFoundError(const.ENTITY_TYPE_ITEM, instance_id)

    # =========================================================================
    # Catalog join
    # =========================================================================

    def resolve(self, owner_id: str) -> list[ScheduledItem]:
        """Resolve every item of one routine or goal.

        Raises:
            NotFoundError: The owner does not exist. Individual references
                never raise; missing templates resolve as orphans.
        """
        owner_kind, record = self.get_owner(owner_id)
        return CatalogEngine.resolve_items(
            record.get(const.DATA_ITEMS, []), owner_id, owner_kind
        )

    def resolve_all(self) -> list[ScheduledItem]:
        """Resolve every item of every routine and goal."""
        items: list[ScheduledItem] = []
        for owner_kind, bucket in (
            (const.OWNER_KIND_ROUTINE, self.routines),
            (const.OWNER_KIND_GOAL, self.goals),
        ):
            for owner_id, record in bucket.items():
                items.extend(
                    CatalogEngine.resolve_items(
                        record.get(const.DATA_ITEMS, []), owner_id, owner_kind
                    )
                )
        return items

    def category_by_item(self) -> dict[str, str | None]:
        """Map catalog ids to a category (area for exercises) for statistics."""
        return {
            item.item_id: item.category or item.area for item in self.resolve_all()
        }

    # =========================================================================
    # Routine / goal CRUD
    # =========================================================================

    async def async_create_routine(self, user_input: Mapping[str, Any]) -> str:
        """Create a routine and return its internal_id."""
        routine = db.build_routine(user_input)
        routine_id = routine[const.DATA_INTERNAL_ID]
        saved = self._checkpoint(self.routines, routine_id)
        self.routines[routine_id] = routine
        await self._async_commit(routine_id, self.routines, saved)
        const.LOGGER.info("INFO: Created routine '%s' (%s)", routine["name"], routine_id)
        return routine_id

    async def async_create_goal(self, user_input: Mapping[str, Any]) -> str:
        """Create a goal and return its internal_id."""
        goal = db.build_goal(user_input)
        goal_id = goal[const.DATA_INTERNAL_ID]
        saved = self._checkpoint(self.goals, goal_id)
        self.goals[goal_id] = goal
        await self._async_commit(goal_id, self.goals, saved)
        const.LOGGER.info("INFO: Created goal '%s' (%s)", goal["name"], goal_id)
        return goal_id

    async def async_delete_routine(self, routine_id: str) -> None:
        """Delete a routine. Its logs are kept."""
        if routine_id not in self.routines:
            raise NotFoundError(const.ENTITY_TYPE_ROUTINE, routine_id)
        saved = self._checkpoint(self.routines, routine_id)
        del self.routines[routine_id]
        await self._async_commit(routine_id, self.routines, saved)
        const.LOGGER.info("INFO: Deleted routine %s", routine_id)

    async def async_delete_goal(self, goal_id: str) -> None:
        """Delete a goal. Its logs are kept."""
        if goal_id not in self.goals:
            raise NotFoundError(const.ENTITY_TYPE_GOAL, goal_id)
        saved = self._checkpoint(self.goals, goal_id)
        del self.goals[goal_id]
        await self._async_commit(goal_id, self.goals, saved)
        const.LOGGER.info("INFO: Deleted goal %s", goal_id)

    # =========================================================================
    # Item references
    # =========================================================================

    async def async_add_item(
        self,
        owner_id: str,
        item_id: str,
        item_type: str | None = None,
        *,
        recurrence: str | None = None,
        schedules: list[dict[str, Any]] | None = None,
        use_default_schedule: bool = False,
        overrides: Mapping[str, Any] | None = None,
    ) -> str:
        """Attach a catalog item to a routine or goal.

        Returns:
            The new instance_id.

        Raises:
            NotFoundError: Unknown owner.
            ServiceValidationError: Unknown catalog id without custom fields,
                or invalid explicit schedules.
        """
        owner_kind, record = self.get_owner(owner_id)
        reference = db.build_item_reference(
            item_id,
            item_type,
            recurrence=recurrence,
            schedules=schedules,
            use_default_schedule=use_default_schedule,
            overrides=overrides,
        )
        bucket = self._bucket(owner_kind)
        saved = self._checkpoint(bucket, owner_id)
        record.setdefault(const.DATA_ITEMS, []).append(reference)
        record[const.DATA_UPDATED_AT] = dt_now_iso()
        await self._async_commit(owner_id, bucket, saved)
        const.LOGGER.debug(
            "DEBUG: Added item '%s' to %s as instance %s",
            item_id,
            owner_id,
            reference[const.DATA_ITEM_INSTANCE_ID],
        )
        return reference[const.DATA_ITEM_INSTANCE_ID]

    async def async_update_item(
        self,
        owner_id: str,
        instance_id: str,
        *,
        recurrence: str | None = None,
        schedules: list[dict[str, Any]] | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> None:
        """Edit one item instance. Schedule edits apply going forward only."""
        owner_kind, record, reference = self.get_reference(owner_id, instance_id)
        ref = dict(reference)
        db.apply_schedule_change(ref, recurrence, schedules)
        db.apply_item_overrides(ref, overrides or {})

        bucket = self._bucket(owner_kind)
        saved = self._checkpoint(bucket, owner_id)
        items = record[const.DATA_ITEMS]
        items[items.index(reference)] = ref
        record[const.DATA_UPDATED_AT] = dt_now_iso()
        await self._async_commit(owner_id, bucket, saved)
        const.LOGGER.debug("DEBUG: Updated item instance %s of %s", instance_id, owner_id)

    async def async_remove_item(self, owner_id: str, instance_id: str) -> None:
        """Detach one item instance. Its logs are kept."""
        owner_kind, record, reference = self.get_reference(owner_id, instance_id)
        bucket = self._bucket(owner_kind)
        saved = self._checkpoint(bucket, owner_id)
        record[const.DATA_ITEMS].remove(reference)
        record[const.DATA_UPDATED_AT] = dt_now_iso()
        await self._async_commit(owner_id, bucket, saved)
        const.LOGGER.debug("DEBUG: Removed item instance %s from %s", instance_id, owner_id)

    # =========================================================================
    # Internal
    # =========================================================================

    def _bucket(self, owner_kind: str) -> dict[str, Any]:
        if owner_kind == const.OWNER_KIND_GOAL:
            return self.goals  # type: ignore[return-value]
        return self.routines  # type: ignore[return-value]

    @staticmethod
    def _checkpoint(bucket: Mapping[str, Any], owner_id: str) -> dict[str, Any]:
        """Copy `bucket` with the owner's record and its item list detached."""
        saved = dict(bucket)
        record = saved.get(owner_id)
        if record is not None:
            saved[owner_id] = {
                **record,
                const.DATA_ITEMS: list(record.get(const.DATA_ITEMS, [])),
            }
        return saved

    async def _async_commit(
        self, owner_id: str, bucket: dict[str, Any], saved: dict[str, Any]
    ) -> None:
        """Persist, refresh entities and announce the change.

        A failed save puts `bucket` back to `saved` before re-raising.
        """

        def _restore() -> None:
            bucket.clear()
            bucket.update(saved)

        await self._async_persist_or_rollback(_restore)
        self.coordinator.async_update_snapshot()
        self.emit(const.SIGNAL_SUFFIX_ROUTINES_CHANGED, owner_id=owner_id)
