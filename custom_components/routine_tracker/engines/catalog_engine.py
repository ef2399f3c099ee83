"""Catalog Engine - joins catalog templates with per-instance overrides.

A routine or goal persists only item references: a stable catalog id plus
whatever the user changed (schedule, instructions, name). Resolution merges
the template with the reference, reference fields winning.

Resolution never fails for a single item. A reference whose template is
gone (removed from the catalog, or a custom id) resolves to an OrphanedItem
built from the persisted fields alone, so it stays displayable and loggable.
Callers branch on the concrete type instead of probing optional fields.

ARCHITECTURE: Pure logic, NO Home Assistant dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, cast

from .. import const
from ..catalog import CATALOGS
from .schedule_engine import RecurrenceEngine, RecurrenceRule

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ..type_defs import CatalogTemplate, ItemReferenceData


# =============================================================================
# Resolved item types (tagged union)
# =============================================================================


@dataclass(frozen=True)
class _ItemBase:
    """Fields shared by resolved and orphaned items."""

    instance_id: str
    item_id: str
    type: str
    owner_id: str
    owner_kind: str
    name: str
    rule: RecurrenceRule
    area: str | None = None
    category: str | None = None
    description: str | None = None
    duration: int | None = None
    instructions: tuple[str, ...] = ()
    notifications_enabled: bool = True

    is_orphaned: ClassVar[bool] = False

    @property
    def is_task(self) -> bool:
        """Return True for task items."""
        return self.type == const.ITEM_TYPE_TASK

    def to_dict(self) -> dict[str, Any]:
        """Serialize for service responses and entity attributes."""
        return {
            const.DATA_ITEM_INSTANCE_ID: self.instance_id,
            const.DATA_ITEM_ID: self.item_id,
            const.DATA_ITEM_TYPE: self.type,
            const.PAYLOAD_OWNER_ID: self.owner_id,
            const.PAYLOAD_OWNER_KIND: self.owner_kind,
            const.DATA_ITEM_NAME: self.name,
            const.DATA_ITEM_AREA: self.area,
            const.DATA_ITEM_CATEGORY: self.category,
            const.DATA_ITEM_DESCRIPTION: self.description,
            const.DATA_ITEM_DURATION: self.duration,
            const.DATA_ITEM_INSTRUCTIONS: list(self.instructions),
            const.DATA_ITEM_NOTIFICATIONS_ENABLED: self.notifications_enabled,
            **self.rule.to_dict(),
            "orphaned": self.is_orphaned,
        }


@dataclass(frozen=True)
class ResolvedItem(_ItemBase):
    """An item whose catalog template was found."""

    template: CatalogTemplate = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class OrphanedItem(_ItemBase):
    """An item whose template no longer exists in any catalog."""

    is_orphaned: ClassVar[bool] = True


ScheduledItem = ResolvedItem | OrphanedItem


# =============================================================================
# Catalog Engine
# =============================================================================


class CatalogEngine:
    """Stateless catalog lookups and reference resolution."""

    # Search order when a reference carries no usable type
    LOOKUP_ORDER: ClassVar[tuple[str, ...]] = (
        const.ITEM_TYPE_EXERCISE,
        const.ITEM_TYPE_TASK,
        const.ITEM_TYPE_ACTIVITY,
    )

    @classmethod
    def lookup(
        cls,
        item_id: str,
        item_type: str | None = None,
        catalogs: Mapping[str, Mapping[str, CatalogTemplate]] | None = None,
    ) -> tuple[str, CatalogTemplate] | None:
        """Find a template by id.

        Args:
            item_id: Stable catalog id
            item_type: Catalog to search. Unknown or missing types search
                every catalog in LOOKUP_ORDER.
            catalogs: Override for tests; defaults to the static catalogs.

        Returns:
            (item_type, template) or None when no catalog has the id.
        """
        tables = catalogs if catalogs is not None else CATALOGS
        if item_type in tables:
            template = tables[item_type].get(item_id)
            return (item_type, template) if template is not None else None
        for candidate in cls.LOOKUP_ORDER:
            template = tables.get(candidate, {}).get(item_id)
            if template is not None:
                return candidate, template
        return None

    @classmethod
    def resolve_item(
        cls,
        reference: ItemReferenceData | Mapping[str, Any],
        owner_id: str,
        owner_kind: str,
        catalogs: Mapping[str, Mapping[str, CatalogTemplate]] | None = None,
    ) -> ScheduledItem:
        """Resolve one persisted reference into a ScheduledItem.

        Override fields present on the reference win over the template. The
        recurrence rule comes from the reference when it carries schedule
        data, otherwise from the template's defaults.
        """
        ref = cast("Mapping[str, Any]", reference)
        item_id = str(ref.get(const.DATA_ITEM_ID) or "")
        persisted_type = ref.get(const.DATA_ITEM_TYPE)
        instance_id = str(ref.get(const.DATA_ITEM_INSTANCE_ID) or item_id)

        found = cls.lookup(item_id, persisted_type, catalogs) if item_id else None

        if found is None:
            const.LOGGER.debug(
                "DEBUG: Catalog template '%s' (%s) not found, resolving as orphan",
                item_id,
                persisted_type,
            )
            return OrphanedItem(
                instance_id=instance_id,
                item_id=item_id,
                type=str(persisted_type or ""),
                owner_id=owner_id,
                owner_kind=owner_kind,
                name=str(ref.get(const.DATA_ITEM_NAME) or item_id),
                rule=cls._rule_from(ref),
                **cls._optional_fields(ref),
            )

        item_type, template = found
        merged: dict[str, Any] = dict(template)
        for key in const.ITEM_OVERRIDE_FIELDS:
            value = ref.get(key)
            if value is not None:
                merged[key] = value

        rule_source = ref if cls._has_schedule_data(ref) else template
        return ResolvedItem(
            instance_id=instance_id,
            item_id=item_id,
            type=item_type,
            owner_id=owner_id,
            owner_kind=owner_kind,
            name=str(merged.get(const.DATA_ITEM_NAME) or item_id),
            rule=cls._rule_from(rule_source),
            template=template,
            **cls._optional_fields(merged),
        )

    @classmethod
    def resolve_items(
        cls,
        references: Iterable[ItemReferenceData | Mapping[str, Any]],
        owner_id: str,
        owner_kind: str,
        catalogs: Mapping[str, Mapping[str, CatalogTemplate]] | None = None,
    ) -> list[ScheduledItem]:
        """Resolve every reference of one routine/goal, preserving order.

        Non-object entries (corrupted storage) are skipped with a warning.
        """
        items: list[ScheduledItem] = []
        for reference in references:
            if not isinstance(reference, dict):
                const.LOGGER.warning(
                    "WARNING: Skipping malformed item reference in %s %s: %r",
                    owner_kind,
                    owner_id,
                    reference,
                )
                continue
            items.append(cls.resolve_item(reference, owner_id, owner_kind, catalogs))
        return items

    @staticmethod
    def default_rule_data(
        item_type: str, template: CatalogTemplate | None
    ) -> dict[str, Any]:
        """Return the schedule a newly added item starts with.

        Templates that define schedules keep them. Otherwise exercises remind
        daily and tasks weekly, at the default time of day.
        """
        if template and template.get(const.DATA_ITEM_SCHEDULES):
            rule = RecurrenceEngine.parse_rule(
                template.get(const.DATA_ITEM_RECURRENCE),
                template.get(const.DATA_ITEM_SCHEDULES),
            )
            return rule.to_dict()
        if item_type == const.ITEM_TYPE_TASK:
            return {
                const.DATA_ITEM_RECURRENCE: const.RECURRENCE_WEEKLY,
                const.DATA_ITEM_SCHEDULES: [
                    {
                        const.SCHEDULE_TIME_OF_DAY: const.DEFAULT_TASK_TIME_OF_DAY,
                        const.SCHEDULE_DAY_OF_WEEK: const.DEFAULT_TASK_DAY_OF_WEEK,
                    }
                ],
            }
        return {
            const.DATA_ITEM_RECURRENCE: const.RECURRENCE_DAILY,
            const.DATA_ITEM_SCHEDULES: [
                {const.SCHEDULE_TIME_OF_DAY: const.DEFAULT_EXERCISE_TIME_OF_DAY}
            ],
        }

    # =========================================================================
    # Internal helpers
    # =========================================================================

    @staticmethod
    def _has_schedule_data(ref: Mapping[str, Any]) -> bool:
        return (
            const.DATA_ITEM_SCHEDULES in ref
            or const.DATA_ITEM_NOTIFICATION_TIMES in ref
        )

    @staticmethod
    def _rule_from(source: Mapping[str, Any]) -> RecurrenceRule:
        return RecurrenceEngine.parse_rule(
            source.get(const.DATA_ITEM_RECURRENCE),
            source.get(const.DATA_ITEM_SCHEDULES),
            source.get(const.DATA_ITEM_NOTIFICATION_TIMES),
        )

    @staticmethod
    def _optional_fields(source: Mapping[str, Any]) -> dict[str, Any]:
        """Extract display fields, dropping values of the wrong shape."""
        instructions = source.get(const.DATA_ITEM_INSTRUCTIONS)
        if isinstance(instructions, str):
            instructions = [instructions]
        elif not isinstance(instructions, list):
            instructions = []

        duration = source.get(const.DATA_ITEM_DURATION)
        enabled = source.get(const.DATA_ITEM_NOTIFICATIONS_ENABLED, True)

        return {
            "area": source.get(const.DATA_ITEM_AREA),
            "category": source.get(const.DATA_ITEM_CATEGORY),
            "description": source.get(const.DATA_ITEM_DESCRIPTION),
            "duration": duration if isinstance(duration, int) else None,
            "instructions": tuple(str(step) for step in instructions),
            "notifications_enabled": enabled is not False,
        }
