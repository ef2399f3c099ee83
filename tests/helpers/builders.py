"""Factories for plain records used by engine tests.

Engines take dicts and dataclasses only, so these builders skip Home
Assistant entirely.
"""

from __future__ import annotations

from typing import Any
import uuid

from custom_components.routine_tracker import const
from custom_components.routine_tracker.engines.catalog_engine import (
    CatalogEngine,
    ScheduledItem,
)


def make_log(
    log_type: str = const.LOG_TYPE_EXERCISE,
    completed_at: str = "2026-01-07T10:00:00+00:00",
    **fields: Any,
) -> dict[str, Any]:
    """Return a log record with a fresh id."""
    return {
        const.DATA_LOG_ID: str(uuid.uuid4()),
        const.DATA_LOG_TYPE: log_type,
        const.DATA_LOG_COMPLETED_AT: completed_at,
        **fields,
    }


def make_reference(
    item_id: str,
    item_type: str | None = const.ITEM_TYPE_EXERCISE,
    *,
    schedules: list[dict[str, Any]] | None = None,
    recurrence: str | None = None,
    instance_id: str | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    """Return a persisted item reference.

    Schedule keys are only written when `schedules` is given, so the
    template schedule applies otherwise.
    """
    reference: dict[str, Any] = {
        const.DATA_ITEM_INSTANCE_ID: instance_id or str(uuid.uuid4()),
        const.DATA_ITEM_ID: item_id,
    }
    if item_type is not None:
        reference[const.DATA_ITEM_TYPE] = item_type
    if schedules is not None:
        reference[const.DATA_ITEM_SCHEDULES] = schedules
    if recurrence is not None:
        reference[const.DATA_ITEM_RECURRENCE] = recurrence
    reference.update(overrides)
    return reference


def make_item(
    item_id: str,
    item_type: str | None = const.ITEM_TYPE_EXERCISE,
    *,
    owner_id: str = "routine-1",
    owner_kind: str = const.OWNER_KIND_ROUTINE,
    **reference_fields: Any,
) -> ScheduledItem:
    """Resolve a reference built by make_reference() against the catalogs."""
    return CatalogEngine.resolve_item(
        make_reference(item_id, item_type, **reference_fields), owner_id, owner_kind
    )
