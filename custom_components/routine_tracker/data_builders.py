"""Record builders for routines, goals, item references and logs.

This module is the SINGLE SOURCE OF TRUTH for:
- Record field defaults
- Business validation that voluptuous schemas cannot express
- Complete record structure building (ids, timestamps)

Each record type has a `build_<record>()` function that:
- Takes already schema-validated input (DATA_* keys)
- Generates internal_id / instance_id / log id (UUID) for new records
- Sets timestamps
- Returns a complete dict ready for storage

Consumers:
- managers/routine_manager.py, managers/log_manager.py
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast
import uuid

from homeassistant.exceptions import ServiceValidationError

from . import const
from .engines.catalog_engine import CatalogEngine
from .engines.schedule_engine import RecurrenceEngine
from .utils.dt_utils import as_utc, dt_now_iso, dt_parse

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .type_defs import GoalData, ItemReferenceData, LogRecordData, RoutineData


# ==============================================================================
# HELPER FUNCTIONS FOR FIELD NORMALIZATION
# ==============================================================================


def _require_name(value: Any) -> str:
    """Return a stripped non-empty name or raise a validation error."""
    name = str(value or "").strip()
    if not name:
        raise ServiceValidationError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_INVALID_NAME,
        )
    return name


def _normalize_instructions(value: Any) -> list[str]:
    """Normalize instructions to a list of strings.

    This prevents list("Breathe") -> ['B', 'r', ...] for single-step input.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    return [str(step) for step in value]


def _validated_rule_data(recurrence: Any, schedules: Any) -> dict[str, Any]:
    """Parse caller-supplied schedule input, rejecting unusable entries.

    Persisted data degrades silently on load; explicit user input that
    loses entries during normalization is an error instead.
    """
    raw_count = len(schedules) if isinstance(schedules, list) else 0
    rule = RecurrenceEngine.parse_rule(recurrence, schedules)
    if raw_count and not rule.schedules:
        raise ServiceValidationError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_INVALID_SCHEDULE,
        )
    return rule.to_dict()


# ==============================================================================
# ROUTINES AND GOALS
# ==============================================================================


def build_routine(user_input: Mapping[str, Any]) -> RoutineData:
    """Build a new routine record with an empty item list."""
    now_iso = dt_now_iso()
    return {
        const.DATA_INTERNAL_ID: str(uuid.uuid4()),
        const.DATA_NAME: _require_name(user_input.get(const.DATA_NAME)),
        const.DATA_DESCRIPTION: str(user_input.get(const.DATA_DESCRIPTION) or ""),
        const.DATA_ITEMS: [],
        const.DATA_CREATED_AT: now_iso,
        const.DATA_UPDATED_AT: now_iso,
    }  # type: ignore[return-value]


def build_goal(user_input: Mapping[str, Any]) -> GoalData:
    """Build a new goal record with an empty item list.

    Unknown categories fall back to "custom".
    """
    category = user_input.get(const.DATA_CATEGORY)
    if category not in const.GOAL_CATEGORIES:
        category = const.GOAL_CATEGORY_CUSTOM
    now_iso = dt_now_iso()
    return {
        const.DATA_INTERNAL_ID: str(uuid.uuid4()),
        const.DATA_NAME: _require_name(user_input.get(const.DATA_NAME)),
        const.DATA_DESCRIPTION: str(user_input.get(const.DATA_DESCRIPTION) or ""),
        const.DATA_CATEGORY: category,
        const.DATA_ITEMS: [],
        const.DATA_CREATED_AT: now_iso,
        const.DATA_UPDATED_AT: now_iso,
    }  # type: ignore[return-value]


# ==============================================================================
# ITEM REFERENCES
# ==============================================================================


def build_item_reference(
    item_id: str,
    item_type: str | None = None,
    *,
    recurrence: str | None = None,
    schedules: list[dict[str, Any]] | None = None,
    use_default_schedule: bool = False,
    overrides: Mapping[str, Any] | None = None,
) -> ItemReferenceData:
    """Build the persisted reference for one item added to a routine/goal.

    The reference stores the catalog id, the resolved type and only the
    fields the caller overrides. Schedule precedence: explicit `schedules`,
    then the catalog defaults when `use_default_schedule` is set, otherwise
    an empty schedule.

    Raises:
        ServiceValidationError: Unknown id without a name and type (custom
            item), or explicit schedules that are all invalid.
    """
    overrides = dict(overrides or {})
    found = CatalogEngine.lookup(item_id, item_type)

    if found is None:
        if not item_type or item_type not in const.ITEM_TYPES or not overrides.get(
            const.DATA_ITEM_NAME
        ):
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_UNKNOWN_ITEM,
                translation_placeholders={const.TRANS_PLACEHOLDER_ITEM_ID: item_id},
            )
        resolved_type, template = item_type, None
    else:
        resolved_type, template = found

    reference: dict[str, Any] = {
        const.DATA_ITEM_INSTANCE_ID: str(uuid.uuid4()),
        const.DATA_ITEM_ID: item_id,
        const.DATA_ITEM_TYPE: resolved_type,
        const.DATA_ITEM_ADDED_AT: dt_now_iso(),
    }
    reference.update(apply_item_overrides({}, overrides))

    if schedules is not None:
        reference.update(_validated_rule_data(recurrence, schedules))
    elif use_default_schedule:
        reference.update(CatalogEngine.default_rule_data(resolved_type, template))
    else:
        reference.update(
            {
                const.DATA_ITEM_RECURRENCE: recurrence or const.RECURRENCE_DAILY,
                const.DATA_ITEM_SCHEDULES: [],
            }
        )
    return cast("ItemReferenceData", reference)


def apply_item_overrides(
    reference: dict[str, Any], changes: Mapping[str, Any]
) -> dict[str, Any]:
    """Copy override fields from `changes` onto `reference`.

    A None value removes the override so the template value shows again.
    Keys outside const.ITEM_OVERRIDE_FIELDS are ignored.
    """
    for key in const.ITEM_OVERRIDE_FIELDS:
        if key not in changes:
            continue
        value = changes[key]
        if value is None:
            reference.pop(key, None)
        elif key == const.DATA_ITEM_INSTRUCTIONS:
            reference[key] = _normalize_instructions(value)
        else:
            reference[key] = value
    return reference


def apply_schedule_change(
    reference: dict[str, Any], recurrence: str | None, schedules: Any
) -> dict[str, Any]:
    """Replace the schedule of `reference` going forward.

    Legacy notification_times are dropped so the new schedule is the only
    source the catalog join reads.
    """
    if recurrence is None and schedules is None:
        return reference
    if schedules is None:
        schedules = reference.get(const.DATA_ITEM_SCHEDULES, [])
    reference.update(_validated_rule_data(recurrence, schedules))
    reference.pop(const.DATA_ITEM_NOTIFICATION_TIMES, None)
    return reference


# ==============================================================================
# LOGS
# ==============================================================================


def build_log_record(user_input: Mapping[str, Any]) -> LogRecordData:
    """Build an append-only completion record.

    completed_at defaults to now and is normalized to a UTC ISO string.
    Only payload fields meaningful for the log kind are kept.

    Raises:
        ServiceValidationError: Unknown log type, unparseable completed_at,
            or a photo/media log without its uri/url.
    """
    log_type = user_input.get(const.DATA_LOG_TYPE)
    if log_type not in const.LOG_TYPES:
        raise ServiceValidationError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_INVALID_LOG,
        )

    raw_completed = user_input.get(const.DATA_LOG_COMPLETED_AT)
    if raw_completed:
        parsed = dt_parse(raw_completed)
        if parsed is None:
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_INVALID_LOG,
            )
        completed_at = as_utc(parsed).isoformat()
    else:
        completed_at = dt_now_iso()

    record: dict[str, Any] = {
        const.DATA_LOG_ID: str(uuid.uuid4()),
        const.DATA_LOG_TYPE: log_type,
        const.DATA_LOG_COMPLETED_AT: completed_at,
    }
    for key in (
        const.DATA_LOG_ITEM_ID,
        const.DATA_LOG_ACTIVITY_ID,
        const.DATA_LOG_ROUTINE_ID,
        const.DATA_LOG_GOAL_ID,
        const.DATA_LOG_NOTES,
    ):
        if user_input.get(key):
            record[key] = user_input[key]

    if log_type == const.LOG_TYPE_EXERCISE and user_input.get(const.DATA_LOG_DURATION):
        record[const.DATA_LOG_DURATION] = int(user_input[const.DATA_LOG_DURATION])
    if user_input.get(const.DATA_LOG_PHOTO_URI):
        record[const.DATA_LOG_PHOTO_URI] = user_input[const.DATA_LOG_PHOTO_URI]
    if user_input.get(const.DATA_LOG_MEDIA_URL):
        record[const.DATA_LOG_MEDIA_URL] = user_input[const.DATA_LOG_MEDIA_URL]

    if (log_type == const.LOG_TYPE_PHOTO and not record.get(const.DATA_LOG_PHOTO_URI)) or (
        log_type == const.LOG_TYPE_MEDIA_UPLOAD
        and not record.get(const.DATA_LOG_MEDIA_URL)
    ):
        raise ServiceValidationError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_INVALID_LOG,
        )
    return cast("LogRecordData", record)
