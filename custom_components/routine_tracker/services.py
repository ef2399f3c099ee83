# File: services.py
"""Defines custom services for the Routine Tracker integration.

These services are the integration's programmatic surface for scripts,
automations and dashboards: routine/goal management, completion logging,
reminder scheduling, badges, onboarding and read-only queries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import voluptuous as vol

from homeassistant.core import HomeAssistant, ServiceCall, SupportsResponse
from homeassistant.exceptions import ServiceValidationError
from homeassistant.helpers import config_validation as cv

from . import const
from .engines.gamification_engine import BADGES
from .engines.routine_engine import RoutineEngine
from .helpers.entity_helpers import get_coordinator
from .utils.dt_utils import dt_today_local

if TYPE_CHECKING:
    from .coordinator import RoutineTrackerCoordinator

# --- Service Schemas ---
SCHEDULE_ENTRY_SCHEMA = vol.Schema(
    {
        vol.Required(const.SCHEDULE_TIME_OF_DAY): cv.string,
        vol.Optional(const.SCHEDULE_DAY_OF_WEEK): vol.All(
            vol.Coerce(int),
            vol.Range(min=const.DAY_OF_WEEK_MIN, max=const.DAY_OF_WEEK_MAX),
        ),
    }
)

CREATE_ROUTINE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_NAME): cv.string,
        vol.Optional(const.FIELD_DESCRIPTION, default=""): cv.string,
    }
)

DELETE_ROUTINE_SCHEMA = vol.Schema({vol.Required(const.FIELD_ROUTINE_ID): cv.string})

CREATE_GOAL_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_NAME): cv.string,
        vol.Optional(const.FIELD_DESCRIPTION, default=""): cv.string,
        vol.Optional(
            const.FIELD_CATEGORY, default=const.GOAL_CATEGORY_CUSTOM
        ): vol.In(const.GOAL_CATEGORIES),
    }
)

DELETE_GOAL_SCHEMA = vol.Schema({vol.Required(const.FIELD_GOAL_ID): cv.string})

_ITEM_OVERRIDE_FIELDS = {
    vol.Optional(const.FIELD_NAME): cv.string,
    vol.Optional(const.FIELD_DESCRIPTION): cv.string,
    vol.Optional(const.FIELD_INSTRUCTIONS): vol.All(cv.ensure_list, [cv.string]),
    vol.Optional(const.FIELD_NOTIFICATIONS_ENABLED): cv.boolean,
}

ADD_ITEM_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_OWNER_ID): cv.string,
        vol.Required(const.FIELD_ITEM_ID): cv.string,
        vol.Optional(const.FIELD_ITEM_TYPE): vol.In(const.ITEM_TYPES),
        vol.Optional(const.FIELD_RECURRENCE): vol.In(const.RECURRENCE_TYPES),
        vol.Optional(const.FIELD_SCHEDULES): [SCHEDULE_ENTRY_SCHEMA],
        vol.Optional(const.FIELD_USE_DEFAULT_SCHEDULE, default=False): cv.boolean,
        **_ITEM_OVERRIDE_FIELDS,
    }
)

UPDATE_ITEM_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_OWNER_ID): cv.string,
        vol.Required(const.FIELD_INSTANCE_ID): cv.string,
        vol.Optional(const.FIELD_RECURRENCE): vol.In(const.RECURRENCE_TYPES),
        vol.Optional(const.FIELD_SCHEDULES): [SCHEDULE_ENTRY_SCHEMA],
        **_ITEM_OVERRIDE_FIELDS,
    }
)

REMOVE_ITEM_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_OWNER_ID): cv.string,
        vol.Required(const.FIELD_INSTANCE_ID): cv.string,
    }
)

LOG_COMPLETION_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_OWNER_ID): cv.string,
        vol.Optional(const.FIELD_INSTANCE_ID): cv.string,
        vol.Optional(const.FIELD_LOG_TYPE): vol.In(const.LOG_TYPES),
        vol.Optional(const.FIELD_ITEM_ID): cv.string,
        vol.Optional(const.FIELD_COMPLETED_AT): cv.string,
        vol.Optional(const.FIELD_PHOTO_URI): cv.string,
        vol.Optional(const.FIELD_MEDIA_URL): cv.string,
        vol.Optional(const.FIELD_NOTES): cv.string,
        vol.Optional(const.FIELD_DURATION): vol.All(vol.Coerce(int), vol.Range(min=0)),
    }
)

BADGE_KEY_SCHEMA = vol.Schema(
    {vol.Required(const.FIELD_BADGE_KEY): vol.In([badge.key for badge in BADGES])}
)

SET_ONBOARDING_STATUS_SCHEMA = vol.Schema(
    {
        vol.Optional(
            const.FIELD_FLOW_KEY, default=const.ONBOARDING_FLOW_INITIAL_SETUP
        ): cv.string,
        vol.Required(const.FIELD_STATUS): vol.In(const.ONBOARDING_STATUSES),
        vol.Optional(const.FIELD_STEP): vol.All(vol.Coerce(int), vol.Range(min=0)),
    }
)

GET_PENDING_ITEMS_SCHEMA = vol.Schema({vol.Optional(const.FIELD_OWNER_ID): cv.string})

GET_CONSISTENCY_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_OWNER_ID): cv.string,
        vol.Optional(const.FIELD_ITEM_ID): cv.string,
        vol.Optional(const.FIELD_DAYS, default=const.STATS_TIME_SERIES_DAYS): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=366)
        ),
    }
)

RESOLVE_ITEMS_SCHEMA = vol.Schema({vol.Optional(const.FIELD_OWNER_ID): cv.string})

EMPTY_SCHEMA = vol.Schema({})


def _get_coordinator(hass: HomeAssistant) -> RoutineTrackerCoordinator:
    """Return the loaded coordinator or raise a translated validation error."""
    coordinator = get_coordinator(hass)
    if coordinator is None:
        raise ServiceValidationError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_NO_ENTRY,
        )
    return coordinator


def _overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Pick the item override fields present in service data."""
    return {
        key: data[key]
        for key in (
            const.FIELD_NAME,
            const.FIELD_DESCRIPTION,
            const.FIELD_INSTRUCTIONS,
            const.FIELD_NOTIFICATIONS_ENABLED,
        )
        if key in data
    }


# pylint: disable=too-many-locals,too-many-statements
def async_setup_services(hass: HomeAssistant) -> None:
    """Register Routine Tracker services."""

    # --- Routines and goals ---

    async def handle_create_routine(call: ServiceCall) -> dict[str, Any]:
        """Handle creating a routine."""
        coordinator = _get_coordinator(hass)
        routine_id = await coordinator.routine_manager.async_create_routine(
            {
                const.DATA_NAME: call.data[const.FIELD_NAME],
                const.DATA_DESCRIPTION: call.data[const.FIELD_DESCRIPTION],
            }
        )
        return {const.FIELD_ROUTINE_ID: routine_id}

    async def handle_delete_routine(call: ServiceCall) -> None:
        """Handle deleting a routine."""
        coordinator = _get_coordinator(hass)
        await coordinator.routine_manager.async_delete_routine(
            call.data[const.FIELD_ROUTINE_ID]
        )

    async def handle_create_goal(call: ServiceCall) -> dict[str, Any]:
        """Handle creating a goal."""
        coordinator = _get_coordinator(hass)
        goal_id = await coordinator.routine_manager.async_create_goal(
            {
                const.DATA_NAME: call.data[const.FIELD_NAME],
                const.DATA_DESCRIPTION: call.data[const.FIELD_DESCRIPTION],
                const.DATA_CATEGORY: call.data[const.FIELD_CATEGORY],
            }
        )
        return {const.FIELD_GOAL_ID: goal_id}

    async def handle_delete_goal(call: ServiceCall) -> None:
        """Handle deleting a goal."""
        coordinator = _get_coordinator(hass)
        await coordinator.routine_manager.async_delete_goal(call.data[const.FIELD_GOAL_ID])

    # --- Items ---

    async def handle_add_item(call: ServiceCall) -> dict[str, Any]:
        """Handle attaching a catalog item to a routine or goal."""
        coordinator = _get_coordinator(hass)
        instance_id = await coordinator.routine_manager.async_add_item(
            call.data[const.FIELD_OWNER_ID],
            call.data[const.FIELD_ITEM_ID],
            call.data.get(const.FIELD_ITEM_TYPE),
            recurrence=call.data.get(const.FIELD_RECURRENCE),
            schedules=call.data.get(const.FIELD_SCHEDULES),
            use_default_schedule=call.data[const.FIELD_USE_DEFAULT_SCHEDULE],
            overrides=_overrides(call.data),
        )
        return {const.FIELD_INSTANCE_ID: instance_id}

    async def handle_update_item(call: ServiceCall) -> None:
        """Handle editing an item's schedule or overrides."""
        coordinator = _get_coordinator(hass)
        await coordinator.routine_manager.async_update_item(
            call.data[const.FIELD_OWNER_ID],
            call.data[const.FIELD_INSTANCE_ID],
            recurrence=call.data.get(const.FIELD_RECURRENCE),
            schedules=call.data.get(const.FIELD_SCHEDULES),
            overrides=_overrides(call.data),
        )

    async def handle_remove_item(call: ServiceCall) -> None:
        """Handle detaching an item from a routine or goal."""
        coordinator = _get_coordinator(hass)
        await coordinator.routine_manager.async_remove_item(
            call.data[const.FIELD_OWNER_ID], call.data[const.FIELD_INSTANCE_ID]
        )

    # --- Logs ---

    async def handle_log_completion(call: ServiceCall) -> dict[str, Any]:
        """Handle logging a completion.

        With owner_id and instance_id the log kind and references come from
        the item. Otherwise log_type is required (plain photo/media logs).
        """
        coordinator = _get_coordinator(hass)
        payload = {
            const.DATA_LOG_COMPLETED_AT: call.data.get(const.FIELD_COMPLETED_AT),
            const.DATA_LOG_PHOTO_URI: call.data.get(const.FIELD_PHOTO_URI),
            const.DATA_LOG_MEDIA_URL: call.data.get(const.FIELD_MEDIA_URL),
            const.DATA_LOG_NOTES: call.data.get(const.FIELD_NOTES),
            const.DATA_LOG_DURATION: call.data.get(const.FIELD_DURATION),
        }
        owner_id = call.data.get(const.FIELD_OWNER_ID)
        instance_id = call.data.get(const.FIELD_INSTANCE_ID)
        if owner_id and instance_id:
            record = await coordinator.log_manager.async_log_item_completion(
                owner_id, instance_id, payload
            )
        else:
            payload[const.DATA_LOG_TYPE] = call.data.get(const.FIELD_LOG_TYPE)
            payload[const.DATA_LOG_ITEM_ID] = call.data.get(const.FIELD_ITEM_ID)
            record = await coordinator.log_manager.async_append_log(payload)
        return {"log": dict(record)}

    # --- Notifications ---

    async def handle_schedule_notifications(call: ServiceCall) -> dict[str, Any]:
        """Handle rebuilding every reminder trigger."""
        coordinator = _get_coordinator(hass)
        summary = await coordinator.notification_manager.async_schedule_all()
        return {"summary": dict(summary) if summary else None}

    # --- Gamification ---

    async def handle_evaluate_badges(call: ServiceCall) -> dict[str, Any]:
        """Handle a manual badge evaluation."""
        coordinator = _get_coordinator(hass)
        awarded = await coordinator.gamification_manager.async_evaluate()
        return {"awarded": awarded}

    async def handle_award_badge(call: ServiceCall) -> dict[str, Any]:
        """Handle an explicit badge award."""
        coordinator = _get_coordinator(hass)
        awarded = await coordinator.gamification_manager.async_award_badge(
            call.data[const.FIELD_BADGE_KEY]
        )
        return {"awarded": awarded}

    async def handle_mark_badge_toast_shown(call: ServiceCall) -> None:
        """Handle recording that a badge toast was shown."""
        coordinator = _get_coordinator(hass)
        await coordinator.gamification_manager.async_mark_toast_shown(
            call.data[const.FIELD_BADGE_KEY]
        )

    # --- Onboarding ---

    async def handle_set_onboarding_status(call: ServiceCall) -> dict[str, Any]:
        """Handle updating an onboarding flow status."""
        coordinator = _get_coordinator(hass)
        status = await coordinator.onboarding_manager.async_set_status(
            call.data[const.FIELD_FLOW_KEY],
            call.data[const.FIELD_STATUS],
            call.data.get(const.FIELD_STEP),
        )
        return dict(status)

    # --- Reset ---

    async def handle_reset_all_data(call: ServiceCall) -> None:
        """Handle wiping all routines, goals, logs and progress."""
        coordinator = _get_coordinator(hass)
        coordinator.notification_manager.cancel_all()
        await coordinator.store.async_clear_data()
        coordinator.async_update_snapshot()
        const.LOGGER.info("INFO: Manual data reset completed")

    # --- Queries ---

    async def handle_get_pending_items(call: ServiceCall) -> dict[str, Any]:
        """Return today's pending items, optionally for one routine/goal."""
        coordinator = _get_coordinator(hass)
        owner_id = call.data.get(const.FIELD_OWNER_ID)
        items = (
            coordinator.routine_manager.resolve(owner_id)
            if owner_id
            else coordinator.routine_manager.resolve_all()
        )
        today = dt_today_local()
        pending = RoutineEngine.pending_today(
            items, coordinator.log_manager.logs_on_day(today), today
        )
        return {
            "date": today.isoformat(),
            const.ATTR_PENDING_ITEMS: [item.to_dict() for item in pending],
        }

    async def handle_get_consistency(call: ServiceCall) -> dict[str, Any]:
        """Return streak statistics plus supplementary statistics for a scope."""
        coordinator = _get_coordinator(hass)
        owner_id = call.data.get(const.FIELD_OWNER_ID)
        item_id = call.data.get(const.FIELD_ITEM_ID)
        if owner_id:
            coordinator.routine_manager.get_owner(owner_id)
            logs = coordinator.log_manager.logs_for_owner(owner_id)
        elif item_id:
            logs = coordinator.log_manager.logs_for_item(item_id)
        else:
            logs = coordinator.log_manager.logs

        stats = coordinator.stats
        return {
            "consistency": dict(stats.compute_consistency(logs)),
            "items": {
                key: dict(value) for key, value in stats.compute_item_stats(logs).items()
            },
            "categories": stats.compute_category_counts(
                logs, coordinator.routine_manager.category_by_item()
            ),
            "time_series": stats.compute_time_series(logs, call.data[const.FIELD_DAYS]),
            "timing": dict(stats.compute_timing_stats(logs)),
        }

    async def handle_resolve_items(call: ServiceCall) -> dict[str, Any]:
        """Return the resolved items of one routine/goal, or of all of them."""
        coordinator = _get_coordinator(hass)
        owner_id = call.data.get(const.FIELD_OWNER_ID)
        items = (
            coordinator.routine_manager.resolve(owner_id)
            if owner_id
            else coordinator.routine_manager.resolve_all()
        )
        return {const.FIELD_ITEMS: [item.to_dict() for item in items]}

    # --- Register Services ---
    registrations: list[tuple[str, Any, vol.Schema, SupportsResponse]] = [
        (const.SERVICE_CREATE_ROUTINE, handle_create_routine, CREATE_ROUTINE_SCHEMA, SupportsResponse.OPTIONAL),
        (const.SERVICE_DELETE_ROUTINE, handle_delete_routine, DELETE_ROUTINE_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_CREATE_GOAL, handle_create_goal, CREATE_GOAL_SCHEMA, SupportsResponse.OPTIONAL),
        (const.SERVICE_DELETE_GOAL, handle_delete_goal, DELETE_GOAL_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_ADD_ITEM, handle_add_item, ADD_ITEM_SCHEMA, SupportsResponse.OPTIONAL),
        (const.SERVICE_UPDATE_ITEM, handle_update_item, UPDATE_ITEM_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_REMOVE_ITEM, handle_remove_item, REMOVE_ITEM_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_LOG_COMPLETION, handle_log_completion, LOG_COMPLETION_SCHEMA, SupportsResponse.OPTIONAL),
        (const.SERVICE_SCHEDULE_NOTIFICATIONS, handle_schedule_notifications, EMPTY_SCHEMA, SupportsResponse.OPTIONAL),
        (const.SERVICE_EVALUATE_BADGES, handle_evaluate_badges, EMPTY_SCHEMA, SupportsResponse.OPTIONAL),
        (const.SERVICE_AWARD_BADGE, handle_award_badge, BADGE_KEY_SCHEMA, SupportsResponse.OPTIONAL),
        (const.SERVICE_MARK_BADGE_TOAST_SHOWN, handle_mark_badge_toast_shown, BADGE_KEY_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_SET_ONBOARDING_STATUS, handle_set_onboarding_status, SET_ONBOARDING_STATUS_SCHEMA, SupportsResponse.OPTIONAL),
        (const.SERVICE_RESET_ALL_DATA, handle_reset_all_data, EMPTY_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_GET_PENDING_ITEMS, handle_get_pending_items, GET_PENDING_ITEMS_SCHEMA, SupportsResponse.ONLY),
        (const.SERVICE_GET_CONSISTENCY, handle_get_consistency, GET_CONSISTENCY_SCHEMA, SupportsResponse.ONLY),
        (const.SERVICE_RESOLVE_ITEMS, handle_resolve_items, RESOLVE_ITEMS_SCHEMA, SupportsResponse.ONLY),
    ]
    for name, handler, schema, supports_response in registrations:
        hass.services.async_register(
            const.DOMAIN,
            name,
            handler,
            schema=schema,
            supports_response=supports_response,
        )

    const.LOGGER.info("INFO: Routine Tracker services have been registered successfully")


ALL_SERVICES = (
    const.SERVICE_CREATE_ROUTINE,
    const.SERVICE_DELETE_ROUTINE,
    const.SERVICE_CREATE_GOAL,
    const.SERVICE_DELETE_GOAL,
    const.SERVICE_ADD_ITEM,
    const.SERVICE_UPDATE_ITEM,
    const.SERVICE_REMOVE_ITEM,
    const.SERVICE_LOG_COMPLETION,
    const.SERVICE_SCHEDULE_NOTIFICATIONS,
    const.SERVICE_EVALUATE_BADGES,
    const.SERVICE_AWARD_BADGE,
    const.SERVICE_MARK_BADGE_TOAST_SHOWN,
    const.SERVICE_SET_ONBOARDING_STATUS,
    const.SERVICE_RESET_ALL_DATA,
    const.SERVICE_GET_PENDING_ITEMS,
    const.SERVICE_GET_CONSISTENCY,
    const.SERVICE_RESOLVE_ITEMS,
)


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister Routine Tracker services when unloading the integration."""
    for service in ALL_SERVICES:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: Routine Tracker services have been unregistered")
