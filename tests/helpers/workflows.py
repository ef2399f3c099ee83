"""Service-call workflows for integration tests.

Each helper calls one Routine Tracker service with blocking=True against a
loaded entry and returns the service response where there is one.

Usage:
    routine_id = await create_routine(hass, "Morning")
    instance_id = await add_item(hass, routine_id, "chin-tuck",
                                 schedules=[{"time_of_day": "08:00"}])
    await log_completion(hass, routine_id, instance_id)
"""

from __future__ import annotations

from typing import Any

from homeassistant.core import HomeAssistant

from custom_components.routine_tracker import const


async def call_service(
    hass: HomeAssistant,
    service: str,
    data: dict[str, Any] | None = None,
    *,
    return_response: bool = False,
) -> Any:
    """Call a Routine Tracker service and wait for it."""
    return await hass.services.async_call(
        const.DOMAIN,
        service,
        data or {},
        blocking=True,
        return_response=return_response,
    )


async def create_routine(hass: HomeAssistant, name: str = "Morning") -> str:
    """Create a routine and return its id."""
    response = await call_service(
        hass,
        const.SERVICE_CREATE_ROUTINE,
        {const.FIELD_NAME: name},
        return_response=True,
    )
    return response[const.FIELD_ROUTINE_ID]


async def create_goal(
    hass: HomeAssistant,
    name: str = "Learn Piano",
    category: str = const.GOAL_CATEGORY_HOBBY,
) -> str:
    """Create a goal and return its id."""
    response = await call_service(
        hass,
        const.SERVICE_CREATE_GOAL,
        {const.FIELD_NAME: name, const.FIELD_CATEGORY: category},
        return_response=True,
    )
    return response[const.FIELD_GOAL_ID]


async def add_item(
    hass: HomeAssistant, owner_id: str, item_id: str, **fields: Any
) -> str:
    """Attach an item to a routine/goal and return its instance id."""
    response = await call_service(
        hass,
        const.SERVICE_ADD_ITEM,
        {const.FIELD_OWNER_ID: owner_id, const.FIELD_ITEM_ID: item_id, **fields},
        return_response=True,
    )
    return response[const.FIELD_INSTANCE_ID]


async def log_completion(
    hass: HomeAssistant,
    owner_id: str | None = None,
    instance_id: str | None = None,
    **fields: Any,
) -> dict[str, Any]:
    """Log a completion and return the stored record.

    Waits for the dispatcher tasks (XP, badge evaluation) to finish.
    """
    data: dict[str, Any] = dict(fields)
    if owner_id:
        data[const.FIELD_OWNER_ID] = owner_id
    if instance_id:
        data[const.FIELD_INSTANCE_ID] = instance_id
    response = await call_service(
        hass, const.SERVICE_LOG_COMPLETION, data, return_response=True
    )
    await hass.async_block_till_done()
    return response["log"]


async def finish_onboarding(
    hass: HomeAssistant, status: str = const.ONBOARDING_STATUS_COMPLETED
) -> None:
    """Finish the initial setup flow, which unlocks reminder scheduling."""
    await call_service(
        hass,
        const.SERVICE_SET_ONBOARDING_STATUS,
        {const.FIELD_STATUS: status},
    )
    await hass.async_block_till_done()
