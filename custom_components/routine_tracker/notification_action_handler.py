# File: notification_action_handler.py
"""Handle notification actions from HA companion notifications.

When the user taps "Open" on a reminder, the companion app fires
mobile_app_notification_action with the action string the reminder was
sent with. This handler parses it, checks that the routine/goal and item
still exist, and fires EVENT_OPEN_ITEM so dashboards or automations can
navigate to the item.

Separation of concerns:
- notification_action_handler.py = "The Router" (INCOMING action taps)
- NotificationManager = "The Voice" (OUTGOING reminders)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from homeassistant.config_entries import ConfigEntryState

from . import const
from .exceptions import NotFoundError

if TYPE_CHECKING:
    from homeassistant.core import Event, HomeAssistant

    from .coordinator import RoutineTrackerCoordinator


# =============================================================================
# ParsedAction Dataclass
# =============================================================================


@dataclass
class ParsedAction:
    """Type-safe parsed notification action.

    Action strings are pipe-separated: "OPEN_ITEM|entry_id[:8]|owner_id|item_id".
    The entry id part may be missing ("OPEN_ITEM|owner_id|item_id"), in which
    case the first loaded entry handles the action.

    Example:
        parsed = ParsedAction(
            action_type="OPEN_ITEM",
            entry_id="abc12345",
            owner_id="routine-123",
            item_id="chin_tuck",
        )
    """

    action_type: str
    entry_id: str | None
    owner_id: str
    item_id: str

    @property
    def is_open_item(self) -> bool:
        """Check if this action opens an item."""
        return self.action_type == const.ACTION_OPEN_ITEM


def parse_notification_action(action_field: str) -> ParsedAction | None:
    """Parse a notification action string into a ParsedAction.

    Returns:
        ParsedAction if valid, None if empty, foreign or malformed. Actions
        of other integrations arrive on the same event, so unknown types
        are logged at debug level only.
    """
    if not action_field:
        return None

    parts = action_field.split(const.NOTIFICATION_ACTION_SEPARATOR)
    action_type = parts[0]
    if action_type != const.ACTION_OPEN_ITEM:
        const.LOGGER.debug("DEBUG: Ignoring foreign notification action: %s", action_field)
        return None

    if len(parts) >= 4 and len(parts[1]) == const.NOTIFICATION_ENTRY_ID_LENGTH:
        entry_id: str | None = parts[1]
        owner_id, item_id = parts[2], parts[3]
    elif len(parts) == 3:
        entry_id = None
        owner_id, item_id = parts[1], parts[2]
    else:
        const.LOGGER.warning("WARNING: Invalid action string format: %s", action_field)
        return None

    if not owner_id or not item_id:
        const.LOGGER.warning("WARNING: Action string missing ids: %s", action_field)
        return None

    return ParsedAction(
        action_type=action_type,
        entry_id=entry_id,
        owner_id=owner_id,
        item_id=item_id,
    )


# =============================================================================
# Action Handler
# =============================================================================


def _find_coordinator(
    hass: HomeAssistant, parsed: ParsedAction
) -> RoutineTrackerCoordinator | None:
    """Return the coordinator of the entry the action was sent from."""
    for entry in hass.config_entries.async_entries(const.DOMAIN):
        if entry.state is not ConfigEntryState.LOADED:
            continue
        if parsed.entry_id and not entry.entry_id.startswith(parsed.entry_id):
            continue
        entry_data = hass.data.get(const.DOMAIN, {}).get(entry.entry_id)
        if entry_data:
            return entry_data[const.COORDINATOR]
    return None


async def async_handle_notification_action(hass: HomeAssistant, event: Event) -> None:
    """Handle notification actions from HA companion notifications.

    Args:
        hass: Home Assistant instance
        event: Event containing the notification action data
    """
    parsed = parse_notification_action(event.data.get(const.NOTIFY_ACTION, ""))
    if parsed is None:
        return

    coordinator = _find_coordinator(hass, parsed)
    if coordinator is None:
        const.LOGGER.error(
            "ERROR: Routine Tracker config entry not found for action: %s",
            parsed.entry_id,
        )
        return

    try:
        owner_kind, owner = coordinator.routine_manager.get_owner(parsed.owner_id)
    except NotFoundError as err:
        const.LOGGER.warning("WARNING: Reminder tapped for a deleted owner: %s", err)
        return

    item = next(
        (
            resolved
            for resolved in coordinator.routine_manager.resolve(parsed.owner_id)
            if resolved.item_id == parsed.item_id
        ),
        None,
    )
    if item is None:
        const.LOGGER.warning(
            "WARNING: Reminder tapped for item %s no longer in '%s'",
            parsed.item_id,
            owner.get(const.DATA_NAME),
        )
        return

    const.LOGGER.debug("DEBUG: Opening item '%s' from reminder", item.name)
    hass.bus.async_fire(
        const.EVENT_OPEN_ITEM,
        {
            const.PAYLOAD_ENTRY_ID: coordinator.config_entry.entry_id,
            const.PAYLOAD_OWNER_ID: parsed.owner_id,
            const.PAYLOAD_OWNER_KIND: owner_kind,
            const.PAYLOAD_ITEM_ID: item.item_id,
            const.PAYLOAD_INSTANCE_ID: item.instance_id,
            const.DATA_NAME: item.name,
        },
    )
