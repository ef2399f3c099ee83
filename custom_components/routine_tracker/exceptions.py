"""Exceptions raised by the Routine Tracker integration.

All errors derive from HomeAssistantError so service callers get translated
messages (strings.json "exceptions" section) instead of raw tracebacks.
"""

from __future__ import annotations

from homeassistant.exceptions import HomeAssistantError

from . import const


class RoutineTrackerError(HomeAssistantError):
    """Base class for Routine Tracker errors."""


class NotFoundError(RoutineTrackerError):
    """Raised when a routine, goal or item reference does not exist.

    Attributes:
        entity_type: One of const.ENTITY_TYPE_* ("routine", "goal", "item")
        entity_id: The id that was looked up
    """

    def __init__(self, entity_type: str, entity_id: str) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            f"{entity_type} '{entity_id}' not found",
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_NOT_FOUND,
            translation_placeholders={
                const.TRANS_PLACEHOLDER_ENTITY_TYPE: entity_type,
                const.TRANS_PLACEHOLDER_ENTITY_ID: entity_id,
            },
        )


class PersistenceError(RoutineTrackerError):
    """Raised when the store could not be written."""

    def __init__(self, error: str) -> None:
        self.error = error
        super().__init__(
            f"Failed to persist routine tracker data: {error}",
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_PERSISTENCE,
            translation_placeholders={const.TRANS_PLACEHOLDER_ERROR: error},
        )


class NotificationPermissionError(RoutineTrackerError):
    """Raised when the configured notify target cannot deliver reminders.

    Home Assistant has no per-app notification permission; a missing or
    removed notify service is the equivalent condition.
    """

    def __init__(self, service: str) -> None:
        self.service = service
        super().__init__(
            f"Notification service '{service}' is not available",
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_NOTIFICATION_PERMISSION,
            translation_placeholders={const.TRANS_PLACEHOLDER_SERVICE: service},
        )
