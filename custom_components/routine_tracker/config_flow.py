# File: config_flow.py
"""Config flow for the Routine Tracker integration.

Only system settings live in the config entry: the notify service used for
reminders and the snapshot refresh interval. Routines, goals and logs are
kept in storage and managed through services.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers import selector

from . import const
from .managers.notification_manager import split_notify_service


def build_settings_schema(default: dict[str, Any] | None = None) -> vol.Schema:
    """Build the schema shared by the user step and the options flow."""
    default = default or {}
    return vol.Schema(
        {
            vol.Optional(
                const.CONF_NOTIFY_SERVICE,
                default=default.get(
                    const.CONF_NOTIFY_SERVICE, const.DEFAULT_NOTIFY_SERVICE
                ),
            ): selector.TextSelector(selector.TextSelectorConfig(multiline=False)),
            vol.Required(
                const.CONF_UPDATE_INTERVAL,
                default=default.get(
                    const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
                ),
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    mode=selector.NumberSelectorMode.BOX,
                    min=1,
                    step=1,
                )
            ),
        }
    )


def validate_settings(hass: HomeAssistant, user_input: dict[str, Any]) -> dict[str, str]:
    """Return form errors for the settings input.

    An empty notify service is allowed; reminders then stay unscheduled and
    every schedule pass reports the missing permission.
    """
    errors: dict[str, str] = {}
    service = (user_input.get(const.CONF_NOTIFY_SERVICE) or "").strip()
    if service:
        domain, svc = split_notify_service(service)
        if not hass.services.has_service(domain, svc):
            errors[const.CONF_NOTIFY_SERVICE] = (
                const.TRANS_KEY_ERROR_INVALID_NOTIFY_SERVICE
            )
    return errors


def build_settings_data(user_input: dict[str, Any]) -> dict[str, Any]:
    """Normalize validated settings for storage in the entry."""
    return {
        const.CONF_NOTIFY_SERVICE: (
            user_input.get(const.CONF_NOTIFY_SERVICE) or ""
        ).strip(),
        const.CONF_UPDATE_INTERVAL: int(
            user_input.get(const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL)
        ),
    }


class RoutineTrackerConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for Routine Tracker (single instance)."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        """Collect the notify service and refresh interval."""
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        errors: dict[str, str] = {}
        if user_input is not None:
            errors = validate_settings(self.hass, user_input)
            if not errors:
                settings = build_settings_data(user_input)
                const.LOGGER.debug("Creating config entry with settings: %s", settings)
                return self.async_create_entry(
                    title=const.ROUTINE_TRACKER_TITLE, data={}, options=settings
                )

        return self.async_show_form(
            step_id="user",
            data_schema=build_settings_schema(user_input),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return RoutineTrackerOptionsFlowHandler(config_entry)


class RoutineTrackerOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for editing the system settings."""

    def __init__(self, _config_entry: config_entries.ConfigEntry):
        """Initialize the options flow."""
        self._entry_options: dict[str, Any] = {}

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        """Edit notify service and refresh interval; the entry reloads on save."""
        self._entry_options = dict(self.config_entry.options)
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = validate_settings(self.hass, user_input)
            if not errors:
                self._entry_options.update(build_settings_data(user_input))
                const.LOGGER.debug(
                    "DEBUG: Updated options: notify_service=%s, update_interval=%s",
                    self._entry_options[const.CONF_NOTIFY_SERVICE],
                    self._entry_options[const.CONF_UPDATE_INTERVAL],
                )
                return self.async_create_entry(title="", data=self._entry_options)

        return self.async_show_form(
            step_id="init",
            data_schema=build_settings_schema(user_input or self._entry_options),
            errors=errors,
        )
