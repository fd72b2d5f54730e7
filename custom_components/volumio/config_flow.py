from __future__ import annotations

from typing import Any
import logging

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import HomeAssistant

from .api import VolumioClient, VolumioHostResolutionError, VolumioInvalidEndpointError
from .const import (
    CONF_HOST,
    CONF_PORT,
    CONF_PROTOCOL,
    CONF_TIMEOUT,
    DEFAULT_PORT,
    DEFAULT_PROTOCOL,
    DEFAULT_TIMEOUT,
    DOMAIN,
    PROTOCOLS,
)

_LOGGER = logging.getLogger(__name__)

STEP_USER_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_HOST): str,
        vol.Optional(CONF_PORT, default=DEFAULT_PORT): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=65535)
        ),
        vol.Optional(CONF_PROTOCOL, default=DEFAULT_PROTOCOL): vol.In(PROTOCOLS),
        vol.Optional(CONF_TIMEOUT, default=DEFAULT_TIMEOUT): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=120)
        ),
    }
)


async def _async_validate_input(hass: HomeAssistant, data: dict[str, Any]) -> None:
    """Build (and immediately close) a client so endpoint and DNS are checked."""
    client = await hass.async_add_executor_job(
        lambda: VolumioClient(
            data[CONF_HOST],
            port=data[CONF_PORT],
            protocol=data[CONF_PROTOCOL],
            timeout=data[CONF_TIMEOUT],
        )
    )
    await client.close()


class VolumioConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a Volumio config flow."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Handle the initial step."""
        errors: dict[str, str] = {}

        if user_input is not None:
            host = user_input[CONF_HOST]
            await self.async_set_unique_id(f"{host}:{user_input[CONF_PORT]}")
            self._abort_if_unique_id_configured()
            try:
                await _async_validate_input(self.hass, user_input)
            except VolumioHostResolutionError:
                _LOGGER.debug("Host %s could not be resolved", host)
                errors["base"] = "cannot_resolve"
            except VolumioInvalidEndpointError:
                errors["base"] = "invalid_endpoint"
            else:
                return self.async_create_entry(title=f"Volumio {host}", data=user_input)

        return self.async_show_form(
            step_id="user", data_schema=STEP_USER_SCHEMA, errors=errors
        )
