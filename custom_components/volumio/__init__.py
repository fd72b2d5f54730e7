"""The Volumio integration."""

from __future__ import annotations

from functools import partial

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryError, ConfigEntryNotReady
from homeassistant.helpers.aiohttp_client import async_get_clientsession

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
)
from .coordinator import VolumioCoordinator

PLATFORMS = [Platform.MEDIA_PLAYER, Platform.BUTTON]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Volumio from a config entry."""
    data = entry.data
    # The client resolves the hostname on construction, keep it off the loop.
    try:
        client = await hass.async_add_executor_job(
            partial(
                VolumioClient,
                data[CONF_HOST],
                port=data.get(CONF_PORT, DEFAULT_PORT),
                protocol=data.get(CONF_PROTOCOL, DEFAULT_PROTOCOL),
                timeout=data.get(CONF_TIMEOUT, DEFAULT_TIMEOUT),
                session=async_get_clientsession(hass),
            )
        )
    except VolumioHostResolutionError as err:
        raise ConfigEntryNotReady(str(err)) from err
    except VolumioInvalidEndpointError as err:
        raise ConfigEntryError(str(err)) from err

    coordinator = VolumioCoordinator(hass, client)
    coordinator.entry_id = entry.entry_id  # type: ignore[attr-defined]

    hass.data.setdefault(DOMAIN, {})
    hass.data[DOMAIN][entry.entry_id] = coordinator

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    # Connection outcome is reported asynchronously; entities stay
    # unavailable until the first state push.
    await coordinator.async_start()

    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)

    if unload_ok:
        coordinator: VolumioCoordinator = hass.data[DOMAIN].pop(entry.entry_id)
        await coordinator.async_stop()

    return unload_ok
