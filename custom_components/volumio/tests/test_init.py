"""Tests for setting up and unloading the Volumio integration."""
from __future__ import annotations

from unittest.mock import patch

import pytest

from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant
from homeassistant.helpers import entity_registry as er
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.volumio.api import VolumioHostResolutionError
from custom_components.volumio.const import DOMAIN

HOST = "192.168.1.50"


@pytest.mark.asyncio
async def test_setup_and_push(hass: HomeAssistant, setup_integration, dummy_socket):
    """Entities follow connection and pushed state."""
    assert setup_integration.state is ConfigEntryState.LOADED
    assert dummy_socket.connect_calls[0][0] == f"http://{HOST}:3000"

    entity_id = er.async_get(hass).async_get_entity_id("media_player", DOMAIN, HOST)
    assert entity_id is not None
    assert hass.states.get(entity_id).state == "unavailable"

    await dummy_socket.fire("connect")
    assert dummy_socket.emitted == [("getState",)]

    await dummy_socket.fire("pushState", {"status": "pause", "title": "Song", "volume": 30})
    await hass.async_block_till_done()

    state = hass.states.get(entity_id)
    assert state.state == "paused"
    assert state.attributes["media_title"] == "Song"
    assert state.attributes["volume_level"] == 0.3


@pytest.mark.asyncio
async def test_unload_closes_client(hass: HomeAssistant, setup_integration, dummy_socket):
    """Unloading shuts the transport down."""
    assert await hass.config_entries.async_unload(setup_integration.entry_id)
    await hass.async_block_till_done()

    assert setup_integration.state is ConfigEntryState.NOT_LOADED
    assert dummy_socket.shut_down is True
    assert setup_integration.entry_id not in hass.data[DOMAIN]


@pytest.mark.asyncio
async def test_setup_retries_unresolvable_host(hass: HomeAssistant, enable_custom_integrations):
    """An unresolvable host defers setup."""
    entry = MockConfigEntry(domain=DOMAIN, unique_id=f"{HOST}:3000", data={"host": HOST})
    entry.add_to_hass(hass)

    with patch(
        "custom_components.volumio.VolumioClient",
        side_effect=VolumioHostResolutionError("no such host"),
    ):
        await hass.config_entries.async_setup(entry.entry_id)
        await hass.async_block_till_done()

    assert entry.state is ConfigEntryState.SETUP_RETRY
