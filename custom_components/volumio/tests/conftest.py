"""Common test fixtures for Volumio integration tests."""
from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio

from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.volumio.api import VolumioClient
from custom_components.volumio.const import DOMAIN
from custom_components.volumio.coordinator import VolumioCoordinator

MOCK_HOST = "192.168.1.50"
MOCK_PORT = 3000
MOCK_ADDRESS = "192.168.1.50"

MOCK_PUSH_STATE = {
    "status": "play",
    "position": 2,
    "title": "Test Title",
    "artist": "Test Artist",
    "album": "Test Album",
    "albumart": "/albumart?cacheid=1&web=Test%20Artist/Test%20Album/extralarge",
    "uri": "music-library/NAS/test.flac",
    "trackType": "flac",
    "seek": 65_300,
    "duration": 240,
    "random": False,
    "repeat": True,
    "repeatSingle": False,
    "volume": 42,
    "mute": False,
    "service": "mpd",
}


class DummySocket:
    """Stand-in for ``socketio.AsyncClient`` that records handlers and emits."""

    def __init__(self) -> None:
        self.handlers: dict[str, Any] = {}
        self.emitted: list[tuple] = []
        self.bound_at_emit: list[set[str]] = []
        self.connect_calls: list[tuple[str, dict[str, Any]]] = []
        self.connect_block: asyncio.Event | None = None
        self.emit_error: Exception | None = None
        self.disconnect_calls = 0
        self.shut_down = False
        self.connected = False

    def on(self, event, handler=None):
        self.handlers[event] = handler

    async def emit(self, event, data=None):
        if self.emit_error is not None:
            raise self.emit_error
        self.bound_at_emit.append(set(self.handlers))
        self.emitted.append((event,) if data is None else (event, data))

    async def connect(self, url, **kwargs):
        self.connect_calls.append((url, kwargs))
        if self.connect_block is not None:
            await self.connect_block.wait()

    async def disconnect(self):
        self.disconnect_calls += 1

    async def shutdown(self):
        self.shut_down = True

    async def fire(self, event, *args):
        """Deliver an inbound event the way python-socketio would."""
        await self.handlers[event](*args)


# ---------------------------------------------------------------------------
# Global patch – no real DNS lookups for any VolumioClient instance
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _patch_resolver(monkeypatch):
    """Resolve every host to a fixed address (autouse)."""
    monkeypatch.setattr(
        "custom_components.volumio.api.socket.gethostbyname",
        lambda host: MOCK_ADDRESS,
    )


@pytest.fixture
def dummy_socket():
    """Return a fresh dummy transport."""
    return DummySocket()


@pytest.fixture
def client(dummy_socket):
    """Create a Volumio client on top of the dummy transport."""
    return VolumioClient(MOCK_HOST, MOCK_PORT, sio=dummy_socket)


@pytest.fixture
def mock_client():
    """Create a mock Volumio client."""
    client = AsyncMock(spec=VolumioClient)
    client.host = MOCK_HOST
    client.base_url = f"http://{MOCK_HOST}:{MOCK_PORT}"
    client.connected = True
    for method in (
        "play",
        "pause",
        "stop",
        "next_track",
        "previous_track",
        "set_volume",
        "set_random",
        "set_repeat",
        "clear_queue",
        "play_playlist",
        "play_favourites",
        "play_radio_favourite",
        "add_play",
        "replace_play",
        "send_system_command",
        "get_state",
    ):
        getattr(client, method).return_value = True
    return client


@pytest.fixture
def mock_coordinator(hass: HomeAssistant, mock_client):
    """Create a coordinator around the mock client with state already pushed."""
    coordinator = VolumioCoordinator(hass, mock_client)
    coordinator.data = {
        "play_status": "play",
        "title": "Test Title",
        "artist": "Test Artist",
        "album": "Test Album",
        "volume": 42,
        "volume_level": 0.42,
        "mute": False,
        "random": False,
        "repeat": True,
        "repeat_single": False,
        "position": 65,
        "duration": 240,
        "uri": "music-library/NAS/test.flac",
        "service": "mpd",
        "track_type": "flac",
        "queue_position": 2,
    }
    return coordinator


@pytest_asyncio.fixture
async def setup_integration(hass: HomeAssistant, dummy_socket, enable_custom_integrations):
    """Set up the Volumio integration with a real client on the dummy transport."""
    entry = MockConfigEntry(
        domain=DOMAIN,
        title=f"Volumio {MOCK_HOST}",
        unique_id=f"{MOCK_HOST}:{MOCK_PORT}",
        data={"host": MOCK_HOST, "port": MOCK_PORT, "protocol": "http", "timeout": 10},
    )
    entry.add_to_hass(hass)

    def _client(host, port, **_):
        return VolumioClient(host, port, sio=dummy_socket)

    with patch("custom_components.volumio.VolumioClient", side_effect=_client):
        assert await hass.config_entries.async_setup(entry.entry_id)
        await hass.async_block_till_done()

    yield entry

    if entry.state is ConfigEntryState.LOADED:
        await hass.config_entries.async_unload(entry.entry_id)
        await hass.async_block_till_done()
