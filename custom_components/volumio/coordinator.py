"""Volumio coordinator for push-based player state."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed
from homeassistant.util import dt as dt_util

from .api import Unsubscribe, VolumioClient
from .const import DOMAIN, EVENT_CONNECT, EVENT_DISCONNECT, EVENT_PUSH_STATE

_LOGGER = logging.getLogger(__name__)


class VolumioCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Keep the latest state pushed by a Volumio player.

    Volumio pushes its state over the socket, so there is no polling
    interval: data is replaced whenever a ``pushState`` event arrives and a
    fresh push is requested every time the transport (re)connects.
    """

    def __init__(self, hass: HomeAssistant, client: VolumioClient) -> None:
        """Initialize Volumio coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            name=f"{DOMAIN}_{client.host}",
            update_interval=None,
        )
        self.client = client
        self._unsubscribers: list[Unsubscribe] = []

    @property
    def available(self) -> bool:
        """Return whether the player is connected and has reported state."""
        return self.client.connected and self.data is not None

    async def async_start(self) -> None:
        """Subscribe to player events and start connecting."""
        self._unsubscribers = [
            self.client.on(EVENT_PUSH_STATE, self._handle_push_state),
            self.client.on(EVENT_CONNECT, self._handle_connect),
            self.client.on(EVENT_DISCONNECT, self._handle_disconnect),
        ]
        await self.client.connect()

    async def async_stop(self) -> None:
        """Unsubscribe and close the connection for good."""
        while self._unsubscribers:
            self._unsubscribers.pop()()
        await self.client.close()

    async def _handle_connect(self, *_args: Any) -> None:
        _LOGGER.debug("[Volumio] %s: connected, requesting state", self.client.host)
        await self.client.get_state()
        self.async_update_listeners()

    def _handle_disconnect(self, *_args: Any) -> None:
        _LOGGER.debug("[Volumio] %s: disconnected", self.client.host)
        self.async_update_listeners()

    def _handle_push_state(self, raw: Any = None, *_args: Any) -> None:
        if not isinstance(raw, dict):
            _LOGGER.debug("[Volumio] %s: ignoring malformed state %r", self.client.host, raw)
            return
        state = self.client.parse_state(raw)
        if state.get("position") is not None:
            state["position_updated_at"] = dt_util.utcnow()
        self.async_set_updated_data(state)

    async def _async_update_data(self) -> dict[str, Any]:
        """Request a state push and return the last known state."""
        if not self.client.connected:
            raise UpdateFailed(f"Volumio on {self.client.host} is not connected")
        if not await self.client.get_state():
            raise UpdateFailed(f"Could not request state from Volumio on {self.client.host}")
        return self.data or {}
