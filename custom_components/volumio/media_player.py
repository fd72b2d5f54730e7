"""Volumio media player entity."""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from datetime import datetime
from typing import Any

import voluptuous as vol
from homeassistant.components.media_player import (
    MediaPlayerEntity,
    MediaPlayerEnqueue,
    MediaPlayerEntityFeature,
    MediaPlayerState,
)
from homeassistant.components.media_player.const import (
    ATTR_MEDIA_ENQUEUE,
    ATTR_MEDIA_EXTRA,
    MediaType,
    RepeatMode,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers import entity_platform
from homeassistant.helpers.entity import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import (
    ATTR_INDEX,
    ATTR_NAME,
    ATTR_QUEUE_POSITION,
    ATTR_SERVICE,
    ATTR_TITLE,
    ATTR_TRACK_TYPE,
    ATTR_URI,
    DEFAULT_SERVICE_TYPE,
    DOMAIN,
    SERVICE_ADD_PLAY,
    SERVICE_PLAY_FAVOURITES,
    SERVICE_PLAY_PLAYLIST,
    SERVICE_PLAY_RADIO_FAVOURITE,
    SERVICE_REPLACE_PLAY,
    STATUS_PAUSE,
    STATUS_PLAY,
)
from .coordinator import VolumioCoordinator

_LOGGER = logging.getLogger(__name__)

SUPPORTED_FEATURES = (
    MediaPlayerEntityFeature.PLAY
    | MediaPlayerEntityFeature.PAUSE
    | MediaPlayerEntityFeature.STOP
    | MediaPlayerEntityFeature.NEXT_TRACK
    | MediaPlayerEntityFeature.PREVIOUS_TRACK
    | MediaPlayerEntityFeature.VOLUME_SET
    | MediaPlayerEntityFeature.VOLUME_STEP
    | MediaPlayerEntityFeature.SHUFFLE_SET
    | MediaPlayerEntityFeature.REPEAT_SET
    | MediaPlayerEntityFeature.CLEAR_PLAYLIST
    | MediaPlayerEntityFeature.PLAY_MEDIA
    | MediaPlayerEntityFeature.MEDIA_ENQUEUE
)

_QUEUE_ITEM_SCHEMA = {
    vol.Required(ATTR_URI): cv.string,
    vol.Optional(ATTR_TITLE): cv.string,
    vol.Optional(ATTR_SERVICE, default=DEFAULT_SERVICE_TYPE): cv.string,
}


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Volumio media player from a config entry."""
    coordinator: VolumioCoordinator = hass.data[DOMAIN][config_entry.entry_id]
    async_add_entities([VolumioMediaPlayer(coordinator)])

    # Register custom entity services
    platform = entity_platform.async_get_current_platform()
    platform.async_register_entity_service(
        SERVICE_PLAY_PLAYLIST,
        {vol.Required(ATTR_NAME): cv.string},
        "async_play_playlist",
    )
    platform.async_register_entity_service(
        SERVICE_PLAY_FAVOURITES,
        {vol.Required(ATTR_NAME): cv.string},
        "async_play_favourites",
    )
    platform.async_register_entity_service(
        SERVICE_PLAY_RADIO_FAVOURITE,
        {vol.Required(ATTR_INDEX): vol.All(vol.Coerce(int), vol.Range(min=0))},
        "async_play_radio_favourite",
    )
    platform.async_register_entity_service(
        SERVICE_ADD_PLAY,
        _QUEUE_ITEM_SCHEMA,
        "async_add_play",
    )
    platform.async_register_entity_service(
        SERVICE_REPLACE_PLAY,
        _QUEUE_ITEM_SCHEMA,
        "async_replace_play",
    )


class VolumioMediaPlayer(CoordinatorEntity[VolumioCoordinator], MediaPlayerEntity):
    """Representation of a Volumio media player."""

    _attr_has_entity_name = True
    _attr_name = None
    _attr_media_content_type = MediaType.MUSIC
    _attr_supported_features = SUPPORTED_FEATURES

    def __init__(self, coordinator: VolumioCoordinator) -> None:
        """Initialize the Volumio media player."""
        super().__init__(coordinator)
        host = coordinator.client.host
        self._attr_unique_id = host
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, host)},
            name=f"Volumio {host}",
            manufacturer="Volumio",
            configuration_url=coordinator.client.base_url,
        )

    @property
    def _status(self) -> dict[str, Any]:
        return self.coordinator.data or {}

    @property
    def available(self) -> bool:
        """Return True while the socket is connected and state is known."""
        return self.coordinator.available

    @property
    def state(self) -> MediaPlayerState:
        """Return the state of the device."""
        play_status = self._status.get("play_status")
        if play_status == STATUS_PLAY:
            return MediaPlayerState.PLAYING
        if play_status == STATUS_PAUSE:
            return MediaPlayerState.PAUSED
        return MediaPlayerState.IDLE

    @property
    def volume_level(self) -> float | None:
        """Return the volume level of the media player (0..1)."""
        return self._status.get("volume_level")

    @property
    def is_volume_muted(self) -> bool | None:
        """Return boolean if volume is currently muted."""
        return self._status.get("mute")

    @property
    def media_content_id(self) -> str | None:
        return self._status.get("uri")

    @property
    def media_title(self) -> str | None:
        """Return the title of current playing media."""
        return self._status.get("title")

    @property
    def media_artist(self) -> str | None:
        """Return the artist of current playing media."""
        return self._status.get("artist")

    @property
    def media_album_name(self) -> str | None:
        """Return the album name of current playing media."""
        return self._status.get("album")

    @property
    def media_image_url(self) -> str | None:
        return self._status.get("entity_picture")

    @property
    def media_position(self) -> int | None:
        """Position of current playing media in seconds."""
        return self._status.get("position")

    @property
    def media_position_updated_at(self) -> datetime | None:
        """When was the position of the current playing media valid."""
        return self._status.get("position_updated_at")

    @property
    def media_duration(self) -> int | None:
        """Duration of current playing media in seconds."""
        return self._status.get("duration")

    @property
    def shuffle(self) -> bool | None:
        """Return true if random playback is enabled."""
        return self._status.get("random")

    @property
    def repeat(self) -> RepeatMode:
        """Return current repeat mode."""
        if not self._status.get("repeat"):
            return RepeatMode.OFF
        if self._status.get("repeat_single"):
            return RepeatMode.ONE
        return RepeatMode.ALL

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return entity specific state attributes."""
        return {
            ATTR_SERVICE: self._status.get("service"),
            ATTR_TRACK_TYPE: self._status.get("track_type"),
            ATTR_QUEUE_POSITION: self._status.get("queue_position"),
        }

    async def _async_send(self, result: Awaitable[bool], action: str) -> None:
        """Await a client command and raise if it was dropped."""
        if not await result:
            _LOGGER.error(
                "Failed to %s on Volumio device %s", action, self.coordinator.client.host
            )
            raise HomeAssistantError(f"Failed to {action} on Volumio device")

    async def async_media_play(self) -> None:
        """Send play command."""
        await self._async_send(self.coordinator.client.play(), "play")

    async def async_media_pause(self) -> None:
        """Send pause command."""
        await self._async_send(self.coordinator.client.pause(), "pause")

    async def async_media_stop(self) -> None:
        """Send stop command."""
        await self._async_send(self.coordinator.client.stop(), "stop")

    async def async_media_next_track(self) -> None:
        """Send next track command."""
        await self._async_send(self.coordinator.client.next_track(), "skip to next track")

    async def async_media_previous_track(self) -> None:
        """Send previous track command."""
        await self._async_send(
            self.coordinator.client.previous_track(), "skip to previous track"
        )

    async def async_set_volume_level(self, volume: float) -> None:
        """Set volume level, range 0..1."""
        level = max(0, min(100, round(volume * 100)))
        await self._async_send(self.coordinator.client.set_volume(level), "set volume")

    async def async_set_shuffle(self, shuffle: bool) -> None:
        """Enable/disable random playback."""
        await self._async_send(self.coordinator.client.set_random(shuffle), "set shuffle")

    async def async_set_repeat(self, repeat: RepeatMode) -> None:
        """Set repeat mode; Volumio only toggles repeat on or off."""
        await self._async_send(
            self.coordinator.client.set_repeat(repeat != RepeatMode.OFF), "set repeat"
        )

    async def async_clear_playlist(self) -> None:
        """Clear players playlist."""
        await self._async_send(self.coordinator.client.clear_queue(), "clear queue")

    async def async_play_media(
        self, media_type: MediaType | str, media_id: str, **kwargs: Any
    ) -> None:
        """Play a stored playlist by name, or a URI (replacing or enqueueing)."""
        client = self.coordinator.client
        if media_type == MediaType.PLAYLIST:
            await self._async_send(client.play_playlist(media_id), "play playlist")
            return

        extra = kwargs.get(ATTR_MEDIA_EXTRA) or {}
        title = extra.get(ATTR_TITLE, media_id)
        service = extra.get(ATTR_SERVICE, DEFAULT_SERVICE_TYPE)
        enqueue = kwargs.get(ATTR_MEDIA_ENQUEUE)
        if enqueue in (MediaPlayerEnqueue.ADD, MediaPlayerEnqueue.NEXT):
            await self._async_send(client.add_play(media_id, title, service), "add media")
        else:
            await self._async_send(client.replace_play(media_id, title, service), "play media")

    # ------------------------------------------------------------------
    # Volumio specific entity services
    # ------------------------------------------------------------------

    async def async_play_playlist(self, name: str) -> None:
        """Handle the play_playlist service call."""
        await self._async_send(self.coordinator.client.play_playlist(name), "play playlist")

    async def async_play_favourites(self, name: str) -> None:
        """Handle the play_favourites service call."""
        await self._async_send(
            self.coordinator.client.play_favourites(name), "play favourites"
        )

    async def async_play_radio_favourite(self, index: int) -> None:
        """Handle the play_radio_favourite service call."""
        await self._async_send(
            self.coordinator.client.play_radio_favourite(index), "play radio favourite"
        )

    async def async_add_play(
        self, uri: str, title: str | None = None, service: str = DEFAULT_SERVICE_TYPE
    ) -> None:
        """Handle the add_play service call."""
        await self._async_send(
            self.coordinator.client.add_play(uri, title or uri, service), "add media"
        )

    async def async_replace_play(
        self, uri: str, title: str | None = None, service: str = DEFAULT_SERVICE_TYPE
    ) -> None:
        """Handle the replace_play service call."""
        await self._async_send(
            self.coordinator.client.replace_play(uri, title or uri, service), "play media"
        )
