"""Constants for the Volumio integration."""

from __future__ import annotations

from typing import Final

DOMAIN: Final = "volumio"

# Config entry keys
CONF_HOST: Final = "host"
CONF_PORT: Final = "port"
CONF_PROTOCOL: Final = "protocol"
CONF_TIMEOUT: Final = "timeout"

DEFAULT_PORT: Final = 3000
DEFAULT_PROTOCOL: Final = "http"
DEFAULT_TIMEOUT: Final = 10  # seconds

PROTOCOLS: Final = ("http", "https")
VALID_SCHEMES: Final = ("http", "https", "ws", "wss")

# Transport reconnection policy (seconds)
RECONNECT_DELAY: Final = 30
RECONNECT_DELAY_MAX: Final = 60

# Outbound command events
CMD_GET_STATE: Final = "getState"
CMD_PLAY: Final = "play"
CMD_PAUSE: Final = "pause"
CMD_STOP: Final = "stop"
CMD_NEXT: Final = "next"
CMD_PREVIOUS: Final = "prev"
CMD_VOLUME: Final = "volume"
CMD_SHUTDOWN: Final = "shutdown"
CMD_REBOOT: Final = "reboot"
CMD_PLAY_PLAYLIST: Final = "playPlaylist"
CMD_CLEAR_QUEUE: Final = "clearQueue"
CMD_RANDOM: Final = "setRandom"
CMD_REPEAT: Final = "setRepeat"
CMD_PLAY_FAVOURITES: Final = "playFavourites"
CMD_PLAY_RADIO_FAVOURITES: Final = "playRadioFavourites"
CMD_ADD_PLAY: Final = "addPlay"
CMD_REPLACE_AND_PLAY: Final = "replaceAndPlay"

SYSTEM_COMMANDS: Final = (CMD_SHUTDOWN, CMD_REBOOT)

# Inbound events
EVENT_CONNECT: Final = "connect"
EVENT_DISCONNECT: Final = "disconnect"
EVENT_CONNECT_ERROR: Final = "connect_error"
EVENT_PUSH_STATE: Final = "pushState"
EVENT_PUSH_PLAY_RADIO_FAVOURITES: Final = "pushPlayRadioFavourites"

LIFECYCLE_EVENTS: Final = (EVENT_CONNECT, EVENT_DISCONNECT, EVENT_CONNECT_ERROR)

# Volumio play status values
STATUS_PLAY: Final = "play"
STATUS_PAUSE: Final = "pause"

# Entity services
SERVICE_PLAY_PLAYLIST: Final = "play_playlist"
SERVICE_PLAY_FAVOURITES: Final = "play_favourites"
SERVICE_PLAY_RADIO_FAVOURITE: Final = "play_radio_favourite"
SERVICE_ADD_PLAY: Final = "add_play"
SERVICE_REPLACE_PLAY: Final = "replace_play"

ATTR_NAME: Final = "name"
ATTR_INDEX: Final = "index"
ATTR_URI: Final = "uri"
ATTR_TITLE: Final = "title"
ATTR_SERVICE: Final = "service"
ATTR_TRACK_TYPE: Final = "track_type"
ATTR_QUEUE_POSITION: Final = "queue_position"

DEFAULT_SERVICE_TYPE: Final = "mpd"
