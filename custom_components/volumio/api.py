"""Volumio Socket.IO client.

Volumio exposes its player through a Socket.IO endpoint (port 3000 on a stock
install).  Every command is a *fire-and-forget* event and the player answers
by pushing its state (``pushState``) to all connected clients.

The transport itself (Engine.IO handshake, heartbeat, reconnection with
back-off) is handled entirely by *python-socketio*.  This module only maps
commands to outbound events, fans inbound events out to subscribers and keeps
track of whether the transport is currently connected.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
import socket
import threading
from collections.abc import Callable
from typing import Any
from urllib.parse import urlparse

import socketio
from aiohttp import ClientSession
from socketio.exceptions import SocketIOError

from .const import (
    CMD_ADD_PLAY,
    CMD_CLEAR_QUEUE,
    CMD_GET_STATE,
    CMD_NEXT,
    CMD_PAUSE,
    CMD_PLAY,
    CMD_PLAY_FAVOURITES,
    CMD_PLAY_PLAYLIST,
    CMD_PLAY_RADIO_FAVOURITES,
    CMD_PREVIOUS,
    CMD_RANDOM,
    CMD_REBOOT,
    CMD_REPEAT,
    CMD_REPLACE_AND_PLAY,
    CMD_SHUTDOWN,
    CMD_STOP,
    CMD_VOLUME,
    DEFAULT_PORT,
    DEFAULT_PROTOCOL,
    DEFAULT_TIMEOUT,
    EVENT_CONNECT,
    EVENT_CONNECT_ERROR,
    EVENT_DISCONNECT,
    EVENT_PUSH_PLAY_RADIO_FAVOURITES,
    LIFECYCLE_EVENTS,
    RECONNECT_DELAY,
    RECONNECT_DELAY_MAX,
    SYSTEM_COMMANDS,
    VALID_SCHEMES,
)

_LOGGER = logging.getLogger(__name__)

Listener = Callable[..., Any]
Unsubscribe = Callable[[], None]

Primitive = str | bool | int


class VolumioError(Exception):
    """Base exception for Volumio errors."""


class VolumioHostResolutionError(VolumioError):
    """The Volumio hostname could not be resolved to an address."""


class VolumioInvalidEndpointError(VolumioError):
    """The endpoint built from protocol, host and port is not a valid URI."""


class VolumioPayloadError(VolumioError):
    """A command payload could not be built from the given arguments."""


class VolumioClientClosedError(VolumioError):
    """The client has been closed and cannot be used any more."""


class _Subscription:
    """A single listener registered for an inbound event."""

    __slots__ = ("event", "listener", "once")

    def __init__(self, event: str, listener: Listener, once: bool) -> None:
        self.event = event
        self.listener = listener
        self.once = once


def build_endpoint(protocol: str, host: str, port: int) -> str:
    """Return ``protocol://host:port`` or raise if it is not a usable URI."""
    url = f"{protocol}://{host}:{port}"
    try:
        parsed = urlparse(url)
        parsed_port = parsed.port
    except ValueError as err:
        raise VolumioInvalidEndpointError(f"Invalid Volumio endpoint '{url}': {err}") from err

    hostname = parsed.hostname
    if (
        parsed.scheme not in VALID_SCHEMES
        or not hostname
        or any(ch.isspace() for ch in hostname)
        or parsed.path
        or not parsed_port
    ):
        raise VolumioInvalidEndpointError(f"Invalid Volumio endpoint '{url}'")
    return url


def _primitive(key: str, value: Any) -> Primitive:
    """Return *value* if it can travel in a command payload."""
    if not isinstance(value, (str, bool, int)):
        raise VolumioPayloadError(
            f"Unsupported value for '{key}': {value!r} ({type(value).__name__})"
        )
    return value


def _build_payload(**fields: Any) -> dict[str, Primitive]:
    """Build a flat command payload from keyword arguments."""
    return {key: _primitive(key, value) for key, value in fields.items()}


class VolumioClient:
    """Volumio Socket.IO client."""

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        protocol: str = DEFAULT_PROTOCOL,
        timeout: int = DEFAULT_TIMEOUT,
        session: ClientSession | None = None,
        sio: socketio.AsyncClient | None = None,
    ) -> None:
        """Initialize Volumio client.

        Resolves *host* before the transport is created, so this blocks on
        DNS and must not run inside the event loop.
        """
        self._host = host
        self._port = port
        self._protocol = protocol
        self._timeout = timeout
        self._url = build_endpoint(protocol, host, port)

        # Connection to an mDNS name (volumio.local) only works once it has
        # been looked up; fail early rather than on the first reconnect.
        try:
            address = socket.gethostbyname(host)
        except (OSError, UnicodeError) as err:
            raise VolumioHostResolutionError(
                f"Could not resolve Volumio host '{host}': {err}"
            ) from err
        _LOGGER.debug("Resolving %s to IP %s", host, address)

        if sio is None:
            sio = socketio.AsyncClient(
                reconnection=True,
                reconnection_delay=RECONNECT_DELAY,
                reconnection_delay_max=RECONNECT_DELAY_MAX,
                request_timeout=timeout,
                http_session=session,
                handle_sigint=False,
                logger=False,
                engineio_logger=False,
            )
        self._sio = sio

        self._connected = threading.Event()
        self._closed = False
        self._connect_task: asyncio.Task | None = None
        self._listeners: dict[str, list[_Subscription]] = {}
        self._bound_events: set[str] = set()

        self._bind_default_events()

    def _bind_default_events(self) -> None:
        self._sio.on(EVENT_CONNECT_ERROR, self._on_connect_error)
        self._sio.on(EVENT_CONNECT, self._on_connect)
        self._sio.on(EVENT_DISCONNECT, self._on_disconnect)

    @property
    def host(self) -> str:
        """Return the host address."""
        return self._host

    @property
    def port(self) -> int:
        """Return the Socket.IO port."""
        return self._port

    @property
    def url(self) -> str:
        """Return the Socket.IO endpoint."""
        return self._url

    @property
    def base_url(self) -> str:
        """Return the HTTP base URL of the Volumio web server (album art etc.)."""
        scheme = "https" if self._protocol in ("https", "wss") else "http"
        return f"{scheme}://{self._host}:{self._port}"

    @property
    def connected(self) -> bool:
        """Return whether the transport is currently connected."""
        return self._connected.is_set()

    @property
    def closed(self) -> bool:
        """Return whether the client has been closed."""
        return self._closed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def _on_connect_error(self, *args: Any) -> None:
        _LOGGER.error(
            "Could not connect to Volumio on %s: %s", self._host, args[0] if args else None
        )
        await self._dispatch(EVENT_CONNECT_ERROR, *args)

    async def _on_connect(self) -> None:
        _LOGGER.info("Connected to Volumio on %s", self._host)
        self._connected.set()
        await self._dispatch(EVENT_CONNECT)

    async def _on_disconnect(self, *args: Any) -> None:
        _LOGGER.warning("Disconnected from Volumio on %s", self._host)
        self._connected.clear()
        await self._dispatch(EVENT_DISCONNECT, *args)

    async def connect(self) -> None:
        """Start connecting in the background.

        Returns as soon as the attempt is scheduled; the outcome is reported
        through the ``connect`` / ``connect_error`` events.  The transport
        keeps retrying according to its reconnection policy.
        """
        if self._closed:
            raise VolumioClientClosedError(f"Client for {self._host} is closed")
        if self._connect_task is not None and not self._connect_task.done():
            _LOGGER.debug("Connection attempt to %s already in progress", self._host)
            return
        self._connect_task = asyncio.get_running_loop().create_task(
            self._async_connect(), name=f"volumio_connect_{self._host}"
        )

    async def _async_connect(self) -> None:
        if self._sio.connected:
            _LOGGER.debug("Already connected to Volumio on %s", self._host)
            return
        try:
            await self._sio.connect(
                self._url,
                wait_timeout=self._timeout,
                retry=True,
            )
        except SocketIOError as err:
            _LOGGER.error("Giving up connecting to Volumio on %s: %s", self._host, err)

    async def _cancel_connect(self) -> None:
        task, self._connect_task = self._connect_task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def disconnect(self) -> None:
        """Request transport teardown; reconnection attempts stop."""
        await self._cancel_connect()
        await self._sio.disconnect()

    async def close(self) -> None:
        """Remove all listeners and shut the transport down for good."""
        if self._closed:
            return
        self._closed = True
        self._listeners.clear()
        # python-socketio cannot unbind a handler; the bound ones now find no
        # listeners and the transport is discarded by shutdown().
        self._bound_events.clear()
        await self._cancel_connect()
        await self._sio.shutdown()

    # ------------------------------------------------------------------
    # Event subscription
    # ------------------------------------------------------------------

    def on(self, event: str, listener: Listener) -> Unsubscribe:
        """Call *listener* every time *event* is received."""
        return self._subscribe(event, listener, once=False)

    def once(self, event: str, listener: Listener) -> Unsubscribe:
        """Call *listener* the next time *event* is received, then forget it."""
        return self._subscribe(event, listener, once=True)

    def _subscribe(self, event: str, listener: Listener, once: bool) -> Unsubscribe:
        if self._closed:
            raise VolumioClientClosedError(f"Client for {self._host} is closed")

        if event not in LIFECYCLE_EVENTS and event not in self._bound_events:
            self._sio.on(event, self._make_handler(event))
            self._bound_events.add(event)

        sub = _Subscription(event, listener, once)
        self._listeners.setdefault(event, []).append(sub)

        def _unsubscribe() -> None:
            self._remove(sub)

        return _unsubscribe

    def _remove(self, sub: _Subscription) -> None:
        subs = self._listeners.get(sub.event)
        if subs and sub in subs:
            subs.remove(sub)

    def _make_handler(self, event: str) -> Callable[..., Any]:
        async def _handler(*args: Any) -> None:
            await self._dispatch(event, *args)

        return _handler

    async def _dispatch(self, event: str, *args: Any) -> None:
        """Deliver *event* to its listeners in registration order."""
        for sub in list(self._listeners.get(event, ())):
            # An earlier listener may have unsubscribed this one
            if sub not in self._listeners.get(event, ()):
                continue
            if sub.once:
                self._remove(sub)
            try:
                result = sub.listener(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception:  # noqa: BLE001
                _LOGGER.exception("Error in Volumio listener for '%s'", event)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def _send(self, event: str, payload: Any = None) -> bool:
        """Emit *event*; return False when the command had to be dropped."""
        if self._closed:
            _LOGGER.debug("Dropping '%s': client for %s is closed", event, self._host)
            return False

        _LOGGER.debug("socket.emit(%s, %s)", event, payload)
        try:
            if payload is None:
                await self._sio.emit(event)
            else:
                await self._sio.emit(event, payload)
        except SocketIOError as err:
            _LOGGER.error("Failed to send '%s' to Volumio on %s: %s", event, self._host, err)
            return False
        return True

    async def _send_item(self, event: str, **fields: Any) -> bool:
        try:
            item = _build_payload(**fields)
        except VolumioPayloadError as err:
            _LOGGER.error("The following error occurred %s", err)
            return False
        return await self._send(event, item)

    async def get_state(self) -> bool:
        """Ask the player to push its current state."""
        return await self._send(CMD_GET_STATE)

    async def play(self, index: int | None = None) -> bool:
        """Resume playback, or play the queue entry at *index*."""
        if index is None:
            return await self._send(CMD_PLAY)
        try:
            if isinstance(index, bool):
                raise VolumioPayloadError(f"Unsupported value for 'index': {index!r} (bool)")
            value = _primitive("index", index)
        except VolumioPayloadError as err:
            _LOGGER.error("The following error occurred %s", err)
            return False
        return await self._send(CMD_PLAY, value)

    async def pause(self) -> bool:
        """Pause the current track."""
        return await self._send(CMD_PAUSE)

    async def stop(self) -> bool:
        """Stop playback."""
        return await self._send(CMD_STOP)

    async def next_track(self) -> bool:
        """Play the next track."""
        return await self._send(CMD_NEXT)

    async def previous_track(self) -> bool:
        """Play the previous track."""
        return await self._send(CMD_PREVIOUS)

    async def set_volume(self, level: int) -> bool:
        """Set the volume level (0-100)."""
        if isinstance(level, bool) or not isinstance(level, int) or not 0 <= level <= 100:
            raise ValueError(f"Volume must be an integer between 0 and 100, got {level!r}")
        return await self._send(CMD_VOLUME, level)

    async def shutdown(self) -> bool:
        """Power the device off."""
        return await self._send(CMD_SHUTDOWN)

    async def reboot(self) -> bool:
        """Reboot the device."""
        return await self._send(CMD_REBOOT)

    async def play_playlist(self, name: str) -> bool:
        """Replace the queue with a stored playlist and play it."""
        return await self._send_item(CMD_PLAY_PLAYLIST, name=name)

    async def clear_queue(self) -> bool:
        """Clear the play queue."""
        return await self._send(CMD_CLEAR_QUEUE)

    async def set_random(self, value: bool) -> bool:
        """Enable or disable random playback."""
        return await self._send_item(CMD_RANDOM, value=value)

    async def set_repeat(self, value: bool) -> bool:
        """Enable or disable repeat."""
        return await self._send_item(CMD_REPEAT, value=value)

    async def play_favourites(self, name: str) -> bool:
        """Play the favourites list."""
        return await self._send_item(CMD_PLAY_FAVOURITES, name=name)

    async def play_radio_favourite(self, index: int) -> bool:
        """Play a station from the radio favourites, identified by its index.

        Volumio first loads the radio favourites into the queue and confirms
        with ``pushPlayRadioFavourites``; only then can the entry be played.
        """
        if self._closed:
            _LOGGER.debug("Dropping radio favourite %s: client is closed", index)
            return False
        _LOGGER.debug("socket.emit(%s)", CMD_PLAY_RADIO_FAVOURITES)

        async def _play_loaded(*_args: Any) -> None:
            await self.play(index)

        unsubscribe = self.once(EVENT_PUSH_PLAY_RADIO_FAVOURITES, _play_loaded)
        if not await self._send(CMD_PLAY_RADIO_FAVOURITES):
            # No confirmation will follow a dropped request
            unsubscribe()
            return False
        return True

    async def play_uri(self, uri: str) -> bool:
        """Play *uri*.

        Volumio's ``play`` handler takes the bare uri here; the ``{"uri": ...}``
        item is only validated, never sent, to stay wire compatible with
        existing players.
        """
        _LOGGER.debug("PlayURI: %s", uri)
        try:
            item = _build_payload(uri=uri)
        except VolumioPayloadError as err:
            _LOGGER.error("The following error occurred %s", err)
            return False
        return await self._send(CMD_PLAY, item["uri"])

    async def add_play(self, uri: str, title: str, service_type: str) -> bool:
        """Append *uri* to the queue and start playing it."""
        return await self._send_item(CMD_ADD_PLAY, uri=uri, title=title, service=service_type)

    async def replace_play(self, uri: str, title: str, service_type: str) -> bool:
        """Replace the queue with *uri* and play it."""
        return await self._send_item(
            CMD_REPLACE_AND_PLAY, uri=uri, title=title, service=service_type
        )

    async def send_system_command(self, command: str) -> bool:
        """Dispatch ``shutdown`` or ``reboot``; anything else is ignored."""
        if command not in SYSTEM_COMMANDS:
            _LOGGER.debug("Ignoring unknown system command %s", command)
            return False
        _LOGGER.info("System command for %s: %s", self._host, command)
        if command == CMD_SHUTDOWN:
            return await self.shutdown()
        return await self.reboot()

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    # Mapping table {raw_key: canonical_key}
    _STATE_MAP: dict[str, str] = {
        "status": "play_status",
        "position": "queue_position",
        "trackType": "track_type",
        "repeatSingle": "repeat_single",
        "samplerate": "sample_rate",
        "bitdepth": "bit_depth",
        "disableVolumeControl": "volume_disabled",
    }

    def parse_state(self, raw: dict[str, Any]) -> dict[str, Any]:
        """Translate a raw ``pushState`` payload into canonical schema."""

        _LOGGER.debug("Raw player state: %s", raw)

        data: dict[str, Any] = {}
        for k, v in raw.items():
            data[self._STATE_MAP.get(k, k)] = v

        for key in ("mute", "random", "repeat", "repeat_single"):
            if data.get(key) is not None:
                data[key] = bool(data[key])

        # Volume normalisation 0-1 float (HA convention)
        if (vol := raw.get("volume")) is not None:
            try:
                vol_int = int(vol)
                data["volume"] = vol_int
                data["volume_level"] = vol_int / 100
            except (TypeError, ValueError):
                data["volume"] = None

        # seek is milliseconds, duration already seconds
        if (seek := raw.get("seek")) is not None:
            try:
                data["position"] = int(seek) // 1_000
            except (TypeError, ValueError):
                pass
        if (duration := raw.get("duration")) is not None:
            try:
                data["duration"] = int(duration)
            except (TypeError, ValueError):
                data["duration"] = None

        # Album art is usually served by Volumio itself under /albumart
        if cover := raw.get("albumart"):
            if cover.startswith("/"):
                cover = f"{self.base_url}{cover}"
            data["entity_picture"] = cover

        _LOGGER.debug("Parsed state: %s", data)
        return data
