"""Anonymous websocket chat client for a single channel."""

from __future__ import annotations

import logging
import os
import secrets
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from ..archive.recorder import ArchiveRecorder
from ..constants import (
    ANONYMOUS_NICK_MAX,
    ANONYMOUS_NICK_PREFIX,
    ANONYMOUS_PASS,
    TWITCH_CAPABILITIES,
    TWITCH_IRC_CONNECT_TIMEOUT,
    TWITCH_IRC_WS_URL,
)
from ..errors.handling import log_error
from ..errors.internal import ChatConnectionError
from ..logs.logger import logger
from .dispatcher import IRCDispatcher
from .events import EVENT_CLOSE, EventEmitter, Observer
from .live import LiveDetector
from .models import ConnectionState, UserRecord
from .session import SessionStateStore


def guest_nick() -> str:
    return f"{ANONYMOUS_NICK_PREFIX}{secrets.randbelow(ANONYMOUS_NICK_MAX)}"


class TwitchChatClient:  # pylint: disable=too-many-instance-attributes
    """Reads one channel's chat anonymously and optionally archives it.

    Observers registered with :meth:`on` receive ``message``, ``chat``,
    ``command``, ``connected``, ``ban``, ``sub``, ``live`` and ``close``
    events. They run inline on the reading task and must not block.
    There is no automatic reconnect; callers decide what to do on ``close``.
    """

    def __init__(
        self,
        channel: str,
        channel_id: str = "",
        ws_url: str = TWITCH_IRC_WS_URL,
        *,
        store: SessionStateStore | None = None,
        live_detector: LiveDetector | None = None,
    ) -> None:
        self.channel = channel.strip().lstrip("#").lower()
        self.ws_url = ws_url
        self.ws: Any = None
        self.nick: str | None = None
        self.cap = False
        self.state = ConnectionState.DISCONNECTED
        self.started_at = datetime.now(UTC)
        self.message_buffer = ""
        self.store = store or SessionStateStore(channel_id, channel=self.channel)
        self.live_detector = live_detector or LiveDetector()
        self.recorder = ArchiveRecorder(self.channel)
        self.events = EventEmitter(owner=self.channel)
        self.dispatcher = IRCDispatcher(self)
        self._closed = False

    # -- observers -----------------------------------------------------
    def on(self, event: str, handler: Observer | None = None):  # type: ignore[no-untyped-def]
        return self.events.on(event, handler)

    def off(self, event: str, handler: Observer) -> None:
        self.events.off(event, handler)

    # -- derived state -------------------------------------------------
    @property
    def channel_id(self) -> str:
        return self.store.channel_id

    @property
    def users(self) -> dict[str, UserRecord]:
        return self.store.users

    @property
    def banned_user_count(self) -> int:
        return self.store.active_ban_count()

    @property
    def is_ready(self) -> bool:
        return self.state is ConnectionState.READY

    def _set_state(self, new_state: ConnectionState) -> None:
        if self.state != new_state:
            logger.log_event(
                "irc",
                "state_change",
                level=logging.DEBUG,
                channel=self.channel,
                old_state=self.state.name,
                new_state=new_state.name,
            )
            self.state = new_state

    # -- lifecycle -----------------------------------------------------
    async def connect(self) -> None:
        """Open the websocket and run the anonymous handshake.

        Raises:
            ChatConnectionError: the websocket could not be opened.
        """
        self._set_state(ConnectionState.CONNECTING)
        logger.log_event("irc", "connect_start", channel=self.channel, url=self.ws_url)
        try:
            self.ws = await websockets.connect(
                self.ws_url,
                open_timeout=TWITCH_IRC_CONNECT_TIMEOUT,
                ping_interval=None,
            )
        except (OSError, TimeoutError, WebSocketException) as e:
            self._set_state(ConnectionState.DISCONNECTED)
            raise ChatConnectionError(
                f"Websocket connection failed: {e}", data={"url": self.ws_url}
            ) from e
        await self._on_open()

    async def _on_open(self) -> None:
        await self.login_anonymous()
        await self.join(self.channel)
        await self.request_capabilities()

    async def login_anonymous(self) -> None:
        self.nick = guest_nick()
        await self.send_line(f"PASS {ANONYMOUS_PASS}")
        await self.send_line(f"NICK {self.nick}")
        self._set_state(ConnectionState.LOGGED_IN)

    async def join(self, channel: str) -> None:
        await self.send_line(f"JOIN #{channel}")
        logger.log_event("irc", "join_sent", channel=channel)

    async def request_capabilities(self) -> None:
        await self.send_line(f"CAP REQ :{TWITCH_CAPABILITIES}")
        self._set_state(ConnectionState.CAPABILITY_PENDING)

    def mark_capabilities_acknowledged(self) -> bool:
        """Enter READY on the first CAP ACK; False if already acknowledged."""
        if self.cap:
            return False
        self.cap = True
        self._set_state(ConnectionState.READY)
        return True

    async def send_line(self, line: str) -> None:
        if self.ws is None:
            raise ChatConnectionError("Not connected", data={"line": line.split(" ", 1)[0]})
        await self.ws.send(line)

    async def send(self, message: str) -> None:
        await self.send_line(f"PRIVMSG #{self.channel} :{message}")

    async def feed(self, data: str) -> None:
        """Process one raw socket payload (may hold several lines)."""
        self.message_buffer = await self.dispatcher.process_incoming_data(
            self.message_buffer, data
        )

    async def listen(self) -> None:
        """Read payloads until the socket closes, then run close handling."""
        if self.ws is None:
            raise ChatConnectionError("Not connected")
        try:
            async for payload in self.ws:
                if isinstance(payload, bytes):
                    payload = payload.decode("utf-8", errors="replace")
                await self.feed(payload)
        except ConnectionClosed as e:
            logger.log_event(
                "irc",
                "connection_closed",
                level=logging.WARNING,
                channel=self.channel,
                code=getattr(e, "code", None),
            )
        except (OSError, WebSocketException) as e:
            log_error("Chat connection failed", e, {"channel": self.channel})
        finally:
            await self._handle_close()

    async def run(self) -> None:
        await self.connect()
        await self.listen()

    async def close(self) -> None:
        """Close the socket; any active dump is finalized first."""
        ws, self.ws = self.ws, None
        await self._handle_close()
        if ws is not None:
            try:
                await ws.close()
            except (OSError, WebSocketException) as e:
                log_error("Error closing chat websocket", e, {"channel": self.channel})

    async def _handle_close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.recorder.is_active:
            try:
                self.stop_dump()
            except Exception as e:  # noqa: BLE001
                log_error("Failed to finalize chat dump on close", e, {"channel": self.channel})
        self.ws = None
        self._set_state(ConnectionState.CLOSED)
        logger.log_event("irc", "closed", channel=self.channel)
        await self.events.emit(EVENT_CLOSE)

    # -- archive -------------------------------------------------------
    def start_dump(self, path: str | os.PathLike[str]) -> Path:
        return self.recorder.start(path)

    def stop_dump(self) -> Path | None:
        return self.recorder.stop(self.store.channel_id)

    @property
    def is_dumping(self) -> bool:
        return self.recorder.is_active
