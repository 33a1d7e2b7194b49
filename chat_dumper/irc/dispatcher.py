"""Line processing and event classification for one chat connection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..constants import SUB_MSG_IDS
from ..errors.handling import log_error
from ..errors.internal import InternalError
from ..logs.logger import logger
from .commands import CapCommand, CommandKind
from .events import (
    EVENT_BAN,
    EVENT_CHAT,
    EVENT_COMMAND,
    EVENT_CONNECTED,
    EVENT_LIVE,
    EVENT_MESSAGE,
    EVENT_SUB,
)
from .parser import ParsedMessage, parse_message, split_payload
from .tags import tag_str

if TYPE_CHECKING:  # pragma: no cover
    from .client import TwitchChatClient

DEFAULT_PING_HOST = "tmi.twitch.tv"


def sanitize_plan_name(raw: str | None) -> str | None:
    """Turn the escaped spaces of ``msg-param-sub-plan-name`` into spaces."""
    if raw is None:
        return None
    return raw.replace("\\\\s", " ").replace("\\s", " ")


def _int_tag(message: ParsedMessage, name: str) -> int:
    raw = tag_str(message.tags, name)
    try:
        return int(raw) if raw else 0
    except ValueError:
        return 0


class IRCDispatcher:
    """Turns socket payloads into state updates and events, strictly in order."""

    def __init__(self, client: TwitchChatClient):
        self.client = client

    async def process_incoming_data(self, buffer: str, new_data: str) -> str:
        """Handle every complete line in ``buffer + new_data``.

        Returns the trailing partial line, to be passed back with the next
        payload.
        """
        lines, buffer = split_payload(buffer, new_data)
        for line in lines:
            await self.handle_line(line)
        return buffer

    async def handle_line(self, raw_line: str) -> ParsedMessage | None:
        """Process one line; failures are logged and confined to that line."""
        try:
            message = parse_message(raw_line)
            if message is None:
                logger.log_event(
                    "irc",
                    "line_rejected",
                    level=logging.DEBUG,
                    channel=self.client.channel,
                    raw=raw_line,
                )
                return None
            await self.dispatch(message)
            return message
        except Exception as e:  # noqa: BLE001
            log_error(
                "Failed to process chat line",
                e,
                {"channel": self.client.channel, "raw": raw_line[:200]},
            )
            return None

    async def dispatch(self, message: ParsedMessage) -> None:
        client = self.client
        client.store.apply_message(message)
        kind = message.command.kind

        await client.events.emit(EVENT_MESSAGE, message)
        if kind is CommandKind.PRIVMSG:
            self._log_chat_message(message)
            await client.events.emit(EVENT_CHAT, message)
        else:
            await client.events.emit(EVENT_COMMAND, message)

        if kind is CommandKind.PING:
            await self._handle_ping(message)
        elif kind is CommandKind.CAP:
            await self._handle_cap(message)
        elif kind is CommandKind.RECONNECT:
            logger.log_event(
                "irc", "reconnect_requested", level=logging.WARNING, channel=client.channel
            )
        elif kind is CommandKind.WELCOME:
            logger.log_event("irc", "welcome", level=logging.DEBUG, channel=client.channel)

        if kind is CommandKind.PRIVMSG:
            self._record(message)

        if client.live_detector.observe(message):
            logger.log_event(
                "live",
                "inferred",
                channel=client.channel,
                matches=client.live_detector.matching_count(),
            )
            await client.events.emit(EVENT_LIVE, message)

        if kind is CommandKind.CLEARCHAT:
            await self._handle_clear_chat(message)
        elif kind is CommandKind.USERNOTICE:
            await self._handle_user_notice(message)

    async def _handle_ping(self, message: ParsedMessage) -> None:
        host = message.parameters or DEFAULT_PING_HOST
        await self.client.send_line(f"PONG :{host}")
        logger.log_event(
            "irc", "pong_sent", level=logging.DEBUG, channel=self.client.channel
        )

    async def _handle_cap(self, message: ParsedMessage) -> None:
        command = message.command
        if not isinstance(command, CapCommand) or not command.ack:
            return
        if self.client.mark_capabilities_acknowledged():
            logger.log_event(
                "irc",
                "capabilities_acknowledged",
                channel=self.client.channel,
                capabilities=message.parameters or "",
            )
            await self.client.events.emit(EVENT_CONNECTED)

    def _record(self, message: ParsedMessage) -> None:
        recorder = self.client.recorder
        if not recorder.is_active:
            return
        try:
            recorder.record(message, self.client.store.channel_id)
        except InternalError as e:
            log_error("Skipping archive comment", e, {"channel": self.client.channel})

    async def _handle_clear_chat(self, message: ParsedMessage) -> None:
        store = self.client.store
        store.apply_clear_chat(message)
        await self.client.events.emit(
            EVENT_BAN,
            message.parameters,
            _int_tag(message, "ban-duration"),
            message,
        )

    async def _handle_user_notice(self, message: ParsedMessage) -> None:
        if tag_str(message.tags, "msg-id") not in SUB_MSG_IDS:
            return
        await self.client.events.emit(
            EVENT_SUB,
            tag_str(message.tags, "display-name"),
            _int_tag(message, "msg-param-cumulative-months"),
            sanitize_plan_name(tag_str(message.tags, "msg-param-sub-plan-name")),
            message.parameters,
            message,
        )

    def _log_chat_message(self, message: ParsedMessage) -> None:
        author = (
            tag_str(message.tags, "display-name")
            or (message.source.nick if message.source else None)
            or "?"
        )
        text = message.parameters or ""
        logger.log_event(
            "chat",
            "message",
            level=logging.DEBUG,
            human=f"{author}: {text}" if not message.is_action else f"* {author} {text}",
            channel=self.client.channel,
            author=author,
        )
