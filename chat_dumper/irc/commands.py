"""Command classification for chat lines.

Every accepted command maps onto one of three frozen dataclasses: plain
:class:`Command`, :class:`ChannelCommand` (carries the target channel) and
:class:`CapCommand` (carries the acknowledgement flag). Commands the client
does not handle classify to ``None`` and the line is dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum

from ..logs.logger import logger


class CommandKind(Enum):
    JOIN = "JOIN"
    PART = "PART"
    NOTICE = "NOTICE"
    CLEARCHAT = "CLEARCHAT"
    HOSTTARGET = "HOSTTARGET"
    PRIVMSG = "PRIVMSG"
    USERNOTICE = "USERNOTICE"
    PING = "PING"
    CAP = "CAP"
    GLOBALUSERSTATE = "GLOBALUSERSTATE"
    USERSTATE = "USERSTATE"
    ROOMSTATE = "ROOMSTATE"
    RECONNECT = "RECONNECT"
    WELCOME = "001"


CHANNEL_COMMANDS = frozenset(
    {
        CommandKind.JOIN,
        CommandKind.PART,
        CommandKind.NOTICE,
        CommandKind.CLEARCHAT,
        CommandKind.HOSTTARGET,
        CommandKind.PRIVMSG,
        CommandKind.USERSTATE,
        CommandKind.ROOMSTATE,
        CommandKind.WELCOME,
    }
)
IGNORED_NUMERICS = frozenset({"002", "003", "004", "353", "366", "372", "375", "376"})
UNSUPPORTED_NUMERIC = "421"


@dataclass(frozen=True, slots=True)
class BotCommand:
    """A ``!name args`` command typed into the chat window."""

    name: str
    params: str | None = None


@dataclass(frozen=True, slots=True)
class Command:
    kind: CommandKind
    bot_command: BotCommand | None = None

    @property
    def command(self) -> str:
        return self.kind.value

    def with_bot_command(self, bot_command: BotCommand) -> Command:
        return replace(self, bot_command=bot_command)


@dataclass(frozen=True, slots=True)
class ChannelCommand(Command):
    channel: str | None = None


@dataclass(frozen=True, slots=True)
class CapCommand(Command):
    ack: bool = False


def classify_command(raw_command: str) -> Command | None:
    """Turn the command block of a line into a typed command.

    Returns ``None`` for ignored numerics, unsupported-command notices and
    anything unknown; those are logged, never raised.
    """
    parts = raw_command.split(" ")
    name = parts[0]

    if name == UNSUPPORTED_NUMERIC:
        logger.log_event(
            "irc",
            "unsupported_command",
            level=logging.DEBUG,
            command=parts[2] if len(parts) > 2 else "",
        )
        return None
    if name in IGNORED_NUMERICS:
        logger.log_event("irc", "numeric_ignored", level=logging.DEBUG, numeric=name)
        return None

    try:
        kind = CommandKind(name)
    except ValueError:
        logger.log_event(
            "irc",
            "unexpected_command",
            level=logging.DEBUG,
            command=name,
            raw=raw_command,
        )
        return None

    if kind in CHANNEL_COMMANDS:
        return ChannelCommand(kind, channel=parts[1] if len(parts) > 1 else None)
    if kind is CommandKind.CAP:
        return CapCommand(kind, ack=len(parts) > 2 and parts[2] == "ACK")
    return Command(kind)


def parse_bot_command(raw_parameters: str) -> BotCommand:
    """Split ``!name arg arg`` into the command name and trimmed arguments."""
    body = raw_parameters[1:].strip()
    name, sep, params = body.partition(" ")
    if not sep:
        return BotCommand(name=name)
    return BotCommand(name=name, params=params.strip())
