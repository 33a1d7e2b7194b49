"""Chat protocol subsystem.

Leaf modules (tags, commands, parser, models, session, live, events) are
re-exported here. The dispatcher and websocket client live in
``chat_dumper.irc.dispatcher`` and ``chat_dumper.irc.client``.
"""

from .commands import (  # noqa: F401
    BotCommand,
    CapCommand,
    ChannelCommand,
    Command,
    CommandKind,
    classify_command,
)
from .events import EventEmitter  # noqa: F401
from .live import LiveDetector  # noqa: F401
from .models import ConnectionState, UserRecord  # noqa: F401
from .parser import ParsedMessage, Source, parse_message, split_payload  # noqa: F401
from .session import SessionStateStore  # noqa: F401
from .tags import parse_tags  # noqa: F401

__all__ = [
    "BotCommand",
    "CapCommand",
    "ChannelCommand",
    "Command",
    "CommandKind",
    "ConnectionState",
    "EventEmitter",
    "LiveDetector",
    "ParsedMessage",
    "SessionStateStore",
    "Source",
    "UserRecord",
    "classify_command",
    "parse_message",
    "parse_tags",
    "split_payload",
]
