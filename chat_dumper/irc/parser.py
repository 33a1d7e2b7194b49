"""Chat line parsing (tags, source, command, parameters)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from .commands import Command, classify_command, parse_bot_command
from .tags import BadgeMap, EmoteMap, Tags, parse_badge_list, parse_tags

if TYPE_CHECKING:  # pragma: no cover
    from .models import UserRecord

LINE_SEPARATOR = "\r\n"
CTCP_DELIMITER = "\x01"
ACTION_TOKEN = "ACTION"


@dataclass(frozen=True, slots=True)
class Source:
    host: str
    nick: str | None = None


@dataclass
class ParsedMessage:
    raw: str
    command: Command
    tags: Tags | None = None
    source: Source | None = None
    parameters: str | None = None
    is_action: bool = False
    received_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    timestamp: datetime | None = None
    user: UserRecord | None = None

    def __post_init__(self) -> None:
        if self.timestamp is None:
            self.timestamp = _sent_timestamp(self.tags) or self.received_at

    @property
    def command_name(self) -> str:
        return self.command.command

    def get_tag(self, name: str) -> object:
        return self.tags.get(name) if self.tags else None

    def get_emotes(self) -> EmoteMap:
        emotes = self.get_tag("emotes")
        return emotes if isinstance(emotes, dict) else {}

    def get_badges(self) -> BadgeMap:
        raw = self.get_tag("badges")
        return (parse_badge_list(raw) if isinstance(raw, str) else None) or {}

    def get_badge_info(self) -> BadgeMap:
        info = self.get_tag("badge-info")
        return info if isinstance(info, dict) else {}


def _sent_timestamp(tags: Tags | None) -> datetime | None:
    raw = tags.get("tmi-sent-ts") if tags else None
    if not isinstance(raw, str):
        return None
    try:
        return datetime.fromtimestamp(int(raw) / 1000, tz=UTC)
    except (ValueError, OverflowError, OSError):
        return None


def split_payload(buffer: str, new_data: str) -> tuple[list[str], str]:
    """Split buffered socket data into complete lines plus the leftover tail."""
    buffer += new_data
    *lines, rest = buffer.split(LINE_SEPARATOR)
    return [line for line in lines if line], rest


def parse_source(raw_source: str) -> Source:
    nick, sep, host = raw_source.partition("!")
    if not sep:
        return Source(host=raw_source)
    return Source(host=host, nick=nick)


def parse_message(
    raw_line: str, received_at: datetime | None = None
) -> ParsedMessage | None:
    """Parse one chat line, or return ``None`` when the command is unhandled."""
    idx = 0
    raw_tags: str | None = None
    raw_source: str | None = None
    raw_parameters: str | None = None

    if raw_line.startswith("@"):
        end = raw_line.find(" ")
        if end == -1:
            end = len(raw_line)
        raw_tags = raw_line[1:end]
        idx = end + 1

    if raw_line[idx : idx + 1] == ":":
        idx += 1
        end = raw_line.find(" ", idx)
        if end == -1:
            end = len(raw_line)
        raw_source = raw_line[idx:end]
        idx = end + 1

    end = raw_line.find(":", idx)
    if end == -1:
        end = len(raw_line)
    raw_command = raw_line[idx:end].strip()
    if end != len(raw_line):
        raw_parameters = raw_line[end + 1 :]

    command = classify_command(raw_command)
    if command is None:
        return None

    parameters = raw_parameters
    is_action = False
    if raw_parameters and raw_parameters.startswith("!"):
        command = command.with_bot_command(parse_bot_command(raw_parameters))
    if (
        raw_parameters
        and len(raw_parameters) >= 2
        and raw_parameters[0] == CTCP_DELIMITER
        and raw_parameters[-1] == CTCP_DELIMITER
    ):
        parameters = raw_parameters[1:-1]
        if parameters.startswith(ACTION_TOKEN):
            parameters = parameters[len(ACTION_TOKEN) :].strip()
            is_action = True

    return ParsedMessage(
        raw=raw_line,
        command=command,
        tags=parse_tags(raw_tags) if raw_tags is not None else None,
        source=parse_source(raw_source) if raw_source else None,
        parameters=parameters,
        is_action=is_action,
        received_at=received_at or datetime.now(UTC),
    )
