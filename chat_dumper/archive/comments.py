"""Conversion of parsed chat messages into archive comments."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from ..constants import ARCHIVE_DEFAULT_COLOR
from ..errors.internal import MissingParametersError
from ..irc.parser import ParsedMessage
from ..irc.tags import tag_str
from .models import (
    ArchiveComment,
    Commenter,
    CommentMessage,
    Emoticon,
    EmoticonRef,
    MessageFragment,
    UserBadge,
)

_DAY = 60 * 60 * 24
_HOUR = 60 * 60
_MINUTE = 60


def nice_duration(seconds: int) -> str:
    """Format seconds as ``1d 2h 3m 4s``, omitting zero components."""
    days, rest = divmod(max(int(seconds), 0), _DAY)
    hours, rest = divmod(rest, _HOUR)
    minutes, secs = divmod(rest, _MINUTE)
    parts = [
        f"{value}{unit}"
        for value, unit in ((days, "d"), (hours, "h"), (minutes, "m"), (secs, "s"))
        if value > 0
    ]
    return " ".join(parts)


def compact_duration(seconds: int) -> str:
    """Format seconds as ``1d2h3m4s``, the form used in the video envelope."""
    return nice_duration(seconds).replace(" ", "")


def iso_timestamp(moment: datetime) -> str:
    """Render a UTC timestamp the way JavaScript's ``toISOString`` does."""
    return (
        moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    )


def _to_int(value: str | None) -> int:
    try:
        return int(value) if value is not None else 0
    except ValueError:
        return 0


def collect_emoticons(message: ParsedMessage) -> list[Emoticon]:
    """Flatten the emote tag into one entry per occurrence, in tag order."""
    return [
        Emoticon(id=emote_id, begin=_to_int(pos.start), end=_to_int(pos.end))
        for emote_id, positions in message.get_emotes().items()
        for pos in positions
    ]


def build_fragments(text: str, emoticons: list[Emoticon]) -> list[MessageFragment]:
    """Split ``text`` into text/emoticon fragments.

    A word gets the first emoticon whose start offset is not beyond the text
    consumed so far (including the word). A word with an emoticon opens a new
    fragment; words without one are appended to the current fragment.
    """
    fragments: list[MessageFragment] = []
    current: MessageFragment | None = None
    consumed = 0
    for index, word in enumerate(text.split(" ")):
        consumed += len(word) + (1 if index else 0)
        emoticon = next((e for e in emoticons if e.begin <= consumed), None)
        if emoticon is not None:
            if current is not None:
                fragments.append(current)
            current = MessageFragment(
                text=word, emoticon=EmoticonRef(emoticon_id=emoticon.id)
            )
        elif current is not None:
            current.text += " " + word
        else:
            current = MessageFragment(text=word)
    if current is not None:
        fragments.append(current)
    return fragments


def build_badges(message: ParsedMessage) -> list[UserBadge]:
    badges = [
        UserBadge(id=name, version=version)
        for name, version in message.get_badges().items()
    ]
    badges.extend(
        UserBadge(id=name, version=version)
        for name, version in message.get_badge_info().items()
    )
    return badges


def message_to_comment(
    message: ParsedMessage, channel_id: str, offset_seconds: float
) -> ArchiveComment:
    """Build the archive record for one chat message.

    Raises:
        MissingParametersError: the message carries no text.
    """
    if not message.parameters:
        raise MissingParametersError(
            "message has no parameters", data={"command": message.command_name}
        )

    tags = message.tags
    stamp = iso_timestamp(message.timestamp or message.received_at)
    nick = message.source.nick if message.source else None
    emoticons = collect_emoticons(message)

    return ArchiveComment(
        id=tag_str(tags, "id") or uuid.uuid4().hex[:8],
        channel_id=tag_str(tags, "room-id") or channel_id,
        content_offset_seconds=offset_seconds,
        commenter=Commenter(
            id=tag_str(tags, "user-id") or "",
            created_at=stamp,
            display_name=tag_str(tags, "display-name") or nick or "",
            name=nick or "",
            updated_at=stamp,
        ),
        message=CommentMessage(
            body=message.parameters,
            emoticons=emoticons,
            fragments=build_fragments(message.parameters, emoticons),
            user_badges=build_badges(message),
            user_color=tag_str(tags, "color") or ARCHIVE_DEFAULT_COLOR,
            is_action=message.is_action,
        ),
        created_at=stamp,
        updated_at=stamp,
    )
