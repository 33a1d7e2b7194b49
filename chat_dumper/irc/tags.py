"""Decoding of the ``@key=value;...`` tag block of a chat line."""

from __future__ import annotations

from typing import NamedTuple

from ..constants import IGNORED_TAGS


class EmotePosition(NamedTuple):
    """Character span of one emote occurrence, as sent by the server."""

    start: str
    end: str | None


BadgeMap = dict[str, str | None]
EmoteMap = dict[str, list[EmotePosition]]
TagValue = str | BadgeMap | EmoteMap | list[str] | None
Tags = dict[str, TagValue]


def parse_badge_list(raw: str | None) -> BadgeMap | None:
    """Decode ``name/version,name/version`` into a mapping.

    >>> parse_badge_list("subscriber/12,premium/1")
    {'subscriber': '12', 'premium': '1'}
    """
    if not raw:
        return None
    badges: BadgeMap = {}
    for pair in raw.split(","):
        name, _, version = pair.partition("/")
        if name:
            badges[name] = version or None
    return badges


def parse_emotes(raw: str | None) -> EmoteMap | None:
    """Decode ``id:start-end,start-end/id:start-end`` into a mapping."""
    if not raw:
        return None
    emotes: EmoteMap = {}
    for group in raw.split("/"):
        emote_id, sep, positions = group.partition(":")
        if not sep:
            continue
        spans: list[EmotePosition] = []
        for position in positions.split(","):
            start, _, end = position.partition("-")
            spans.append(EmotePosition(start, end or None))
        emotes[emote_id] = spans
    return emotes


def parse_emote_sets(raw: str | None) -> list[str] | None:
    if not raw:
        return None
    return raw.split(",")


def parse_tags(raw_tags: str) -> Tags:
    """Decode a raw tag block (without the leading ``@``).

    ``badge-info``, ``emotes`` and ``emote-sets`` are decoded into structures;
    ``badges`` stays raw text and is decoded on demand with
    :func:`parse_badge_list`. Tags listed in ``IGNORED_TAGS`` are dropped.
    """
    tags: Tags = {}
    for tag in raw_tags.split(";"):
        if not tag:
            continue
        name, _, raw_value = tag.partition("=")
        value = raw_value or None
        if name in IGNORED_TAGS:
            continue
        if name == "badge-info":
            tags[name] = parse_badge_list(value)
        elif name == "emotes":
            tags[name] = parse_emotes(value)
        elif name == "emote-sets":
            tags[name] = parse_emote_sets(value)
        else:
            tags[name] = value
    return tags


def tag_str(tags: Tags | None, name: str) -> str | None:
    """Return a tag only when it holds plain text."""
    if not tags:
        return None
    value = tags.get(name)
    return value if isinstance(value, str) else None
