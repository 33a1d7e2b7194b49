"""Shared chat connection data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum, auto

from .tags import BadgeMap


class ConnectionState(Enum):
    DISCONNECTED = auto()
    CONNECTING = auto()
    LOGGED_IN = auto()
    CAPABILITY_PENDING = auto()
    READY = auto()
    CLOSED = auto()


@dataclass(slots=True)
class UserRecord:
    """Identity and role state of one chat participant within a session.

    Role flags only ever go from ``False`` to ``True``. ``message_count``
    counts messages after the first one seen for this user.
    """

    id: str
    nick: str = ""
    login: str = ""
    display_name: str = ""
    color: str = ""
    badges: BadgeMap = field(default_factory=dict)
    is_mod: bool = False
    is_subscriber: bool = False
    is_turbo: bool = False
    message_count: int = 0
    ban_timestamp: datetime | None = None
    ban_duration: int | None = None
    last_seen: datetime = field(default_factory=lambda: datetime.now(UTC))

    def ban_expires_at(self) -> datetime | None:
        if self.ban_timestamp is None:
            return None
        return self.ban_timestamp + timedelta(seconds=self.ban_duration or 0)

    def is_banned(self, now: datetime | None = None) -> bool:
        expires = self.ban_expires_at()
        if expires is None:
            return False
        return (now or datetime.now(UTC)) < expires
