"""Per-connection session state: user records, room id and ban windows."""

from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import UTC, datetime, timedelta

from ..constants import SESSION_IDLE_SECONDS, SESSION_MAX_USERS
from ..logs.logger import logger
from .commands import CommandKind
from .models import UserRecord
from .parser import ParsedMessage
from .tags import tag_str


def _parse_duration(raw: str | None) -> int:
    try:
        return int(raw) if raw else 0
    except ValueError:
        return 0


class SessionStateStore:
    """Derived user state for one connection.

    Records are kept in least-recently-active order. When ``max_users`` is
    exceeded the oldest records without an active ban are evicted; ``sweep``
    removes records idle for longer than a threshold. Banned users are never
    evicted while their ban window is open.
    """

    def __init__(
        self,
        channel_id: str = "",
        max_users: int = SESSION_MAX_USERS,
        channel: str | None = None,
    ) -> None:
        self.channel_id = channel_id
        self.channel = channel
        self.max_users = max_users
        self.users: OrderedDict[str, UserRecord] = OrderedDict()

    def __len__(self) -> int:
        return len(self.users)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self.users

    def get(self, user_id: str) -> UserRecord | None:
        return self.users.get(user_id)

    def apply_message(self, message: ParsedMessage) -> UserRecord | None:
        """Update state from one parsed message and link its sender record."""
        tags = message.tags
        room_id = tag_str(tags, "room-id")
        if room_id:
            self.channel_id = room_id

        user_id = tag_str(tags, "user-id")
        if not user_id:
            return None

        record = self.users.get(user_id)
        if record is None:
            login = tag_str(tags, "login") or ""
            record = UserRecord(
                id=user_id,
                nick=login,
                login=login,
                display_name=tag_str(tags, "display-name") or "",
                color=tag_str(tags, "color") or "",
                badges=message.get_badge_info() or message.get_badges(),
                last_seen=message.received_at,
            )
            self.users[user_id] = record
            self._enforce_cap(message.received_at, keep=user_id)
        else:
            record.message_count += 1
            record.last_seen = message.received_at
            self.users.move_to_end(user_id)

        if tag_str(tags, "mod") == "1":
            record.is_mod = True
        if tag_str(tags, "subscriber") == "1":
            record.is_subscriber = True
        if tag_str(tags, "turbo") == "1":
            record.is_turbo = True

        if message.command.kind is CommandKind.USERNOTICE:
            login = tag_str(tags, "login")
            if login:
                record.login = login

        message.user = record
        return record

    def apply_clear_chat(self, message: ParsedMessage) -> UserRecord | None:
        """Open a ban window for the user targeted by a CLEARCHAT line."""
        target_id = tag_str(message.tags, "target-user-id")
        if not message.parameters or not target_id:
            return None
        record = self.users.get(target_id)
        if record is None:
            return None
        record.ban_timestamp = message.received_at
        record.ban_duration = _parse_duration(tag_str(message.tags, "ban-duration"))
        logger.log_event(
            "session",
            "user_banned",
            level=logging.DEBUG,
            channel=self.channel,
            login=message.parameters,
            duration=record.ban_duration,
            users=len(self.users),
        )
        return record

    def active_ban_count(self, now: datetime | None = None) -> int:
        now = now or datetime.now(UTC)
        return sum(1 for record in self.users.values() if record.is_banned(now))

    def sweep(
        self, idle_seconds: float = SESSION_IDLE_SECONDS, now: datetime | None = None
    ) -> int:
        """Remove records idle for more than ``idle_seconds``; returns the count."""
        now = now or datetime.now(UTC)
        cutoff = now - timedelta(seconds=idle_seconds)
        stale = [
            user_id
            for user_id, record in self.users.items()
            if record.last_seen < cutoff and not record.is_banned(now)
        ]
        for user_id in stale:
            del self.users[user_id]
        if stale:
            logger.log_event(
                "session",
                "sweep",
                level=logging.DEBUG,
                channel=self.channel,
                removed=len(stale),
                remaining=len(self.users),
            )
        return len(stale)

    def _enforce_cap(self, now: datetime, keep: str) -> None:
        if self.max_users <= 0 or len(self.users) <= self.max_users:
            return
        overflow = len(self.users) - self.max_users
        evicted = []
        for user_id, record in self.users.items():
            if len(evicted) >= overflow:
                break
            if user_id != keep and not record.is_banned(now):
                evicted.append(user_id)
        for user_id in evicted:
            del self.users[user_id]
