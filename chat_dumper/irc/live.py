"""Content-based guess that a channel just went live."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from ..constants import LIVE_DEBOUNCE_SECONDS, LIVE_TERMS, LIVE_WINDOW_SIZE
from .parser import ParsedMessage


class LiveDetector:
    """Sliding window over recent messages.

    Fires when strictly more than half of the window mentions a liveness
    term, at most once per ``debounce_seconds``. Matching is a
    case-sensitive substring test on the message text.
    """

    def __init__(
        self,
        window_size: int = LIVE_WINDOW_SIZE,
        debounce_seconds: float = LIVE_DEBOUNCE_SECONDS,
        terms: Iterable[str] = LIVE_TERMS,
    ) -> None:
        self.window_size = window_size
        self.debounce = timedelta(seconds=debounce_seconds)
        self.terms = tuple(terms)
        self.window: deque[ParsedMessage] = deque(maxlen=window_size)
        self.last_fired: datetime | None = None

    def mentions_live(self, message: ParsedMessage) -> bool:
        text = message.parameters
        if not text:
            return False
        return any(term in text for term in self.terms)

    def matching_count(self) -> int:
        return sum(1 for message in self.window if self.mentions_live(message))

    def observe(self, message: ParsedMessage, now: datetime | None = None) -> bool:
        """Add ``message`` to the window; True when a live inference fires."""
        self.window.append(message)
        if self.matching_count() <= self.window_size // 2:
            return False
        now = now or datetime.now(UTC)
        if self.last_fired is not None and now - self.last_fired < self.debounce:
            return False
        self.last_fired = now
        return True

    def reset(self) -> None:
        self.window.clear()
        self.last_fired = None
