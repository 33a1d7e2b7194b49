"""Synchronous, ordered observer registry."""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from ..logs.logger import logger

EVENT_MESSAGE = "message"
EVENT_CHAT = "chat"
EVENT_COMMAND = "command"
EVENT_CONNECTED = "connected"
EVENT_BAN = "ban"
EVENT_SUB = "sub"
EVENT_LIVE = "live"
EVENT_CLOSE = "close"

Observer = Callable[..., Any]


class EventEmitter:
    """Observers run in registration order, one at a time.

    An observer may be a plain callable or a coroutine function; awaitables
    are awaited before the next observer runs, so a slow observer delays
    everything behind it. An exception raised by one observer is logged and
    does not stop the others.
    """

    def __init__(self, owner: str | None = None) -> None:
        self.owner = owner
        self._observers: dict[str, list[Observer]] = defaultdict(list)

    def on(self, event: str, handler: Observer | None = None):  # type: ignore[no-untyped-def]
        """Register ``handler`` for ``event``; usable as a decorator."""
        if handler is None:

            def decorator(fn: Observer) -> Observer:
                self._observers[event].append(fn)
                return fn

            return decorator
        self._observers[event].append(handler)
        return handler

    def off(self, event: str, handler: Observer) -> None:
        observers = self._observers.get(event)
        if observers and handler in observers:
            observers.remove(handler)

    def listeners(self, event: str) -> list[Observer]:
        return list(self._observers.get(event, ()))

    async def emit(self, event: str, *args: Any) -> int:
        """Invoke every observer of ``event``; returns how many ran cleanly."""
        delivered = 0
        for handler in tuple(self._observers.get(event, ())):
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception as e:  # noqa: BLE001
                logger.log_event(
                    "events",
                    "observer_error",
                    level=logging.ERROR,
                    channel=self.owner,
                    event=event,
                    error=str(e),
                    error_type=type(e).__name__,
                )
        return delivered
