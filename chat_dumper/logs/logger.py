"""Event logger used across the chat dumper.

Every log line is a ``domain_action`` event. Human text comes from the
event catalog; ``channel`` and ``user`` are lifted out of the context and
rendered as a fixed-width ``[#channel user]`` column so interleaved output
from several dumps stays readable.
"""

from __future__ import annotations

import logging
import os
import sys

import colorlog

_PREFIX_WIDTH = 24
_EVENT_WIDTH = 28
_CHAT_EVENTS = frozenset({"chat_message"})


def _debug_enabled() -> bool:
    return os.environ.get("DEBUG", "false").lower() in ("true", "1", "yes")


def _console_formatter() -> logging.Formatter:
    return colorlog.ColoredFormatter(
        "%(log_color)s%(levelname)-8s%(reset)s %(message)s",
        log_colors={
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "magenta",
        },
        stream=sys.stdout,
    )


class ChatLogger:
    """Structured event logger.

    Until :meth:`use_root_handlers` is called the logger writes to stdout on
    its own, so library users get readable output without configuring
    logging first.
    """

    def __init__(self, name: str = "chat_dumper") -> None:
        self.logger = logging.getLogger(name)
        self.logger.handlers.clear()
        self.logger.setLevel(logging.DEBUG if _debug_enabled() else logging.INFO)

        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(_console_formatter())
        self.logger.addHandler(console)

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)

    def use_root_handlers(self) -> None:
        """Drop the private console handler and defer to the root logger."""
        self.logger.handlers.clear()
        self.logger.propagate = True

    def log_event(
        self,
        domain: str,
        action: str,
        level: int = logging.INFO,
        human: str | None = None,
        *,
        exc_info: bool = False,
        **context: object,
    ) -> None:
        event = f"{domain}_{action}".lower()
        if human is None:
            human = self._render(domain, action, context)
        channel = context.pop("channel", None)
        user = context.pop("user", None)
        column = self._column(
            channel if isinstance(channel, str) else None,
            user if isinstance(user, str) else None,
        )
        if event in _CHAT_EVENTS:
            human = f"💬 {human}"
        if _debug_enabled():
            message = f"{event[:_EVENT_WIDTH].ljust(_EVENT_WIDTH)} {column} {human}"
            if context:
                message += " (" + ", ".join(f"{k}={v}" for k, v in context.items()) + ")"
        else:
            message = f"{column} {human}"
        self.logger.log(level, message, exc_info=exc_info)

    @staticmethod
    def _render(domain: str, action: str, context: dict[str, object]) -> str:
        # Imported lazily so a reload of the catalog is picked up.
        from .event_catalog import EVENT_TEMPLATES

        template = EVENT_TEMPLATES.get((domain, action))
        if template is None:
            context.setdefault("derived", True)
            return f"{domain.replace('_', ' ')}: {action.replace('_', ' ')}"
        try:
            return template.format(**context)
        except (KeyError, IndexError, ValueError):
            return template

    @staticmethod
    def _column(channel: str | None, user: str | None) -> str:
        label = f"#{channel}" if channel else "-"
        if user:
            label = f"{label} {user}"
        return f"[{label[:_PREFIX_WIDTH].ljust(_PREFIX_WIDTH)}]"


logger = ChatLogger()
