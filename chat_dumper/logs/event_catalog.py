"""Human-readable templates for ``(domain, action)`` log events.

Templates live in ``event_templates.json`` next to this module, grouped by
domain. ``CHAT_DUMPER_EVENT_TEMPLATES`` may point at a replacement file.
"""

from __future__ import annotations

import json
import os
import string
from pathlib import Path

EventKey = tuple[str, str]

EVENT_TEMPLATES: dict[EventKey, str] = {}
DEFAULT_TEMPLATES_PATH = Path(__file__).with_name("event_templates.json")


def templates_path() -> Path:
    override = os.environ.get("CHAT_DUMPER_EVENT_TEMPLATES")
    return Path(override) if override else DEFAULT_TEMPLATES_PATH


def load_event_templates(path: Path) -> dict[EventKey, str]:
    """Flatten ``{domain: {action: template}}``; non-string entries are skipped.

    An unreadable file yields a single ``("app", "load_error")`` entry so
    every other event falls back to derived text.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {("app", "load_error"): f"Event templates file missing: {path}"}
    except (OSError, ValueError) as e:
        return {("app", "load_error"): f"Failed to load event templates: {e}"[:200]}
    if not isinstance(raw, dict):
        return {}
    return {
        (domain, action): template
        for domain, actions in raw.items()
        if isinstance(actions, dict)
        for action, template in actions.items()
        if isinstance(template, str)
    }


def template_fields(template: str) -> set[str]:
    """Names of the ``{placeholders}`` a template expects."""
    return {name for _, name, _, _ in string.Formatter().parse(template) if name}


def reload_event_templates() -> None:
    global EVENT_TEMPLATES  # noqa: PLW0603
    EVENT_TEMPLATES = load_event_templates(templates_path())


reload_event_templates()

__all__ = [
    "EVENT_TEMPLATES",
    "load_event_templates",
    "reload_event_templates",
    "template_fields",
]
