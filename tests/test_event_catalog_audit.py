from __future__ import annotations

import json
import re
from pathlib import Path

import chat_dumper
from chat_dumper.logs import event_catalog
from chat_dumper.logs.event_catalog import (
    EVENT_TEMPLATES,
    load_event_templates,
    template_fields,
)

PACKAGE_ROOT = Path(chat_dumper.__file__).parent
ENTRY_POINT = PACKAGE_ROOT.parent / "main.py"
_CALL = re.compile(r'log_event\(\s*"(?P<domain>[a-z_]+)",\s*"(?P<action>[a-z_]+)"')

# Events that always pass explicit human text
_HUMAN_ONLY = {("chat", "message")}


def _emitted_events() -> set[tuple[str, str]]:
    sources = [*PACKAGE_ROOT.rglob("*.py"), ENTRY_POINT]
    found: set[tuple[str, str]] = set()
    for path in sources:
        for match in _CALL.finditer(path.read_text(encoding="utf-8")):
            found.add((match["domain"], match["action"]))
    return found


def test_every_emitted_event_has_a_template():
    emitted = _emitted_events()
    assert emitted, "no log_event calls found"
    missing = sorted(emitted - set(EVENT_TEMPLATES) - _HUMAN_ONLY)
    if missing:
        raise AssertionError(f"Events without template: {missing}")


def test_templates_render_with_named_fields():
    failures = []
    for key, template in EVENT_TEMPLATES.items():
        try:
            template.format(**dict.fromkeys(template_fields(template), "x"))
        except (KeyError, IndexError, ValueError) as e:
            failures.append((key, str(e)))
    assert failures == []


def test_event_template_keys_lowercase():
    for domain, action in EVENT_TEMPLATES:
        assert domain == domain.lower() and action == action.lower()


def test_loader_skips_non_string_entries(tmp_path):
    path = tmp_path / "templates.json"
    path.write_text(
        json.dumps({"irc": {"a": "A {x}", "b": 3}, "broken": "not a mapping"}),
        encoding="utf-8",
    )
    assert load_event_templates(path) == {("irc", "a"): "A {x}"}


def test_loader_reports_missing_and_invalid_files(tmp_path):
    missing = load_event_templates(tmp_path / "nope.json")
    assert list(missing) == [("app", "load_error")]
    bad = tmp_path / "bad.json"
    bad.write_text("{", encoding="utf-8")
    assert list(load_event_templates(bad)) == [("app", "load_error")]


def test_override_path_is_used_on_reload(tmp_path, monkeypatch):
    path = tmp_path / "custom.json"
    path.write_text(json.dumps({"app": {"start": "go {channel}"}}), encoding="utf-8")
    monkeypatch.setenv("CHAT_DUMPER_EVENT_TEMPLATES", str(path))
    try:
        event_catalog.reload_event_templates()
        assert event_catalog.EVENT_TEMPLATES == {("app", "start"): "go {channel}"}
    finally:
        monkeypatch.delenv("CHAT_DUMPER_EVENT_TEMPLATES")
        event_catalog.reload_event_templates()
    assert ("archive", "dump_started") in event_catalog.EVENT_TEMPLATES
