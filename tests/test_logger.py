from __future__ import annotations

import logging

from chat_dumper.logs.event_catalog import EVENT_TEMPLATES
from chat_dumper.logs.logger import ChatLogger


def _capture(chat_logger: ChatLogger, monkeypatch):
    records: list[logging.LogRecord] = []

    class _ListHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            records.append(record)

    chat_logger.logger.handlers.clear()
    chat_logger.logger.addHandler(_ListHandler())
    chat_logger.logger.propagate = False
    chat_logger.set_level(logging.DEBUG)
    monkeypatch.delenv("DEBUG", raising=False)
    return records


def test_template_is_rendered_with_channel_prefix(monkeypatch):
    chat_logger = ChatLogger(name="test.template")
    records = _capture(chat_logger, monkeypatch)
    chat_logger.log_event("archive", "dump_started", channel="chan", path="/tmp/x.json")
    message = records[0].getMessage()
    assert message.startswith("[#chan ")
    assert "Starting chat dump to /tmp/x.json" in message


def test_unknown_event_derives_text(monkeypatch):
    chat_logger = ChatLogger(name="test.derived")
    records = _capture(chat_logger, monkeypatch)
    chat_logger.log_event("irc", "something_new")
    assert records[0].getMessage().endswith("irc: something new")


def test_missing_template_field_falls_back_to_raw_template(monkeypatch):
    chat_logger = ChatLogger(name="test.fallback")
    records = _capture(chat_logger, monkeypatch)
    chat_logger.log_event("archive", "dump_started")
    assert "{path}" in records[0].getMessage()


def test_chat_messages_get_speech_prefix(monkeypatch):
    chat_logger = ChatLogger(name="test.chat")
    records = _capture(chat_logger, monkeypatch)
    chat_logger.log_event("chat", "message", human="Ann: hi", channel="chan")
    assert "💬 Ann: hi" in records[0].getMessage()


def test_debug_mode_appends_context(monkeypatch):
    chat_logger = ChatLogger(name="test.debug")
    records = _capture(chat_logger, monkeypatch)
    monkeypatch.setenv("DEBUG", "1")
    chat_logger.log_event("session", "sweep", channel="chan", removed=2, remaining=5)
    message = records[0].getMessage()
    assert message.startswith("session_sweep")
    assert "(removed=2, remaining=5)" in message


def test_level_is_respected(monkeypatch):
    chat_logger = ChatLogger(name="test.level")
    records = _capture(chat_logger, monkeypatch)
    chat_logger.log_event("irc", "reconnect_requested", level=logging.WARNING)
    assert records[0].levelno == logging.WARNING


def test_catalog_covers_emitted_domains():
    domains = {domain for domain, _ in EVENT_TEMPLATES}
    assert {"app", "irc", "chat", "live", "session", "archive", "events"} <= domains


def test_user_is_rendered_after_channel(monkeypatch):
    chat_logger = ChatLogger(name="test.user")
    records = _capture(chat_logger, monkeypatch)
    chat_logger.log_event("irc", "welcome", channel="chan", user="justinfan1")
    assert records[0].getMessage().startswith("[#chan justinfan1")


def test_events_without_channel_use_placeholder(monkeypatch):
    chat_logger = ChatLogger(name="test.nochannel")
    records = _capture(chat_logger, monkeypatch)
    chat_logger.log_event("app", "shutdown")
    assert records[0].getMessage().startswith("[- ")
