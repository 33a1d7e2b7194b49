from __future__ import annotations

import logging

import pytest

from chat_dumper.logging_config import LoggerConfigurator
from chat_dumper.logs.logger import logger as chat_logger


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    saved_root = (list(root.handlers), root.level)
    saved_chat = (
        list(chat_logger.logger.handlers),
        chat_logger.logger.propagate,
        chat_logger.logger.level,
    )
    yield root
    for handler in root.handlers:
        if handler not in saved_root[0]:
            handler.close()
    root.handlers[:] = saved_root[0]
    root.setLevel(saved_root[1])
    chat_logger.logger.handlers[:] = saved_chat[0]
    chat_logger.logger.propagate = saved_chat[1]
    chat_logger.logger.setLevel(saved_chat[2])


def test_log_file_receives_event_lines(tmp_path, restore_logging):
    log_file = tmp_path / "dumper.log"
    LoggerConfigurator({"log_file": str(log_file), "final_summary": False}).configure()

    chat_logger.log_event("app", "start", channel="chan")
    logging.warning("plain warning")
    for handler in restore_logging.handlers:
        handler.flush()

    content = log_file.read_text(encoding="utf-8")
    assert "#chan" in content
    assert "WARNING  plain warning" in content


def test_no_file_handler_without_log_file(restore_logging):
    LoggerConfigurator({"final_summary": False}).configure()
    assert not any(isinstance(h, logging.FileHandler) for h in restore_logging.handlers)
    assert chat_logger.logger.handlers == []
    assert chat_logger.logger.propagate is True
