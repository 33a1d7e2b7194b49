r"""
Logging setup for the chat dumper.

``LoggerConfigurator`` installs one colorlog handler on the root logger and
routes the event logger through it. ``log_structured_error`` is the single
path for reporting failures: it writes a ``[TYPE] message | ...`` line and
feeds the process-wide ``ErrorAggregator`` that prints a summary at exit.
"""

import atexit
import logging
import os
import sys
import threading
import time
from collections import Counter, defaultdict, deque
from typing import Any

import colorlog

_ALERT_WINDOW_SECONDS = 3600


class ErrorAggregator:
    """Keeps recent errors per type and counts them per channel."""

    def __init__(self, max_per_type: int = 1000):
        self.max_per_type = max_per_type
        self.lock = threading.Lock()
        self.errors: dict[str, deque[dict[str, Any]]] = defaultdict(
            lambda: deque(maxlen=self.max_per_type)
        )
        self.channels: dict[str, Counter[str]] = defaultdict(Counter)
        self.start_time = time.time()

    def record_error(
        self, error_type: str, message: str, context: dict[str, Any] | None = None
    ) -> None:
        context = context or {}
        with self.lock:
            self.errors[error_type].append(
                {"timestamp": time.time(), "message": message, "context": context}
            )
            channel = context.get("channel")
            if channel:
                self.channels[error_type][str(channel)] += 1

    def get_error_summary(self) -> dict[str, Any]:
        with self.lock:
            now = time.time()
            hours = max((now - self.start_time) / 3600, 1)
            summary: dict[str, Any] = {}
            for error_type, occurrences in self.errors.items():
                summary[error_type] = {
                    "total_count": len(occurrences),
                    "recent_count": sum(
                        1
                        for e in occurrences
                        if now - e["timestamp"] < _ALERT_WINDOW_SECONDS
                    ),
                    "rate_per_hour": len(occurrences) / hours,
                    "last_occurrence": occurrences[-1] if occurrences else None,
                    "channels": dict(self.channels[error_type]),
                }
            return summary

    def should_alert(self, error_type: str, threshold_rate: float = 10.0) -> bool:
        stats = self.get_error_summary().get(error_type)
        return stats is not None and stats["rate_per_hour"] > threshold_rate

    def log_summary_report(self) -> None:
        summary = self.get_error_summary()
        if not summary:
            logging.info("No errors recorded in this session")
            return

        logging.warning("🚨 Error summary")
        for error_type, stats in sorted(summary.items()):
            line = (
                f"  {error_type}: {stats['total_count']} kept, "
                f"{stats['recent_count']} in the last hour"
            )
            if stats["channels"]:
                worst = Counter(stats["channels"]).most_common(3)
                line += " (" + ", ".join(f"#{c}={n}" for c, n in worst) + ")"
            logging.warning(line)
            if stats["last_occurrence"]:
                logging.warning(f"    last: {stats['last_occurrence']['message']}")

    def reset(self) -> None:
        with self.lock:
            self.errors.clear()
            self.channels.clear()
            self.start_time = time.time()


error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: Exception | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with structured context and aggregation.

    Args:
        error_type: Category of the error (``network``, ``dump``, ``parsing``...)
        message: Descriptive error message
        exception: The exception that occurred (optional)
        context: Additional context data for debugging
        level: Logging level (default: ERROR)
    """
    parts = [f"[{error_type.upper()}] {message}"]
    if exception is not None:
        parts.append(f"Exception: {type(exception).__name__}: {exception}")
    if context:
        parts.append("Context: " + " | ".join(f"{k}={v}" for k, v in context.items()))
    logging.log(level, " | ".join(parts))

    error_aggregator.record_error(error_type, message, context)
    if error_aggregator.should_alert(error_type):
        rate = error_aggregator.get_error_summary()[error_type]["rate_per_hour"]
        logging.critical(f"🚨 High error rate: {error_type} at {rate:.1f}/hour")


class LoggerConfigurator:
    """Configures the root logger for the command-line entry point.

    ``DEBUG`` (``true``/``1``/``yes``) selects DEBUG level. Config keys:
    ``final_summary`` (default True) registers the exit-time error summary;
    ``log_file`` (optional path) adds a plain-text file handler.
    """

    LOG_COLORS = {
        "DEBUG": "cyan",
        "INFO": "green",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "magenta",
    }

    def __init__(self, config: dict[str, Any] | None = None):
        self.config = config or {}

    def configure(self) -> None:
        level = (
            logging.DEBUG
            if os.environ.get("DEBUG", "").lower() in ("true", "1", "yes")
            else logging.INFO
        )
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            colorlog.ColoredFormatter(
                "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s "
                "%(message_log_color)s%(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
                log_colors=self.LOG_COLORS,
                secondary_log_colors={
                    "message": {"ERROR": "red", "CRITICAL": "magenta"}
                },
            )
        )

        root = logging.getLogger()
        root.handlers.clear()
        root.addHandler(handler)
        log_file = self.config.get("log_file")
        if log_file:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)-8s %(message)s")
            )
            root.addHandler(file_handler)
        root.setLevel(level)

        # websockets logs every frame at DEBUG
        logging.getLogger("websockets").setLevel(logging.INFO)

        from .logs.logger import logger as chat_logger

        chat_logger.use_root_handlers()
        chat_logger.set_level(level)

        if self.config.get("final_summary", True):
            atexit.register(self._log_final_error_summary)

    @staticmethod
    def _log_final_error_summary() -> None:
        try:
            error_aggregator.log_summary_report()
        except Exception as e:  # noqa: BLE001
            logging.error(f"Failed to log final error summary: {e}")
