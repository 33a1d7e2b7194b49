from __future__ import annotations

from typing import Any

from ..logging_config import log_structured_error
from .internal import (
    ChatConnectionError,
    DumpError,
    InternalError,
    MissingParametersError,
)


def classify_error(error: BaseException) -> str:
    """Map an exception onto the error type used for aggregation."""
    if isinstance(error, ChatConnectionError | OSError | ConnectionError):
        return "network"
    if isinstance(error, DumpError):
        return "dump"
    if isinstance(error, MissingParametersError | ValueError):
        return "parsing"
    if isinstance(error, InternalError):
        return "internal"
    return "unknown"


def log_error(
    message: str, error: Exception, context: dict[str, Any] | None = None
) -> None:
    """Logs an error message with the associated exception details.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging. Data carried
            by an ``InternalError`` is merged underneath it.
    """
    merged: dict[str, Any] = {}
    if isinstance(error, InternalError):
        merged.update(error.data)
    if context:
        merged.update(context)
    log_structured_error(
        error_type=classify_error(error),
        message=f"{message}: {error}",
        exception=error,
        context=merged or None,
    )
