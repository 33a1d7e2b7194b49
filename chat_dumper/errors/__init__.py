"""Error hierarchy and logging helpers."""

from .handling import classify_error, log_error  # noqa: F401
from .internal import (  # noqa: F401
    ChatConnectionError,
    DumpAlreadyActiveError,
    DumpError,
    DumpTargetExistsError,
    InternalError,
    LeftoverLineFileError,
    MissingParametersError,
)

__all__ = [
    "ChatConnectionError",
    "DumpAlreadyActiveError",
    "DumpError",
    "DumpTargetExistsError",
    "InternalError",
    "LeftoverLineFileError",
    "MissingParametersError",
    "classify_error",
    "log_error",
]
