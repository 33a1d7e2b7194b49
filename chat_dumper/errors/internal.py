"""Centralized internal error hierarchy.

Classes:
  InternalError            – Base for all internal errors.
  ChatConnectionError      – Transport failures on the chat websocket.
  DumpError                – Base for archive recording failures.
  DumpAlreadyActiveError   – A dump is already running on this connection.
  DumpTargetExistsError    – The finalized archive path already exists.
  LeftoverLineFileError    – A .line file from an interrupted dump is in the way.
  MissingParametersError   – A message without text cannot become a comment.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal application errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class ChatConnectionError(InternalError):
    """Raised when the chat websocket cannot be opened or breaks mid-session."""


class DumpError(InternalError):
    """Base class for archive recorder failures."""


class DumpAlreadyActiveError(DumpError):
    """Raised by ``start`` while another dump is still active."""

    def __init__(self, path: str) -> None:
        super().__init__("Dump already started", data={"path": path})


class DumpTargetExistsError(DumpError):
    """Raised by ``start`` when the finalized archive path is already taken."""

    def __init__(self, path: str) -> None:
        super().__init__(f"File {path} already exists", data={"path": path})


class LeftoverLineFileError(DumpError):
    """Raised by ``start`` when ``<path>.line`` survives from an earlier session."""

    def __init__(self, path: str, line_path: str) -> None:
        super().__init__(
            f"Leftover {line_path} found; consolidate it with --recover first",
            data={"path": path, "line_path": line_path},
        )


class MissingParametersError(InternalError):
    """Raised when converting a message that carries no free-text payload."""


__all__ = [
    "InternalError",
    "ChatConnectionError",
    "DumpError",
    "DumpAlreadyActiveError",
    "DumpTargetExistsError",
    "LeftoverLineFileError",
    "MissingParametersError",
]
