"""Chat archive recording (append-then-consolidate)."""

from .comments import (  # noqa: F401
    build_badges,
    build_fragments,
    compact_duration,
    message_to_comment,
    nice_duration,
)
from .models import ArchiveComment, ArchiveDump  # noqa: F401
from .recorder import ArchiveRecorder, recover_line_file  # noqa: F401

__all__ = [
    "ArchiveComment",
    "ArchiveDump",
    "ArchiveRecorder",
    "build_badges",
    "build_fragments",
    "compact_duration",
    "message_to_comment",
    "nice_duration",
    "recover_line_file",
]
