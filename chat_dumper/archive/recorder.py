"""Two-phase chat archive writer.

While a dump is active every chat message is appended as one JSON line to
``<path>.line``. Stopping reads those lines back, wraps them in the video
envelope and writes the final document to ``<path>``; the ``.line`` file is
removed afterwards. A process killed mid-session leaves a ``.line`` file that
:func:`recover_line_file` can still consolidate.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import IO

from ..constants import ARCHIVE_LINE_SUFFIX, ARCHIVE_VIDEO_TITLE
from ..errors.handling import log_error
from ..errors.internal import (
    DumpAlreadyActiveError,
    DumpTargetExistsError,
    LeftoverLineFileError,
)
from ..irc.parser import ParsedMessage
from ..logs.logger import logger
from .comments import compact_duration, iso_timestamp, message_to_comment
from .models import ArchiveComment, ArchiveDump, Streamer, VideoMetadata


def line_path_for(path: str | os.PathLike[str]) -> Path:
    return Path(f"{os.fspath(path)}{ARCHIVE_LINE_SUFFIX}")


def check_dump_target(path: str | os.PathLike[str]) -> Path:
    """Refuse a target whose archive or leftover ``.line`` file already exists.

    Raises:
        DumpTargetExistsError: the finalized archive is already there.
        LeftoverLineFileError: an interrupted dump left its ``.line`` file.
    """
    target = Path(path)
    if target.exists():
        raise DumpTargetExistsError(str(target))
    line_path = line_path_for(target)
    if line_path.exists():
        raise LeftoverLineFileError(str(target), str(line_path))
    return target


def read_comment_lines(line_path: Path) -> list[ArchiveComment]:
    comments: list[ArchiveComment] = []
    with line_path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                comments.append(ArchiveComment.model_validate_json(line))
    return comments


def build_dump(
    comments: list[ArchiveComment],
    started_at: datetime,
    elapsed_seconds: float,
    channel: str,
    channel_id: str,
) -> ArchiveDump:
    created = iso_timestamp(started_at)
    return ArchiveDump(
        comments=comments,
        video=VideoMetadata(
            created_at=created,
            published_at=created,
            duration=compact_duration(round(elapsed_seconds)),
            title=ARCHIVE_VIDEO_TITLE,
            user_id=channel_id,
            user_name=channel,
            start=0,
            end=elapsed_seconds,
        ),
        streamer=Streamer(
            name=channel, id=int(channel_id) if channel_id.isdigit() else None
        ),
    )


def write_dump(path: Path, dump: ArchiveDump) -> None:
    path.write_text(dump.to_json(), encoding="utf-8")


class ArchiveRecorder:
    """Owns the active dump of one connection.

    Appends run on a single worker thread so disk latency never stalls line
    processing while lines stay in arrival order. ``stop`` drains the worker
    before consolidating, so nothing already handed over is lost.
    """

    def __init__(self, channel: str) -> None:
        self.channel = channel
        self.path: Path | None = None
        self.started_at: datetime | None = None
        self.comment_count = 0
        self._last_offset = 0.0
        self._sink: IO[str] | None = None
        self._executor: ThreadPoolExecutor | None = None

    @property
    def is_active(self) -> bool:
        return self.path is not None

    @property
    def line_path(self) -> Path | None:
        return line_path_for(self.path) if self.path else None

    def start(self, path: str | os.PathLike[str]) -> Path:
        if self.path is not None:
            raise DumpAlreadyActiveError(str(self.path))
        target = check_dump_target(path)
        self._sink = line_path_for(target).open("x", encoding="utf-8")
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"dump-{self.channel}"
        )
        self.path = target
        self.started_at = datetime.now(UTC)
        self.comment_count = 0
        self._last_offset = 0.0
        logger.log_event(
            "archive", "dump_started", channel=self.channel, path=str(target)
        )
        return target

    def offset_seconds(self, now: datetime | None = None) -> float:
        if self.started_at is None:
            return 0.0
        offset = ((now or datetime.now(UTC)) - self.started_at).total_seconds()
        # Offsets never go backwards even if the wall clock does.
        self._last_offset = max(self._last_offset, offset)
        return self._last_offset

    def record(self, message: ParsedMessage, channel_id: str) -> ArchiveComment | None:
        """Convert and queue one message; no-op while no dump is active."""
        if self._executor is None or self._sink is None:
            return None
        comment = message_to_comment(message, channel_id, self.offset_seconds())
        future = self._executor.submit(self._append, self._sink, comment.to_json())
        future.add_done_callback(self._on_append_done)
        self.comment_count += 1
        return comment

    @staticmethod
    def _append(sink: IO[str], line: str) -> None:
        sink.write(line + "\n")
        sink.flush()

    def _on_append_done(self, future: Future[None]) -> None:
        error = future.exception()
        if error is not None:
            log_error(
                "Archive append failed",
                error,  # type: ignore[arg-type]
                {"channel": self.channel, "path": str(self.path)},
            )

    def stop(self, channel_id: str = "") -> Path | None:
        """Finalize the active dump; returns the written path or ``None``."""
        if self.path is None or self.started_at is None:
            logger.log_event(
                "archive", "dump_not_started", level=logging.WARNING, channel=self.channel
            )
            return None

        path, started_at, line_path = self.path, self.started_at, line_path_for(self.path)
        try:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
            if self._sink is not None:
                self._sink.close()
            elapsed = (datetime.now(UTC) - started_at).total_seconds()
            comments = read_comment_lines(line_path)
            write_dump(path, build_dump(comments, started_at, elapsed, self.channel, channel_id))
            line_path.unlink()
        finally:
            self.path = None
            self.started_at = None
            self._sink = None
            self._executor = None

        logger.log_event(
            "archive",
            "dump_stopped",
            channel=self.channel,
            path=str(path),
            comments=len(comments),
            duration=compact_duration(round(elapsed)),
        )
        return path


def recover_line_file(
    path: str | os.PathLike[str], channel: str, channel_id: str = ""
) -> Path:
    """Consolidate a ``.line`` file left behind by an interrupted session.

    The start time is taken from the first comment minus its offset, the
    duration from the offset of the last comment.
    """
    target = Path(path)
    if target.exists():
        raise DumpTargetExistsError(str(target))
    line_path = line_path_for(target)
    comments = read_comment_lines(line_path)
    if comments:
        first = comments[0]
        first_seen = datetime.fromisoformat(first.created_at.replace("Z", "+00:00"))
        started_at = first_seen - timedelta(seconds=first.content_offset_seconds)
        elapsed = comments[-1].content_offset_seconds
    else:
        started_at = datetime.fromtimestamp(line_path.stat().st_mtime, tz=UTC)
        elapsed = 0.0
    write_dump(target, build_dump(comments, started_at, elapsed, channel, channel_id))
    line_path.unlink()
    logger.log_event(
        "archive",
        "dump_recovered",
        channel=channel,
        path=str(target),
        comments=len(comments),
    )
    return target
