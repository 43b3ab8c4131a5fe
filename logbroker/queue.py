"""A partition log made of consecutive segments that rolls over when one fills up."""

from __future__ import annotations

import re
import threading
from bisect import bisect_right
from os import PathLike
from pathlib import Path

from .index import LOG_FILE_SUFFIX
from .segment import LogSegment, SegmentFull

_SEGMENT_NAME = re.compile(r"([0-9]+)" + re.escape(LOG_FILE_SUFFIX))


class LogQueue:
    """Ordered list of log segments in one directory.

    Writes go to the newest segment; a full segment causes a new one to start
    at the next offset. Reads remember the segment they last hit and look
    forward from there.
    """

    def __init__(self, log_dir: str | PathLike[str], max_segment_size: int) -> None:
        self.log_dir = Path(log_dir)
        self.max_segment_size = max_segment_size
        self._segments: list[LogSegment] = []
        self._base_offsets: list[int] = []
        self._active_write = 0
        self._active_read = 0
        self._lock = threading.Lock()
        try:
            self._load_segments()
        except BaseException:
            self.close()
            raise

    def __enter__(self) -> LogQueue:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"LogQueue(log_dir={str(self.log_dir)!r}, segments={len(self._segments)})"

    def _existing_offsets(self) -> list[int]:
        if not self.log_dir.is_dir():
            return []
        offsets = []
        for entry in self.log_dir.iterdir():
            match = _SEGMENT_NAME.fullmatch(entry.name)
            if match:
                offsets.append(int(match.group(1)))
        return sorted(offsets)

    def _add_segment(self, segment: LogSegment) -> None:
        self._segments.append(segment)
        self._base_offsets.append(segment.base_offset)

    def _load_segments(self) -> None:
        for offset in self._existing_offsets():
            self._add_segment(LogSegment(self.log_dir, offset, self.max_segment_size))
        if not self._segments:
            self._add_segment(LogSegment(self.log_dir, 0, self.max_segment_size))
        self._active_write = len(self._segments) - 1
        self._active_read = 0

    def _next_base_offset(self) -> int:
        return self._segments[-1].next_offset() if self._segments else 0

    def append_message(self, message: bytes) -> int:
        """Append ``message`` to the log and return its offset."""
        with self._lock:
            try:
                return self._segments[self._active_write].append_message(message)
            except SegmentFull:
                pass
            segment = LogSegment(self.log_dir, self._next_base_offset(), self.max_segment_size)
            try:
                offset = segment.append_message(message)
            except BaseException:
                segment.close()
                raise
            self._add_segment(segment)
            self._active_write = len(self._segments) - 1
            return offset

    def read_message(self, offset: int) -> bytes | None:
        """Return the message at ``offset``, or None if no segment holds it."""
        with self._lock:
            if self._active_read == 0:
                position = bisect_right(self._base_offsets, offset) - 1
                if position >= 0:
                    self._active_read = position
                    return self._segments[position].read_message(offset)

            message = self._segments[self._active_read].read_message(offset)
            if message is not None:
                return message

            start = self._active_read + 1
            for index, segment in enumerate(self._segments[start:], start):
                message = segment.read_message(offset)
                if message is not None:
                    self._active_read = index
                    return message
            return None

    def close(self) -> None:
        """Close every segment."""
        for segment in self._segments:
            segment.close()