"""A single log segment: an append-only message file with a sparse offset index."""

from __future__ import annotations

import os
import threading
from collections.abc import Iterator
from os import PathLike
from pathlib import Path

from .index import (
    INDEX_ENTRY,
    INDEX_FILE_SUFFIX,
    LOG_FILE_SUFFIX,
    MESSAGE_HEADER,
    MSG_HEADER_SIZE,
    load_index,
)

INDEX_INTERVAL = 100


class SegmentFull(Exception):
    """Raised when a segment has reached its size limit and takes no more messages."""


class LogSegment:
    """Append-only store of length-prefixed messages starting at ``base_offset``.

    Each record is an 8-byte offset, a 4-byte length and the payload, all
    big-endian. Every offset divisible by 100 gets an index entry.
    """

    def __init__(
        self,
        log_dir: str | PathLike[str],
        base_offset: int,
        max_segment_size: int,
    ) -> None:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        stem = f"{base_offset:020d}"
        self.log_path = directory / f"{stem}{LOG_FILE_SUFFIX}"
        self.index_path = directory / f"{stem}{INDEX_FILE_SUFFIX}"
        self.base_offset = base_offset
        self.max_segment_size = max_segment_size
        self._lock = threading.Lock()
        self._log = open(self.log_path, "a+b")
        try:
            self._index_file = open(self.index_path, "a+b")
        except OSError:
            self._log.close()
            raise
        self._index = load_index(self.index_path)
        if self._file_size() == 0:
            self._offset = base_offset
        else:
            self._offset = self._recover_offset()

    def __enter__(self) -> LogSegment:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"LogSegment(path={str(self.log_path)!r}, base_offset={self.base_offset}, "
            f"next_offset={self._offset})"
        )

    def _file_size(self) -> int:
        self._log.flush()
        return os.fstat(self._log.fileno()).st_size

    def _headers(self) -> Iterator[tuple[int, int]]:
        """Yield (offset, length) of each record from the current file position.

        When resumed, the generator skips over the payload of the record it
        last yielded.
        """
        while True:
            header = self._log.read(MSG_HEADER_SIZE)
            if len(header) < MSG_HEADER_SIZE:
                return
            offset, length = MESSAGE_HEADER.unpack(header)
            yield offset, length
            self._log.seek(length, os.SEEK_CUR)

    def _recover_offset(self) -> int:
        last_offset, last_pos = self._index.last_entry() or (0, 0)
        self._log.seek(last_pos)
        for offset, _ in self._headers():
            last_offset = offset
        return last_offset + 1

    def append_message(self, message: bytes) -> int:
        """Append ``message`` and return its offset; raise SegmentFull when full."""
        with self._lock:
            file_len = self._file_size()
            if file_len >= self.max_segment_size:
                self._index_file.flush()
                self._index = load_index(self.index_path)
                raise SegmentFull(
                    f"segment {self.log_path.name} holds {file_len} bytes "
                    f"(limit {self.max_segment_size})"
                )
            offset = self._offset
            payload = bytes(message)
            self._log.write(MESSAGE_HEADER.pack(offset, len(payload)) + payload)
            self._log.flush()
            if offset % INDEX_INTERVAL == 0:
                self._index_file.write(INDEX_ENTRY.pack(offset, file_len))
                self._index_file.flush()
                self._index = load_index(self.index_path)
            self._offset += 1
            return offset

    def read_message(self, offset: int) -> bytes | None:
        """Return the message stored at ``offset``, or None if it is not here."""
        with self._lock:
            pos = self._index.find_position(offset)
            if pos is None:
                if self._offset > 1000:
                    pos = self._index.find_position(self._offset - 1000) or 0
                else:
                    pos = 0
            if pos >= self._file_size():
                return None
            self._log.seek(pos)
            for msg_offset, length in self._headers():
                if msg_offset == offset:
                    message = self._log.read(length)
                    if len(message) < length:
                        raise EOFError(
                            f"message at offset {offset} is truncated in {self.log_path.name}"
                        )
                    return message
            return None

    def next_offset(self) -> int:
        """Offset the next appended message will receive."""
        return self._offset

    def size(self) -> int:
        """Current size of the log file in bytes."""
        with self._lock:
            return self._file_size()

    def close(self) -> None:
        """Flush and close the underlying files."""
        with self._lock:
            self._log.close()
            self._index_file.close()