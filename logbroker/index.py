"""Sparse offset index shared by log segments, plus the on-disk layout constants."""

from __future__ import annotations

import struct
from bisect import bisect_left
from collections.abc import Iterator
from dataclasses import dataclass
from os import PathLike
from pathlib import Path

MSG_LEN_SIZE = 4
OFFSET_SIZE = 8
POS_SIZE = 8
INDEX_ENTRY_SIZE = OFFSET_SIZE + POS_SIZE
MSG_HEADER_SIZE = OFFSET_SIZE + MSG_LEN_SIZE

LOG_FILE_SUFFIX = ".log"
INDEX_FILE_SUFFIX = ".index"

INDEX_ENTRY = struct.Struct(">QQ")
MESSAGE_HEADER = struct.Struct(">QI")


@dataclass(frozen=True)
class OffsetIndex:
    """Read-only view of an index file: big-endian (offset, position) pairs."""

    data: bytes = b""

    def entries(self) -> Iterator[tuple[int, int]]:
        """Yield every complete (offset, position) entry in file order."""
        usable = len(self.data) - len(self.data) % INDEX_ENTRY_SIZE
        return INDEX_ENTRY.iter_unpack(self.data[:usable])

    def __len__(self) -> int:
        return len(self.data) // INDEX_ENTRY_SIZE

    def last_entry(self) -> tuple[int, int] | None:
        """Return the final (offset, position) pair, or None when the index is empty."""
        if len(self.data) < INDEX_ENTRY_SIZE:
            return None
        return INDEX_ENTRY.unpack_from(self.data, len(self.data) - INDEX_ENTRY_SIZE)

    def find_position(self, target_offset: int) -> int | None:
        """Return the log position of the closest entry not after ``target_offset``.

        An empty index gives None; if every entry lies past the target the scan
        starts from position 0.
        """
        if not self.data:
            return None
        closest_pos = 0
        for stored_offset, position in self.entries():
            if stored_offset > target_offset:
                break
            closest_pos = position
        return closest_pos

    def find_offset_half(self, target_offset: int) -> int | None:
        """Binary search for the first entry whose offset is at least ``target_offset``."""
        entries = list(self.entries())
        offsets = [offset for offset, _ in entries]
        low = bisect_left(offsets, target_offset)
        if low < len(entries):
            return entries[low][1]
        return None


def load_index(path: str | PathLike[str]) -> OffsetIndex:
    """Read an index file; a missing file is an empty index."""
    try:
        return OffsetIndex(Path(path).read_bytes())
    except FileNotFoundError:
        return OffsetIndex()