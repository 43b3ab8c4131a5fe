"""Removal of old or excess log segments from a log directory."""

from __future__ import annotations

import os
import threading
import time
from os import PathLike
from pathlib import Path

from .index import INDEX_FILE_SUFFIX, LOG_FILE_SUFFIX

RETENTION_TIME = 7 * 24 * 60 * 60
MAX_LOG_SIZE = 10 * 1024 * 1024 * 1024
CLEAN_INTERVAL = 60 * 60


def _created(stat: os.stat_result) -> float:
    return getattr(stat, "st_birthtime", None) or stat.st_mtime


def clean_old_segments(
    log_dir: str | PathLike[str],
    now: float | None = None,
    max_log_size: int = MAX_LOG_SIZE,
    retention_time: float = RETENTION_TIME,
) -> list[Path]:
    """Delete segments that push the total size over the limit or are too old.

    Segments are considered oldest first; each removed log file takes its
    index file with it. Returns the removed log paths.
    """
    try:
        logs = [p for p in Path(log_dir).iterdir() if p.suffix == LOG_FILE_SUFFIX]
    except OSError:
        return []
    if now is None:
        now = time.time()

    segments = sorted(((p, p.stat()) for p in logs), key=lambda item: _created(item[1]))
    removed: list[Path] = []
    total_size = 0
    for path, stat in segments:
        total_size += stat.st_size
        if total_size > max_log_size or now - _created(stat) > retention_time:
            path.unlink()
            path.with_suffix(INDEX_FILE_SUFFIX).unlink()
            removed.append(path)
    return removed


class _Cleaner(threading.Thread):
    def __init__(self, log_dir: str | PathLike[str], interval: float) -> None:
        super().__init__(name="segment-cleaner", daemon=True)
        self.log_dir = log_dir
        self.interval = interval
        self._halt = threading.Event()

    def run(self) -> None:
        while True:
            clean_old_segments(self.log_dir)
            if self._halt.wait(self.interval):
                return

    def stop(self) -> None:
        self._halt.set()


def start_cleaner(log_dir: str | PathLike[str], interval: float = CLEAN_INTERVAL) -> _Cleaner:
    """Start a daemon thread that cleans ``log_dir`` every ``interval`` seconds."""
    cleaner = _Cleaner(log_dir, interval)
    cleaner.start()
    return cleaner