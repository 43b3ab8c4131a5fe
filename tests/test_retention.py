import time

import pytest

from logbroker.retention import RETENTION_TIME, clean_old_segments, start_cleaner


def make_segment(directory, stem, size):
    log = directory / f"{stem}.log"
    log.write_bytes(b"x" * size)
    (directory / f"{stem}.index").write_bytes(b"")
    return log


def test_recent_small_segments_are_kept(tmp_path):
    log = make_segment(tmp_path, "00000000000000000000", 10)
    assert clean_old_segments(tmp_path) == []
    assert log.exists()


def test_size_limit_removes_excess_segment(tmp_path):
    first = make_segment(tmp_path, "00000000000000000000", 10)
    second = make_segment(tmp_path, "00000000000000000100", 10)
    other = tmp_path / "notes.txt"
    other.write_text("keep")

    removed = clean_old_segments(tmp_path, max_log_size=15)

    assert len(removed) == 1
    assert removed[0] in (first, second)
    assert not removed[0].exists()
    assert not removed[0].with_suffix(".index").exists()
    survivors = {first, second} - set(removed)
    assert all(p.exists() for p in survivors)
    assert other.exists()


def test_old_segments_are_removed(tmp_path):
    logs = {make_segment(tmp_path, f"{i:020d}", 4) for i in range(3)}
    later = time.time() + RETENTION_TIME + 60
    removed = clean_old_segments(tmp_path, now=later)
    assert set(removed) == logs
    assert list(tmp_path.iterdir()) == []


def test_missing_directory_is_ignored(tmp_path):
    assert clean_old_segments(tmp_path / "absent") == []


def test_missing_index_is_an_error(tmp_path):
    (tmp_path / "00000000000000000000.log").write_bytes(b"data")
    with pytest.raises(FileNotFoundError):
        clean_old_segments(tmp_path, max_log_size=0)


def test_cleaner_thread_runs_and_stops(tmp_path):
    log = make_segment(tmp_path, "00000000000000000000", 4)
    cleaner = start_cleaner(tmp_path, 0.01)
    assert cleaner.is_alive()
    time.sleep(0.05)
    cleaner.stop()
    cleaner.join(timeout=2)
    assert not cleaner.is_alive()
    assert log.exists()