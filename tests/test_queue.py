from pathlib import Path

import pytest

from logbroker.queue import LogQueue


@pytest.fixture
def queue(tmp_path):
    with LogQueue(tmp_path / "queue", 1024) as q:
        yield q


def test_append_message(queue):
    assert queue.append_message(b"hello kafka") == 0


def test_read_message(queue):
    offset = queue.append_message(b"hello kafka")
    assert queue.read_message(offset) == b"hello kafka"


def test_read_message_after_rotation(queue):
    for write_offset in range(3000):
        queue.append_message(f"hello kafka {write_offset}".encode())
    for read_offset in range(800, 2000):
        assert queue.read_message(read_offset) == f"hello kafka {read_offset}".encode()


def test_segment_rotation(tmp_path):
    directory = tmp_path / "rot"
    with LogQueue(directory, 10) as q:
        assert q.append_message(b"1234567890") == 0
        assert q.append_message(b"new segment") == 1
        assert q.append_message(b"987654321") == 2
        assert q.read_message(0) == b"1234567890"
        assert q.read_message(1) == b"new segment"
        assert q.read_message(2) == b"987654321"
    assert len(list(Path(directory).glob("*.log"))) == 3


def test_write_times(queue):
    for offset in range(3000):
        message = f"heool kafka {offset}".encode()
        assert queue.append_message(message) == offset
        assert queue.read_message(offset) == message


def test_read_missing_offset_returns_none(queue):
    queue.append_message(b"only one")
    assert queue.read_message(10) is None


def test_reopen_continues_offsets(tmp_path):
    directory = tmp_path / "reopen"
    with LogQueue(directory, 1024) as q:
        for i in range(5):
            q.append_message(f"m{i}".encode())
    with LogQueue(directory, 1024) as q:
        assert q.append_message(b"m5") == 5
        assert [q.read_message(i) for i in range(6)] == [f"m{i}".encode() for i in range(6)]


def test_reopen_after_rotation_starts_new_segment(tmp_path):
    directory = tmp_path / "reopen-rot"
    with LogQueue(directory, 10) as q:
        for payload in (b"1234567890", b"new segment", b"987654321"):
            q.append_message(payload)
    with LogQueue(directory, 10) as q:
        assert q.append_message(b"again") == 3
    assert len(list(Path(directory).glob("*.log"))) == 4


def test_foreign_files_are_ignored(tmp_path):
    directory = tmp_path / "foreign"
    directory.mkdir()
    (directory / "notes.log").write_bytes(b"garbage")
    with LogQueue(directory, 1024) as q:
        assert q.append_message(b"first") == 0
        assert q.read_message(0) == b"first"