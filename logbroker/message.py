"""Binary frame format: 4-byte length, 1-byte type, 4-byte id, then the payload."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO

_LENGTH = struct.Struct(">I")
_HEADER = struct.Struct(">BI")

HEADER_SIZE = _HEADER.size

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BinaryMessage:
    """A typed, numbered message with an opaque payload."""

    msg_type: int
    msg_id: int
    payload: bytes = b""

    def __post_init__(self) -> None:
        if not 0 <= self.msg_type <= 0xFF:
            raise ValueError(f"msg_type {self.msg_type} does not fit in one byte")
        if not 0 <= self.msg_id <= 0xFFFFFFFF:
            raise ValueError(f"msg_id {self.msg_id} does not fit in four bytes")
        object.__setattr__(self, "payload", bytes(self.payload))

    def encode(self) -> bytes:
        """Serialise the message with its big-endian length prefix."""
        body = _HEADER.pack(self.msg_type, self.msg_id) + self.payload
        return _LENGTH.pack(len(body)) + body


def decode(data: bytes) -> BinaryMessage:
    """Parse a frame body (without its length prefix)."""
    if len(data) < HEADER_SIZE:
        raise ValueError("Buffer too short")
    msg_type, msg_id = _HEADER.unpack_from(data)
    return BinaryMessage(msg_type, msg_id, bytes(data[HEADER_SIZE:]))


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if data is None or len(data) < size:
        raise EOFError(f"expected {size} bytes, stream ended early")
    return data


def decode_stream(stream: BinaryIO) -> BinaryMessage:
    """Read a type byte and an id from ``stream``; the payload is left unread."""
    (msg_type,) = _read_exact(stream, 1)
    (msg_id,) = _LENGTH.unpack(_read_exact(stream, 4))
    message = BinaryMessage(msg_type, msg_id, b"")
    logger.debug(
        "decode_stream message: msg_type=%d, msg_id=%d, payload=%r",
        message.msg_type,
        message.msg_id,
        message.payload,
    )
    return message