"""Framed message exchange over TCP and an echo server that speaks it."""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from contextlib import suppress

from .message import BinaryMessage, decode

DEFAULT_ADDRESS = "127.0.0.1:9092"


async def send_message(writer: asyncio.StreamWriter, msg: BinaryMessage) -> None:
    """Write ``msg`` as one frame and wait until it is flushed."""
    writer.write(msg.encode())
    await writer.drain()


async def receive_message(reader: asyncio.StreamReader) -> BinaryMessage:
    """Read one length-prefixed frame and decode it.

    Raises asyncio.IncompleteReadError if the stream ends mid-frame and
    ValueError if the frame body is malformed.
    """
    length = int.from_bytes(await reader.readexactly(4), "big")
    body = await reader.readexactly(length)
    return decode(body)


def _split_address(address: str) -> tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"address {address!r} is not of the form host:port")
    return host.strip("[]"), int(port)


class NetworkServer:
    """TCP server that echoes every frame it receives back to the sender."""

    def __init__(self, address: str) -> None:
        self.host, self.port = _split_address(address)
        self.address = address
        self.started = asyncio.Event()

    async def start(self) -> None:
        """Bind and serve until cancelled."""
        server = await asyncio.start_server(self._handle_client, self.host, self.port)
        self.port = server.sockets[0].getsockname()[1]
        self.address = f"{self.host}:{self.port}"
        print(f"Server running on {self.address}")
        self.started.set()
        async with server:
            await server.serve_forever()

    async def _handle_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        peer = writer.get_extra_info("peername")
        print(f"New connection: {peer}")
        try:
            while True:
                try:
                    message = await receive_message(reader)
                except (asyncio.IncompleteReadError, ConnectionResetError):
                    print(f"Client {peer} disconnected.")
                    break
                except (OSError, ValueError) as exc:
                    print(f"Failed to receive message: {exc}", file=sys.stderr)
                    break
                print(f"Received message: {message.msg_id}")
                try:
                    await send_message(writer, message)
                except OSError as exc:
                    print(f"Error sending message: {exc}", file=sys.stderr)
                    break
        finally:
            writer.close()
            with suppress(OSError):
                await writer.wait_closed()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the echo server until interrupted."""
    parser = argparse.ArgumentParser(prog="logbroker", description="Run the message server.")
    parser.add_argument("--address", default=DEFAULT_ADDRESS, help="host:port to listen on")
    args = parser.parse_args(argv)
    try:
        server = NetworkServer(args.address)
    except ValueError as exc:
        parser.error(str(exc))
    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        pass
    return 0