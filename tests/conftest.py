import asyncio
import logging
import socket
from typing import List, Optional

import pytest
import pytest_asyncio

logging.basicConfig(level=logging.INFO, format="%(levelname)-8s %(message)s")

CONNACK_ACCEPTED = b"\x20\x02\x00\x00"


async def read_raw_packet(reader: asyncio.StreamReader) -> bytes:
    """Read one framed packet, returning its full bytes."""
    first = await reader.readexactly(1)
    length_bytes = b""
    length = 0
    multiplier = 1
    while True:
        b = await reader.readexactly(1)
        length_bytes += b
        length += (b[0] & 0x7F) * multiplier
        multiplier *= 128
        if not b[0] & 0x80:
            break
    body = await reader.readexactly(length)
    return first + length_bytes + body


class FakeBroker:
    """Scripted broker: answers CONNECT with a fixed CONNACK and records
    every packet the client sends."""

    def __init__(
        self,
        connack: bytes = CONNACK_ACCEPTED,
        after_connack: bytes = b"",
        close_on_disconnect: bool = True,
    ) -> None:
        self.connack = connack
        self.after_connack = after_connack
        self.close_on_disconnect = close_on_disconnect
        self.packets: List[bytes] = []
        self.client_closed = asyncio.Event()
        self._new_packet = asyncio.Condition()
        self._writer: Optional[asyncio.StreamWriter] = None
        self._server: Optional[asyncio.AbstractServer] = None
        self.port = 0

    @property
    def url(self) -> str:
        return f"tcp://127.0.0.1:{self.port}"

    async def start(self) -> None:
        self._server = await asyncio.start_server(
            self._handle, "127.0.0.1", 0
        )
        self.port = self._server.sockets[0].getsockname()[1]

    async def stop(self) -> None:
        if self._writer is not None:
            self._writer.close()
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()

    async def send(self, data: bytes) -> None:
        assert self._writer is not None
        self._writer.write(data)
        await self._writer.drain()

    async def close_client(self) -> None:
        assert self._writer is not None
        self._writer.close()

    async def wait_for_packets(self, count: int, timeout: float = 2.0):
        async def _wait():
            async with self._new_packet:
                await self._new_packet.wait_for(
                    lambda: len(self.packets) >= count
                )

        await asyncio.wait_for(_wait(), timeout)
        return self.packets[:count]

    async def _record(self, packet: bytes) -> None:
        async with self._new_packet:
            self.packets.append(packet)
            self._new_packet.notify_all()

    async def _handle(self, reader, writer) -> None:
        self._writer = writer
        try:
            await self._record(await read_raw_packet(reader))
            writer.write(self.connack + self.after_connack)
            await writer.drain()
            while True:
                packet = await read_raw_packet(reader)
                await self._record(packet)
                if packet == b"\xe0\x00" and self.close_on_disconnect:
                    writer.close()
                    break
        except (asyncio.IncompleteReadError, ConnectionError):
            pass
        finally:
            self.client_closed.set()


@pytest_asyncio.fixture
async def broker():
    fake = FakeBroker()
    await fake.start()
    yield fake
    await fake.stop()


@pytest_asyncio.fixture
async def make_broker():
    started = []

    async def _make(**kwargs) -> FakeBroker:
        fake = FakeBroker(**kwargs)
        await fake.start()
        started.append(fake)
        return fake

    yield _make
    for fake in started:
        await fake.stop()


@pytest.fixture
def unused_tcp_port_url() -> str:
    """A tcp URL with no listener behind it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"tcp://127.0.0.1:{port}"


class BytesStream:
    """In-memory stand-in for a transport's read side."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    async def read_exact(self, size: int) -> bytes:
        from core.exceptions import UnexpectedEOFError

        chunk = self._data[self._pos : self._pos + size]
        self._pos += len(chunk)
        if len(chunk) < size:
            raise UnexpectedEOFError(size, len(chunk))
        return chunk

    @property
    def remaining(self) -> bytes:
        return self._data[self._pos :]
