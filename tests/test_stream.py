import pytest

from core.exceptions import (
    MalformedLengthError,
    MalformedPacketError,
    UnexpectedEOFError,
    UnsupportedPacketTypeError,
)
from mqtt.packet import ConnAck, Publish, read_connack, read_packet
from mqtt.packet.stream import read_remaining_length
from tests.conftest import BytesStream

pytestmark = pytest.mark.asyncio


async def test_read_remaining_length():
    stream = BytesStream(b"\x80\x80\x01tail")
    assert await read_remaining_length(stream) == 16384
    assert stream.remaining == b"tail"


async def test_read_remaining_length_too_long():
    with pytest.raises(MalformedLengthError):
        await read_remaining_length(BytesStream(b"\xff\xff\xff\xff\x01"))


async def test_read_packets_in_wire_order():
    stream = BytesStream(
        b"\x30\x05\x00\x01ahi" b"\x20\x02\x00\x00" b"\x30\x03\x00\x01b"
    )
    assert await read_packet(stream) == Publish("a", b"hi")
    assert await read_packet(stream) == ConnAck(0, 0)
    assert await read_packet(stream) == Publish("b", b"")


async def test_unsupported_packet_is_drained():
    stream = BytesStream(b"\x90\x03\x00\x01\x00" b"\x30\x03\x00\x01b")
    with pytest.raises(UnsupportedPacketTypeError):
        await read_packet(stream)
    assert await read_packet(stream) == Publish("b", b"")


async def test_read_packet_short_body():
    with pytest.raises(UnexpectedEOFError):
        await read_packet(BytesStream(b"\x30\x0a\x00\x04te"))


async def test_read_connack():
    stream = BytesStream(b"\x20\x02\x01\x05")
    assert await read_connack(stream) == ConnAck(1, 5)


async def test_read_connack_rejects_other_packet():
    with pytest.raises(MalformedPacketError):
        await read_connack(BytesStream(b"\x30\x02\x00\x00"))


async def test_read_connack_rejects_wrong_length():
    with pytest.raises(MalformedPacketError):
        await read_connack(BytesStream(b"\x20\x03\x00\x00\x00"))


async def test_read_connack_short_read():
    with pytest.raises(UnexpectedEOFError):
        await read_connack(BytesStream(b"\x20\x02"))
