import pytest

from core.exceptions import (
    InvalidQoSError,
    MalformedLengthError,
    MalformedPacketError,
    PacketTooLargeError,
    UnexpectedEOFError,
)
from mqtt.packet.base import (
    decode_remaining_length,
    decode_string,
    encode_bytes,
    encode_keep_alive,
    encode_packet_id,
    encode_remaining_length,
    encode_string,
    fixed_header_byte,
    split_fixed_header_byte,
    to_qos,
)
from mqtt.packet.types import PacketType, QoS


@pytest.mark.parametrize(
    "length, expected",
    [
        (0, b"\x00"),
        (127, b"\x7f"),
        (128, b"\x80\x01"),
        (16383, b"\xff\x7f"),
        (16384, b"\x80\x80\x01"),
        (2097151, b"\xff\xff\x7f"),
        (2097152, b"\x80\x80\x80\x01"),
        (268435455, b"\xff\xff\xff\x7f"),
    ],
)
def test_encode_remaining_length_known_values(length, expected):
    assert encode_remaining_length(length) == expected


@pytest.mark.parametrize(
    "length", [0, 1, 127, 128, 321, 16383, 16384, 2097152, 268435455]
)
def test_decode_reverses_encode(length):
    encoded = encode_remaining_length(length)
    assert 1 <= len(encoded) <= 4
    value, pos = decode_remaining_length(encoded, 0)
    assert value == length
    assert pos == len(encoded)


@pytest.mark.parametrize("length", [-1, 268435456])
def test_encode_remaining_length_out_of_range(length):
    with pytest.raises(PacketTooLargeError):
        encode_remaining_length(length)


def test_decode_remaining_length_rejects_fifth_byte():
    with pytest.raises(MalformedLengthError):
        decode_remaining_length(b"\x30\xff\xff\xff\xff\x01")


def test_decode_remaining_length_truncated():
    with pytest.raises(UnexpectedEOFError):
        decode_remaining_length(b"\x30\x80")


def test_decode_remaining_length_returns_next_position():
    assert decode_remaining_length(b"\x30\x80\x01rest") == (128, 3)


def test_fixed_header_byte():
    assert fixed_header_byte(PacketType.CONNECT) == 0x10
    assert fixed_header_byte(PacketType.PUBLISH) == 0x30
    assert fixed_header_byte(PacketType.SUBSCRIBE, 0b0010) == 0x82
    assert fixed_header_byte(PacketType.DISCONNECT) == 0xE0


def test_split_fixed_header_byte():
    assert split_fixed_header_byte(0x3B) == (3, 0x0B)


def test_encode_string_uses_utf8_byte_length():
    assert encode_string("MQTT") == b"\x00\x04MQTT"
    assert encode_string("é") == b"\x00\x02\xc3\xa9"
    assert encode_string("") == b"\x00\x00"


def test_encode_bytes_limit():
    assert encode_bytes(b"\x00" * 65535)[:2] == b"\xff\xff"
    with pytest.raises(PacketTooLargeError):
        encode_bytes(b"\x00" * 65536)


def test_decode_string():
    assert decode_string(b"\x00\x04test!", 0) == ("test", 6)


def test_decode_string_truncated():
    with pytest.raises(MalformedPacketError):
        decode_string(b"\x00\x05test", 0)
    with pytest.raises(MalformedPacketError):
        decode_string(b"\x00", 0)


def test_decode_string_invalid_utf8():
    with pytest.raises(MalformedPacketError):
        decode_string(b"\x00\x01\xff", 0)


@pytest.mark.parametrize("packet_id", [0, 65536, -1])
def test_encode_packet_id_range(packet_id):
    with pytest.raises(MalformedPacketError):
        encode_packet_id(packet_id)


def test_encode_packet_id_big_endian():
    assert encode_packet_id(1) == b"\x00\x01"
    assert encode_packet_id(65535) == b"\xff\xff"


def test_encode_keep_alive():
    assert encode_keep_alive(10) == b"\x00\x0a"
    assert encode_keep_alive(0) == b"\x00\x00"
    with pytest.raises(MalformedPacketError):
        encode_keep_alive(65536)


def test_to_qos():
    assert to_qos(1) is QoS.AT_LEAST_ONCE
    with pytest.raises(InvalidQoSError) as exc_info:
        to_qos(3)
    assert exc_info.value.qos == 3
