"""MQTT packet stream reader.

トランスポートからパケット単位でデータを読み取るモジュール。

固定ヘッダーを1バイトずつ読み、残りの長さに従って本体を読み取ってから
パーサーに渡します。
"""

from typing import Protocol

from core.constants import MAX_REMAINING_LENGTH_BYTES
from core.exceptions import MalformedLengthError, MalformedPacketError
from core.logging import log_packet

from .base import encode_remaining_length, split_fixed_header_byte
from .models import ConnAck, Packet
from .parser import CONNACK_REMAINING_LENGTH, parse_body, parse_connack
from .types import PacketType

# CONNACKは固定ヘッダー2バイトと本体2バイトの計4バイト
CONNACK_PACKET_SIZE = 4


class ByteStream(Protocol):
    """パケットの読み取りに必要なトランスポートのインターフェース."""

    async def read_exact(self, size: int) -> bytes: ...


async def read_remaining_length(stream: ByteStream) -> int:
    """ストリームから可変長の残りの長さを読み取る.

    Raises:
        MalformedLengthError: 5バイト目が必要な場合
    """
    multiplier = 1
    value = 0
    for _ in range(MAX_REMAINING_LENGTH_BYTES):
        (byte,) = await stream.read_exact(1)
        value += (byte & 0x7F) * multiplier
        if not byte & 0x80:
            return value
        multiplier *= 128
    raise MalformedLengthError()


async def read_packet(stream: ByteStream) -> Packet:
    """ストリームから1パケットを読み取り解析する.

    本体は解析の前に全て読み取られるため、サポートされていない
    パケットタイプでもストリームはパケット境界に留まります。

    Returns:
        Packet: 解析されたパケット

    Raises:
        UnsupportedPacketTypeError: デコードできないパケットタイプの場合
        TransportIOError: 読み取りに失敗した場合
    """
    (first_byte,) = await stream.read_exact(1)
    packet_type, flags = split_fixed_header_byte(first_byte)
    remaining_length = await read_remaining_length(stream)
    body = await stream.read_exact(remaining_length)

    log_packet(
        _packet_type_name(packet_type),
        bytes([first_byte]) + encode_remaining_length(remaining_length) + body,
        direction="<<",
    )
    return parse_body(packet_type, flags, body)


async def read_connack(stream: ByteStream) -> ConnAck:
    """接続直後のCONNACKを読み取る.

    Raises:
        MalformedPacketError: CONNACK以外のパケット、または残りの長さが
            2でないCONNACKを受信した場合
    """
    data = await stream.read_exact(CONNACK_PACKET_SIZE)
    log_packet(PacketType.CONNACK.name, data, direction="<<")

    packet_type, _ = split_fixed_header_byte(data[0])
    if packet_type != PacketType.CONNACK:
        raise MalformedPacketError(
            f"expected CONNACK, received packet type {packet_type}"
        )
    if data[1] != CONNACK_REMAINING_LENGTH:
        raise MalformedPacketError(
            f"CONNACK remaining length {data[1]}, expected "
            f"{CONNACK_REMAINING_LENGTH}"
        )
    return parse_connack(data[2:])


def _packet_type_name(packet_type: int) -> str:
    try:
        return PacketType(packet_type).name
    except ValueError:
        return f"UNKNOWN({packet_type})"
