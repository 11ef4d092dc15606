"""MQTTパケット解析モジュール.

このモジュールはMQTTパケットの解析機能を提供します。
固定ヘッダーを取り除いた本体を受け取り、パケットタイプに応じた
パケットモデルへ変換します。
"""

import struct
from typing import Callable, Dict

from core.exceptions import (
    MalformedPacketError,
    UnexpectedEOFError,
    UnsupportedPacketTypeError,
)

from .base import (
    decode_remaining_length,
    decode_string,
    split_fixed_header_byte,
)
from .models import ConnAck, Packet, Publish
from .types import PacketType, QoS

# CONNACKの残りの長さは常に2
CONNACK_REMAINING_LENGTH = 2


def parse_connack(body: bytes) -> ConnAck:
    """CONNACKパケットの本体を解析します.

    Args:
        body: 固定ヘッダーを除いたパケット本体

    Returns:
        ConnAck: 解析されたCONNACKパケット

    Raises:
        MalformedPacketError: 残りの長さが2でない場合
    """
    if len(body) != CONNACK_REMAINING_LENGTH:
        raise MalformedPacketError(
            f"CONNACK remaining length {len(body)}, expected "
            f"{CONNACK_REMAINING_LENGTH}"
        )
    return ConnAck(session_present_flags=body[0], return_code=body[1])


def parse_publish(flags: int, body: bytes) -> Publish:
    """PUBLISHパケットの本体を解析します.

    ペイロードはトピック(とQoS > 0の場合はパケットID)の後ろの
    残り全てで、空の場合もあります。

    Args:
        flags: 固定ヘッダーのフラグ
        body: 固定ヘッダーを除いたパケット本体

    Returns:
        Publish: 解析されたPUBLISHパケット

    Raises:
        MalformedPacketError: パケットの解析に失敗した場合
    """
    qos_bits = (flags & 0x06) >> 1
    if qos_bits > QoS.EXACTLY_ONCE:
        raise MalformedPacketError("PUBLISH with QoS 3")
    qos = QoS(qos_bits)

    topic, pos = decode_string(body, 0)

    # QoSレベルに応じてパケットIDを取得
    packet_id = None
    if qos > QoS.AT_MOST_ONCE:
        if len(body) < pos + 2:
            raise MalformedPacketError("Packet too short for QoS > 0")
        (packet_id,) = struct.unpack_from("!H", body, pos)
        pos += 2

    return Publish(
        topic=topic,
        payload=bytes(body[pos:]),
        qos=qos,
        packet_id=packet_id,
        dup=bool(flags & 0x08),
        retain=bool(flags & 0x01),
    )


BODY_PARSERS: Dict[PacketType, Callable[[int, bytes], Packet]] = {
    PacketType.CONNACK: lambda flags, body: parse_connack(body),
    PacketType.PUBLISH: parse_publish,
}


def parse_body(packet_type: int, flags: int, body: bytes) -> Packet:
    """パケットタイプに応じて本体を解析します.

    Raises:
        UnsupportedPacketTypeError: デコードできないパケットタイプの場合
    """
    try:
        body_parser = BODY_PARSERS[PacketType(packet_type)]
    except (KeyError, ValueError) as err:
        raise UnsupportedPacketTypeError(packet_type) from err
    return body_parser(flags, body)


def parse_packet(data: bytes) -> Packet:
    """バイナリデータから1つのMQTTパケットを解析します.

    Args:
        data: 固定ヘッダーを含む1パケット分のバイナリデータ

    Returns:
        Packet: 解析されたパケット

    Raises:
        UnexpectedEOFError: データが残りの長さより短い場合
        MalformedPacketError: データが残りの長さより長い場合
        UnsupportedPacketTypeError: デコードできないパケットタイプの場合
    """
    if not data:
        raise UnexpectedEOFError(1, 0)

    packet_type, flags = split_fixed_header_byte(data[0])
    remaining_length, pos = decode_remaining_length(data, 1)

    body = data[pos:]
    if len(body) < remaining_length:
        raise UnexpectedEOFError(remaining_length, len(body))
    if len(body) > remaining_length:
        raise MalformedPacketError(
            f"{len(body) - remaining_length} trailing bytes after packet"
        )

    return parse_body(packet_type, flags, body)
