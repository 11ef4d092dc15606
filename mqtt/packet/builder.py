"""MQTT packet builder.

MQTTパケットビルダーを提供するモジュール。

主な機能:
- CONNECTパケットの生成
- PUBLISHパケットの生成
- SUBSCRIBEパケットの生成
- DISCONNECTパケットの生成
- パケットモデルからバイト列への変換
"""

from typing import Optional

from core.constants import (
    MQTT_CLEAN_SESSION,
    MQTT_KEEP_ALIVE,
    MQTT_PROTOCOL_LEVEL,
    MQTT_PROTOCOL_NAME,
)
from core.exceptions import MalformedPacketError, UnsupportedPacketTypeError

from .base import (
    encode_keep_alive,
    encode_packet_id,
    encode_remaining_length,
    encode_string,
    fixed_header_byte,
    to_qos,
)
from .models import ConnAck, Connect, Disconnect, Packet, Publish, Subscribe
from .types import PacketType, QoS

# SUBSCRIBEの固定ヘッダーで予約済みのフラグ
SUBSCRIBE_FLAGS = 0b0010


def _assemble(first_byte: int, body: bytes) -> bytes:
    """固定ヘッダーと本体を結合する."""
    return bytes([first_byte]) + encode_remaining_length(len(body)) + body


def build_connect_packet(
    client_id: str,
    keep_alive: int = MQTT_KEEP_ALIVE,
    clean_session: bool = MQTT_CLEAN_SESSION,
) -> bytes:
    """CONNECTパケットを生成する.

    Args:
        client_id (str): クライアントID
        keep_alive (int): キープアライブ時間(秒)。デフォルト10秒。
        clean_session (bool): セッションをクリーンに保つかどうか:デフォルトTrue

    Returns:
        bytes: 生成されたCONNECTパケット

    Raises:
        MalformedPacketError: キープアライブが範囲外の場合
    """
    connect_flags = 0x02 if clean_session else 0x00

    # 可変ヘッダーの構築
    var_header = (
        encode_string(MQTT_PROTOCOL_NAME)
        + bytes([MQTT_PROTOCOL_LEVEL, connect_flags])
        + encode_keep_alive(keep_alive)
    )

    # ペイロードの構築
    payload = encode_string(client_id)

    return _assemble(
        fixed_header_byte(PacketType.CONNECT), var_header + payload
    )


def build_publish_packet(
    topic: str,
    payload: bytes,
    qos: int = 0,
    packet_id: Optional[int] = None,
    retain: bool = False,
    dup: bool = False,
) -> bytes:
    """PUBLISHパケットを生成する.

    Args:
        topic (str): 発行するトピック
        payload (bytes): メッセージのペイロード
        qos (int): QoSレベル(0-2)。デフォルト0。
        packet_id (Optional[int]): パケットID。QoS > 0の場合のみ必須。
        retain (bool): 保持フラグ。デフォルトFalse。
        dup (bool): 再送フラグ。デフォルトFalse。

    Returns:
        bytes: 生成されたPUBLISHパケット

    Raises:
        MalformedPacketError: QoSとパケットIDの組み合わせが不正な場合
        InvalidQoSError: QoSが範囲外の場合
    """
    qos = to_qos(qos)
    flags = (dup << 3) | (qos << 1) | retain

    # 可変ヘッダーの構築
    var_header = encode_string(topic)

    # QoS > 0の場合はパケットIDを追加
    if qos > QoS.AT_MOST_ONCE:
        if packet_id is None:
            raise MalformedPacketError("PUBLISH with QoS > 0 needs packet id")
        var_header += encode_packet_id(packet_id)
    elif packet_id is not None:
        raise MalformedPacketError("PUBLISH with QoS 0 carries no packet id")

    return _assemble(
        fixed_header_byte(PacketType.PUBLISH, flags), var_header + payload
    )


def build_subscribe_packet(packet_id: int, topic: str, qos: int = 0) -> bytes:
    """SUBSCRIBEパケットを生成する.

    Args:
        packet_id (int): パケットID(1-65535)
        topic (str): 購読するトピックフィルター
        qos (int): 要求するQoSレベル(0-2)。デフォルト0。

    Returns:
        bytes: 生成されたSUBSCRIBEパケット

    Raises:
        InvalidQoSError: QoSが範囲外の場合
    """
    var_header = encode_packet_id(packet_id)

    # ペイロードの構築(トピックとQoSのペア)
    payload = encode_string(topic) + bytes([to_qos(qos)])

    return _assemble(
        fixed_header_byte(PacketType.SUBSCRIBE, SUBSCRIBE_FLAGS),
        var_header + payload,
    )


def build_disconnect_packet() -> bytes:
    """DISCONNECTパケットを生成する.

    Returns:
        bytes: ``0xE0 0x00``
    """
    return _assemble(fixed_header_byte(PacketType.DISCONNECT), b"")


def build_connack_packet(
    return_code: int, session_present: bool = False
) -> bytes:
    """CONNACKパケットを生成する."""
    return _assemble(
        fixed_header_byte(PacketType.CONNACK),
        bytes([int(session_present), return_code]),
    )


def encode_packet(packet: Packet) -> bytes:
    """パケットモデルをバイト列に変換する.

    Args:
        packet: 変換するパケット

    Returns:
        bytes: ワイヤー上のバイト列

    Raises:
        UnsupportedPacketTypeError: 変換できないパケットの場合
    """
    if isinstance(packet, Connect):
        return build_connect_packet(
            packet.client_id, packet.keep_alive, packet.clean_session
        )
    if isinstance(packet, Publish):
        return build_publish_packet(
            packet.topic,
            packet.payload,
            packet.qos,
            packet.packet_id,
            packet.retain,
            packet.dup,
        )
    if isinstance(packet, Subscribe):
        return build_subscribe_packet(
            packet.packet_id, packet.topic, packet.requested_qos
        )
    if isinstance(packet, Disconnect):
        return build_disconnect_packet()
    if isinstance(packet, ConnAck):
        return build_connack_packet(
            packet.return_code, packet.session_present
        )
    raise UnsupportedPacketTypeError(
        int(getattr(packet, "packet_type", 0))
    )
