"""MQTT packet handling.

MQTTパケット処理を提供するパッケージ。

主な機能:
- 固定ヘッダーと残りの長さのエンコード
- パケットの構築と解析
- パケットタイプとパケットモデルの定義
- ストリームからのパケット読み取り
"""

from .base import (
    decode_remaining_length,
    encode_remaining_length,
    encode_string,
    fixed_header_byte,
    to_qos,
)
from .builder import (
    build_connack_packet,
    build_connect_packet,
    build_disconnect_packet,
    build_publish_packet,
    build_subscribe_packet,
    encode_packet,
)
from .models import ConnAck, Connect, Disconnect, Packet, Publish, Subscribe
from .parser import parse_connack, parse_packet, parse_publish
from .stream import read_connack, read_packet
from .types import ConnectReturnCode, PacketType, QoS, RefusalReason

__all__ = [
    # 型定義
    "PacketType",
    "QoS",
    "ConnectReturnCode",
    "RefusalReason",
    # パケットモデル
    "Packet",
    "Connect",
    "ConnAck",
    "Publish",
    "Subscribe",
    "Disconnect",
    # エンコード
    "fixed_header_byte",
    "encode_remaining_length",
    "decode_remaining_length",
    "encode_string",
    "to_qos",
    # パケット構築
    "build_connect_packet",
    "build_connack_packet",
    "build_disconnect_packet",
    "build_publish_packet",
    "build_subscribe_packet",
    "encode_packet",
    # パケット解析
    "parse_packet",
    "parse_connack",
    "parse_publish",
    "read_packet",
    "read_connack",
]
