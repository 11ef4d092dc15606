"""MQTT protocol handling.

MQTTプロトコル処理を提供するパッケージ。

このパッケージはTCP経由のMQTT 3.1.1クライアントを提供します。
パケットの構築、解析、トランスポート、およびセッション管理が含まれています。
"""

from .client import MQTTClient, MQTTConfig, PacketIdAllocator, new
from .dispatcher import Dispatcher
from .packet import (
    ConnAck,
    Connect,
    Disconnect,
    Packet,
    PacketType,
    Publish,
    QoS,
    RefusalReason,
    Subscribe,
    build_connect_packet,
    build_disconnect_packet,
    build_publish_packet,
    build_subscribe_packet,
    parse_packet,
    parse_publish,
)
from .transport import TCPTransport
from .url import parse_url

# パブリックAPIとして公開する要素を定義
__all__ = [
    # クライアント
    "new",
    "MQTTClient",
    "MQTTConfig",
    "PacketIdAllocator",
    "Dispatcher",
    "TCPTransport",
    "parse_url",
    # 基本型
    "Packet",
    "PacketType",
    "QoS",
    "RefusalReason",
    "Connect",
    "ConnAck",
    "Publish",
    "Subscribe",
    "Disconnect",
    # パケット構築関数
    "build_connect_packet",
    "build_disconnect_packet",
    "build_publish_packet",
    "build_subscribe_packet",
    # パケット解析関数
    "parse_packet",
    "parse_publish",
]
