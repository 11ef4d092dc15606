"""MQTT packet models.

MQTTパケットの構造を表現するデータモデルを提供するモジュール。

各パケットはイミュータブルなデータクラスとして表現され、
``Packet`` はそれらのユニオン型です。
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from .types import PacketType, QoS


@dataclass(frozen=True)
class Connect:
    """CONNECTパケット.

    Attributes:
        client_id: クライアントID
        keep_alive: キープアライブ時間(秒)
        clean_session: クリーンセッションフラグ
    """

    packet_type: ClassVar[PacketType] = PacketType.CONNECT

    client_id: str
    keep_alive: int = 10
    clean_session: bool = True


@dataclass(frozen=True)
class ConnAck:
    """CONNACKパケット.

    Attributes:
        session_present_flags: 接続確認フラグ(ビット0がセッション有無)
        return_code: リターンコード
    """

    packet_type: ClassVar[PacketType] = PacketType.CONNACK

    session_present_flags: int
    return_code: int

    @property
    def session_present(self) -> bool:
        """セッションが存在するかどうか."""
        return bool(self.session_present_flags & 0x01)


@dataclass(frozen=True)
class Publish:
    """PUBLISHパケット.

    ``packet_id`` はQoSが1以上の場合のみ存在します。

    Attributes:
        topic: トピック名
        payload: アプリケーションメッセージ
        qos: QoSレベル
        packet_id: パケットID
        dup: 再送フラグ
        retain: 保持フラグ
    """

    packet_type: ClassVar[PacketType] = PacketType.PUBLISH

    topic: str
    payload: bytes
    qos: QoS = QoS.AT_MOST_ONCE
    packet_id: Optional[int] = None
    dup: bool = False
    retain: bool = False


@dataclass(frozen=True)
class Subscribe:
    """単一フィルターのSUBSCRIBEパケット.

    Attributes:
        packet_id: パケットID
        topic: トピックフィルター
        requested_qos: 要求するQoSレベル
    """

    packet_type: ClassVar[PacketType] = PacketType.SUBSCRIBE

    packet_id: int
    topic: str
    requested_qos: QoS = QoS.AT_MOST_ONCE


@dataclass(frozen=True)
class Disconnect:
    """DISCONNECTパケット."""

    packet_type: ClassVar[PacketType] = PacketType.DISCONNECT


Packet = Union[Connect, ConnAck, Publish, Subscribe, Disconnect]
