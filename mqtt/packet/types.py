"""MQTT packet types.

MQTTパケットタイプの定義を提供するモジュール。

このモジュールはMQTTプロトコルで使用される各種パケットタイプ、
QoSレベル、およびCONNACKのリターンコードを定義します。
値はMQTT 3.1.1仕様に準拠しています。
"""

from enum import Enum, IntEnum, unique


@unique
class PacketType(IntEnum):
    """MQTTパケットタイプを定義する列挙型.

    MQTT v3.1.1仕様に基づくパケットタイプの列挙です。
    各パケットタイプは固有の整数値を持ち、固定ヘッダーの上位4ビットで
    識別されます。

    Attributes:
        CONNECT (int): クライアントからサーバーへの接続要求パケット
        CONNACK (int): サーバーからクライアントへの接続応答パケット
        PUBLISH (int): メッセージの配信パケット
        PUBACK (int): QoS 1での PUBLISH パケットの受信確認
        PUBREC (int): QoS 2での PUBLISH パケットの受信通知
        PUBREL (int): QoS 2での PUBLISH パケットの解放
        PUBCOMP (int): QoS 2での PUBLISH パケットの完了
        SUBSCRIBE (int): トピックの購読要求パケット
        SUBACK (int): サーバーからの購読要求応答パケット
        UNSUBSCRIBE (int): トピックの購読解除要求パケット
        UNSUBACK (int): サーバーからの購読解除応答パケット
        PINGREQ (int): クライアントからのping要求パケット
        PINGRESP (int): サーバーからのping応答パケット
        DISCONNECT (int): クライアントからの正常切断要求パケット
    """

    CONNECT = 1
    CONNACK = 2
    PUBLISH = 3
    PUBACK = 4
    PUBREC = 5
    PUBREL = 6
    PUBCOMP = 7
    SUBSCRIBE = 8
    SUBACK = 9
    UNSUBSCRIBE = 10
    UNSUBACK = 11
    PINGREQ = 12
    PINGRESP = 13
    DISCONNECT = 14


@unique
class QoS(IntEnum):
    """QoSレベル.

    Attributes:
        AT_MOST_ONCE (0): 最大1回の配信
        AT_LEAST_ONCE (1): 最低1回の配信
        EXACTLY_ONCE (2): 正確に1回の配信
    """

    AT_MOST_ONCE = 0
    AT_LEAST_ONCE = 1
    EXACTLY_ONCE = 2


@unique
class ConnectReturnCode(IntEnum):
    """CONNACKのリターンコード."""

    ACCEPTED = 0
    UNACCEPTABLE_PROTOCOL_VERSION = 1
    IDENTIFIER_REJECTED = 2
    SERVER_UNAVAILABLE = 3
    BAD_CREDENTIALS = 4
    NOT_AUTHORIZED = 5


@unique
class RefusalReason(Enum):
    """接続拒否の理由.

    値はエラーメッセージに埋め込まれる説明文です。
    """

    UNACCEPTABLE_PROTOCOL_VERSION = "unacceptable protocol version"
    IDENTIFIER_REJECTED = "identifier rejected"
    SERVER_UNAVAILABLE = "server unavailable"
    BAD_CREDENTIALS = "bad user name or password"
    NOT_AUTHORIZED = "not authorized"
    UNKNOWN = "unknown"

    @classmethod
    def from_return_code(cls, return_code: int) -> "RefusalReason":
        """リターンコードから拒否理由を取得します.

        Args:
            return_code: CONNACKのリターンコード(1以上)

        Returns:
            RefusalReason: 対応する拒否理由。未定義のコードはUNKNOWN
        """
        try:
            code = ConnectReturnCode(return_code)
        except ValueError:
            return cls.UNKNOWN
        return cls.__members__.get(code.name, cls.UNKNOWN)
