"""Exception definitions.

例外定義を提供するモジュール。

このモジュールはMQTTクライアントで使用される例外クラスと
エラーメッセージの定義を提供します。
"""

from typing import TYPE_CHECKING, Dict

if TYPE_CHECKING:
    from mqtt.packet.types import RefusalReason


# エラーメッセージ定義
ERROR_MESSAGES: Dict[str, str] = {
    # 設定関連
    "INVALID_URL": "Invalid URL: {url}",
    "UNSUPPORTED_SCHEME": "Unsupported network type: {scheme}",
    "INVALID_CONFIG": "Invalid {field}: {value}",
    # 接続関連
    "DIAL_FAILED": "Connect to {address} failed: {reason}",
    "TRANSPORT_IO": "Transport I/O error: {reason}",
    "UNEXPECTED_EOF": (
        "Unexpected EOF: read {received} bytes, expected {expected}"
    ),
    "TRANSPORT_CLOSED": "Transport is closed",
    "CONNECTION_REFUSED": "Connection refused: {reason}",
    # パケット関連
    "MALFORMED_LENGTH": "Malformed remaining length",
    "MALFORMED_PACKET": "Malformed packet: {detail}",
    "UNSUPPORTED_PACKET_TYPE": "Unsupported packet type {code}",
    "PACKET_TOO_LARGE": "Packet too large: {detail}",
    "INVALID_QOS": "Invalid QoS level: {qos}",
    # セッション関連
    "NOT_CONNECTED": "Session is not connected",
    "SESSION_CLOSED": "Session has already been used",
    # その他
    "UNEXPECTED_ERROR": "Unexpected error: {detail}",
}


class MQTTError(Exception):
    """MQTTクライアント関連の基本例外クラス.

    全てのMQTTクライアント関連の例外の基底クラスとして機能します。
    """


class ConfigError(MQTTError):
    """設定関連のエラー.

    接続先URLなどの設定値の解析時に発生するエラーを表します。
    """


class InvalidURLError(ConfigError):
    """URLが ``scheme://rest`` の形式でない場合のエラー."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(ERROR_MESSAGES["INVALID_URL"].format(url=url))


class UnsupportedSchemeError(ConfigError):
    """サポートされていないスキームが指定された場合のエラー."""

    def __init__(self, scheme: str) -> None:
        self.scheme = scheme
        super().__init__(
            ERROR_MESSAGES["UNSUPPORTED_SCHEME"].format(scheme=scheme)
        )


class InvalidConfigError(ConfigError):
    """設定値が許容範囲外の場合のエラー.

    Attributes:
        field: 設定項目名
        value: 指定された値
    """

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(
            ERROR_MESSAGES["INVALID_CONFIG"].format(field=field, value=value)
        )


class TransportError(MQTTError):
    """トランスポート関連のエラー.

    ネットワーク接続や送受信時に発生するエラーを表します。
    """


class TransportDialError(TransportError):
    """接続の確立に失敗した場合のエラー."""

    def __init__(self, address: str, reason: str) -> None:
        self.address = address
        super().__init__(
            ERROR_MESSAGES["DIAL_FAILED"].format(
                address=address, reason=reason
            )
        )


class TransportIOError(TransportError):
    """送受信中に発生したI/Oエラー."""


class UnexpectedEOFError(TransportIOError):
    """パケット境界の前にストリームが終了した場合のエラー."""

    def __init__(self, expected: int, received: int) -> None:
        self.expected = expected
        self.received = received
        super().__init__(
            ERROR_MESSAGES["UNEXPECTED_EOF"].format(
                expected=expected, received=received
            )
        )


class TransportClosedError(TransportIOError):
    """クローズ済みのトランスポートを使用した場合のエラー."""

    def __init__(self) -> None:
        super().__init__(ERROR_MESSAGES["TRANSPORT_CLOSED"])


class PacketError(MQTTError):
    """パケット処理のエラー.

    パケットの構築や解析時に発生するエラーを表します。
    """


class MalformedLengthError(PacketError):
    """残りの長さが4バイトを超えた場合のエラー."""

    def __init__(self) -> None:
        super().__init__(ERROR_MESSAGES["MALFORMED_LENGTH"])


class MalformedPacketError(PacketError):
    """パケットの形式が不正な場合のエラー."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            ERROR_MESSAGES["MALFORMED_PACKET"].format(detail=detail)
        )


class UnsupportedPacketTypeError(PacketError):
    """処理できないパケットタイプを受信した場合のエラー."""

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(
            ERROR_MESSAGES["UNSUPPORTED_PACKET_TYPE"].format(code=code)
        )


class PacketTooLargeError(PacketError):
    """フィールドやパケットが上限を超えた場合のエラー."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            ERROR_MESSAGES["PACKET_TOO_LARGE"].format(detail=detail)
        )


class InvalidQoSError(PacketError):
    """QoSレベルが0から2の範囲外の場合のエラー."""

    def __init__(self, qos: object) -> None:
        self.qos = qos
        super().__init__(ERROR_MESSAGES["INVALID_QOS"].format(qos=qos))


class ConnectionRefusedError(MQTTError):
    """ブローカーが接続を拒否した場合のエラー.

    CONNACKのリターンコードが0以外の場合に送出されます。

    Attributes:
        reason: 拒否理由
        return_code: CONNACKのリターンコード
    """

    def __init__(self, reason: "RefusalReason", return_code: int) -> None:
        self.reason = reason
        self.return_code = return_code
        super().__init__(
            ERROR_MESSAGES["CONNECTION_REFUSED"].format(reason=reason.value)
        )


class SessionError(MQTTError):
    """セッションの状態に関するエラー."""


class NotConnectedError(SessionError):
    """接続前に送信しようとした場合のエラー."""

    def __init__(self) -> None:
        super().__init__(ERROR_MESSAGES["NOT_CONNECTED"])


class SessionClosedError(SessionError):
    """使用済みのセッションで再接続しようとした場合のエラー."""

    def __init__(self) -> None:
        super().__init__(ERROR_MESSAGES["SESSION_CLOSED"])
