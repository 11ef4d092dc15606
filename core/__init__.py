"""Core functionality.

コアとなる機能を提供するパッケージ。

以下の機能を提供します:
- ロギング機能
- 定数定義
- 例外クラス
"""

from .constants import (
    INBOUND_QUEUE_SIZE,
    MAX_KEEP_ALIVE,
    MAX_PACKET_ID,
    MAX_REMAINING_LENGTH,
    MAX_STRING_LENGTH,
    MQTT_CLEAN_SESSION,
    MQTT_KEEP_ALIVE,
    MQTT_PROTOCOL_LEVEL,
    MQTT_PROTOCOL_NAME,
    MQTT_SUPPORTED_SCHEME,
    StatusFlag,
)
from .exceptions import (
    ERROR_MESSAGES,
    ConfigError,
    ConnectionRefusedError,
    InvalidConfigError,
    InvalidQoSError,
    InvalidURLError,
    MalformedLengthError,
    MalformedPacketError,
    MQTTError,
    NotConnectedError,
    PacketError,
    PacketTooLargeError,
    SessionClosedError,
    SessionError,
    TransportClosedError,
    TransportDialError,
    TransportError,
    TransportIOError,
    UnexpectedEOFError,
    UnsupportedPacketTypeError,
    UnsupportedSchemeError,
)
from .logging import log_error, log_packet, logger, setup_logging

__all__ = [
    # ロギング関連
    "logger",
    "setup_logging",
    "log_packet",
    "log_error",
    # 定数関連
    "StatusFlag",
    "MQTT_PROTOCOL_NAME",
    "MQTT_PROTOCOL_LEVEL",
    "MQTT_KEEP_ALIVE",
    "MQTT_CLEAN_SESSION",
    "MAX_KEEP_ALIVE",
    "MQTT_SUPPORTED_SCHEME",
    "MAX_REMAINING_LENGTH",
    "MAX_STRING_LENGTH",
    "MAX_PACKET_ID",
    "INBOUND_QUEUE_SIZE",
    # 例外クラス
    "MQTTError",
    "ConfigError",
    "InvalidURLError",
    "UnsupportedSchemeError",
    "InvalidConfigError",
    "TransportError",
    "TransportDialError",
    "TransportIOError",
    "UnexpectedEOFError",
    "TransportClosedError",
    "PacketError",
    "MalformedLengthError",
    "MalformedPacketError",
    "UnsupportedPacketTypeError",
    "PacketTooLargeError",
    "InvalidQoSError",
    "ConnectionRefusedError",
    "SessionError",
    "NotConnectedError",
    "SessionClosedError",
    "ERROR_MESSAGES",
]
