"""Constants definitions.

定数定義を提供するモジュール。

含まれる定数:
- MQTTプロトコル設定
- 接続先URL設定
- セッション設定
- ログとコンソール表示設定
"""

from enum import IntEnum, unique
from typing import Dict, Final


@unique
class StatusFlag(IntEnum):
    """接続状態を表す列挙型.

    Attributes:
        DISCONNECTED (0): 未接続
        CONNECTING (1): 接続中
        CONNECTED (2): 接続済み
        CLOSED (3): 終了済み(再利用不可)
    """

    DISCONNECTED = 0
    CONNECTING = 1
    CONNECTED = 2
    CLOSED = 3


# MQTT設定
MQTT_PROTOCOL_NAME: Final[str] = "MQTT"
MQTT_PROTOCOL_LEVEL: Final[int] = 4
MQTT_KEEP_ALIVE: Final[int] = 10
MQTT_CLEAN_SESSION: Final[bool] = True
MAX_KEEP_ALIVE: Final[int] = 65_535

# 接続先URL設定
MQTT_SUPPORTED_SCHEME: Final[str] = "tcp"
URL_SCHEME_SEPARATOR: Final[str] = "://"

# パケット制限
MAX_REMAINING_LENGTH: Final[int] = 268_435_455
MAX_REMAINING_LENGTH_BYTES: Final[int] = 4
MAX_STRING_LENGTH: Final[int] = 65_535
MAX_PACKET_ID: Final[int] = 65_535

# セッション設定
INBOUND_QUEUE_SIZE: Final[int] = 100

# ログとコンソール設定
LOGGER_NAME: Final[str] = "mqtt"
LOG_FORMAT: Final[str] = "%(message)s"
FILE_LOG_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

CONSOLE_THEME: Final[Dict[str, str]] = {
    "info": "blue",
    "warning": "yellow",
    "error": "red",
    "debug": "dim white",
    "success": "green",
    "header": "magenta",
}
