"""Broker URL parsing.

接続先URLを解析するモジュール。
"""

from typing import Tuple

from core.constants import MQTT_SUPPORTED_SCHEME, URL_SCHEME_SEPARATOR
from core.exceptions import InvalidURLError, UnsupportedSchemeError


def parse_url(url: str) -> Tuple[str, str]:
    """URLをスキームとアドレスに分解する.

    ``tcp://localhost:1883`` の形式のみを受け付けます。
    アドレス部分はそのまま ``host:port`` として返します。

    Args:
        url: 接続先URL

    Returns:
        Tuple[str, str]: (スキーム, アドレス)

    Raises:
        InvalidURLError: ``scheme://rest`` の形式でない場合
        UnsupportedSchemeError: スキームが ``tcp`` 以外の場合
    """
    parts = url.split(URL_SCHEME_SEPARATOR)
    if len(parts) != 2:
        raise InvalidURLError(url)

    scheme, address = parts
    if scheme != MQTT_SUPPORTED_SCHEME:
        raise UnsupportedSchemeError(scheme)
    return scheme, address
