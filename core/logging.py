"""Logging configuration.

ロギング設定を提供するモジュール。
主な機能:
- Richによるコンソールへのログ出力
- 任意のファイルへのログ出力
- MQTTパケットのログ記録
- エラー情報のログ記録
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from .constants import CONSOLE_THEME, FILE_LOG_FORMAT, LOG_FORMAT, LOGGER_NAME
from .exceptions import ERROR_MESSAGES


class LoggerFactory:
    """ロガーインスタンスを生成と設定をするファクトリークラス."""

    def __init__(self) -> None:
        """LoggerFactoryの初期化."""
        self._console = Console(theme=Theme(CONSOLE_THEME))

    def create_logger(
        self,
        name: str = LOGGER_NAME,
        level: int = logging.INFO,
        log_file: Optional[Union[str, Path]] = None,
    ) -> logging.Logger:
        """ロガーインスタンスを生成し設定する.

        Args:
            name: ロガー名、デフォルト:"mqtt"
            level: ログレベル、デフォルト:logging.INFO
            log_file: ログファイルのパス、Noneの場合はファイル出力なし

        Returns:
            logging.Logger: 設定済みロガーインスタンス
        """
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers.clear()

        rich_handler = RichHandler(
            console=self._console,
            rich_tracebacks=True,
            markup=False,
            show_time=False,
            show_path=False,
        )
        rich_handler.setLevel(level)
        rich_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(rich_handler)

        if log_file is not None:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
            logger.addHandler(file_handler)

        return logger


logger_factory = LoggerFactory()

# パッケージ共通のロガー。ハンドラーはsetup_logging()で設定する
logger = logging.getLogger(LOGGER_NAME)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """パッケージロガーにハンドラーを設定する.

    Args:
        level: ログレベル
        log_file: ログファイルのパス

    Returns:
        logging.Logger: 設定済みのロガーインスタンス
    """
    return logger_factory.create_logger(LOGGER_NAME, level, log_file)


def log_packet(
    packet_type: str,
    packet_data: bytes,
    direction: str = ">>",
    level: int = logging.DEBUG,
) -> None:
    """MQTTパケットをログに記録する.

    Args:
        packet_type (str): パケットの種類
        packet_data (bytes): パケットのデータ
        direction (str, optional): パケットの方向（>> = 送信、<< = 受信）.
            デフォルトは">>"
        level (int, optional): ログレベル. デフォルトはDEBUG
    """
    if not logger.isEnabledFor(level):
        return
    hex_data = packet_data.hex(" ") if packet_data else "(empty)"
    logger.log(level, f"{direction} {packet_type}: {hex_data}")


def log_error(
    error_code: str,
    detail: Optional[Dict[str, Any]] = None,
    level: int = logging.ERROR,
) -> None:
    """エラー情報をログに記録する.

    Args:
        error_code (str): エラーコード
        detail (Optional[Dict[str, Any]], optional): エラーの詳細情報.
            デフォルトはNone
        level (int, optional): ログレベル. デフォルトはERROR
    """
    error_msg = ERROR_MESSAGES.get(error_code, "Unknown error: {detail}")
    if detail:
        error_msg = error_msg.format(**detail)
    logger.log(level, error_msg)
