"""TCP transport.

asyncioのストリームを使用してブローカーと通信するトランスポートモジュール。

主な機能:
- ``host:port`` への接続
- 全バイトの書き込み
- 指定バイト数の読み取り
- 冪等なクローズ
"""

import asyncio
from typing import Optional, Tuple

from core.exceptions import (
    TransportClosedError,
    TransportDialError,
    TransportIOError,
    UnexpectedEOFError,
)
from core.logging import logger


def split_address(address: str) -> Tuple[str, int]:
    """``host:port`` をホストとポートに分解する.

    IPv6アドレスは ``[::1]:1883`` の形式で指定します。

    Raises:
        TransportDialError: アドレスの形式が不正な場合
    """
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise TransportDialError(address, "missing host or port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, int(port)


class TCPTransport:
    """ブローカーとのTCP接続.

    読み取りはパケット読み取りループから、書き込みは送信側から行われます。
    書き込みの排他制御は呼び出し側が行います。

    Attributes:
        address: 接続先アドレス
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        address: str,
    ) -> None:
        self.address = address
        self._reader = reader
        self._writer = writer
        self._closed = False

    @classmethod
    async def open(
        cls, address: str, timeout: Optional[float] = None
    ) -> "TCPTransport":
        """``host:port`` に接続します.

        Args:
            address: 接続先アドレス
            timeout: 接続タイムアウト(秒)。Noneの場合は無制限

        Returns:
            TCPTransport: 接続済みのトランスポート

        Raises:
            TransportDialError: 接続に失敗した場合
        """
        host, port = split_address(address)
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port), timeout
            )
        except asyncio.TimeoutError as err:
            raise TransportDialError(address, "timed out") from err
        except OSError as err:
            raise TransportDialError(address, str(err)) from err

        logger.debug(f"TCP接続を確立しました: {address}")
        return cls(reader, writer, address)

    @property
    def closed(self) -> bool:
        """クローズ済みかどうか."""
        return self._closed

    async def write_all(self, data: bytes) -> None:
        """全てのバイトを書き込みます.

        Raises:
            TransportClosedError: クローズ済みの場合
            TransportIOError: 書き込みに失敗した場合
        """
        if self._closed:
            raise TransportClosedError()
        try:
            self._writer.write(data)
            await self._writer.drain()
        except OSError as err:
            raise TransportIOError(
                f"write to {self.address} failed: {err}"
            ) from err

    async def read_exact(self, size: int) -> bytes:
        """ちょうど ``size`` バイトを読み取ります.

        Raises:
            TransportClosedError: クローズ済み、または読み取り中に
                クローズされた場合
            UnexpectedEOFError: 途中でストリームが終了した場合
            TransportIOError: 読み取りに失敗した場合
        """
        if self._closed:
            raise TransportClosedError()
        if size == 0:
            return b""
        try:
            return await self._reader.readexactly(size)
        except asyncio.IncompleteReadError as err:
            if self._closed:
                raise TransportClosedError() from err
            raise UnexpectedEOFError(size, len(err.partial)) from err
        except OSError as err:
            if self._closed:
                raise TransportClosedError() from err
            raise TransportIOError(
                f"read from {self.address} failed: {err}"
            ) from err

    async def close(self) -> None:
        """接続を閉じます. 2回目以降の呼び出しは何もしません."""
        if self._closed:
            return
        self._closed = True
        # 読み取り中のタスクをEOFで解放する
        self._reader.feed_eof()
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except OSError as err:
            logger.debug(f"クローズ時のエラーを無視します: {err}")
        logger.debug(f"TCP接続を閉じました: {self.address}")
