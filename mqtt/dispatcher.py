"""Inbound packet dispatcher.

受信パケットをパケットタイプごとのハンドラーに振り分けるモジュール。
"""

import inspect
from typing import Awaitable, Callable, Dict, Optional, Union

from core.exceptions import UnsupportedPacketTypeError
from core.logging import logger

from .packet import Packet, PacketType

PacketHandler = Callable[[Packet], Union[None, Awaitable[None]]]


class Dispatcher:
    """パケットタイプをキーにしたハンドラーの振り分け.

    ハンドラーは通常の関数とコルーチン関数のどちらでも登録できます。
    ハンドラーが登録されていないパケットタイプは
    UnsupportedPacketTypeErrorになります。
    """

    def __init__(self) -> None:
        self._handlers: Dict[PacketType, PacketHandler] = {}

    def register(
        self, packet_type: PacketType, handler: PacketHandler
    ) -> None:
        """ハンドラーを登録します. 既存のハンドラーは置き換えられます."""
        packet_type = PacketType(packet_type)
        self._handlers[packet_type] = handler
        logger.debug(f"ハンドラーを登録しました: {packet_type.name}")

    def unregister(self, packet_type: PacketType) -> Optional[PacketHandler]:
        """ハンドラーの登録を解除します.

        Returns:
            Optional[PacketHandler]: 解除されたハンドラー
        """
        return self._handlers.pop(PacketType(packet_type), None)

    def handler_for(self, packet_type: PacketType) -> Optional[PacketHandler]:
        return self._handlers.get(PacketType(packet_type))

    async def dispatch(self, packet: Packet) -> None:
        """パケットを対応するハンドラーに渡します.

        Raises:
            UnsupportedPacketTypeError: ハンドラーが登録されていない場合
        """
        handler = self._handlers.get(packet.packet_type)
        if handler is None:
            raise UnsupportedPacketTypeError(int(packet.packet_type))

        result = handler(packet)
        if inspect.isawaitable(result):
            await result
