"""MQTT TCP client.

TCP経由でMQTTブローカーに接続するクライアントです。
以下の機能を提供します:

- CONNECT/CONNACKによる接続ハンドシェイク
- QoS 0でのメッセージ発行
- 単一トピックの購読
- 切断要求の送信
- バックグラウンドでのパケット受信とハンドラーへの振り分け
"""

import asyncio
import threading
from dataclasses import dataclass
from typing import Optional

from core import (
    INBOUND_QUEUE_SIZE,
    MAX_KEEP_ALIVE,
    MAX_PACKET_ID,
    MQTT_CLEAN_SESSION,
    MQTT_KEEP_ALIVE,
    ConnectionRefusedError,
    InvalidConfigError,
    MQTTError,
    NotConnectedError,
    SessionClosedError,
    StatusFlag,
    UnsupportedPacketTypeError,
    log_error,
    log_packet,
    logger,
)

from .dispatcher import Dispatcher, PacketHandler
from .packet import (
    ConnAck,
    Connect,
    ConnectReturnCode,
    Disconnect,
    Packet,
    PacketType,
    Publish,
    QoS,
    RefusalReason,
    Subscribe,
    encode_packet,
    read_connack,
    read_packet,
    to_qos,
)
from .transport import TCPTransport
from .url import parse_url

# パケット読み取りループの終了を通知する番兵
_READER_DONE = None


@dataclass
class MQTTConfig:
    """MQTT接続の設定.

    値の範囲は生成時に検証されます。

    Attributes:
        keep_alive: キープアライブ間隔(秒)。PINGREQは送信しません
        clean_session: クリーンセッションフラグ
        queue_size: 受信キューの最大長
        connect_timeout: 接続とCONNACK受信のタイムアウト(秒)。
            Noneの場合は無制限
    """

    keep_alive: int = MQTT_KEEP_ALIVE
    clean_session: bool = MQTT_CLEAN_SESSION
    queue_size: int = INBOUND_QUEUE_SIZE
    connect_timeout: Optional[float] = None

    def __post_init__(self) -> None:
        if not 0 <= self.keep_alive <= MAX_KEEP_ALIVE:
            raise InvalidConfigError("keep_alive", self.keep_alive)
        if self.queue_size < 0:
            raise InvalidConfigError("queue_size", self.queue_size)
        if self.connect_timeout is not None and self.connect_timeout <= 0:
            raise InvalidConfigError("connect_timeout", self.connect_timeout)


class PacketIdAllocator:
    """パケットIDの採番.

    1から始まり単調に増加し、65535の次は1に戻ります(0は使用しません)。
    複数スレッドから呼び出されても重複しません。
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last = 0

    @property
    def last(self) -> int:
        """最後に採番したID. 未採番の場合は0."""
        return self._last

    def next(self) -> int:
        with self._lock:
            self._last = self._last % MAX_PACKET_ID + 1
            return self._last


class MQTTClient:
    """MQTT TCPクライアント.

    ``connect`` はセッションが終了するまで呼び出し元をブロックします。
    ``publish``、``subscribe``、``disconnect`` は同じイベントループ上の
    別のタスクから呼び出します。セッションは使い捨てで、
    一度接続したインスタンスは再接続できません。

    Attributes:
        config: MQTT接続設定
        dispatcher: 受信パケットの振り分け
        state: 現在の接続状態
    """

    def __init__(
        self, client_id: str, config: Optional[MQTTConfig] = None
    ) -> None:
        """MQTTClientを初期化します.

        Args:
            client_id: クライアントID
            config: MQTT接続設定
        """
        self._client_id = client_id
        self.config = config or MQTTConfig()
        self.dispatcher = Dispatcher()
        self.state = StatusFlag.DISCONNECTED

        self._transport: Optional[TCPTransport] = None
        self._packet_ids = PacketIdAllocator()
        self._queue: "asyncio.Queue[Optional[Packet]]" = asyncio.Queue(
            maxsize=self.config.queue_size
        )
        self._write_lock = asyncio.Lock()
        self._reader_task: Optional[asyncio.Task] = None
        self._connected = asyncio.Event()

    @property
    def client_id(self) -> str:
        return self._client_id

    @property
    def is_connected(self) -> bool:
        return self.state == StatusFlag.CONNECTED

    async def wait_connected(self) -> None:
        """CONNACKを受信して接続が確立するまで待ちます."""
        await self._connected.wait()

    @property
    def last_packet_id(self) -> int:
        """最後に採番したパケットID."""
        return self._packet_ids.last

    def on_message(self, callback: PacketHandler) -> None:
        """受信したPUBLISHを受け取るコールバックを登録します."""
        self.dispatcher.register(PacketType.PUBLISH, callback)

    def on_connack(self, callback: PacketHandler) -> None:
        """接続後に受信したCONNACKを受け取るコールバックを登録します."""
        self.dispatcher.register(PacketType.CONNACK, callback)

    async def connect(
        self, url: str, cancel: Optional[asyncio.Event] = None
    ) -> None:
        """ブローカーに接続し、セッションが終了するまで受信パケットを処理します.

        ``cancel`` がセットされるか、受信が終了してキューが空になると
        正常に戻ります。戻る時点でトランスポートは閉じられます。

        Args:
            url: 接続先URL (``tcp://host:port``)
            cancel: セッションを終了させるイベント

        Raises:
            SessionClosedError: 使用済みのセッションの場合
            InvalidURLError: URLの形式が不正な場合
            UnsupportedSchemeError: スキームが ``tcp`` 以外の場合
            TransportDialError: 接続に失敗した場合
            ConnectionRefusedError: ブローカーが接続を拒否した場合
        """
        if self.state != StatusFlag.DISCONNECTED:
            raise SessionClosedError()

        _, address = parse_url(url)

        self.state = StatusFlag.CONNECTING
        logger.info(f"接続状態: {self.state.name} ({url})")
        try:
            self._transport = await TCPTransport.open(
                address, self.config.connect_timeout
            )
        except MQTTError:
            self.state = StatusFlag.DISCONNECTED
            raise

        try:
            await asyncio.wait_for(
                self._handshake(self._transport), self.config.connect_timeout
            )
        except BaseException:
            self.state = StatusFlag.CLOSED
            await self._transport.close()
            raise

        self.state = StatusFlag.CONNECTED
        self._connected.set()
        logger.info(
            f"接続状態: {self.state.name} (クライアントID: {self._client_id})"
        )

        self._reader_task = asyncio.create_task(
            self._read_loop(self._transport)
        )
        try:
            await self._dispatch_loop(cancel)
        finally:
            self.state = StatusFlag.CLOSED
            await self._transport.close()
            await self._stop_reader()
            logger.info(f"接続状態: {self.state.name}")

    async def publish(self, topic: str, payload: bytes) -> None:
        """QoS 0でメッセージを発行します.

        バイト列がトランスポートに書き込まれた時点で戻ります。

        Raises:
            NotConnectedError: 接続していない場合
        """
        await self._send(Publish(topic=topic, payload=bytes(payload)))

    async def subscribe(
        self, topic: str, qos: QoS = QoS.AT_MOST_ONCE
    ) -> int:
        """トピックを購読します.

        SUBACKは待たず、バイト列が書き込まれた時点で戻ります。

        Returns:
            int: SUBSCRIBEに使用したパケットID

        Raises:
            InvalidQoSError: QoSが範囲外の場合
            NotConnectedError: 接続していない場合
        """
        requested_qos = to_qos(qos)
        self._ensure_connected()
        packet_id = self._packet_ids.next()
        await self._send(
            Subscribe(
                packet_id=packet_id, topic=topic, requested_qos=requested_qos
            )
        )
        return packet_id

    async def disconnect(self) -> None:
        """DISCONNECTを送信します.

        トランスポートは閉じず、``connect`` の終了時に閉じられます。
        送信後のセッションは再利用できません。

        Raises:
            NotConnectedError: 接続していない場合
        """
        await self._send(Disconnect())
        self.state = StatusFlag.CLOSED
        logger.info(f"接続状態: {self.state.name} (DISCONNECT送信済み)")

    def _ensure_connected(self) -> None:
        if self.state != StatusFlag.CONNECTED or self._transport is None:
            raise NotConnectedError()

    async def _send(self, packet: Packet) -> None:
        self._ensure_connected()
        await self._write_packet(packet)

    async def _write_packet(self, packet: Packet) -> None:
        """パケットを書き込みます. 書き込みは互いに排他です."""
        if self._transport is None:
            raise NotConnectedError()
        data = encode_packet(packet)
        async with self._write_lock:
            await self._transport.write_all(data)
        log_packet(packet.packet_type.name, data, direction=">>")

    async def _handshake(self, transport: TCPTransport) -> None:
        """CONNECTを送信し、CONNACKのリターンコードを検証します."""
        await self._write_packet(
            Connect(
                client_id=self._client_id,
                keep_alive=self.config.keep_alive,
                clean_session=self.config.clean_session,
            )
        )
        connack = await read_connack(transport)
        self._check_connack(connack)

    @staticmethod
    def _check_connack(connack: ConnAck) -> None:
        """CONNACKのリターンコードを検証します.

        Raises:
            ConnectionRefusedError: リターンコードが0以外の場合
        """
        if connack.return_code == ConnectReturnCode.ACCEPTED:
            logger.debug(
                f"CONNACK受信 (session_present={connack.session_present})"
            )
            return
        reason = RefusalReason.from_return_code(connack.return_code)
        log_error("CONNECTION_REFUSED", {"reason": reason.value})
        raise ConnectionRefusedError(reason, connack.return_code)

    async def _read_loop(self, transport: TCPTransport) -> None:
        """パケットを読み取り、受信キューに追加します.

        読み取りエラーで終了すると番兵をキューに追加します。
        """
        try:
            while True:
                try:
                    packet = await read_packet(transport)
                except UnsupportedPacketTypeError as err:
                    # 本体は読み取り済みなので次のパケットから続行する
                    logger.debug(f"未対応のパケットを読み飛ばしました: {err}")
                    continue
                await self._queue.put(packet)
        except MQTTError as err:
            logger.debug(f"パケット受信ループを終了します: {err}")
        await self._queue.put(_READER_DONE)

    async def _dispatch_loop(self, cancel: Optional[asyncio.Event]) -> None:
        """受信キューからパケットを取り出し、ハンドラーに渡します."""
        cancel_wait: Optional[asyncio.Future] = None
        if cancel is not None:
            cancel_wait = asyncio.ensure_future(cancel.wait())
        get_task: Optional[asyncio.Future] = None
        try:
            while True:
                get_task = asyncio.ensure_future(self._queue.get())
                if cancel_wait is not None:
                    done, _ = await asyncio.wait(
                        {get_task, cancel_wait},
                        return_when=asyncio.FIRST_COMPLETED,
                    )
                    if cancel_wait in done:
                        get_task.cancel()
                        logger.info("セッションがキャンセルされました")
                        return

                packet = await get_task
                if packet is _READER_DONE:
                    logger.warning("ブローカーとの接続が終了しました")
                    return
                await self._handle_packet(packet)
        finally:
            if get_task is not None:
                get_task.cancel()
            if cancel_wait is not None:
                cancel_wait.cancel()

    async def _handle_packet(self, packet: Packet) -> None:
        try:
            await self.dispatcher.dispatch(packet)
        except UnsupportedPacketTypeError:
            logger.debug(
                f"ハンドラーが未登録のパケットです: {packet.packet_type.name}"
            )
        except Exception as err:
            logger.error(f"パケット処理エラー: {err}")

    async def _stop_reader(self) -> None:
        if self._reader_task is None:
            return
        reader_task, self._reader_task = self._reader_task, None
        reader_task.cancel()
        # waitはタスクの例外を送出しない
        await asyncio.wait({reader_task})
        if not reader_task.cancelled() and reader_task.exception():
            logger.error(
                f"パケット受信ループが異常終了しました: {reader_task.exception()}"
            )


def new(client_id: str, config: Optional[MQTTConfig] = None) -> MQTTClient:
    """クライアントIDを指定してセッションを作成します."""
    return MQTTClient(client_id, config)
