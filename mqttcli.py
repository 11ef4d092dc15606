"""MQTT TCPクライアントのコマンドラインツール.

ブローカーに接続し、指定されたトピックへの発行と購読を行います。
受信したメッセージはログに出力されます。

使用例:
    mqttcli tcp://localhost:1883 --client-id demo --subscribe test/ \\
        --publish test hello --duration 5
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from core import MAX_KEEP_ALIVE, MQTTError, logger, setup_logging
from mqtt import MQTTClient, MQTTConfig, Publish, QoS


def keep_alive_seconds(value: str) -> int:
    """キープアライブ秒数の引数を検証します."""
    seconds = int(value)
    if not 0 <= seconds <= MAX_KEEP_ALIVE:
        raise argparse.ArgumentTypeError(
            f"keep alive must be between 0 and {MAX_KEEP_ALIVE}"
        )
    return seconds


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """コマンドライン引数を解析します."""
    parser = argparse.ArgumentParser(
        prog="mqttcli", description="Minimal MQTT 3.1.1 client over TCP"
    )
    parser.add_argument("url", help="broker URL, e.g. tcp://localhost:1883")
    parser.add_argument("--client-id", default="mqttcli", help="client id")
    parser.add_argument(
        "--publish",
        nargs=2,
        action="append",
        default=[],
        metavar=("TOPIC", "MESSAGE"),
        help="publish MESSAGE to TOPIC at QoS 0 (repeatable)",
    )
    parser.add_argument(
        "--subscribe",
        action="append",
        default=[],
        metavar="TOPIC",
        help="subscribe to TOPIC (repeatable)",
    )
    parser.add_argument(
        "--qos",
        type=int,
        choices=[int(q) for q in QoS],
        default=0,
        help="requested QoS for subscriptions",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="seconds to stay connected (default: until Ctrl-C)",
    )
    parser.add_argument("--keep-alive", type=keep_alive_seconds, default=None)
    parser.add_argument("--log-file", default=None, help="also log to file")
    parser.add_argument(
        "--debug", action="store_true", help="log packet hex dumps"
    )
    return parser.parse_args(argv)


def print_message(packet: Publish) -> None:
    """受信したメッセージをログに出力します."""
    try:
        text = packet.payload.decode("utf-8")
    except UnicodeDecodeError:
        text = packet.payload.hex(" ")
    logger.info(f"受信: {packet.topic} (QoS {int(packet.qos)}): {text}")


async def run(args: argparse.Namespace) -> None:
    """接続してから操作を実行し、指定時間後に切断します."""
    config = MQTTConfig()
    if args.keep_alive is not None:
        config = MQTTConfig(keep_alive=args.keep_alive)

    client = MQTTClient(args.client_id, config)
    client.on_message(print_message)

    cancel = asyncio.Event()
    session = asyncio.create_task(client.connect(args.url, cancel))

    # 接続完了かセッション終了まで待つ
    connected = asyncio.create_task(client.wait_connected())
    await asyncio.wait(
        {session, connected}, return_when=asyncio.FIRST_COMPLETED
    )
    if not connected.done():
        connected.cancel()
    if session.done():
        session.result()
        return

    try:
        for topic in args.subscribe:
            packet_id = await client.subscribe(topic, QoS(args.qos))
            logger.info(f"購読: {topic} (パケットID: {packet_id})")
        for topic, message in args.publish:
            await client.publish(topic, message.encode("utf-8"))
            logger.info(f"発行: {topic}")

        if args.duration is not None:
            await asyncio.wait({session}, timeout=args.duration)
        else:
            await session

        if client.is_connected:
            await client.disconnect()
    finally:
        cancel.set()
        await session


def main(argv: Optional[List[str]] = None) -> int:
    """アプリケーションのメインエントリーポイント."""
    args = parse_args(argv)
    setup_logging(
        level=logging.DEBUG if args.debug else logging.INFO,
        log_file=args.log_file,
    )

    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("シャットダウンしました")
    except MQTTError as e:
        logger.error(f"エラーが発生しました: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
