"""MQTT packet base.

MQTTパケットの基本的なエンコード・デコード処理を提供するモジュール。

主な機能:
- 固定ヘッダーの先頭バイトの構築と分解
- 可変長の残りの長さのエンコードとデコード
- 長さプレフィックス付き文字列・バイト列のエンコードとデコード
"""

import struct
from typing import Tuple

from core.constants import (
    MAX_KEEP_ALIVE,
    MAX_PACKET_ID,
    MAX_REMAINING_LENGTH,
    MAX_REMAINING_LENGTH_BYTES,
    MAX_STRING_LENGTH,
)
from core.exceptions import (
    InvalidQoSError,
    MalformedLengthError,
    MalformedPacketError,
    PacketTooLargeError,
    UnexpectedEOFError,
)

from .types import QoS

from .types import PacketType


def fixed_header_byte(packet_type: PacketType, flags: int = 0) -> int:
    """固定ヘッダーの先頭バイトを構築する.

    Args:
        packet_type: パケットタイプ
        flags: 下位4ビットのフラグ

    Returns:
        int: ``(packet_type << 4) | flags``
    """
    return (int(packet_type) << 4) | (flags & 0x0F)


def split_fixed_header_byte(first_byte: int) -> Tuple[int, int]:
    """固定ヘッダーの先頭バイトをパケットタイプとフラグに分解する.

    Returns:
        Tuple[int, int]: (パケットタイプの値, フラグ)
    """
    return first_byte >> 4, first_byte & 0x0F


def encode_remaining_length(length: int) -> bytes:
    """残りの長さを可変長エンコードする.

    Args:
        length: 0以上268435455以下の残りの長さ

    Returns:
        bytes: エンコードされた1〜4バイト

    Raises:
        PacketTooLargeError: 範囲外の長さの場合
    """
    if length < 0 or length > MAX_REMAINING_LENGTH:
        raise PacketTooLargeError(f"remaining length {length} out of range")

    encoded = bytearray()
    while True:
        digit = length % 128
        length = length // 128
        # 後続のバイトがある場合は最上位ビットを立てる
        if length > 0:
            digit |= 0x80
        encoded.append(digit)
        if length == 0:
            break

    return bytes(encoded)


def decode_remaining_length(data: bytes, start: int = 1) -> Tuple[int, int]:
    """可変長の残りの長さをデコードする.

    Args:
        data (bytes): パケットデータ
        start (int, optional): デコードを開始する位置。デフォルトは1。

    Returns:
        Tuple[int, int]: (残りの長さ, 次の位置)のタプル

    Raises:
        UnexpectedEOFError: データが途中で終わっている場合
        MalformedLengthError: 5バイト目が必要な場合
    """
    multiplier = 1
    value = 0
    index = start

    while True:
        if index - start >= MAX_REMAINING_LENGTH_BYTES:
            raise MalformedLengthError()
        if index >= len(data):
            raise UnexpectedEOFError(index - start + 1, index - start)

        byte = data[index]
        value += (byte & 0x7F) * multiplier
        multiplier *= 128
        index += 1

        if not byte & 0x80:
            break

    return value, index


def encode_string(s: str) -> bytes:
    """文字列をMQTT形式でエンコードする.

    Args:
        s (str): エンコードする文字列

    Returns:
        bytes: 2バイトのビッグエンディアン長に続くUTF-8バイト列

    Raises:
        PacketTooLargeError: UTF-8での長さが65535バイトを超える場合
    """
    return encode_bytes(s.encode("utf-8"))


def encode_bytes(data: bytes) -> bytes:
    """バイト列を長さプレフィックス付きでエンコードする."""
    if len(data) > MAX_STRING_LENGTH:
        raise PacketTooLargeError(
            f"field length {len(data)} exceeds {MAX_STRING_LENGTH}"
        )
    return struct.pack("!H", len(data)) + data


def decode_string(data: bytes, start: int = 0) -> Tuple[str, int]:
    """長さプレフィックス付き文字列をデコードする.

    Args:
        data: バッファ
        start: 長さフィールドの位置

    Returns:
        Tuple[str, int]: (文字列, 次の位置)

    Raises:
        MalformedPacketError: バッファが短い、またはUTF-8として不正な場合
    """
    if len(data) < start + 2:
        raise MalformedPacketError("string length prefix truncated")
    (length,) = struct.unpack_from("!H", data, start)
    end = start + 2 + length
    if len(data) < end:
        raise MalformedPacketError(
            f"string of {length} bytes exceeds packet body"
        )
    try:
        return data[start + 2 : end].decode("utf-8"), end
    except UnicodeDecodeError as err:
        raise MalformedPacketError(f"invalid UTF-8 string: {err}") from err


def encode_packet_id(packet_id: int) -> bytes:
    """パケットIDをビッグエンディアンの2バイトにエンコードする.

    Raises:
        MalformedPacketError: 0または65535を超えるIDの場合
    """
    if not 0 < packet_id <= MAX_PACKET_ID:
        raise MalformedPacketError(f"packet id {packet_id} out of range")
    return struct.pack("!H", packet_id)


def encode_keep_alive(keep_alive: int) -> bytes:
    """キープアライブ秒数をビッグエンディアンの2バイトにエンコードする.

    Raises:
        MalformedPacketError: 0から65535の範囲外の場合
    """
    if not 0 <= keep_alive <= MAX_KEEP_ALIVE:
        raise MalformedPacketError(f"keep alive {keep_alive} out of range")
    return struct.pack("!H", keep_alive)


def to_qos(qos: int) -> QoS:
    """整数をQoSレベルに変換する.

    Raises:
        InvalidQoSError: 0から2の範囲外の場合
    """
    try:
        return QoS(qos)
    except ValueError:
        raise InvalidQoSError(qos) from None
