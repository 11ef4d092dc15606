import pytest

from core.exceptions import (
    InvalidQoSError,
    MalformedPacketError,
    UnsupportedPacketTypeError,
)
from mqtt.packet import (
    ConnAck,
    Connect,
    Disconnect,
    Publish,
    QoS,
    Subscribe,
    build_connack_packet,
    build_connect_packet,
    build_disconnect_packet,
    build_publish_packet,
    build_subscribe_packet,
    encode_packet,
)


def test_connect_golden_bytes():
    packet = build_connect_packet("c")
    assert packet == (
        b"\x10"  # CONNECT, flags 0
        b"\x0d"  # remaining length 13
        b"\x00\x04MQTT"
        b"\x04"  # protocol level
        b"\x02"  # clean session
        b"\x00\x0a"  # keep alive 10
        b"\x00\x01c"
    )


def test_connect_remaining_length_tracks_client_id():
    packet = build_connect_packet("test")
    assert packet[1] == 10 + 2 + 4
    assert packet.endswith(b"\x00\x04test")


def test_connect_options():
    packet = build_connect_packet("c", keep_alive=0, clean_session=False)
    assert packet[9] == 0x00
    assert packet[10:12] == b"\x00\x00"


@pytest.mark.parametrize("keep_alive", [-1, 65536])
def test_connect_rejects_keep_alive_out_of_range(keep_alive):
    with pytest.raises(MalformedPacketError):
        build_connect_packet("c", keep_alive=keep_alive)


def test_connect_max_keep_alive():
    packet = build_connect_packet("c", keep_alive=65535)
    assert packet[10:12] == b"\xff\xff"


def test_disconnect_is_two_bytes():
    assert build_disconnect_packet() == b"\xe0\x00"


def test_publish_qos0_layout():
    packet = build_publish_packet("test", b"test")
    assert packet == b"\x30\x0a\x00\x04testtest"


def test_publish_empty_payload():
    assert build_publish_packet("a", b"") == b"\x30\x03\x00\x01a"


def test_publish_long_payload_uses_multibyte_length():
    packet = build_publish_packet("t", b"x" * 200)
    assert packet[0] == 0x30
    assert packet[1:3] == b"\xcb\x01"  # 203
    assert len(packet) == 3 + 203


def test_publish_qos1_carries_packet_id():
    packet = build_publish_packet("t", b"p", qos=1, packet_id=7)
    assert packet == b"\x32\x06\x00\x01t\x00\x07p"


def test_publish_flags():
    packet = build_publish_packet("t", b"", qos=0, retain=True, dup=True)
    assert packet[0] == 0x39


def test_publish_rejects_inconsistent_packet_id():
    with pytest.raises(MalformedPacketError):
        build_publish_packet("t", b"", qos=1)
    with pytest.raises(MalformedPacketError):
        build_publish_packet("t", b"", qos=0, packet_id=1)


def test_subscribe_layout():
    packet = build_subscribe_packet(1, "test/", QoS.AT_MOST_ONCE)
    assert packet[0] == 0x82
    assert packet[1] == 2 + 2 + 5 + 1
    assert packet[2:] == b"\x00\x01\x00\x05test/\x00"


def test_subscribe_requested_qos():
    assert build_subscribe_packet(300, "a", 2)[2:] == b"\x01\x2c\x00\x01a\x02"


def test_subscribe_rejects_zero_packet_id():
    with pytest.raises(MalformedPacketError):
        build_subscribe_packet(0, "a")


def test_subscribe_rejects_invalid_qos():
    with pytest.raises(InvalidQoSError):
        build_subscribe_packet(1, "a", 3)


def test_publish_rejects_invalid_qos():
    with pytest.raises(InvalidQoSError):
        build_publish_packet("a", b"", qos=3, packet_id=1)


def test_connack():
    assert build_connack_packet(5) == b"\x20\x02\x00\x05"
    assert build_connack_packet(0, session_present=True) == b"\x20\x02\x01\x00"


@pytest.mark.parametrize(
    "packet, expected",
    [
        (Connect("c"), build_connect_packet("c")),
        (Publish("t", b"p"), b"\x30\x04\x00\x01tp"),
        (Subscribe(2, "t"), b"\x82\x06\x00\x02\x00\x01t\x00"),
        (Disconnect(), b"\xe0\x00"),
        (ConnAck(0, 0), b"\x20\x02\x00\x00"),
    ],
)
def test_encode_packet(packet, expected):
    assert encode_packet(packet) == expected


def test_encode_packet_unknown_object():
    with pytest.raises(UnsupportedPacketTypeError):
        encode_packet(object())
