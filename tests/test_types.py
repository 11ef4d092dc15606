import pytest

from mqtt.packet.types import ConnectReturnCode, PacketType, RefusalReason


def test_packet_type_values():
    assert PacketType.CONNECT == 1
    assert PacketType.PUBREL == 6
    assert PacketType.UNSUBACK == 11
    assert PacketType.DISCONNECT == 14
    assert len(PacketType) == 14


@pytest.mark.parametrize(
    "code, reason",
    [
        (1, RefusalReason.UNACCEPTABLE_PROTOCOL_VERSION),
        (2, RefusalReason.IDENTIFIER_REJECTED),
        (3, RefusalReason.SERVER_UNAVAILABLE),
        (4, RefusalReason.BAD_CREDENTIALS),
        (5, RefusalReason.NOT_AUTHORIZED),
        (6, RefusalReason.UNKNOWN),
        (255, RefusalReason.UNKNOWN),
    ],
)
def test_refusal_reason_from_return_code(code, reason):
    assert RefusalReason.from_return_code(code) is reason


def test_accepted_return_code():
    assert ConnectReturnCode.ACCEPTED == 0
