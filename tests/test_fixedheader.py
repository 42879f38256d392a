import pytest

from mqttcore.fixedheader import (
    FixedHeader,
    InvalidFlagsError,
    PacketType,
    encode_length,
)

P = PacketType


def _fields(ptype, dup=False, qos=0, retain=False, remaining=0):
    return {
        "remaining": remaining,
        "packet_type": ptype,
        "qos": qos,
        "dup": dup,
        "retain": retain,
    }


TABLE = [
    (bytes([P.CONNECT << 4, 0x00]), _fields(P.CONNECT), False),
    (bytes([P.CONNACK << 4, 0x00]), _fields(P.CONNACK), False),
    (bytes([P.PUBLISH << 4, 0x00]), _fields(P.PUBLISH), False),
    (bytes([P.PUBLISH << 4 | 1 << 1, 0x00]), _fields(P.PUBLISH, qos=1), False),
    (bytes([P.PUBLISH << 4 | 1 << 1 | 1, 0x00]), _fields(P.PUBLISH, qos=1, retain=True), False),
    (bytes([P.PUBLISH << 4 | 2 << 1, 0x00]), _fields(P.PUBLISH, qos=2), False),
    (bytes([P.PUBLISH << 4 | 2 << 1 | 1, 0x00]), _fields(P.PUBLISH, qos=2, retain=True), False),
    (bytes([P.PUBLISH << 4 | 1 << 3, 0x00]), _fields(P.PUBLISH, dup=True), False),
    (bytes([P.PUBLISH << 4 | 1 << 3 | 1, 0x00]), _fields(P.PUBLISH, dup=True, retain=True), False),
    (
        bytes([P.PUBLISH << 4 | 1 << 3 | 1 << 1 | 1, 0x00]),
        _fields(P.PUBLISH, dup=True, qos=1, retain=True),
        False,
    ),
    (
        bytes([P.PUBLISH << 4 | 1 << 3 | 2 << 1 | 1, 0x00]),
        _fields(P.PUBLISH, dup=True, qos=2, retain=True),
        False,
    ),
    (bytes([P.PUBACK << 4, 0x00]), _fields(P.PUBACK), False),
    (bytes([P.PUBREC << 4, 0x00]), _fields(P.PUBREC), False),
    (bytes([P.PUBREL << 4 | 1 << 1, 0x00]), _fields(P.PUBREL, qos=1), False),
    (bytes([P.PUBCOMP << 4, 0x00]), _fields(P.PUBCOMP), False),
    (bytes([P.SUBSCRIBE << 4 | 1 << 1, 0x00]), _fields(P.SUBSCRIBE, qos=1), False),
    (bytes([P.SUBACK << 4, 0x00]), _fields(P.SUBACK), False),
    (bytes([P.UNSUBSCRIBE << 4 | 1 << 1, 0x00]), _fields(P.UNSUBSCRIBE, qos=1), False),
    (bytes([P.UNSUBACK << 4, 0x00]), _fields(P.UNSUBACK), False),
    (bytes([P.PINGREQ << 4, 0x00]), _fields(P.PINGREQ), False),
    (bytes([P.PINGRESP << 4, 0x00]), _fields(P.PINGRESP), False),
    (bytes([P.DISCONNECT << 4, 0x00]), _fields(P.DISCONNECT), False),
    (bytes([P.PUBLISH << 4, 0x0A]), _fields(P.PUBLISH, remaining=10), False),
    (bytes([P.PUBLISH << 4, 0x80, 0x04]), _fields(P.PUBLISH, remaining=512), False),
    (bytes([P.PUBLISH << 4, 0xD2, 0x07]), _fields(P.PUBLISH, remaining=978), False),
    (bytes([P.PUBLISH << 4, 0x86, 0x9D, 0x01]), _fields(P.PUBLISH, remaining=20102), False),
    (
        bytes([P.PUBLISH << 4, 0xD5, 0x86, 0xF9, 0x9E, 0x01]),
        _fields(P.PUBLISH, remaining=333333333),
        False,
    ),
    (bytes([P.CONNECT << 4 | 1 << 3, 0x00]), _fields(P.CONNECT, dup=True), True),
    (bytes([P.CONNECT << 4 | 1 << 1, 0x00]), _fields(P.CONNECT, qos=1), True),
    (bytes([P.CONNECT << 4 | 1, 0x00]), _fields(P.CONNECT, retain=True), True),
]

VALID = [(raw, fields) for raw, fields, flag_error in TABLE if not flag_error]
INVALID = [raw for raw, _, flag_error in TABLE if flag_error]


@pytest.mark.parametrize("raw, fields", VALID)
def test_fixed_header_encode(raw, fields):
    header = FixedHeader(**fields)
    assert header.encode() == raw


@pytest.mark.parametrize("raw, fields", VALID)
def test_fixed_header_decode(raw, fields):
    fh = FixedHeader()
    fh.decode(raw[0])
    assert fh.packet_type == fields["packet_type"]
    assert fh.dup == fields["dup"]
    assert fh.qos == fields["qos"]
    assert fh.retain == fields["retain"]


@pytest.mark.parametrize("raw", INVALID)
def test_fixed_header_decode_invalid_flags(raw):
    with pytest.raises(InvalidFlagsError):
        FixedHeader().decode(raw[0])


def test_decode_sets_type_enum():
    fh = FixedHeader().decode(0x30)
    assert fh.packet_type is PacketType.PUBLISH


def test_decode_rejects_out_of_range_byte():
    with pytest.raises(ValueError):
        FixedHeader().decode(256)


@pytest.mark.parametrize(
    "length, expected",
    [
        (120, bytes([0x78])),
        (2**63 - 1, bytes([0xFF] * 8 + [0x7F])),
    ],
)
def test_encode_length(length, expected):
    assert encode_length(length) == expected


def test_encode_length_negative():
    with pytest.raises(ValueError):
        encode_length(-1)