"""The fixed header that begins every MQTT control packet."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from mqttcore.codec import encode_bool


class PacketType(IntEnum):
    """MQTT control packet types."""

    RESERVED = 0
    CONNECT = 1
    CONNACK = 2
    PUBLISH = 3
    PUBACK = 4
    PUBREC = 5
    PUBREL = 6
    PUBCOMP = 7
    SUBSCRIBE = 8
    SUBACK = 9
    UNSUBSCRIBE = 10
    UNSUBACK = 11
    PINGREQ = 12
    PINGRESP = 13
    DISCONNECT = 14
    AUTH = 15


class InvalidFlagsError(ValueError):
    """Raised when a header carries flags its packet type forbids."""


class OversizedLengthError(ValueError):
    """Raised when a remaining length indicator is longer than allowed."""


_QOS_CARRYING = (PacketType.PUBREL, PacketType.SUBSCRIBE, PacketType.UNSUBSCRIBE)


@dataclass
class FixedHeader:
    """Values of the fixed header portion of an MQTT packet."""

    remaining: int = 0
    packet_type: PacketType = PacketType.RESERVED
    qos: int = 0
    dup: bool = False
    retain: bool = False

    def encode(self) -> bytes:
        """Return the header byte followed by the encoded remaining length."""
        first = (
            (int(self.packet_type) << 4)
            | (encode_bool(self.dup) << 3)
            | (self.qos << 1)
            | encode_bool(self.retain)
        ) & 0xFF
        return bytes([first]) + encode_length(self.remaining)

    def decode(self, header_byte: int) -> FixedHeader:
        """Fill the type and flags from the first header byte."""
        if not 0 <= header_byte <= 0xFF:
            raise ValueError(f"header byte out of range: {header_byte}")
        self.packet_type = PacketType(header_byte >> 4)
        if self.packet_type == PacketType.PUBLISH:
            self.dup = bool((header_byte >> 3) & 0x01)
            self.qos = (header_byte >> 1) & 0x03
            self.retain = bool(header_byte & 0x01)
        elif self.packet_type in _QOS_CARRYING:
            self.qos = (header_byte >> 1) & 0x03
        elif header_byte & 0x0F:
            raise InvalidFlagsError(
                f"invalid flags for packet type {self.packet_type.name}"
            )
        return self


def encode_length(length: int) -> bytes:
    """Encode a remaining length as continuation-bit bytes."""
    if length < 0:
        raise ValueError("length must not be negative")
    out = bytearray()
    while True:
        digit = length % 128
        length //= 128
        if length > 0:
            digit |= 0x80
        out.append(digit)
        if length == 0:
            return bytes(out)