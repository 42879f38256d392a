"""Primitive encoders and decoders for MQTT wire values."""

from __future__ import annotations

import struct
from typing import BinaryIO

_UINT16 = struct.Struct(">H")
_UINT32 = struct.Struct(">I")

MAX_VBI = 268_435_455
"""Largest value a four byte variable byte integer can hold."""


class CodecError(ValueError):
    """Raised when a buffer cannot be decoded or a value cannot be encoded."""


def bytes_to_string(data: bytes) -> str:
    """Convert raw bytes to a string without losing any byte."""
    return bytes(data).decode("utf-8", errors="surrogateescape")


def decode_uint16(buf: bytes, offset: int) -> tuple[int, int]:
    """Read a big-endian uint16 at ``offset``; return the value and the next offset."""
    if offset < 0 or len(buf) < offset + 2:
        raise CodecError("offset out of range while reading uint16")
    return _UINT16.unpack_from(buf, offset)[0], offset + 2


def decode_bytes(buf: bytes, offset: int) -> tuple[bytes, int]:
    """Read a length-prefixed UTF-8 byte string; return it and the next offset."""
    length, start = decode_uint16(buf, offset)
    end = start + length
    if end > len(buf):
        raise CodecError("offset out of range while reading string")
    chunk = bytes(buf[start:end])
    if not valid_utf8(chunk):
        raise CodecError("string is not valid UTF-8")
    return chunk, end


def decode_string(buf: bytes, offset: int) -> tuple[str, int]:
    """Read a length-prefixed UTF-8 string; return it and the next offset."""
    chunk, end = decode_bytes(buf, offset)
    return bytes_to_string(chunk), end


def decode_byte(buf: bytes, offset: int) -> tuple[int, int]:
    """Read a single byte; return it and the next offset."""
    if offset < 0 or len(buf) <= offset:
        raise CodecError("offset out of range while reading byte")
    return buf[offset], offset + 1


def decode_byte_bool(buf: bytes, offset: int) -> tuple[bool, int]:
    """Read a byte as a boolean (lowest bit); return it and the next offset."""
    if offset < 0 or len(buf) <= offset:
        raise CodecError("offset out of range while reading bool")
    return bool(buf[offset] & 1), offset + 1


def encode_bool(value: bool) -> int:
    """Return 1 for true and 0 for false."""
    return int(bool(value))


def encode_bytes(value: bytes) -> bytes:
    """Encode bytes with a two byte big-endian length prefix."""
    data = bytes(value)
    return _UINT16.pack(len(data) & 0xFFFF) + data


def encode_uint16(value: int) -> bytes:
    """Encode a uint16 as two big-endian bytes."""
    return _UINT16.pack(value & 0xFFFF)


def encode_string(value: str) -> bytes:
    """Encode a string as UTF-8 with a two byte length prefix."""
    return encode_bytes(value.encode("utf-8"))


def valid_utf8(data: bytes) -> bool:
    """Report whether ``data`` is well-formed UTF-8."""
    try:
        bytes(data).decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def encode_vbi(length: int) -> bytes:
    """Encode a non-negative integer as an MQTT variable byte integer."""
    if length < 0 or length > MAX_VBI:
        raise CodecError(f"value {length} cannot be encoded as a variable byte integer")
    out = bytearray()
    while True:
        digit = length % 128
        length //= 128
        if length > 0:
            digit |= 0x80
        out.append(digit)
        if length == 0:
            return bytes(out)


def read_vbi_bytes(stream: BinaryIO) -> bytes:
    """Read the raw bytes of a variable byte integer from ``stream``."""
    out = bytearray()
    while True:
        digit = _read_exact(stream, 1)[0]
        out.append(digit)
        if digit <= 0x7F:
            return bytes(out)


def decode_vbi(stream: BinaryIO) -> int:
    """Decode a variable byte integer; an exhausted stream ends the value."""
    value = 0
    shift = 0
    while True:
        chunk = stream.read(1)
        digit = chunk[0] if chunk else 0
        value |= (digit & 0x7F) << shift
        if not digit & 0x80:
            break
        shift += 7
    return value & 0xFFFFFFFF


def write_uint16(value: int, stream: BinaryIO) -> None:
    """Write a big-endian uint16."""
    stream.write(_UINT16.pack(value & 0xFFFF))


def write_uint32(value: int, stream: BinaryIO) -> None:
    """Write a big-endian uint32."""
    stream.write(_UINT32.pack(value & 0xFFFFFFFF))


def write_string(value: str, stream: BinaryIO) -> None:
    """Write a length-prefixed UTF-8 string."""
    write_binary(value.encode("utf-8"), stream)


def write_binary(data: bytes, stream: BinaryIO) -> None:
    """Write length-prefixed binary data."""
    write_uint16(len(data), stream)
    stream.write(bytes(data))


def read_uint16(stream: BinaryIO) -> int:
    """Read a big-endian uint16."""
    return _UINT16.unpack(_read_exact(stream, 2))[0]


def read_uint32(stream: BinaryIO) -> int:
    """Read a big-endian uint32."""
    return _UINT32.unpack(_read_exact(stream, 4))[0]


def read_binary(stream: BinaryIO) -> bytes:
    """Read length-prefixed binary data."""
    size = read_uint16(stream)
    return _read_exact(stream, size)


def read_string(stream: BinaryIO) -> str:
    """Read a length-prefixed string."""
    return bytes_to_string(read_binary(stream))


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size) if size else b""
    if len(data) < size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return data