"""Big-endian encoding of integers and strings for the wire."""

from __future__ import annotations

import struct
from typing import Union

_U8 = struct.Struct(">B")
_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")


class SerializationError(ValueError):
    """Raised when a value cannot be encoded or data cannot be decoded."""


def _pack(packer: struct.Struct, bits: int, value: int) -> bytes:
    # Negative values wrap as two's complement, as a cast to unsigned does.
    if not -(1 << (bits - 1)) <= value < (1 << bits):
        raise SerializationError(f"{value} does not fit in {bits} bits")
    return packer.pack(value & ((1 << bits) - 1))


def serialize_u8(value: int) -> bytes:
    """Encode one unsigned byte."""
    return _pack(_U8, 8, value)


def serialize_u16(value: int) -> bytes:
    """Encode an unsigned 16-bit integer in network order."""
    return _pack(_U16, 16, value)


def serialize_u32(value: int) -> bytes:
    """Encode an unsigned 32-bit integer in network order."""
    return _pack(_U32, 32, value)


def serialize_string(text: Union[str, bytes]) -> bytes:
    """Encode a string as a 32-bit byte length followed by its UTF-8 bytes."""
    raw = text.encode("utf-8") if isinstance(text, str) else bytes(text)
    return serialize_u32(len(raw)) + raw


class ByteReader:
    """Reads network-order values from a byte buffer, advancing an offset."""

    def __init__(self, data: Union[bytes, bytearray, memoryview], offset: int = 0) -> None:
        self._data = bytes(data)
        if not 0 <= offset <= len(self._data):
            raise SerializationError(f"offset {offset} outside buffer of {len(self._data)} bytes")
        self.offset = offset

    def _take(self, count: int) -> bytes:
        if count < 0:
            raise SerializationError(f"cannot read {count} bytes")
        end = self.offset + count
        if end > len(self._data):
            raise SerializationError(
                f"need {count} bytes at offset {self.offset}, only {self.remaining()} left"
            )
        chunk = self._data[self.offset:end]
        self.offset = end
        return chunk

    def read_u8(self) -> int:
        return self._take(1)[0]

    def read_u16(self) -> int:
        return _U16.unpack(self._take(2))[0]

    def read_u32(self) -> int:
        return _U32.unpack(self._take(4))[0]

    def read_string(self) -> str:
        length = self.read_u32()
        return self._take(length).decode("utf-8", errors="replace")

    def read_bytes(self, count: int) -> bytes:
        return self._take(count)

    def remaining(self) -> int:
        return len(self._data) - self.offset