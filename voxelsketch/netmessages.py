"""Engine-level network messages and their wire format.

Every message starts with a 15-byte header: size (u32), process id (u32),
type (u8), TCP flag (u8), request flag (u8) and message id (u32).
Decoding starts at the type byte; the size and process id are consumed
before a message reaches a decoder.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from .serialize import (
    ByteReader,
    serialize_string,
    serialize_u8,
    serialize_u16,
    serialize_u32,
)
from .types import EVERYONE, NO_CONNECTION, Connection

REC_TCP_BUFFER_SIZE = 512
HEADER_SIZE = 15

RESERVED_UDP = 0
RESERVED_TCP = 1
RESERVED_REQ_TCP = 2
RESERVED_SHUTDOWN = 3


class NetMessage:
    """The header shared by every network message."""

    def __init__(self, is_tcp: bool, is_request: bool, message_type: int, message_id: int) -> None:
        self.is_tcp = bool(is_tcp)
        self.is_request = bool(is_request)
        self.message_type = message_type
        self.pid = os.getpid()
        self.message_id = message_id
        self.message_size = HEADER_SIZE

    def __eq__(self, other: Any) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({fields})"

    def serialize(self) -> bytes:
        return b"".join(
            (
                serialize_u32(self.message_size),
                serialize_u32(self.pid),
                serialize_u8(self.message_type),
                serialize_u8(int(self.is_tcp)),
                serialize_u8(int(self.is_request)),
                serialize_u32(self.message_id),
            )
        )

    def read_header(self, reader: ByteReader) -> "NetMessage":
        """Read type, flags and id from a reader positioned at the type byte."""
        self.message_type = reader.read_u8()
        self.is_tcp = bool(reader.read_u8())
        self.is_request = bool(reader.read_u8())
        self.message_id = reader.read_u32()
        return self

    def _read_fields(self, reader: ByteReader, sender: Connection) -> None:
        self.read_header(reader)


class UDPMessage(NetMessage):
    def __init__(self, port: int, message_id: int) -> None:
        super().__init__(False, False, RESERVED_UDP, message_id)
        self.port = port
        self.message_size += 2

    @classmethod
    def _blank(cls) -> "UDPMessage":
        return cls(0, 0)

    def serialize(self) -> bytes:
        return super().serialize() + serialize_u16(self.port)

    def _read_fields(self, reader: ByteReader, sender: Connection) -> None:
        super()._read_fields(reader, sender)
        self.port = reader.read_u16()

    @classmethod
    def from_reader(cls, reader: ByteReader, sender: Connection = NO_CONNECTION) -> "UDPMessage":
        message = cls._blank()
        message._read_fields(reader, sender)
        return message


class TCPMessage(NetMessage):
    def __init__(self, ip: int, port: int, message_id: int) -> None:
        super().__init__(True, False, RESERVED_TCP, message_id)
        self.ip = ip
        self.port = port
        self.message_size += 6

    @classmethod
    def _blank(cls) -> "TCPMessage":
        return cls(0, 0, 0)

    def serialize(self) -> bytes:
        return super().serialize() + serialize_u32(self.ip) + serialize_u16(self.port)

    def _read_fields(self, reader: ByteReader, sender: Connection) -> None:
        super()._read_fields(reader, sender)
        self.ip = reader.read_u32()
        self.port = reader.read_u16()

    @classmethod
    def from_reader(cls, reader: ByteReader, sender: Connection = NO_CONNECTION) -> "TCPMessage":
        message = cls._blank()
        message._read_fields(reader, sender)
        return message


class TCPReqMessage(TCPMessage):
    """A TCP request that expects a number of responses."""

    def __init__(
        self,
        expected_responses: int,
        ip: int,
        port: int,
        message_id: int,
        sender_ip: int = 0,
        sender_port: int = 0,
    ) -> None:
        super().__init__(ip, port, message_id)
        self.sender_ip = sender_ip
        self.sender_port = sender_port
        self.expected_responses = expected_responses
        self.is_request = True
        self.message_type = RESERVED_TCP
        self.message_size += 1

    @classmethod
    def _blank(cls) -> "TCPReqMessage":
        return cls(0, 0, 0, 0)

    def serialize(self) -> bytes:
        return super().serialize() + serialize_u8(self.expected_responses)

    def _read_fields(self, reader: ByteReader, sender: Connection) -> None:
        super()._read_fields(reader, sender)
        self.expected_responses = reader.read_u8()
        self.sender_ip, self.sender_port = sender

    @classmethod
    def from_reader(cls, reader: ByteReader, sender: Connection = NO_CONNECTION) -> "TCPReqMessage":
        message = cls._blank()
        message._read_fields(reader, sender)
        return message


class ShutdownMessage(TCPMessage):
    """Broadcast by a peer that is leaving."""

    def __init__(self, message_id: int) -> None:
        super().__init__(EVERYONE, 0, message_id)
        self.text = "GOODBYE"
        self.sender_ip = 0
        self.sender_port = 0
        self.message_type = RESERVED_SHUTDOWN
        self.message_size += len(self.text.encode("utf-8")) + 4

    @classmethod
    def _blank(cls) -> "ShutdownMessage":
        return cls(0)

    def serialize(self) -> bytes:
        return super().serialize() + serialize_string(self.text)

    def _read_fields(self, reader: ByteReader, sender: Connection) -> None:
        super()._read_fields(reader, sender)
        self.text = reader.read_string()
        self.sender_ip, self.sender_port = sender

    @classmethod
    def from_reader(cls, reader: ByteReader, sender: Connection = NO_CONNECTION) -> "ShutdownMessage":
        message = cls._blank()
        message._read_fields(reader, sender)
        return message


@dataclass(frozen=True)
class ResponsePayload:
    """A response to a request, matched by the request's message id."""

    message_id: int
    response_type: int


@dataclass(frozen=True)
class RemoveConnectionPayload:
    connection: Connection