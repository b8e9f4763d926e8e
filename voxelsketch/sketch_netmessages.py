"""Game-specific network messages exchanged between sketching peers."""

from __future__ import annotations

import enum
from typing import Union

from .netmessages import (
    REC_TCP_BUFFER_SIZE,
    RESERVED_REQ_TCP,
    RESERVED_SHUTDOWN,
    RESERVED_TCP,
    RESERVED_UDP,
    TCPMessage,
    TCPReqMessage,
)
from .serialize import ByteReader, serialize_string, serialize_u8, serialize_u32
from .types import EVERYONE, NO_CONNECTION, Connection

# Largest number of voxel masses carried by one integrity data message.
INTEGRITY_SLICE_SIZE = REC_TCP_BUFFER_SIZE - 29


class NetMessageType(enum.IntEnum):
    """The type byte of every network message."""

    RESERVED_UDP = RESERVED_UDP
    RESERVED_TCP = RESERVED_TCP
    RESERVED_REQ_TCP = RESERVED_REQ_TCP
    RESERVED_SHUTDOWN = RESERVED_SHUTDOWN
    SEND_STRING = 4
    DRAW_BLOCK = 5
    PLAYER_JOIN_REQ = 6
    PLAYER_JOIN_RES = 7
    PLAYER_JOIN = 8
    STEAL_VOXEL_REQ = 9
    STEAL_VOXEL_RES = 10
    INTEGRITY_REQ = 11
    INTEGRITY_RES = 12
    INTEGRITY_DATA = 13
    INTEGRITY_START = 14


def _to_i32(value: int) -> int:
    return value - (1 << 32) if value & 0x80000000 else value


class IntegrityStartNetMessage(TCPMessage):
    """Tells every peer to start sending its integrity data."""

    def __init__(self, message_id: int) -> None:
        super().__init__(EVERYONE, 0, message_id)
        self.message_type = NetMessageType.INTEGRITY_START

    @classmethod
    def _blank(cls) -> "IntegrityStartNetMessage":
        return cls(0)


class IntegrityDataNetMessage(TCPMessage):
    """A slice of a peer's voxel masses, starting at a voxel index."""

    def __init__(
        self,
        start_voxel_index: int,
        ip: int,
        port: int,
        message_id: int,
        data: Union[bytes, bytearray, list] = b"",
    ) -> None:
        super().__init__(ip, port, message_id)
        self.start_voxel_index = start_voxel_index
        self.data = bytes(data)
        self.message_size += 8 + len(self.data)
        self.message_type = NetMessageType.INTEGRITY_DATA

    @property
    def data_size(self) -> int:
        return len(self.data)

    @classmethod
    def _blank(cls) -> "IntegrityDataNetMessage":
        return cls(0, 0, 0, 0)

    def serialize(self) -> bytes:
        return (
            super().serialize()
            + serialize_u32(self.start_voxel_index)
            + serialize_u32(self.data_size)
            + self.data
        )

    def _read_fields(self, reader: ByteReader, sender: Connection) -> None:
        super()._read_fields(reader, sender)
        self.start_voxel_index = reader.read_u32()
        size = reader.read_u32()
        self.data = reader.read_bytes(size)
        self.message_size += len(self.data)

    @classmethod
    def from_reader(
        cls, reader: ByteReader, sender: Connection = NO_CONNECTION
    ) -> "IntegrityDataNetMessage":
        return super().from_reader(reader, sender)


class IntegrityResNetMessage(TCPMessage):
    """Acknowledges an integrity request."""

    def __init__(self, response_id: int, ip: int, port: int, message_id: int) -> None:
        super().__init__(ip, port, message_id)
        self.response_id = response_id
        self.message_type = NetMessageType.INTEGRITY_RES
        self.message_size += 4

    @classmethod
    def _blank(cls) -> "IntegrityResNetMessage":
        return cls(0, 0, 0, 0)

    def serialize(self) -> bytes:
        return super().serialize() + serialize_u32(self.response_id)

    def _read_fields(self, reader: ByteReader, sender: Connection) -> None:
        super()._read_fields(reader, sender)
        self.response_id = reader.read_u32()

    @classmethod
    def from_reader(
        cls, reader: ByteReader, sender: Connection = NO_CONNECTION
    ) -> "IntegrityResNetMessage":
        return super().from_reader(reader, sender)


class IntegrityReqNetMessage(TCPReqMessage):
    """Asks every peer to enter integrity mode."""

    def __init__(self, expected_responses: int, message_id: int) -> None:
        super().__init__(expected_responses, EVERYONE, 0, message_id)
        self.message_type = NetMessageType.INTEGRITY_REQ

    @classmethod
    def _blank(cls) -> "IntegrityReqNetMessage":
        return cls(0, 0)


class StealVoxelResNetMessage(TCPMessage):
    """Answers a steal request: whether the voxel was handed over."""

    def __init__(
        self,
        response_id: int,
        has_stolen_voxel: bool,
        voxel_id: int,
        ip: int,
        port: int,
        message_id: int,
    ) -> None:
        super().__init__(ip, port, message_id)
        self.response_id = response_id
        self.has_stolen_voxel = bool(has_stolen_voxel)
        self.voxel_id = voxel_id
        self.message_size += 9
        self.message_type = NetMessageType.STEAL_VOXEL_RES

    @classmethod
    def _blank(cls) -> "StealVoxelResNetMessage":
        return cls(0, False, 0, 0, 0, 0)

    def serialize(self) -> bytes:
        return (
            super().serialize()
            + serialize_u32(self.response_id)
            + serialize_u8(int(self.has_stolen_voxel))
            + serialize_u32(self.voxel_id)
        )

    def _read_fields(self, reader: ByteReader, sender: Connection) -> None:
        super()._read_fields(reader, sender)
        self.response_id = reader.read_u32()
        self.has_stolen_voxel = bool(reader.read_u8())
        self.voxel_id = reader.read_u32()

    @classmethod
    def from_reader(
        cls, reader: ByteReader, sender: Connection = NO_CONNECTION
    ) -> "StealVoxelResNetMessage":
        return super().from_reader(reader, sender)


class StealVoxelReqNetMessage(TCPReqMessage):
    """Asks a peer to give up one voxel; expects a single response."""

    def __init__(self, voxel_index: int, ip: int, port: int, message_id: int) -> None:
        super().__init__(1, ip, port, message_id)
        self.voxel_index = voxel_index
        self.message_size += 4
        self.message_type = NetMessageType.STEAL_VOXEL_REQ

    @classmethod
    def _blank(cls) -> "StealVoxelReqNetMessage":
        return cls(0, 0, 0, 0)

    def serialize(self) -> bytes:
        return super().serialize() + serialize_u32(self.voxel_index)

    def _read_fields(self, reader: ByteReader, sender: Connection) -> None:
        super()._read_fields(reader, sender)
        self.voxel_index = reader.read_u32()

    @classmethod
    def from_reader(
        cls, reader: ByteReader, sender: Connection = NO_CONNECTION
    ) -> "StealVoxelReqNetMessage":
        return super().from_reader(reader, sender)


class PlayerJoinNetMessage(TCPMessage):
    """Announces that the sender has taken a player slot."""

    def __init__(self, slot: int, ip: int, port: int, message_id: int) -> None:
        super().__init__(ip, port, message_id)
        self.slot = slot
        self.sender_ip = 0
        self.sender_port = 0
        self.message_type = NetMessageType.PLAYER_JOIN
        self.message_size += 1

    @classmethod
    def _blank(cls) -> "PlayerJoinNetMessage":
        return cls(0, 0, 0, 0)

    def serialize(self) -> bytes:
        return super().serialize() + serialize_u8(self.slot)

    def _read_fields(self, reader: ByteReader, sender: Connection) -> None:
        super()._read_fields(reader, sender)
        self.slot = reader.read_u8()
        self.sender_ip, self.sender_port = sender

    @classmethod
    def from_reader(
        cls, reader: ByteReader, sender: Connection = NO_CONNECTION
    ) -> "PlayerJoinNetMessage":
        return super().from_reader(reader, sender)


class PlayerJoinResNetMessage(TCPMessage):
    """Answers a join request with the lowest free slot and the sender's own slot."""

    def __init__(
        self,
        free_slot: int,
        local_slot: int,
        respond_to_id: int,
        ip: int,
        port: int,
        message_id: int,
    ) -> None:
        super().__init__(ip, port, message_id)
        self.respond_to_id = respond_to_id
        self.sender_ip = 0
        self.sender_port = 0
        self.free_slot = free_slot
        self.local_slot = local_slot
        self.message_type = NetMessageType.PLAYER_JOIN_RES
        self.message_size += 6

    @classmethod
    def _blank(cls) -> "PlayerJoinResNetMessage":
        return cls(0, 0, 0, 0, 0, 0)

    def serialize(self) -> bytes:
        return (
            super().serialize()
            + serialize_u32(self.respond_to_id)
            + serialize_u8(self.free_slot)
            + serialize_u8(self.local_slot)
        )

    def _read_fields(self, reader: ByteReader, sender: Connection) -> None:
        super()._read_fields(reader, sender)
        self.message_type = NetMessageType.PLAYER_JOIN_RES
        self.respond_to_id = reader.read_u32()
        self.free_slot = reader.read_u8()
        self.local_slot = reader.read_u8()
        self.sender_ip, self.sender_port = sender

    @classmethod
    def from_reader(
        cls, reader: ByteReader, sender: Connection = NO_CONNECTION
    ) -> "PlayerJoinResNetMessage":
        return super().from_reader(reader, sender)


class PlayerJoinReqNetMessage(TCPReqMessage):
    """Asks every peer which player slot is free."""

    def __init__(self, expected_responses: int, ip: int, port: int, message_id: int) -> None:
        super().__init__(expected_responses, ip, port, message_id, 0, 0)
        self.is_request = True
        self.message_type = NetMessageType.PLAYER_JOIN_REQ

    @classmethod
    def _blank(cls) -> "PlayerJoinReqNetMessage":
        return cls(0, 0, 0, 0)

    def _read_fields(self, reader: ByteReader, sender: Connection) -> None:
        super()._read_fields(reader, sender)
        self.message_type = NetMessageType.PLAYER_JOIN_REQ
        self.is_request = True

    @classmethod
    def from_reader(
        cls, reader: ByteReader, sender: Connection = NO_CONNECTION
    ) -> "PlayerJoinReqNetMessage":
        return super().from_reader(reader, sender)


class SendStringNetMessage(TCPMessage):
    """Carries a line of text to print."""

    def __init__(self, text: str, ip: int, port: int, message_id: int) -> None:
        super().__init__(ip, port, message_id)
        self.text = text
        self.is_request = True
        self.message_size += len(text.encode("utf-8")) + 4
        self.message_type = NetMessageType.SEND_STRING

    @classmethod
    def _blank(cls) -> "SendStringNetMessage":
        return cls("", 0, 0, 0)

    def serialize(self) -> bytes:
        return super().serialize() + serialize_string(self.text)

    def _read_fields(self, reader: ByteReader, sender: Connection) -> None:
        super()._read_fields(reader, sender)
        self.text = reader.read_string()
        self.message_size += len(self.text.encode("utf-8"))
        self.message_type = NetMessageType.SEND_STRING

    @classmethod
    def from_reader(
        cls, reader: ByteReader, sender: Connection = NO_CONNECTION
    ) -> "SendStringNetMessage":
        return super().from_reader(reader, sender)


class DrawBlockNetMessage(TCPMessage):
    """Tells peers that a player coloured the block at (x, y)."""

    def __init__(self, player: int, x: int, y: int, ip: int, port: int, message_id: int) -> None:
        super().__init__(ip, port, message_id)
        self.x = x
        self.y = y
        self.player = player
        self.is_request = False
        self.message_size += 9
        self.message_type = NetMessageType.DRAW_BLOCK

    @classmethod
    def _blank(cls) -> "DrawBlockNetMessage":
        return cls(0, 0, 0, 0, 0, 0)

    def serialize(self) -> bytes:
        return (
            super().serialize()
            + serialize_u8(self.player)
            + serialize_u32(self.x)
            + serialize_u32(self.y)
        )

    def _read_fields(self, reader: ByteReader, sender: Connection) -> None:
        super()._read_fields(reader, sender)
        self.player = reader.read_u8()
        self.x = _to_i32(reader.read_u32())
        self.y = _to_i32(reader.read_u32())

    @classmethod
    def from_reader(
        cls, reader: ByteReader, sender: Connection = NO_CONNECTION
    ) -> "DrawBlockNetMessage":
        return super().from_reader(reader, sender)