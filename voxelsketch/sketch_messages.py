"""Payloads of the messages passed around inside the sketching game."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Union

from .netmessages import ResponsePayload
from .sketch_netmessages import NetMessageType
from .types import Connection


class SketchMode(enum.IntEnum):
    """Whether the scene is drawing normally or checking integrity."""

    NORMAL = 0
    INTEGRITY = 1


@dataclass(frozen=True)
class DrawBlockPayload:
    x: int
    y: int
    player: int


@dataclass(frozen=True)
class PlayerJoinReqPayload:
    ip: int
    respond_id: int
    port: int


@dataclass(frozen=True)
class PlayerJoinResPayload(ResponsePayload):
    """A peer's answer to a join request."""

    response_type: int = field(default=int(NetMessageType.PLAYER_JOIN_RES), init=False)
    sender: Connection
    free_slot: int
    sender_slot: int


@dataclass(frozen=True)
class StealVoxelResPayload(ResponsePayload):
    """A peer's answer to a steal request."""

    response_type: int = field(default=int(NetMessageType.STEAL_VOXEL_RES), init=False)
    voxel_id: int
    have_voxel: bool
    connection: Connection


@dataclass(frozen=True)
class IntegrityResPayload(ResponsePayload):
    """A peer's acknowledgement of an integrity request."""

    response_type: int = field(default=int(NetMessageType.INTEGRITY_RES), init=False)


@dataclass(frozen=True)
class ChangeColourPayload:
    r: float
    g: float
    b: float


@dataclass(frozen=True)
class StartIntegrityPayload:
    pass


@dataclass(frozen=True)
class VisualiseIntegrityPayload:
    pass


@dataclass(frozen=True)
class PlayerJoinPayload:
    connection: Connection
    player_slot: int


@dataclass(frozen=True)
class IntegrityDataPayload:
    """A slice of a peer's voxel masses starting at a voxel index."""

    start_voxel_index: int
    voxel_data: Union[bytes, bytearray, list]

    def __post_init__(self) -> None:
        object.__setattr__(self, "voxel_data", bytes(self.voxel_data))

    @property
    def num_voxels(self) -> int:
        return len(self.voxel_data)


@dataclass(frozen=True)
class StolenVoxelPayload:
    connection: Connection
    voxel_index: int


@dataclass(frozen=True)
class StealVoxelReqPayload:
    connection: Connection
    voxel_index: int
    response_id: int


@dataclass(frozen=True)
class PlayerLeftPayload:
    connection: Connection


@dataclass(frozen=True)
class SwitchSketchModePayload:
    mode: SketchMode

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", SketchMode(self.mode))