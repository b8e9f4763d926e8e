"""Turning network messages into game events and back."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Sequence, Type, TypeVar, Union

from .game import NO_SLOT, SketchGame
from .messages import Message
from .netmessages import (
    NetMessage,
    RemoveConnectionPayload,
    ShutdownMessage,
    TCPMessage,
    TCPReqMessage,
    UDPMessage,
)
from .serialize import ByteReader, SerializationError
from .sketch_messages import (
    DrawBlockPayload,
    IntegrityDataPayload,
    IntegrityResPayload,
    PlayerJoinPayload,
    PlayerJoinResPayload,
    PlayerLeftPayload,
    SketchMode,
    StartIntegrityPayload,
    StealVoxelReqPayload,
    StealVoxelResPayload,
    StolenVoxelPayload,
    SwitchSketchModePayload,
)
from .sketch_netmessages import (
    DrawBlockNetMessage,
    IntegrityDataNetMessage,
    IntegrityReqNetMessage,
    IntegrityResNetMessage,
    IntegrityStartNetMessage,
    NetMessageType,
    PlayerJoinNetMessage,
    PlayerJoinReqNetMessage,
    PlayerJoinResNetMessage,
    SendStringNetMessage,
    StealVoxelReqNetMessage,
    StealVoxelResNetMessage,
)
from .types import EVERYONE, NO_CONNECTION, Addressee, Connection

T = TypeVar("T", bound=NetMessage)

# Offset of the type byte once the size field has been stripped: pid (4 bytes) first.
_TYPE_OFFSET = 4

_DECODERS: Dict[int, Type[NetMessage]] = {
    NetMessageType.SEND_STRING: SendStringNetMessage,
    NetMessageType.DRAW_BLOCK: DrawBlockNetMessage,
    NetMessageType.PLAYER_JOIN_REQ: PlayerJoinReqNetMessage,
    NetMessageType.PLAYER_JOIN_RES: PlayerJoinResNetMessage,
    NetMessageType.PLAYER_JOIN: PlayerJoinNetMessage,
    NetMessageType.STEAL_VOXEL_REQ: StealVoxelReqNetMessage,
    NetMessageType.STEAL_VOXEL_RES: StealVoxelResNetMessage,
    NetMessageType.INTEGRITY_REQ: IntegrityReqNetMessage,
    NetMessageType.INTEGRITY_RES: IntegrityResNetMessage,
    NetMessageType.INTEGRITY_START: IntegrityStartNetMessage,
    NetMessageType.INTEGRITY_DATA: IntegrityDataNetMessage,
    NetMessageType.RESERVED_TCP: TCPMessage,
    NetMessageType.RESERVED_UDP: UDPMessage,
    NetMessageType.RESERVED_REQ_TCP: TCPReqMessage,
    NetMessageType.RESERVED_SHUTDOWN: ShutdownMessage,
}


class GameFullError(RuntimeError):
    """Raised when every player slot in the session is taken."""


class NetworkHandler(ABC):
    """Game-specific processing of network traffic."""

    @abstractmethod
    def process_net_message(self, message: NetMessage) -> None:
        """Act on a decoded incoming message."""

    @abstractmethod
    def handle_fulfilled_response(self, messages: Sequence[Message[Any]]) -> None:
        """Act on all the responses to one request."""

    @abstractmethod
    def handle_timed_out_request(self, message: NetMessage) -> None:
        """Act on a request that did not get all its responses in time."""

    @abstractmethod
    def create_message(self, data: Union[bytes, bytearray], sender: Connection) -> NetMessage:
        """Decode received bytes into a message."""


def _expect(message: Any, cls: Type[T]) -> T:
    if not isinstance(message, cls):
        raise TypeError(f"expected {cls.__name__}, got {type(message).__name__}")
    return message


class SketchNetworkHandler(NetworkHandler):
    """Handles the sketching game's messages.

    ``send`` receives every outgoing ``Message``; ``message_ids`` returns a
    fresh id for each outgoing network message.
    """

    def __init__(
        self,
        game: SketchGame,
        send: Callable[[Message[Any]], None],
        message_ids: Callable[[], int],
    ) -> None:
        self.game = game
        self._send = send
        self._next_id = message_ids
        self._handlers: Dict[int, Callable[[NetMessage], None]] = {
            NetMessageType.SEND_STRING: self._handle_send_string,
            NetMessageType.DRAW_BLOCK: self._handle_draw_block,
            NetMessageType.PLAYER_JOIN_REQ: self._handle_player_join_req,
            NetMessageType.PLAYER_JOIN_RES: self._handle_player_join_res,
            NetMessageType.PLAYER_JOIN: self._handle_player_join,
            NetMessageType.RESERVED_SHUTDOWN: self._handle_peer_shutdown,
            NetMessageType.STEAL_VOXEL_REQ: self._handle_steal_voxel_req,
            NetMessageType.STEAL_VOXEL_RES: self._handle_steal_voxel_res,
            NetMessageType.INTEGRITY_REQ: self._handle_integrity_req,
            NetMessageType.INTEGRITY_RES: self._handle_integrity_res,
            NetMessageType.INTEGRITY_START: self._handle_integrity_start,
            NetMessageType.INTEGRITY_DATA: self._handle_integrity_data,
        }

    def _to_network(self, net_message: NetMessage) -> None:
        self._send(Message(Addressee.NETWORK_SYSTEM, net_message))

    def _to_scene(self, payload: Any) -> None:
        self._send(Message(Addressee.SCENE, payload))

    # Incoming messages

    def process_net_message(self, message: NetMessage) -> None:
        handler = self._handlers.get(int(message.message_type))
        if handler is not None:
            handler(message)

    def _handle_send_string(self, message: NetMessage) -> None:
        print(_expect(message, SendStringNetMessage).text)

    def _handle_draw_block(self, message: NetMessage) -> None:
        block = _expect(message, DrawBlockNetMessage)
        self._to_scene(DrawBlockPayload(block.x, block.y, block.player))

    def _handle_player_join_req(self, message: NetMessage) -> None:
        request = _expect(message, PlayerJoinReqNetMessage)
        self._to_network(
            PlayerJoinResNetMessage(
                self.game.available_player_slot(),
                self.game.local_player_slot,
                request.message_id,
                request.sender_ip,
                request.sender_port,
                self._next_id(),
            )
        )

    def _handle_player_join_res(self, message: NetMessage) -> None:
        response = _expect(message, PlayerJoinResNetMessage)
        self._send(
            Message(
                Addressee.NETWORK_SYSTEM,
                PlayerJoinResPayload(
                    message_id=response.respond_to_id,
                    sender=(response.sender_ip, response.sender_port),
                    free_slot=response.free_slot,
                    sender_slot=response.local_slot,
                ),
            )
        )

    def _handle_player_join(self, message: NetMessage) -> None:
        join = _expect(message, PlayerJoinNetMessage)
        self._to_scene(PlayerJoinPayload((join.sender_ip, join.sender_port), join.slot))

    def _handle_peer_shutdown(self, message: NetMessage) -> None:
        shutdown = _expect(message, ShutdownMessage)
        connection = (shutdown.sender_ip, shutdown.sender_port)
        self._to_scene(PlayerLeftPayload(connection))
        self._send(Message(Addressee.NETWORK_SYSTEM, RemoveConnectionPayload(connection)))

    def _handle_steal_voxel_req(self, message: NetMessage) -> None:
        request = _expect(message, StealVoxelReqNetMessage)
        self._to_scene(
            StealVoxelReqPayload(
                (request.sender_ip, request.sender_port),
                request.voxel_index,
                request.message_id,
            )
        )

    def _handle_steal_voxel_res(self, message: NetMessage) -> None:
        response = _expect(message, StealVoxelResNetMessage)
        if not response.has_stolen_voxel:
            return
        self._send(
            Message(
                Addressee.NETWORK_SYSTEM,
                StealVoxelResPayload(
                    message_id=response.response_id,
                    voxel_id=response.voxel_id,
                    have_voxel=True,
                    connection=(response.ip, response.port),
                ),
            )
        )

    def _handle_integrity_req(self, message: NetMessage) -> None:
        request = _expect(message, IntegrityReqNetMessage)
        self._to_scene(SwitchSketchModePayload(SketchMode.INTEGRITY))
        self._to_network(
            IntegrityResNetMessage(
                request.message_id, request.sender_ip, request.sender_port, self._next_id()
            )
        )

    def _handle_integrity_res(self, message: NetMessage) -> None:
        response = _expect(message, IntegrityResNetMessage)
        self._send(
            Message(Addressee.NETWORK_SYSTEM, IntegrityResPayload(message_id=response.response_id))
        )

    def _handle_integrity_start(self, message: NetMessage) -> None:
        self._to_scene(StartIntegrityPayload())

    def _handle_integrity_data(self, message: NetMessage) -> None:
        slice_ = _expect(message, IntegrityDataNetMessage)
        self._to_scene(IntegrityDataPayload(slice_.start_voxel_index, slice_.data))

    # Decoding

    def create_message(self, data: Union[bytes, bytearray], sender: Connection) -> NetMessage:
        """Decode bytes that start at the process id (the size field already removed)."""
        if len(data) <= _TYPE_OFFSET:
            raise SerializationError(f"message of {len(data)} bytes has no type byte")
        message_type = data[_TYPE_OFFSET]
        decoder = _DECODERS.get(message_type)
        if decoder is None:
            raise ValueError(f"invalid message type: {message_type}")
        return decoder.from_reader(ByteReader(data, _TYPE_OFFSET), tuple(sender))

    # Requests

    def handle_timed_out_request(self, message: NetMessage) -> None:
        message_type = int(message.message_type)
        if message_type == NetMessageType.PLAYER_JOIN_REQ:
            self._handle_player_join_timeout()
        elif message_type in (NetMessageType.STEAL_VOXEL_REQ, NetMessageType.INTEGRITY_REQ):
            # Nothing to undo: a lost steal stays lost, integrity can be asked for again.
            return
        else:
            raise ValueError(f"cannot handle a timed out request of type {message_type}")

    def _handle_player_join_timeout(self) -> None:
        # Nobody answered, so we are the first player.
        self._to_network(PlayerJoinNetMessage(0, EVERYONE, 0, self._next_id()))
        self._to_scene(PlayerJoinPayload(NO_CONNECTION, 0))

    def handle_fulfilled_response(self, messages: Sequence[Message[Any]]) -> None:
        if not messages:
            raise ValueError("no responses to handle")
        response_type = int(messages[0].payload.response_type)
        if response_type == NetMessageType.PLAYER_JOIN_RES:
            self._handle_player_join_responses(messages)
        elif response_type == NetMessageType.STEAL_VOXEL_RES:
            self._handle_voxel_steal_responses(messages)
        elif response_type == NetMessageType.INTEGRITY_RES:
            self._handle_integrity_responses()
        else:
            raise ValueError(f"cannot handle responses of type {response_type}")

    def _handle_voxel_steal_responses(self, messages: Sequence[Message[Any]]) -> None:
        payload = _expect_payload(messages[0].payload, StealVoxelResPayload)
        if payload.have_voxel:
            self._to_scene(StolenVoxelPayload(payload.connection, payload.voxel_id))

    def _handle_integrity_responses(self) -> None:
        self._to_network(IntegrityStartNetMessage(self._next_id()))
        self._to_scene(StartIntegrityPayload())

    def _handle_player_join_responses(self, messages: Sequence[Message[Any]]) -> None:
        payloads = [_expect_payload(m.payload, PlayerJoinResPayload) for m in messages]
        offered = payloads[0].free_slot
        if offered == NO_SLOT:
            raise GameFullError("every player slot is taken")
        if any(p.free_slot != offered for p in payloads):
            # Peers disagree on the free slot: ask again.
            self._to_network(
                PlayerJoinReqNetMessage(len(payloads), EVERYONE, 0, self._next_id())
            )
            return
        self._to_network(PlayerJoinNetMessage(offered, EVERYONE, 0, self._next_id()))
        self._to_scene(PlayerJoinPayload(NO_CONNECTION, offered))
        for payload in payloads:
            self._to_scene(PlayerJoinPayload(payload.sender, payload.sender_slot))


P = TypeVar("P")


def _expect_payload(payload: Any, cls: Type[P]) -> P:
    if not isinstance(payload, cls):
        raise TypeError(f"expected {cls.__name__}, got {type(payload).__name__}")
    return payload