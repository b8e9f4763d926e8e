"""The sketching scene: reacts to game events and drives the voxel canvas."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Type

from .canvas import Voxel, VoxelCanvas
from .game import NO_SLOT, SketchGame
from .messages import Message
from .sketch_messages import (
    ChangeColourPayload,
    DrawBlockPayload,
    IntegrityDataPayload,
    PlayerJoinPayload,
    PlayerLeftPayload,
    SketchMode,
    StartIntegrityPayload,
    StealVoxelReqPayload,
    StolenVoxelPayload,
    SwitchSketchModePayload,
    VisualiseIntegrityPayload,
)
from .sketch_netmessages import (
    IntegrityDataNetMessage,
    IntegrityReqNetMessage,
    StealVoxelReqNetMessage,
    StealVoxelResNetMessage,
)
from .types import (
    ANYONE,
    EVERYONE,
    Addressee,
    PullEntityPayload,
    UpdateEntityPayload,
)

CANVAS_WIDTH = 128
CANVAS_HEIGHT = 128
CANVAS_SCALE = 0.5

INTEGRITY_GREY = (0.2, 0.2, 0.2, 1.0)
TOO_LITTLE_MASS = (0.0, 0.0, 1.0, 1.0)
TOO_MUCH_MASS = (1.0, 0.0, 0.0, 1.0)


class SketchScene:
    """Owns the canvas and turns scene messages into changes to it.

    ``send`` receives every outgoing ``Message``; ``message_ids`` returns a
    fresh id for each outgoing network message.
    """

    def __init__(
        self,
        game: SketchGame,
        send: Callable[[Message[Any]], None],
        message_ids: Callable[[], int],
        width: int = CANVAS_WIDTH,
        height: int = CANVAS_HEIGHT,
        scale: float = CANVAS_SCALE,
    ) -> None:
        self.game = game
        self._send = send
        self._next_id = message_ids
        self.canvas = VoxelCanvas(
            0.0,
            0.0,
            width,
            height,
            scale,
            on_mass_change=self._mass_changed,
            on_voxel_emptied=self._voxel_emptied,
            on_integrity_complete=self._integrity_complete,
        )
        self.local_mass_total = len(self.canvas)
        self.remote_mass_total = 0
        self.num_players = 0
        self.integrity_mode = False
        self._handlers: Dict[Type[Any], Callable[[Any], None]] = {
            StealVoxelReqPayload: self._on_steal_voxel_req,
            StolenVoxelPayload: self._on_stolen_voxel,
            IntegrityDataPayload: self._on_integrity_data,
            UpdateEntityPayload: lambda payload: None,
            DrawBlockPayload: self._on_draw_block,
            PlayerJoinPayload: self._on_player_join,
            PlayerLeftPayload: self._on_player_left,
            ChangeColourPayload: self._on_change_colour,
            StartIntegrityPayload: lambda payload: self.send_integrity_data(),
            SwitchSketchModePayload: self._on_switch_mode,
            VisualiseIntegrityPayload: lambda payload: self.visualise_integrity(),
        }

    # Outgoing messages

    def _to_network(self, net_message: Any) -> None:
        self._send(Message(Addressee.NETWORK_SYSTEM, net_message))

    def _update_entity(self, voxel: Voxel, addressee: Any = Addressee.RENDER_SYSTEM) -> None:
        self._send(Message(addressee, UpdateEntityPayload(voxel)))

    def _pull(self) -> None:
        self._send(
            Message(Addressee.RENDER_SYSTEM | Addressee.COLLISION_SYSTEM, PullEntityPayload())
        )

    # Canvas callbacks

    def _mass_changed(self, delta: int) -> None:
        if delta > 0:
            self.inc_mass()
        else:
            self.dec_mass()

    def _voxel_emptied(self, index: int, voxel: Voxel) -> None:
        self._update_entity(voxel, Addressee.RENDER_SYSTEM | Addressee.SCENE)

    def _integrity_complete(self) -> None:
        self._send(Message(Addressee.SCENE, VisualiseIntegrityPayload()))

    def inc_mass(self) -> None:
        self.local_mass_total += 1

    def dec_mass(self) -> None:
        self.local_mass_total -= 1

    # Incoming messages

    def on_message(self, message: Message[Any]) -> bool:
        """Handle a message; report whether its payload was one the scene knows."""
        handler = self._handlers.get(type(message.payload))
        if handler is None:
            return False
        handler(message.payload)
        return True

    def _on_steal_voxel_req(self, payload: StealVoxelReqPayload) -> None:
        ip, port = payload.connection
        have_voxel = self.canvas.has_voxel(payload.voxel_index)
        self._to_network(
            StealVoxelResNetMessage(
                payload.response_id, have_voxel, payload.voxel_index, ip, port, self._next_id()
            )
        )
        if have_voxel:
            self.canvas.remove_mass(payload.voxel_index)

    def _on_stolen_voxel(self, payload: StolenVoxelPayload) -> None:
        player = self.game.player_slot(payload.connection)
        r, g, b = self.game.colour(player)
        self.canvas.add_mass(payload.voxel_index)
        voxel = self.canvas.voxel_at_index(payload.voxel_index)
        cr, cg, cb, ca = voxel.colour
        voxel.colour = (cr + r, cg + g, cb + b, ca)
        self._update_entity(voxel)

    def _on_integrity_data(self, payload: IntegrityDataPayload) -> None:
        self.canvas.add_slice_to_cache(payload.start_voxel_index, payload.voxel_data)

    def _on_draw_block(self, payload: DrawBlockPayload) -> None:
        voxel = self.canvas.voxel_at_coordinate(payload.x, payload.y)
        voxel.colour = (*self.game.colour(payload.player), 1.0)
        self._update_entity(voxel)

    def _on_player_join(self, payload: PlayerJoinPayload) -> None:
        self.game.add_player(payload.connection, payload.player_slot)
        self.num_players += 1
        if payload.connection[0] == 0:
            self.game.local_player_slot = payload.player_slot
            r, g, b = self.game.colour(payload.player_slot)
            self._send(Message(Addressee.SCENE, ChangeColourPayload(r, g, b)))

    def _on_player_left(self, payload: PlayerLeftPayload) -> None:
        self.game.remove_player(payload.connection)
        self.num_players -= 1

    def _on_change_colour(self, payload: ChangeColourPayload) -> None:
        for voxel in self.canvas.voxels:
            voxel.colour = (payload.r, payload.g, payload.b, voxel.colour[3])
        self._pull()

    def _on_switch_mode(self, payload: SwitchSketchModePayload) -> None:
        if payload.mode is SketchMode.INTEGRITY:
            self.switch_to_integrity_mode()
        else:
            self.switch_to_normal_mode()

    # Actions

    def voxel_collision(self, index: int) -> bool:
        """Ask peers for the voxel that was hit; report whether a request went out."""
        if self.integrity_mode or self.game.local_player_slot == NO_SLOT:
            return False
        voxel = self.canvas.voxel_at_index(index)
        self._to_network(StealVoxelReqNetMessage(index, ANYONE, 0, self._next_id()))
        self._update_entity(voxel)
        return True

    def toggle_integrity(self) -> bool:
        """Enter or leave integrity mode; return the new mode."""
        self.integrity_mode = not self.integrity_mode
        if self.integrity_mode:
            expected = (self.game.player_count - 1) & 0xFF
            self._to_network(IntegrityReqNetMessage(expected, self._next_id()))
            self.on_message(Message(Addressee.SCENE, SwitchSketchModePayload(SketchMode.INTEGRITY)))
        else:
            self.on_message(Message(Addressee.SCENE, SwitchSketchModePayload(SketchMode.NORMAL)))
        return self.integrity_mode

    def switch_to_integrity_mode(self) -> None:
        """Save every voxel's look, grey them all out and seed the cache with local mass."""
        self.canvas.save_colours()
        for voxel in self.canvas.voxels:
            voxel.colour = INTEGRITY_GREY
            voxel.visible = True
        self.canvas.add_local_mass_to_cache()
        self._pull()

    def switch_to_normal_mode(self) -> None:
        """Restore the saved look of every voxel and forget the integrity data."""
        self.canvas.reinstate_colours()
        self._pull()
        self.canvas.clear_colours()
        self.canvas.clear_integrity_cache()

    def send_integrity_data(self) -> int:
        """Send the local masses to every peer; return the number of messages sent."""
        sent = 0
        for start, chunk in self.canvas.mass_slices():
            self._to_network(IntegrityDataNetMessage(start, EVERYONE, 0, self._next_id(), chunk))
            sent += 1
        return sent

    def visualise_integrity(self) -> None:
        """Colour voxels whose summed mass is below the player count blue, above it red."""
        players = self.game.player_count
        for voxel, total in zip(self.canvas.voxels, self.canvas.integrity_cache):
            if total < players:
                voxel.colour = TOO_LITTLE_MASS
            elif total > players:
                voxel.colour = TOO_MUCH_MASS
        self._pull()

    def reset(self) -> None:
        """Restore every voxel's mass and paint the canvas in the local player's colour."""
        self.canvas.reset_mass()
        self.local_mass_total = len(self.canvas)
        self.remote_mass_total = 0
        colour = self.game.colour(self.game.local_player_slot)
        for voxel in self.canvas.voxels:
            voxel.colour = (*colour, 1.0)
            voxel.visible = True
        self._pull()

    def info_lines(self) -> List[str]:
        """The lines shown in the info panel."""
        return [
            f"Players: {self.num_players}",
            f"Local Mass: {self.local_mass_total}",
            f"Total Mass: {self.remote_mass_total}",
        ]