"""Player bookkeeping for a sketching session."""

from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple

from .sketch_netmessages import PlayerJoinReqNetMessage
from .types import EVERYONE, Connection

MAX_PLAYERS = 4
NO_SLOT = 255

Colour = Tuple[float, float, float]

_PLAYER_COLOURS: Dict[int, Colour] = {
    0: (0.0039, 0.1098, 0.1529),
    1: (0.2863, 0.2235, 0.0),
    2: (0.1922, 0.0667, 0.0667),
    3: (0.0078, 0.2392, 0.0471),
}

CLEAR_COLOUR = (0.2549, 0.2471, 0.3294, 1.0)


class SketchGame:
    """Tracks which peer holds which player slot, and each slot's colour."""

    MAX_PLAYERS = MAX_PLAYERS
    NO_SLOT = NO_SLOT

    def __init__(self, connection_count: Optional[Callable[[], int]] = None) -> None:
        self._connection_count = connection_count or (lambda: 0)
        self.players: Dict[int, Connection] = {}
        self.player_colours: Dict[int, Colour] = dict(_PLAYER_COLOURS)
        self.input_freq = 60
        self.input_elapsed = 0.0
        self.input_poll_rate = 1.0 / self.input_freq
        self.local_player_slot = NO_SLOT
        self.quit = False

    @property
    def connection_count(self) -> int:
        """Number of peers currently connected."""
        return int(self._connection_count())

    @property
    def player_count(self) -> int:
        return len(self.players)

    def add_player(self, connection: Connection, slot: int) -> None:
        self.players[slot] = tuple(connection)

    def remove_player(self, connection: Connection) -> int:
        """Remove the player on ``connection`` and return the slot it held."""
        connection = tuple(connection)
        for slot, held_by in self.players.items():
            if held_by == connection:
                del self.players[slot]
                return slot
        raise KeyError(f"no player on {connection[0]}:{connection[1]}")

    def available_player_slot(self) -> int:
        """The lowest free slot, or ``NO_SLOT`` when the game is full."""
        return next(
            (slot for slot in range(MAX_PLAYERS) if slot not in self.players),
            NO_SLOT,
        )

    def player_slot(self, connection: Connection) -> int:
        connection = tuple(connection)
        for slot, held_by in self.players.items():
            if held_by == connection:
                return slot
        raise KeyError(f"no player on {connection[0]}:{connection[1]}")

    def colour(self, slot: int) -> Colour:
        """The colour of a slot; unknown slots are black."""
        return self.player_colours.get(slot, (0.0, 0.0, 0.0))

    def update_input_poll_rate(self) -> float:
        self.input_poll_rate = 1.0 / float(self.input_freq)
        return self.input_poll_rate

    def join_request(self, message_id: int) -> PlayerJoinReqNetMessage:
        """A request to every peer for a free slot, expecting one answer per connection."""
        return PlayerJoinReqNetMessage(self.connection_count, EVERYONE, 0, message_id)