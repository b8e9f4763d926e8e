# voxelsketch

This package holds the game logic of a peer-to-peer voxel sketching game.
All players share one canvas of voxels. A player takes ("steals") voxels
from the other players by clicking on them. Any peer can start an integrity
check. In that check every peer sends its mass for each voxel, so that the
summed masses can be compared with the number of players.

## Modules

- `voxelsketch.types`: the engine enumerations (`Addressee`, `ComponentType`,
  `ColliderType`, `KeyCode`, `SystemInstruction`), the `ColourByte` colour with
  `from_floats` and `to_floats`, and the engine payload records.
- `voxelsketch.serialize`: the big-endian encoders `serialize_u8`,
  `serialize_u16`, `serialize_u32` and `serialize_string`, plus `ByteReader`,
  which decodes values from a buffer and moves its offset forward. If a value
  does not fit or the data runs out, `SerializationError` is raised.
- `voxelsketch.messages`: `Message`, a frozen payload with an addressee
  (`is_for` checks the addressee flags); `Observer`, which hands a payload of
  the type it observes to `process_message`; `MessageBus`, a thread-safe FIFO
  with `send`, `drain` and `len()`.
- `voxelsketch.netmessages`: the engine's wire messages `NetMessage`,
  `UDPMessage`, `TCPMessage`, `TCPReqMessage` and `ShutdownMessage`, plus
  `ResponsePayload` and `RemoveConnectionPayload`. Each message has a 15-byte
  header, made up of the size, the process id, the type, the TCP flag, the
  request flag and the message id.
- `voxelsketch.sketch_netmessages`: the game's wire messages, namely player
  join request/response/announce, steal voxel request/response, integrity
  request/response/start/data, draw block and send string. Their type bytes
  are listed in `NetMessageType`.
- `voxelsketch.sketch_messages`: the payloads that the game passes around
  inside one process, and the `SketchMode` enum (`NORMAL`, `INTEGRITY`).
- `voxelsketch.game`: `SketchGame`, which tracks up to four player slots,
  the connection that holds each slot, and each slot's colour.
  `available_player_slot()` returns `NO_SLOT` (255) once the game is full.
  `player_slot` and `remove_player` raise `KeyError` for a connection they
  do not know.
- `voxelsketch.handler`: `SketchNetworkHandler`. Its `create_message(data,
  sender)` decodes received bytes, given with the size prefix already
  removed. `process_net_message` turns a decoded message into outgoing
  `Message`s. `handle_fulfilled_response` and `handle_timed_out_request`
  finish off requests. If every slot is taken, the join responses raise
  `GameFullError`.
- `voxelsketch.canvas`: `VoxelCanvas`, a grid of `Voxel`s with one mass per
  voxel. It saves and restores colours during an integrity check, keeps the
  integrity cache, and `mass_slices()` yields slices sized for one integrity
  data message.
- `voxelsketch.input`: `InputManager`. Pass each frame's keys and mouse state
  to `update`, then ask `key_down`, `key_up` and `key_pressed`.
- `voxelsketch.scene`: `SketchScene`, which holds the canvas, handles scene
  payloads through `on_message`, and carries out voxel collisions, integrity
  mode, reset and the info panel lines.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
from voxelsketch.serialize import ByteReader
from voxelsketch.sketch_netmessages import DrawBlockNetMessage

msg = DrawBlockNetMessage(player=1, x=3, y=4, ip=2, port=0, message_id=7)
wire = msg.serialize()

# The 4-byte size prefix is removed before decoding; the reader starts at the
# type byte, which follows the 4-byte process id.
decoded = DrawBlockNetMessage.from_reader(ByteReader(wire[4:], 4), (0, 0))
assert (decoded.x, decoded.y, decoded.player) == (3, 4, 1)
```

`SketchNetworkHandler(game, send, message_ids)` and
`SketchScene(game, send, message_ids)` take three arguments: a `SketchGame`;
a `send` callable, which receives every outgoing `Message`; and a
`message_ids` callable, which returns a fresh id for each outgoing network
message. `itertools.count(1).__next__` works as `message_ids`.

## What this package does not do

The package has no rendering, no window and no sockets. It does not open
connections, send or receive bytes, or time out requests itself. The caller
delivers each outgoing `Message` addressed to `Addressee.NETWORK_SYSTEM` and
feeds received bytes to `create_message`. The package installs no command to
run.