import itertools

import pytest

from voxelsketch.game import NO_SLOT, SketchGame
from voxelsketch.messages import Message
from voxelsketch.sketch_messages import (
    ChangeColourPayload,
    DrawBlockPayload,
    IntegrityDataPayload,
    PlayerJoinPayload,
    PlayerLeftPayload,
    StealVoxelReqPayload,
    StolenVoxelPayload,
    VisualiseIntegrityPayload,
)
from voxelsketch.sketch_netmessages import (
    INTEGRITY_SLICE_SIZE,
    IntegrityDataNetMessage,
    IntegrityReqNetMessage,
    StealVoxelReqNetMessage,
    StealVoxelResNetMessage,
)
from voxelsketch.scene import INTEGRITY_GREY, TOO_LITTLE_MASS, TOO_MUCH_MASS, SketchScene
from voxelsketch.types import Addressee, UpdateEntityPayload


def make_scene(width=4, height=4, scale=1.0):
    sent = []
    game = SketchGame()
    scene = SketchScene(game, sent.append, itertools.count(1).__next__, width, height, scale)
    return scene, game, sent


def payloads(sent, cls):
    return [m.payload for m in sent if isinstance(m.payload, cls)]


def scene_message(payload):
    return Message(Addressee.SCENE, payload)


def test_initial_state_and_info_lines():
    scene, _, _ = make_scene(3, 5)
    assert scene.local_mass_total == 15
    assert scene.info_lines() == ["Players: 0", "Local Mass: 15", "Total Mass: 0"]


def test_unknown_payload_not_handled():
    scene, _, sent = make_scene()
    assert scene.on_message(scene_message("nothing")) is False
    assert sent == []


def test_steal_request_hands_over_voxel_then_refuses():
    scene, _, sent = make_scene()
    request = StealVoxelReqPayload((7, 8), 3, 42)
    assert scene.on_message(scene_message(request)) is True
    responses = payloads(sent, StealVoxelResNetMessage)
    assert len(responses) == 1
    assert responses[0].has_stolen_voxel is True
    assert (responses[0].ip, responses[0].port) == (7, 8)
    assert responses[0].response_id == 42
    assert scene.canvas.has_voxel(3) is False
    assert scene.local_mass_total == len(scene.canvas) - 1
    emptied = [m for m in sent if isinstance(m.payload, UpdateEntityPayload)]
    assert emptied[0].is_for(Addressee.SCENE)
    assert emptied[0].payload.entity is scene.canvas.voxel_at_index(3)

    sent.clear()
    scene.on_message(scene_message(request))
    responses = payloads(sent, StealVoxelResNetMessage)
    assert responses[0].has_stolen_voxel is False
    assert scene.canvas.masses[3] == 0


def test_stolen_voxel_adds_mass_and_colour():
    scene, game, sent = make_scene()
    game.add_player((5, 6), 1)
    before = scene.canvas.voxel_at_index(2).colour
    scene.on_message(scene_message(StolenVoxelPayload((5, 6), 2)))
    assert scene.canvas.masses[2] == 2
    assert scene.local_mass_total == len(scene.canvas) + 1
    after = scene.canvas.voxel_at_index(2).colour
    expected = [b + c for b, c in zip(before[:3], game.colour(1))]
    assert after[:3] == pytest.approx(expected)
    assert after[3] == before[3]
    assert payloads(sent, UpdateEntityPayload)[0].entity is scene.canvas.voxel_at_index(2)


def test_stolen_voxel_from_unknown_player_raises():
    scene, _, _ = make_scene()
    with pytest.raises(KeyError):
        scene.on_message(scene_message(StolenVoxelPayload((9, 9), 0)))


def test_draw_block_uses_player_colour():
    scene, game, sent = make_scene()
    scene.on_message(scene_message(DrawBlockPayload(1, 2, 3)))
    voxel = scene.canvas.voxel_at_coordinate(1, 2)
    assert voxel.colour == (*game.colour(3), 1.0)
    assert payloads(sent, UpdateEntityPayload)[0].entity is voxel


def test_local_player_join_sets_slot_and_colour():
    scene, game, sent = make_scene()
    scene.on_message(scene_message(PlayerJoinPayload((0, 0), 2)))
    assert game.local_player_slot == 2
    assert scene.num_players == 1
    colour = payloads(sent, ChangeColourPayload)[0]
    assert (colour.r, colour.g, colour.b) == game.colour(2)


def test_remote_player_join_and_leave():
    scene, game, sent = make_scene()
    scene.on_message(scene_message(PlayerJoinPayload((10, 20), 1)))
    assert game.local_player_slot == NO_SLOT
    assert payloads(sent, ChangeColourPayload) == []
    assert game.player_slot((10, 20)) == 1
    scene.on_message(scene_message(PlayerLeftPayload((10, 20))))
    assert scene.num_players == 0
    assert game.player_count == 0


def test_unknown_player_leaving_raises():
    scene, _, _ = make_scene()
    with pytest.raises(KeyError):
        scene.on_message(scene_message(PlayerLeftPayload((1, 1))))


def test_change_colour_paints_every_voxel():
    scene, _, _ = make_scene()
    scene.on_message(scene_message(ChangeColourPayload(0.25, 0.5, 0.75)))
    assert all(v.colour[:3] == (0.25, 0.5, 0.75) for v in scene.canvas.voxels)


def test_toggle_integrity_round_trip():
    scene, game, sent = make_scene()
    game.add_player((0, 0), 0)
    game.add_player((3, 4), 1)
    assert scene.toggle_integrity() is True
    request = payloads(sent, IntegrityReqNetMessage)[0]
    assert request.expected_responses == game.player_count - 1
    assert all(v.colour == INTEGRITY_GREY for v in scene.canvas.voxels)
    assert scene.canvas.integrity_cache == scene.canvas.masses

    assert scene.toggle_integrity() is False
    assert all(v.colour == (1.0, 1.0, 1.0, 1.0) for v in scene.canvas.voxels)
    assert set(scene.canvas.integrity_cache) == {0}
    assert scene.canvas.saved_colours == ()


def test_voxel_collision_blocked_without_slot_or_in_integrity_mode():
    scene, game, sent = make_scene()
    assert scene.voxel_collision(0) is False
    assert sent == []
    game.local_player_slot = 0
    scene.integrity_mode = True
    assert scene.voxel_collision(0) is False
    assert sent == []


def test_voxel_collision_sends_steal_request():
    scene, game, sent = make_scene()
    game.local_player_slot = 0
    assert scene.voxel_collision(5) is True
    request = payloads(sent, StealVoxelReqNetMessage)[0]
    assert request.voxel_index == 5
    assert request.expected_responses == 1
    assert payloads(sent, UpdateEntityPayload)[0].entity is scene.canvas.voxel_at_index(5)


def test_send_integrity_data_covers_every_mass():
    scene, _, sent = make_scene(30, 30)
    count = scene.send_integrity_data()
    slices = payloads(sent, IntegrityDataNetMessage)
    assert count == len(slices)
    assert slices[0].start_voxel_index == 0
    assert slices[0].data_size == INTEGRITY_SLICE_SIZE
    assert b"".join(s.data for s in slices) == bytes(scene.canvas.masses)
    for earlier, later in zip(slices, slices[1:]):
        assert later.start_voxel_index == earlier.start_voxel_index + earlier.data_size


def test_last_integrity_slice_triggers_visualisation():
    scene, _, sent = make_scene(2, 2)
    scene.on_message(scene_message(IntegrityDataPayload(0, [1, 1])))
    assert payloads(sent, VisualiseIntegrityPayload) == []
    scene.on_message(scene_message(IntegrityDataPayload(2, [1, 1])))
    assert len(payloads(sent, VisualiseIntegrityPayload)) == 1
    assert scene.canvas.integrity_cache == (1, 1, 1, 1)


def test_visualise_integrity_marks_mismatches():
    scene, game, _ = make_scene(2, 2)
    game.add_player((0, 0), 0)
    game.add_player((3, 4), 1)
    scene.canvas.add_local_mass_to_cache()
    scene.canvas.add_slice_to_cache(0, [0, 1, 2, 1])
    scene.visualise_integrity()
    colours = [v.colour for v in scene.canvas.voxels]
    assert colours[0] == TOO_LITTLE_MASS
    assert colours[1] == (1.0, 1.0, 1.0, 1.0)
    assert colours[2] == TOO_MUCH_MASS
    assert colours[3] == (1.0, 1.0, 1.0, 1.0)


def test_reset_restores_mass_and_colour():
    scene, game, _ = make_scene()
    game.local_player_slot = 1
    scene.canvas.remove_mass(0)
    scene.remote_mass_total = 7
    scene.reset()
    assert scene.canvas.masses == tuple([1] * len(scene.canvas))
    assert scene.local_mass_total == len(scene.canvas)
    assert scene.remote_mass_total == 0
    assert all(v.visible for v in scene.canvas.voxels)
    assert all(v.colour == (*game.colour(1), 1.0) for v in scene.canvas.voxels)