import dataclasses

import pytest

from voxelsketch.messages import Message, Observer
from voxelsketch.netmessages import ResponsePayload
from voxelsketch.sketch_messages import (
    ChangeColourPayload,
    DrawBlockPayload,
    IntegrityDataPayload,
    IntegrityResPayload,
    PlayerJoinPayload,
    PlayerJoinResPayload,
    SketchMode,
    StealVoxelResPayload,
    StolenVoxelPayload,
    SwitchSketchModePayload,
)
from voxelsketch.sketch_netmessages import NetMessageType
from voxelsketch.types import Addressee


def test_player_join_res_payload_type_is_fixed():
    payload = PlayerJoinResPayload(5, (1, 2), 3, 0)
    assert isinstance(payload, ResponsePayload)
    assert payload.response_type == NetMessageType.PLAYER_JOIN_RES
    assert payload.message_id == 5
    assert payload.sender == (1, 2)
    assert (payload.free_slot, payload.sender_slot) == (3, 0)


def test_steal_voxel_res_payload_fields():
    payload = StealVoxelResPayload(9, 40, True, (7, 8))
    assert payload.response_type == NetMessageType.STEAL_VOXEL_RES
    assert payload.voxel_id == 40
    assert payload.have_voxel is True
    assert payload.connection == (7, 8)


def test_integrity_res_payload_type():
    payload = IntegrityResPayload(3)
    assert payload.response_type == NetMessageType.INTEGRITY_RES
    assert payload.message_id == 3


def test_response_type_cannot_be_passed():
    with pytest.raises(TypeError):
        IntegrityResPayload(3, 12)


def test_payloads_are_frozen():
    payload = DrawBlockPayload(1, 2, 0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        payload.x = 5
    assert payload == DrawBlockPayload(1, 2, 0)
    assert payload.x == 1


def test_integrity_data_converts_to_bytes():
    payload = IntegrityDataPayload(10, [1, 2, 0])
    assert payload.voxel_data == b"\x01\x02\x00"
    assert payload.num_voxels == 3


def test_switch_mode_coerces_to_enum():
    assert SwitchSketchModePayload(1).mode is SketchMode.INTEGRITY
    assert SwitchSketchModePayload(0).mode is SketchMode.NORMAL


def test_switch_mode_rejects_unknown():
    with pytest.raises(ValueError):
        SwitchSketchModePayload(5)


def test_message_carries_payload_to_scene():
    message = Message(Addressee.SCENE, PlayerJoinPayload((0, 0), 2))
    assert message.is_for(Addressee.SCENE)
    assert not message.is_for(Addressee.NETWORK_SYSTEM)
    assert message.payload.player_slot == 2


class _StolenCounter(Observer):
    payload_type = StolenVoxelPayload

    def __init__(self):
        self.seen = []

    def process_message(self, payload):
        self.seen.append(payload)


def test_observer_picks_out_its_payload_type():
    observer = _StolenCounter()
    stolen = Message(Addressee.SCENE, StolenVoxelPayload((1, 1), 12))
    colour = Message(Addressee.SCENE, ChangeColourPayload(0.1, 0.2, 0.3))
    assert observer.on_message(stolen) is True
    assert observer.on_message(colour) is False
    assert observer.seen == [StolenVoxelPayload((1, 1), 12)]
    assert observer.seen[0].voxel_index == 12