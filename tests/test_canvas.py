import pytest

from voxelsketch.canvas import Voxel, VoxelCanvas
from voxelsketch.sketch_netmessages import INTEGRITY_SLICE_SIZE
from voxelsketch.types import ColourByte


def make_canvas(width=4, height=3, scale=0.5, **callbacks):
    return VoxelCanvas(0, 0, width, height, scale, **callbacks)


def test_length_matches_grid():
    canvas = make_canvas()
    assert len(canvas) == 4 * 3
    assert len(canvas.masses) == len(canvas)


def test_index_round_trip():
    canvas = make_canvas()
    for index in range(len(canvas)):
        assert canvas.index_of(canvas.voxel_at_index(index)) == index


def test_coordinate_round_trip_non_square():
    canvas = VoxelCanvas(2.0, -3.0, 5, 2, 1.5)
    for y in range(2):
        for x in range(5):
            assert canvas.coordinate_of(canvas.voxel_at_coordinate(x, y)) == (x, y)


def test_voxels_are_spaced_by_scale():
    canvas = make_canvas()
    a = canvas.voxel_at_coordinate(0, 0)
    b = canvas.voxel_at_coordinate(1, 0)
    c = canvas.voxel_at_coordinate(0, 1)
    assert b.position[0] - a.position[0] == pytest.approx(0.5)
    assert c.position[2] - a.position[2] == pytest.approx(0.5)
    assert a.scale == (0.5, 0.5, 0.5)


def test_out_of_range_lookups_raise():
    canvas = make_canvas()
    with pytest.raises(IndexError):
        canvas.voxel_at_index(len(canvas))
    with pytest.raises(IndexError):
        canvas.voxel_at_index(-1)
    with pytest.raises(IndexError):
        canvas.voxel_at_coordinate(4, 0)


def test_index_of_off_canvas_voxel_raises():
    canvas = make_canvas()
    with pytest.raises(ValueError):
        canvas.index_of(Voxel((100.0, 0.0, 100.0), (0.5, 0.5, 0.5)))


def test_every_voxel_starts_with_mass():
    canvas = make_canvas()
    assert all(canvas.has_voxel(i) for i in range(len(canvas)))
    assert set(canvas.masses) == {1}


def test_remove_mass_empties_and_disables():
    changes, emptied = [], []
    canvas = make_canvas(
        on_mass_change=changes.append,
        on_voxel_emptied=lambda index, voxel: emptied.append((index, voxel)),
    )
    assert canvas.remove_mass(5) == 0
    assert not canvas.has_voxel(5)
    assert changes == [-1]
    assert emptied[0][0] == 5
    voxel = canvas.voxel_at_index(5)
    assert emptied[0][1] is voxel
    assert voxel.visible is False
    assert voxel.collidable is False


def test_remove_mass_from_empty_voxel_raises():
    canvas = make_canvas()
    canvas.remove_mass(0)
    with pytest.raises(ValueError):
        canvas.remove_mass(0)


def test_add_mass_reports_change():
    changes = []
    canvas = make_canvas(on_mass_change=changes.append)
    assert canvas.add_mass(2) == 2
    assert changes == [1]
    assert canvas.masses[2] == 2


def test_reset_mass_restores_ones():
    canvas = make_canvas()
    canvas.remove_mass(0)
    canvas.add_mass(1)
    canvas.reset_mass()
    assert set(canvas.masses) == {1}


def test_save_and_reinstate_colours():
    canvas = make_canvas()
    voxel = canvas.voxel_at_index(3)
    voxel.colour = (0.2, 0.4, 0.6, 1.0)
    voxel.visible = False
    canvas.save_colours()
    assert canvas.saved_colours[3] == ColourByte.from_floats(0.2, 0.4, 0.6)
    voxel.colour = (0.2, 0.2, 0.2, 1.0)
    voxel.visible = True
    canvas.reinstate_colours()
    assert voxel.colour == pytest.approx((0.2, 0.4, 0.6, 1.0), abs=1 / 255)
    assert voxel.visible is False


def test_reinstate_without_saved_colours_raises():
    canvas = make_canvas()
    canvas.save_colours()
    canvas.clear_colours()
    assert canvas.saved_colours == ()
    with pytest.raises(RuntimeError):
        canvas.reinstate_colours()


def test_local_mass_goes_into_cache():
    canvas = make_canvas()
    canvas.add_mass(0)
    canvas.add_local_mass_to_cache()
    assert canvas.integrity_cache == canvas.masses
    canvas.clear_integrity_cache()
    assert set(canvas.integrity_cache) == {0}


def test_add_slice_to_cache_completes_at_end():
    completions = []
    canvas = make_canvas(on_integrity_complete=lambda: completions.append(True))
    assert canvas.add_slice_to_cache(0, [1] * 6) is False
    assert completions == []
    assert canvas.integrity_cache[:6] == (1,) * 6
    assert canvas.integrity_cache[6:] == (0,) * 6
    assert canvas.add_slice_to_cache(6, [2] * 6) is True
    assert completions == [True]
    assert canvas.integrity_cache[6:] == (2,) * 6


def test_add_slice_ignores_data_past_the_end():
    canvas = make_canvas()
    assert canvas.add_slice_to_cache(10, [3] * 20) is True
    assert canvas.integrity_cache[10:] == (3, 3)
    assert len(canvas.integrity_cache) == len(canvas)


def test_mass_slices_cover_all_masses():
    canvas = VoxelCanvas(0, 0, 128, 128, 0.5)
    canvas.remove_mass(700)
    slices = list(canvas.mass_slices())
    assert b"".join(chunk for _, chunk in slices) == bytes(canvas.masses)
    expected_start = 0
    for start, chunk in slices:
        assert start == expected_start
        assert len(chunk) <= INTEGRITY_SLICE_SIZE
        expected_start += len(chunk)
    assert len(slices[-1][1]) < INTEGRITY_SLICE_SIZE


def test_mass_slices_round_trip_into_cache():
    source = VoxelCanvas(0, 0, 40, 30, 1.0)
    source.remove_mass(17)
    target = VoxelCanvas(0, 0, 40, 30, 1.0)
    for start, chunk in source.mass_slices():
        target.add_slice_to_cache(start, chunk)
    assert target.integrity_cache == source.masses