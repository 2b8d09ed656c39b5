"""
Tests for the chunk streaming service
"""
import random

import numpy as np
import pytest

from terrastream.constants import (
    DebugColour, Quadrant, TerrainConfigError, TerrainSettings, VisibleAxis
)
from terrastream.entities import Companion, Observer
from terrastream.world import TerrainService


def _settings(radius=4, cap=64):
    settings = TerrainSettings()
    settings.render_radius = radius
    settings.max_spawns_per_frame = cap
    return settings


def _half_disk(radius):
    """Cells in range of (0, 0) that are not south of it"""
    return {
        (dx, dz)
        for dz in range(-radius, radius + 1)
        for dx in range(-radius, radius + 1)
        if dx * dx + dz * dz <= radius * radius and dz >= 0
    }


def test_rejects_bad_settings():
    """Test that unusable settings fail at construction"""
    for name, value in (("chunk_size", 0.0), ("noise_scale", -1.0), ("chunk_resolution", 1),
                        ("render_radius", -1), ("max_spawns_per_frame", 0), ("noise_octaves", 0),
                        ("blue_noise_radius", 0.0), ("noise_seed", 256), ("noise_seed", -1)):
        settings = TerrainSettings()
        setattr(settings, name, value)
        with pytest.raises(TerrainConfigError):
            TerrainService(settings)

    # Configuration errors are value errors
    settings = TerrainSettings()
    settings.chunk_size = -8.0
    with pytest.raises(ValueError):
        settings.validate()


def test_missing_observer_skips_tick():
    """Test that a tick without an observer leaves everything unchanged"""
    service = TerrainService(_settings())
    service.update(None)
    assert service.chunks == {}
    assert service.sampler.visible_axis == VisibleAxis.NORTH
    assert service.take_rotation_count() == 0


def test_grid_cell():
    """Test world to chunk coordinate conversion"""
    service = TerrainService(_settings())
    assert service.grid_cell(0.0, 0.0) == (0, 0)
    assert service.grid_cell(7.9, 8.0) == (0, 1)
    assert service.grid_cell(-0.1, -8.0) == (-1, -1)
    assert service.cell_center((0, -1)) == (4.0, -4.0)


def test_spawn_cap_and_fill():
    """Test that spawning is capped per tick and fills the half disk ahead"""
    service = TerrainService(_settings(radius=6, cap=10))
    observer = Observer(0.0, 0.0)

    service.update(observer)
    assert service.spawned_last_tick == 10
    assert len(service.chunks) == 10
    assert (0, 0) in service.chunks

    for _ in range(20):
        service.update(observer)
        assert service.spawned_last_tick <= 10

    assert set(service.chunks) == _half_disk(6)
    assert service.spawned == set(service.chunks)
    assert service.spawned_last_tick == 0


def test_chunks_stay_in_range_while_walking():
    """Test that a wandering observer never leaves far chunks behind"""
    settings = _settings(radius=4, cap=6)
    service = TerrainService(settings)
    observer = Observer(0.0, 0.0)
    rng = random.Random(4)
    limit = settings.get_despawn_radius() ** 2

    for _ in range(120):
        observer.yaw += rng.uniform(-0.6, 0.6)
        fx, fz = observer.forward
        observer.x += fx * 3.0
        observer.z += fz * 3.0
        service.update(observer)

        assert service.spawned_last_tick <= settings.max_spawns_per_frame
        assert service.spawned == set(service.chunks)
        ox, oz = service.grid_cell(observer.x, observer.z)
        for cx, cz in service.chunks:
            assert (cx - ox) ** 2 + (cz - oz) ** 2 <= limit


def test_turn_right_keeps_surviving_quadrant():
    """Test a quarter turn from north to east at the origin"""
    service = TerrainService(_settings(radius=16))
    observer = Observer(0.0, 0.0)

    service.update(observer)
    assert (0, 0) in service.chunks
    assert service.spawned_last_tick <= 64
    for cx, cz in service.chunks:
        assert cx * cx + cz * cz <= 18 * 18

    height_before = service.terrain_height(4.0, 4.0)
    observer.face(1.0, 0.0)
    service.update(observer)

    assert service.sampler.visible_axis == VisibleAxis.EAST
    assert service.take_rotation_count() == 1
    assert all(cx >= 0 for cx, _ in service.chunks)
    assert service.terrain_height(4.0, 4.0) == pytest.approx(height_before, abs=1e-4)

    # Facing the same way does not rotate again
    service.update(observer)
    assert service.take_rotation_count() == 0


def test_rotation_count_resets():
    """Test that reading the rotation count resets it"""
    service = TerrainService(_settings(radius=2))
    observer = Observer(0.0, 0.0)
    service.update(observer)

    observer.face(1.0, 0.0)
    service.update(observer)
    observer.face(0.0, -1.0)
    service.update(observer)

    assert service.take_rotation_count() == 2
    assert service.take_rotation_count() == 0


def test_half_turn_rotates_twice():
    """Test that a half turn steps through the intermediate axis"""
    service = TerrainService(_settings(radius=2))
    observer = Observer(0.0, 0.0)
    service.update(observer)

    observer.face(0.0, -1.0)
    service.update(observer)
    assert service.sampler.visible_axis == VisibleAxis.WEST
    service.update(observer)
    assert service.sampler.visible_axis == VisibleAxis.SOUTH
    assert service.take_rotation_count() == 2


def test_fresh_quadrant_gets_next_colour():
    """Test quadrant colour tags across a rotation"""
    service = TerrainService(_settings(radius=3))
    observer = Observer(0.0, 0.0)
    service.update(observer)

    assert service.chunks[(0, 0)].colour == DebugColour.GREEN
    assert service.chunks[(-1, 0)].colour == DebugColour.RED

    observer.face(1.0, 0.0)
    service.update(observer)

    assert service.colour_for(Quadrant.SOUTH_EAST) == DebugColour.BLUE
    assert service.next_colour == DebugColour.YELLOW
    assert service.chunks[(0, -1)].colour == DebugColour.BLUE
    assert service.chunks[(0, 0)].colour == DebugColour.GREEN


def test_stale_region_captured_and_shared():
    """Test that turning away from the observer's quadrant records it and seals its edges"""
    service = TerrainService(_settings(radius=3))
    observer = Observer(0.0, 0.0)
    service.update(observer)
    stale_edges = service.chunks[(0, 0)].edge_heights

    # Turning left retires the north-east quadrant the observer stands in
    observer.face(-1.0, 0.0)
    service.update(observer)

    assert service.sampler.visible_axis == VisibleAxis.WEST
    assert service.stale is not None
    assert service.stale.grid_pos == (0, 0)
    assert service.stale.edge_heights is stale_edges
    assert (0, 0) in service.chunks

    south = service.chunks[(0, -1)].edge_heights
    assert np.array_equal(south.north, stale_edges.south)
    south_west = service.chunks[(-1, -1)].edge_heights
    assert south_west.north[-1] == stale_edges.south[0]

    # Walking away despawns the stale chunk and releases the snapshot
    observer.x = -20.0
    service.update(observer)
    assert (0, 0) not in service.chunks
    assert service.stale is None


def test_stale_region_kept_while_tracking_same_chunk():
    """Test that turning away from the same chunk twice keeps the first snapshot"""
    service = TerrainService(_settings(radius=3))
    observer = Observer(0.0, 0.0)
    service.update(observer)

    observer.face(-1.0, 0.0)
    service.update(observer)
    first = service.stale
    assert first is not None and first.grid_pos == (0, 0)

    # Back to north: the retiring quadrant is south-west, nothing is captured
    observer.face(0.0, 1.0)
    service.update(observer)
    assert service.sampler.visible_axis == VisibleAxis.NORTH
    assert service.stale is first

    # West again retires the observer's quadrant, the older snapshot stays
    observer.face(-1.0, 0.0)
    service.update(observer)
    assert service.sampler.visible_axis == VisibleAxis.WEST
    assert service.take_rotation_count() == 3
    assert service.stale is first
    assert service.stale.sampler.visible_axis == VisibleAxis.NORTH


def test_followers_stand_on_terrain():
    """Test that the observer and followers track the terrain height"""
    settings = _settings(radius=2)
    service = TerrainService(settings)
    observer = Observer(3.0, 5.0)
    companion = Companion(observer)
    service.add_follower(companion)

    service.update(observer)

    assert observer.y == pytest.approx(service.terrain_height(3.0, 5.0) + settings.eye_height)
    expected = service.terrain_height(companion.x, companion.z) + companion.height_offset
    assert companion.y == pytest.approx(expected)


def test_observer_uses_own_eye_height():
    """Test that the observer stands at its own eye height above the terrain"""
    service = TerrainService(_settings(radius=1))
    observer = Observer(2.0, 3.0, eye_height=4.25)
    service.update(observer)
    assert observer.height_offset == 4.25
    assert observer.y == pytest.approx(service.terrain_height(2.0, 3.0) + 4.25)


def test_rotation_seed_controls_fresh_axes():
    """Test that two services with the same seed rotate identically"""
    services = [TerrainService(_settings(radius=1)) for _ in range(2)]
    for service in services:
        observer = Observer(0.0, 0.0)
        service.update(observer)
        observer.face(1.0, 0.0)
        service.update(observer)

    assert np.array_equal(services[0].sampler.right_axis, services[1].sampler.right_axis)
    assert np.array_equal(services[0].sampler.noise_origin, services[1].sampler.noise_origin)
