import os
import sys
import concurrent.futures

import numpy as np

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import config
import logutil
import zone_map
from config import SECTOR_SIZE, SECTOR_HEIGHT
from layered_zones import LayeredZoneOrdering
from zones import FlatSurface, NoiseSurface

SMALL_STACK = [
    ('sky', 30, 60, LayeredZoneOrdering.LOW_SKY),
    ('surface', 4, 8, LayeredZoneOrdering.SURFACE),
    ('shallow', 8, 16, LayeredZoneOrdering.SHALLOW_UNDERGROUND),
    ('deep', 16, 32, LayeredZoneOrdering.DEEP_UNDERGROUND),
]


def test_zone_map_shape_and_full_coverage():
    world = zone_map.build_layered_world(seed=12, layers=SMALL_STACK)
    zmap = zone_map.generate_zone_map((32, 0, -16), world, FlatSurface(100.5))
    assert zmap.shape == (SECTOR_SIZE, SECTOR_HEIGHT, SECTOR_SIZE)
    assert zmap.dtype == np.uint8
    assert zmap.min() == 1
    assert zmap.max() == len(SMALL_STACK)


def test_zone_map_agrees_with_region_functions():
    world = zone_map.build_layered_world(seed=12, layers=SMALL_STACK)
    region = NoiseSurface(12)
    position = (-16, 0, 48)
    with concurrent.futures.ThreadPoolExecutor(max_workers=4) as ex:
        zmap = zone_map.generate_zone_map(position, world, region, executor=ex)
    rng = np.random.RandomState(3)
    for _ in range(200):
        dx, y, dz = rng.randint(SECTOR_SIZE), rng.randint(SECTOR_HEIGHT), rng.randint(SECTOR_SIZE)
        child = world.children[zmap[dx, y, dz] - 1]
        assert child.contains(position[0] + dx, y, position[2] + dz, region)


def test_zone_map_surface_row():
    world = zone_map.build_layered_world(seed=1, layers=SMALL_STACK)
    zmap = zone_map.generate_zone_map((0, 0, 0), world, FlatSurface(64))
    surface_index = 2
    assert (zmap[:, 64, :] == surface_index).all()
    assert (zmap[:, 63, :] == surface_index + 1).all()
    assert (zmap[:, 0, :] == len(SMALL_STACK)).all()
    assert (zmap[:, SECTOR_HEIGHT - 1, :] == 1).all()


def test_zone_map_is_deterministic():
    region = NoiseSurface(8)
    a = zone_map.generate_zone_map((0, 0, 0), zone_map.build_layered_world(8, SMALL_STACK), region)
    b = zone_map.generate_zone_map((0, 0, 0), zone_map.build_layered_world(8, SMALL_STACK), region)
    assert np.array_equal(a, b)


def test_default_layers_are_immutable():
    assert isinstance(zone_map.DEFAULT_LAYERS, tuple)
    world = zone_map.build_layered_world(seed=2)
    assert [c.name for c in world.children] == [name for name, _, _, _ in zone_map.DEFAULT_LAYERS]


def test_column_profile_runs():
    world = zone_map.build_layered_world(seed=5)
    region = FlatSurface(80)
    runs = zone_map.column_profile(10, 10, world, region)
    assert runs[0][0] == 0 and runs[-1][1] == SECTOR_HEIGHT
    for (_, stop, _), (start, _, _) in zip(runs, runs[1:]):
        assert stop == start
    names = [name for _, _, name in runs]
    assert names == ['deep underground', 'medium underground', 'shallow underground',
                     'surface', 'low sky', 'medium sky', 'high sky']
    surface_run = runs[3]
    assert surface_run[0] == 80


def test_logging_respects_scope_flags(capsys, monkeypatch):
    monkeypatch.setattr(config, 'LOG_COLOR', False)
    monkeypatch.setattr(config, 'LOG_LAYER_CACHE', False)
    logutil.log('LAYER_CACHE', 'hidden', level='DEBUG')
    logutil.log('LAYER_CACHE', 'shown anyway', level='ERROR')
    logutil.log('ZONES', 'zone event')
    out = capsys.readouterr().out
    assert 'hidden' not in out
    assert '[ERROR' in out and 'LAYER_CACHE] shown anyway' in out
    assert 'ZONES] zone event' in out
