'''
zone_map.py -- evaluates zone region functions over whole sectors

A zone map is a (SECTOR_SIZE, SECTOR_HEIGHT, SECTOR_SIZE) array holding, for
each voxel, 1 + the index of the first child zone that claims it (0 if none
does). Columns are farmed out to a thread pool; every column shares the
layered region functions and their per-column caches.
'''

# standard library imports
import time
import concurrent.futures

import numpy

# local imports
import config
import logutil
from config import SECTOR_SIZE, SECTOR_HEIGHT
from layered_zones import LayeredZoneRegionFunction, LayeredZoneOrdering
from zones import Zone, NoiseSurface

DEFAULT_LAYERS = (
    ('high sky', 20, 40, LayeredZoneOrdering.HIGH_SKY),
    ('medium sky', 20, 40, LayeredZoneOrdering.MEDIUM_SKY),
    ('low sky', 20, 40, LayeredZoneOrdering.LOW_SKY),
    ('surface', 4, 8, LayeredZoneOrdering.SURFACE),
    ('shallow underground', 8, 16, LayeredZoneOrdering.SHALLOW_UNDERGROUND),
    ('medium underground', 16, 32, LayeredZoneOrdering.MEDIUM_UNDERGROUND),
    ('deep underground', 16, 32, LayeredZoneOrdering.DEEP_UNDERGROUND),
)


def build_layered_world(seed, layers=DEFAULT_LAYERS):
    """ Root zone whose children are one layered zone per (name, min, max, ordering).

    """
    root = Zone('world', seed=seed)
    for name, min_width, max_width, ordering in layers:
        root.add_zone(Zone(name, LayeredZoneRegionFunction(min_width, max_width, ordering)))
    return root


def _zone_column(x, z, children, region):
    col = numpy.zeros(SECTOR_HEIGHT, dtype='u1')
    for y in range(SECTOR_HEIGHT):
        for idx, child in enumerate(children):
            if child.contains(x, y, z, region):
                col[y] = idx + 1
                break
    return col


def generate_zone_map(position, zone, region, executor=None):
    """ Zone map of the sector at world position (x, y, z); y is ignored.

    Any error raised by a region function (e.g. a misconfigured layer)
    propagates out of here.
    """
    children = zone.get_child_zones()
    if len(children) > 255:
        raise ValueError(f"zone '{zone}' has {len(children)} children, at most 255 fit a zone map")
    base_x, _, base_z = position
    t0 = time.perf_counter()
    own_executor = executor is None
    if own_executor:
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=getattr(config, 'ZONE_MAP_WORKERS', 4),
            thread_name_prefix='zonemap')
    try:
        futures = {}
        for dx in range(SECTOR_SIZE):
            for dz in range(SECTOR_SIZE):
                fut = executor.submit(_zone_column, base_x + dx, base_z + dz, children, region)
                futures[fut] = (dx, dz)
        zmap = numpy.zeros((SECTOR_SIZE, SECTOR_HEIGHT, SECTOR_SIZE), dtype='u1')
        for fut in concurrent.futures.as_completed(futures):
            dx, dz = futures[fut]
            zmap[dx, :, dz] = fut.result()
    finally:
        if own_executor:
            executor.shutdown(wait=True, cancel_futures=True)
    logutil.log("ZONE_MAP", "zone map for sector %s: %.1fms"
                % (position, (time.perf_counter() - t0) * 1000.0))
    return zmap


def column_profile(x, z, zone, region, heights=range(SECTOR_HEIGHT)):
    """ Runs of (start, stop, zone name) down one column; name is None where
    no child zone applies. stop is exclusive.
    """
    children = zone.get_child_zones()
    runs = []
    for y in heights:
        name = None
        for child in children:
            if child.contains(x, y, z, region):
                name = child.name
                break
        if runs and runs[-1][2] == name and runs[-1][1] == y:
            start, _, _ = runs[-1]
            runs[-1] = (start, y + 1, name)
        else:
            runs.append((y, y + 1, name))
    return runs


if __name__ == '__main__':
    seed = 3332
    world = build_layered_world(seed)
    region = NoiseSurface(seed)
    for x, z in ((0, 0), (250, -40), (-1000, 777)):
        print('column', (x, z), 'surface', region.surface_height_at(x, z))
        for start, stop, name in column_profile(x, z, world, region):
            print('   %4d..%4d %s' % (start, stop - 1, name))
    zmap = generate_zone_map((0, 0, 0), world, region)
    counts = numpy.bincount(zmap.ravel(), minlength=len(world.children) + 1)
    for idx, child in enumerate(world.children):
        print('%-20s %d voxels' % (child.name, counts[idx + 1]))
