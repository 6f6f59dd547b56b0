'''
zones.py -- zone tree and surface height providers used by the layered zone resolver

A Zone is a named region of the world. It owns a seed, an optional region
function deciding which voxels belong to it, and child zones. The children of
one parent are siblings; their region functions are what a layered region
function partitions the vertical axis between.
'''

import math

import numpy

import config
import simplex


class Zone(object):
    def __init__(self, name, region_function=None, seed=None):
        self.name = name
        self.region_function = region_function
        self.seed = seed
        self.parent = None
        self.children = []

    def add_zone(self, child):
        child.parent = self
        self.children.append(child)
        return self

    def get_seed(self):
        """ Seed of this zone; zones without their own seed use their parent's.

        Layered siblings must agree on the seed, otherwise their widths are
        drawn from different noise fields and the stack tears apart.
        """
        zone = self
        while zone.seed is None and zone.parent is not None:
            zone = zone.parent
        return 0 if zone.seed is None else zone.seed

    def get_child_zones(self):
        return list(self.children)

    def get_sibling_zones(self):
        if self.parent is None:
            return [self]
        return self.parent.get_child_zones()

    def get_sibling_region_functions(self):
        """ Region functions of this zone and its siblings, in insertion order.

        """
        return [z.region_function for z in self.get_sibling_zones()
                if z.region_function is not None]

    def contains(self, x, y, z, region):
        if self.region_function is None:
            return False
        return self.region_function.apply(x, y, z, region, self)

    def __repr__(self):
        return f"Zone({self.name!r})"

    def __str__(self):
        return self.name


class FlatSurface(object):
    """Surface at a constant height everywhere."""
    def __init__(self, height):
        self.height = height

    def surface_height_at(self, x, z):
        return float(self.height)


class NoiseSurface(object):
    """ Rolling surface made of a hill layer riding on a continental layer,
    the same recipe the sector generator uses for its height field.

    """
    def __init__(self, seed,
                 hill_step=config.SURFACE_HILL_STEP,
                 hill_scale=config.SURFACE_HILL_SCALE,
                 continental_step=config.SURFACE_CONTINENTAL_STEP,
                 continental_scale=config.SURFACE_CONTINENTAL_SCALE,
                 offset=config.SURFACE_OFFSET):
        self.hills = simplex.SimplexNoise(seed=seed + 12)
        self.continents = simplex.SimplexNoise(seed=seed + 14)
        self.hill_step = hill_step
        self.hill_scale = hill_scale
        self.continental_step = continental_step
        self.continental_scale = continental_scale
        self.offset = offset

    def heights(self, xs, zs):
        Z = numpy.stack([numpy.asarray(xs, dtype=numpy.float64).ravel(),
                         numpy.asarray(zs, dtype=numpy.float64).ravel()], axis=-1)
        h = self.hills.noise(Z / self.hill_step) * self.hill_scale
        c = self.continents.noise(Z / self.continental_step) * self.continental_scale
        return h + c + self.offset

    def surface_height_at(self, x, z):
        return float(self.heights([x], [z])[0])


def surface_floor(region, x, z):
    return int(math.floor(region.surface_height_at(x, z)))
