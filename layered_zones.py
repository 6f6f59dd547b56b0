'''
layered_zones.py -- region functions that stack sibling zones into vertical layers

Every LayeredZoneRegionFunction is one layer. Layers with ordering >= 0 sit
above the surface, the rest below it, and the magnitude of the ordering sets
the distance from the surface (smaller is closer). Each layer's thickness at a
column is picked between its min and max width by coherent noise, so layer
boundaries roll across the world instead of lying flat.

The innermost layers touch the surface; the outermost layer on each side is
open ended (the sky has no ceiling and the deepest layer has no floor).

Resolvers are called from many generation threads at once. Per-column ranges
go into a cache that is never invalidated, since a column's layering depends
only on the seed and the surface height.
'''

import itertools
import math
import threading

import config
import logutil
import simplex
from zones import surface_floor


class LayeredZoneOrdering:
    HIGH_SKY = 300
    MEDIUM_SKY = 200
    LOW_SKY = 100
    SURFACE = 0
    SHALLOW_UNDERGROUND = -100
    MEDIUM_UNDERGROUND = -200
    DEEP_UNDERGROUND = -300


class LayerConfigurationError(RuntimeError):
    """The layer is not among the layered siblings of its zone, or its side of
    the surface has no layers at all. This is a setup bug, not a transient
    condition.
    """
    def __init__(self, zone, layer):
        self.zone = zone
        self.layer = layer
        side = 'underground' if layer.is_underground() else 'aboveground'
        super().__init__(
            f"Layer {layer!r} for zone '{zone}' is not among the {side} "
            f"layered siblings of that zone")


class LayerRange(object):
    """ Half open span of heights [min, max). A bound of None is unbounded.

    Built up with the set/unset methods, which return the range so calls can
    be chained. Ranges are not mutated once they are published to a cache.
    """
    __slots__ = ('min', 'max')

    def __init__(self, min=None, max=None):
        self.min = min
        self.max = max

    def set_min(self, min):
        self.min = min
        return self

    def set_max(self, max):
        self.max = max
        return self

    def unset_min(self):
        self.min = None
        return self

    def unset_max(self):
        self.max = None
        return self

    @property
    def has_min(self):
        return self.min is not None

    @property
    def has_max(self):
        return self.max is not None

    def contains(self, height):
        satisfies_min = self.min is None or self.min <= height
        satisfies_max = self.max is None or height < self.max
        return satisfies_min and satisfies_max

    def __eq__(self, other):
        if not isinstance(other, LayerRange):
            return NotImplemented
        return self.min == other.min and self.max == other.max

    __hash__ = None

    def __repr__(self):
        lo = '-inf' if self.min is None else self.min
        hi = '+inf' if self.max is None else self.max
        return f"LayerRange([{lo}, {hi}))"


class ColumnRangeCache(object):
    """ Layer ranges keyed by (x, z) column.

    get and publish are each a single dict operation and therefore atomic.
    The lookup/compute/publish sequence is not: two threads missing on the
    same column both compute, and publish keeps whichever range landed first
    and hands it back to both, so every caller sees the same object.
    """
    def __init__(self):
        self._ranges = {}

    def get(self, key):
        return self._ranges.get(key)

    def publish(self, key, layer_range):
        return self._ranges.setdefault(key, layer_range)

    def clear(self):
        self._ranges.clear()

    def __len__(self):
        return len(self._ranges)

    def __contains__(self, key):
        return key in self._ranges


class LayerGroup(object):
    """ Layered siblings of a zone, sorted by distance from the surface.

    Each list is computed on first request and kept for the lifetime of the
    group. Sorting is stable: layers with the same abs(ordering) keep the
    order in which their zones were added to the parent.
    """
    def __init__(self):
        self._lock = threading.Lock()
        self._siblings = None
        self._aboveground = None
        self._underground = None

    def siblings(self, zone):
        siblings = self._siblings
        if siblings is None:
            with self._lock:
                if self._siblings is None:
                    layers = [f for f in zone.get_sibling_region_functions()
                              if isinstance(f, LayeredZoneRegionFunction)]
                    layers.sort(key=lambda l: abs(l.ordering))
                    self._siblings = tuple(layers)
                    logutil.log("ZONES", f"zone '{zone}' has {len(layers)} layered siblings: "
                                f"{[l.ordering for l in layers]}")
                siblings = self._siblings
        return siblings

    def aboveground_layers(self, zone):
        layers = self._aboveground
        if layers is None:
            siblings = self.siblings(zone)
            with self._lock:
                if self._aboveground is None:
                    self._aboveground = tuple(l for l in siblings if not l.is_underground())
                layers = self._aboveground
        return layers

    def underground_layers(self, zone):
        layers = self._underground
        if layers is None:
            siblings = self.siblings(zone)
            with self._lock:
                if self._underground is None:
                    self._underground = tuple(l for l in siblings if l.is_underground())
                layers = self._underground
        return layers


_layer_ids = itertools.count()


class LayeredZoneRegionFunction(object):
    """ Region function making its zone one layer of a stack of sibling zones.

    min_width and max_width bound the layer's thickness at any column and
    ordering places it in the stack (see LayeredZoneOrdering for the usual
    values). Raises ValueError unless 0 <= min_width <= max_width.
    """
    def __init__(self, min_width, max_width, ordering):
        if min_width < 0 or min_width > max_width:
            raise ValueError(
                f"layer widths must satisfy 0 <= min_width <= max_width, "
                f"got min_width={min_width} max_width={max_width}")
        self._min_width = int(min_width)
        self._max_width = int(max_width)
        self._ordering = int(ordering)
        # identifies this layer within its sibling group
        self.layer_id = next(_layer_ids)
        self.group = LayerGroup()
        self.cache = ColumnRangeCache()
        self._noise = None
        self._noise_lock = threading.Lock()

    @property
    def min_width(self):
        return self._min_width

    @property
    def max_width(self):
        return self._max_width

    @property
    def ordering(self):
        return self._ordering

    def is_underground(self):
        return self._ordering < 0

    def apply(self, x, y, z, region, zone):
        return self.range_for(x, z, region, zone).contains(y)

    contains = apply

    def width_at(self, noise_value):
        """ Width of this layer for a noise sample in [-1, 1].

        Samples outside that interval are clamped. Rounds half up.
        """
        v = (min(1.0, max(-1.0, noise_value)) + 1) / 2
        return int(math.floor(self._min_width + v * (self._max_width - self._min_width) + 0.5))

    def range_for(self, x, z, region, zone):
        pos = (x, z)
        layer_range = self.cache.get(pos)
        if layer_range is not None:
            return layer_range

        noise = self._get_noise(zone)
        aboveground = not self.is_underground()
        if aboveground:
            layers = self.group.aboveground_layers(zone)
        else:
            layers = self.group.underground_layers(zone)
        surface_height = surface_floor(region, x, z)
        noise_scale = getattr(config, 'LAYER_NOISE_SCALE', 100.0)
        noise_offset = getattr(config, 'LAYER_NOISE_OFFSET', 10000)
        sign = 1 if aboveground else -1

        cumulative_small = 0
        cumulative_large = 0
        for i, layer in enumerate(layers):
            layer_width = layer.width_at(
                noise.noise3(x / noise_scale, noise_offset * i * sign, z / noise_scale))
            cumulative_large += layer_width
            if layer.layer_id == self.layer_id:
                outermost = i == len(layers) - 1
                if aboveground:
                    layer_range = LayerRange(surface_height + cumulative_small,
                                             surface_height + cumulative_large)
                    if outermost:
                        layer_range.unset_max()
                else:
                    layer_range = LayerRange(surface_height - cumulative_large,
                                             surface_height - cumulative_small)
                    if outermost:
                        layer_range.unset_min()
                break
            cumulative_small += layer_width

        if layer_range is None:
            logutil.log("ZONES", f"layer {self!r} missing from siblings of zone '{zone}' "
                        f"({len(layers)} layers on its side)", level="ERROR")
            raise LayerConfigurationError(zone, self)

        if logutil.enabled("LAYER_CACHE"):
            logutil.log("LAYER_CACHE", f"zone '{zone}' column {pos}: {layer_range}", level="DEBUG")
        return self.cache.publish(pos, layer_range)

    def _get_noise(self, zone):
        noise = self._noise
        if noise is None:
            with self._noise_lock:
                if self._noise is None:
                    seed = zone.get_seed()
                    octaves = getattr(config, 'LAYER_NOISE_OCTAVES', 2)
                    self._noise = simplex.BrownianNoise(simplex.SimplexNoise(seed=seed), octaves=octaves)
                    logutil.log("ZONES", f"seeded layer noise for zone '{zone}' "
                                f"(seed {seed}, {octaves} octaves)")
                noise = self._noise
        return noise

    def __repr__(self):
        return (f"LayeredZoneRegionFunction(min_width={self._min_width}, "
                f"max_width={self._max_width}, ordering={self._ordering})")
