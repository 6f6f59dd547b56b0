import os

# Size of sectors used for zone maps.
SECTOR_SIZE = 16 #width and depth (x and z)
SECTOR_HEIGHT = 256 #height of world (y)

# Layered zones
# Horizontal divisor applied to world x/z before sampling layer width noise.
LAYER_NOISE_SCALE = 100.0
# Vertical offset between successive layers' noise fields (decorrelates them).
LAYER_NOISE_OFFSET = 10000
# Octaves of brownian noise used for layer widths.
LAYER_NOISE_OCTAVES = 2

# Zone map generation: worker threads used to evaluate columns of a sector.
ZONE_MAP_WORKERS = min(8, os.cpu_count() or 1)

# Default surface recipe for NoiseSurface (hill + continental noise).
SURFACE_HILL_STEP = 40.0
SURFACE_HILL_SCALE = 5
SURFACE_CONTINENTAL_STEP = 1500.0
SURFACE_CONTINENTAL_SCALE = 40.0
SURFACE_OFFSET = 80

# Enable ANSI colors in logs.
LOG_COLOR = True

# Log zone setup events (noise seeding, sibling group resolution, zone map timings).
LOG_ZONES = True

# Log every per-column layer range computation (very chatty).
LOG_LAYER_CACHE = False
