"""core/constants.py — Shared constants used across the codebase.

Centralises magic numbers so there's exactly one place to change them.

Unit System
-----------
All positions are measured in **tiles**.  Entity positions are floats
(``Position.x / .y``) but every placement the zone engine makes is on a
whole tile, so ``int(pos.x), int(pos.y)`` recovers the tile.

Rendering converts to pixels via ``TILE_SIZE`` (px per tile).
No gameplay code should reference pixels — only the renderer.

Tile IDs
~~~~~~~~
Tile ids are small ints so a grid fits in a byte array (see
``core/nbt.py``).  Walkability is derived from the id, never stored.
"""

# Tile IDs  (must match TILE_COLORS and data in *.nbt files)
TILE_VOID       = 0
TILE_GRASS      = 1
TILE_DIRT       = 2
TILE_STONE      = 3
TILE_WATER      = 4
TILE_DEEP_WATER = 5
TILE_WALL       = 6     # stone wall
TILE_SAND       = 7
TILE_TREE       = 10

TILE_NAMES = {
    TILE_VOID: "void",
    TILE_GRASS: "grass",
    TILE_DIRT: "dirt",
    TILE_STONE: "stone",
    TILE_WATER: "water",
    TILE_DEEP_WATER: "deep water",
    TILE_WALL: "stone wall",
    TILE_SAND: "sand",
    TILE_TREE: "tree",
}

# Tiles nothing can stand on
BLOCKING_TILES = frozenset({TILE_WALL, TILE_TREE, TILE_DEEP_WATER})

# Render
TILE_SIZE = 16

# Tile palette, index → color
TILE_COLORS = {
    0: (40, 40, 40),       # void
    1: (50, 80, 40),       # grass
    2: (80, 70, 50),       # dirt
    3: (60, 60, 70),       # stone
    4: (30, 60, 90),       # water
    5: (15, 30, 70),       # deep water
    6: (90, 90, 90),       # stone wall
    7: (170, 150, 100),    # sand
    10: (25, 55, 25),      # tree
}
