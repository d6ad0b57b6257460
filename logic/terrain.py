"""logic/terrain.py — Per-biome terrain generation.

    grid = generate_terrain(Biome.CAVE, zone.seed, zone.width, zone.height,
                            exits=zone.exits.values())

``generate_terrain`` is a pure function of its arguments.  All
randomness comes from one ``random.Random`` seeded from the zone seed,
so the same key always produces the same grid, tile for tile.  Each
biome has exactly one algorithm; ``_GENERATORS`` must cover every
``Biome`` member and the module refuses to import otherwise.

Counts and probabilities are read from ``[terrain.*]`` in
``data/tuning.toml``.  The defaults below are the shipped values.
"""

from __future__ import annotations
import random
from typing import Callable, Iterable

from core import tuning
from core.constants import (
    TILE_DIRT, TILE_GRASS, TILE_SAND, TILE_STONE, TILE_TREE, TILE_WALL,
    TILE_WATER,
)
from core.tiles import TileGrid
from core.zone import BIOME_FLOOR, Biome, Direction, edge_midpoint

# Added to the zone seed for the terrain RNG (spawning uses other offsets)
TERRAIN_SEED_OFFSET = 0


# ── Shapes ───────────────────────────────────────────────────────────

def _disc(grid: TileGrid, cx: int, cy: int, radius: int, tile: int) -> None:
    """Fill every tile within Euclidean *radius* of (cx, cy)."""
    r2 = radius * radius
    for dy in range(-radius, radius + 1):
        for dx in range(-radius, radius + 1):
            if dx * dx + dy * dy <= r2:
                grid.set(cx + dx, cy + dy, tile)


def _scatter(grid: TileGrid, rng: random.Random, count: int) -> Iterable[tuple[int, int]]:
    for _ in range(count):
        yield rng.randrange(grid.width), rng.randrange(grid.height)


# ── Biomes ───────────────────────────────────────────────────────────

def _wasteland(grid: TileGrid, rng: random.Random) -> None:
    cfg = "terrain.wasteland"
    grid.fill(TILE_DIRT)

    for x, y in _scatter(grid, rng, tuning.get(cfg, "blotches", 100)):
        grid.set(x, y, TILE_SAND if rng.random() < 0.5 else TILE_STONE)

    pools = rng.randint(tuning.get(cfg, "pools_min", 2), tuning.get(cfg, "pools_max", 4))
    for _ in range(pools):
        cx, cy = rng.randrange(grid.width), rng.randrange(grid.height)
        radius = rng.randint(tuning.get(cfg, "pool_radius_min", 2),
                             tuning.get(cfg, "pool_radius_max", 4))
        _disc(grid, cx, cy, radius, TILE_WATER)


def _ruins(grid: TileGrid, rng: random.Random) -> None:
    cfg = "terrain.ruins"
    grid.fill(TILE_STONE)
    keep = tuning.get(cfg, "wall_chance", 0.7)
    size_min = tuning.get(cfg, "size_min", 4)
    size_max = tuning.get(cfg, "size_max", 9)

    for _ in range(tuning.get(cfg, "buildings", 8)):
        bw = rng.randint(size_min, size_max)
        bh = rng.randint(size_min, size_max)
        bx = rng.randrange(max(1, grid.width - bw))
        by = rng.randrange(max(1, grid.height - bh))
        # Each perimeter tile rolls on its own, so walls come out broken
        for x in range(bx, bx + bw):
            if rng.random() < keep:
                grid.set(x, by, TILE_WALL)
            if rng.random() < keep:
                grid.set(x, by + bh - 1, TILE_WALL)
        for y in range(by, by + bh):
            if rng.random() < keep:
                grid.set(bx, y, TILE_WALL)
            if rng.random() < keep:
                grid.set(bx + bw - 1, y, TILE_WALL)

    for x, y in _scatter(grid, rng, tuning.get(cfg, "rubble", 50)):
        if grid.get(x, y) != TILE_WALL:
            grid.set(x, y, TILE_DIRT)


def _forest(grid: TileGrid, rng: random.Random) -> None:
    cfg = "terrain.forest"
    grid.fill(TILE_GRASS)

    for x, y in _scatter(grid, rng, tuning.get(cfg, "trees", 150)):
        grid.set(x, y, TILE_TREE)

    for _ in range(tuning.get(cfg, "clearings", 5)):
        cx, cy = rng.randrange(grid.width), rng.randrange(grid.height)
        radius = rng.randint(tuning.get(cfg, "clearing_radius_min", 3),
                             tuning.get(cfg, "clearing_radius_max", 5))
        _disc(grid, cx, cy, radius, TILE_GRASS)


def _wall_neighbours(tiles: list[list[int]], x: int, y: int, w: int, h: int) -> int:
    n = 0
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            nx, ny = x + dx, y + dy
            # Off-grid counts as rock
            if not (0 <= nx < w and 0 <= ny < h) or tiles[ny][nx] == TILE_WALL:
                n += 1
    return n


def _cave(grid: TileGrid, rng: random.Random) -> None:
    cfg = "terrain.cave"
    w, h = grid.width, grid.height
    grid.fill(TILE_WALL)

    open_chance = tuning.get(cfg, "open_chance", 0.45)
    for y in range(1, h - 1):
        for x in range(1, w - 1):
            if rng.random() < open_chance:
                grid.set(x, y, TILE_STONE)

    threshold = tuning.get(cfg, "wall_threshold", 5)
    for _ in range(tuning.get(cfg, "smoothing_passes", 3)):
        # Every pass reads the previous generation, never its own writes
        prev = grid.rows()
        for y in range(h):
            for x in range(w):
                walls = _wall_neighbours(prev, x, y, w, h)
                grid.set(x, y, TILE_WALL if walls >= threshold else TILE_STONE)

    core = tuning.get(cfg, "core_size", 11)
    half = core // 2
    cx, cy = w // 2, h // 2
    for y in range(cy - half, cy - half + core):
        for x in range(cx - half, cx - half + core):
            grid.set(x, y, TILE_STONE)


def _settlement(grid: TileGrid, rng: random.Random) -> None:
    cfg = "terrain.settlement"
    w, h = grid.width, grid.height
    grid.fill(TILE_GRASS)

    path = tuning.get(cfg, "path_width", 2)
    for d in range(path):
        row = h // 2 - path // 2 + d
        col = w // 2 - path // 2 + d
        for x in range(w):
            grid.set(x, row, TILE_DIRT)
        for y in range(h):
            grid.set(col, y, TILE_DIRT)

    for x, y in _scatter(grid, rng, tuning.get(cfg, "decorations", 20)):
        grid.set(x, y, TILE_STONE)


def _laboratory(grid: TileGrid, rng: random.Random) -> None:
    cfg = "terrain.laboratory"
    cell = tuning.get(cfg, "cell", 8)
    corridor = tuning.get(cfg, "corridor", 3)
    for y in range(grid.height):
        for x in range(grid.width):
            is_corridor = x % cell < corridor or y % cell < corridor
            grid.set(x, y, TILE_STONE if is_corridor else TILE_WALL)

    for x, y in _scatter(grid, rng, tuning.get(cfg, "openings", 30)):
        grid.set(x, y, TILE_STONE)


_GENERATORS: dict[Biome, Callable[[TileGrid, random.Random], None]] = {
    Biome.WASTELAND: _wasteland,
    Biome.RUINS: _ruins,
    Biome.FOREST: _forest,
    Biome.CAVE: _cave,
    Biome.SETTLEMENT: _settlement,
    Biome.LABORATORY: _laboratory,
}

_missing = set(Biome) - set(_GENERATORS)
if _missing:
    raise RuntimeError(f"no terrain generator for biome(s): "
                       f"{sorted(b.value for b in _missing)}")


# ── Exits ────────────────────────────────────────────────────────────

def clear_exit(grid: TileGrid, direction: Direction, floor: int) -> list[tuple[int, int]]:
    """Open a strip on the boundary centred on the edge midpoint.

    The strip runs along the boundary (horizontal on north/south,
    vertical on east/west).  Returns the tiles written.
    """
    strip = tuning.get("terrain", "exit_strip", 3)
    mx, my = edge_midpoint(direction, grid.width, grid.height)
    lo = -(strip // 2)
    cleared = []
    for d in range(lo, lo + strip):
        if direction in (Direction.NORTH, Direction.SOUTH):
            tile = (mx + d, my)
        else:
            tile = (mx, my + d)
        if grid.in_bounds(*tile):
            grid.set(tile[0], tile[1], floor)
            cleared.append(tile)
    return cleared


def generate_terrain(biome: Biome | str, seed: int, width: int, height: int,
                     exits: Iterable = (),
                     landings: Iterable[tuple[int, int]] = ()) -> TileGrid:
    """Build the tile grid for one zone.

    *exits* are the zone's outbound ``ExitEdge`` objects (or bare
    ``Direction`` values); each gets its boundary strip opened.
    *landings* are tiles other zones' exits arrive on; each is set to
    floor so nobody materialises inside a wall.

    Densities and counts come from the live ``core.tuning`` table at
    call time, so after ``tuning.reload()`` the same seed can give a
    different grid.  ``ZoneController`` caches each grid for the session;
    only zones first generated after a reload pick up the new values.
    """
    biome = Biome(biome)
    grid = TileGrid(width, height)
    rng = random.Random(seed + TERRAIN_SEED_OFFSET)
    _GENERATORS[biome](grid, rng)

    floor = BIOME_FLOOR[biome]
    for ex in exits:
        clear_exit(grid, Direction(getattr(ex, "direction", ex)), floor)
    for x, y in landings:
        grid.set(x, y, floor)
    return grid
