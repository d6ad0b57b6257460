"""test_terrain.py — Headless checks for per-biome terrain generation.

Every check runs against the in-code defaults (``tuning.reset()``),
which the shipped data/tuning.toml mirrors.

Run:  python test_terrain.py
"""
from __future__ import annotations
import sys, tempfile, traceback
from pathlib import Path

from core import tuning
from core.constants import (
    TILE_DIRT, TILE_GRASS, TILE_SAND, TILE_STONE, TILE_TREE, TILE_WALL,
    TILE_WATER,
)
from core.zone import BIOME_FLOOR, Biome, Direction, ExitEdge, stable_seed
from core.tiles import TileGrid
from logic.terrain import clear_exit, generate_terrain

_passed = 0
_failed = 0


def ok(label: str):
    global _passed
    _passed += 1
    print(f"  [PASS] {label}")


def fail(label: str, detail: str = ""):
    global _failed
    _failed += 1
    print(f"  [FAIL] {label}")
    if detail:
        for line in detail.strip().splitlines():
            print(f"         {line}")


def check(cond: bool, label: str, detail: str = ""):
    if cond:
        ok(label)
    else:
        fail(label, detail)
    assert cond, f"{label}: {detail}"


def _tiles_used(grid: TileGrid) -> set[int]:
    return {t for row in grid.tiles for t in row}


# ════════════════════════════════════════════════════════════════════

def test_determinism():
    print("\n=== 1: Determinism ===")
    tuning.reset()
    seed = stable_seed("start")
    a = generate_terrain(Biome.WASTELAND, seed, 50, 50)
    b = generate_terrain("wasteland", seed, 50, 50)
    check(a == b, "same key and size give the same grid, tile for tile")
    check(a.bounds == (50, 50), "grid has the requested size")

    other = generate_terrain(Biome.WASTELAND, stable_seed("elsewhere"), 50, 50)
    check(a != other, "a different key gives different terrain")

    for biome in Biome:
        g1 = generate_terrain(biome, 1234, 40, 30)
        g2 = generate_terrain(biome, 1234, 40, 30)
        assert g1 == g2, biome.value
    ok("every biome is reproducible")


def test_every_biome():
    print("\n=== 2: Every biome dispatches ===")
    tuning.reset()
    for biome in Biome:
        grid = generate_terrain(biome, stable_seed(biome.value), 45, 45)
        walkable = sum(1 for y in range(45) for x in range(45) if grid.is_walkable(x, y))
        assert grid.bounds == (45, 45), biome.value
        assert walkable > 0, f"{biome.value} has no floor"
    ok("all six biomes produce a grid with floor")

    try:
        generate_terrain("swamp", 1, 10, 10)
        fail("unknown biome refused")
        assert False
    except ValueError:
        ok("unknown biome refused")


def test_biome_palettes():
    print("\n=== 3: Biome palettes ===")
    tuning.reset()
    seed = stable_seed("palette")

    waste = generate_terrain(Biome.WASTELAND, seed, 50, 50)
    check(_tiles_used(waste) <= {TILE_DIRT, TILE_SAND, TILE_STONE, TILE_WATER},
          "wasteland is dirt, sand, stone and water")
    check(waste.count(TILE_WATER) > 0, "wasteland has at least one pool")

    forest = generate_terrain(Biome.FOREST, seed, 50, 50)
    check(_tiles_used(forest) <= {TILE_GRASS, TILE_TREE}, "forest is grass and trees")
    check(forest.count(TILE_TREE) > 0, "forest has trees")

    ruins = generate_terrain(Biome.RUINS, seed, 50, 50)
    check(_tiles_used(ruins) <= {TILE_STONE, TILE_WALL, TILE_DIRT}, "ruins are stone, walls and rubble")
    check(ruins.count(TILE_WALL) > 0, "ruins have broken walls")


def test_cave_core():
    print("\n=== 4: Cave core ===")
    tuning.reset()
    for seed in range(6):
        grid = generate_terrain(Biome.CAVE, seed, 50, 50)
        cx, cy = 25, 25
        for y in range(cy - 5, cy + 6):
            for x in range(cx - 5, cx + 6):
                assert grid.get(x, y) == TILE_STONE, f"seed {seed}: wall at {(x, y)}"
    ok("11x11 centre is open on six seeds")

    small = generate_terrain(Biome.CAVE, 7, 9, 9)
    check(small.bounds == (9, 9), "core larger than the grid is clipped")
    check(_tiles_used(small) == {TILE_STONE}, "tiny cave is all core")


def test_laboratory_grid():
    print("\n=== 5: Laboratory grid ===")
    tuning.reset()
    grid = generate_terrain(Biome.LABORATORY, stable_seed("vault_omega"), 48, 48)
    corridors_open = all(grid.get(x, y) == TILE_STONE
                         for y in range(48) for x in range(48)
                         if x % 8 < 3 or y % 8 < 3)
    check(corridors_open, "corridor bands are floor")
    walls_in_rooms = all(x % 8 >= 3 and y % 8 >= 3
                         for y in range(48) for x in range(48)
                         if grid.get(x, y) == TILE_WALL)
    check(walls_in_rooms, "walls only inside cells")
    check(grid.count(TILE_WALL) > 0, "cells are walled")


def test_settlement_paths():
    print("\n=== 6: Settlement paths ===")
    tuning.reset()
    grid = generate_terrain(Biome.SETTLEMENT, stable_seed("rusthollow"), 45, 45)
    # Path rows / columns are 21 and 22; decorations may sit on top
    row_ok = all(grid.get(x, y) in (TILE_DIRT, TILE_STONE) for y in (21, 22) for x in range(45))
    col_ok = all(grid.get(x, y) in (TILE_DIRT, TILE_STONE) for x in (21, 22) for y in range(45))
    check(row_ok, "east-west road crosses the zone")
    check(col_ok, "north-south road crosses the zone")
    check(_tiles_used(grid) <= {TILE_GRASS, TILE_DIRT, TILE_STONE}, "settlement palette")
    check(all(grid.is_walkable(x, y) for y in range(45) for x in range(45)),
          "settlements are fully walkable")


def test_exit_strips():
    print("\n=== 7: Exit strips and landings ===")
    tuning.reset()
    exits = [ExitEdge(Direction.NORTH, "ruins_south", (25, 48)), Direction.EAST]
    grid = generate_terrain(Biome.CAVE, stable_seed("start"), 50, 50,
                            exits=exits, landings=[(3, 3), (46, 2)])
    floor = BIOME_FLOOR[Biome.CAVE]
    check(all(grid.get(x, 0) == floor for x in (24, 25, 26)), "north strip opened")
    check(all(grid.get(49, y) == floor for y in (24, 25, 26)), "east strip opened")
    check(grid.get(3, 3) == floor and grid.get(46, 2) == floor, "landing tiles are floor")

    blank = TileGrid(50, 50)
    cleared = clear_exit(blank, Direction.WEST, TILE_DIRT)
    check(cleared == [(0, 24), (0, 25), (0, 26)], "west strip centred on the midpoint",
          repr(cleared))

    narrow = TileGrid(2, 6)
    cleared = clear_exit(narrow, Direction.SOUTH, TILE_DIRT)
    check(cleared == [(0, 5), (1, 5)], "strip clipped to the grid", repr(cleared))

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "tuning.toml"
        path.write_text("[terrain]\nexit_strip = 5\n")
        tuning.load(path)
        try:
            wide = clear_exit(TileGrid(50, 50), Direction.NORTH, TILE_DIRT)
            check(len(wide) == 5 and wide[0] == (23, 0), "strip width is tunable")
        finally:
            tuning.reset()


def test_live_tuning():
    print("\n=== 8: Tuning read at generation time ===")
    tuning.reset()
    seed = stable_seed("greenwood")
    before = generate_terrain(Biome.FOREST, seed, 50, 50)

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "tuning.toml"
        path.write_text("[terrain.forest]\ntrees = 600\n")
        tuning.load(path)
        try:
            dense = generate_terrain(Biome.FOREST, seed, 50, 50)
            check(dense != before, "same seed, new tuning, different grid")
            check(dense.count(TILE_TREE) > before.count(TILE_TREE), "more trees scattered")
        finally:
            tuning.reset()
    check(generate_terrain(Biome.FOREST, seed, 50, 50) == before, "defaults give the old grid back")


if __name__ == "__main__":
    sections = [
        ("Determinism", test_determinism),
        ("Every Biome", test_every_biome),
        ("Biome Palettes", test_biome_palettes),
        ("Cave Core", test_cave_core),
        ("Laboratory Grid", test_laboratory_grid),
        ("Settlement Paths", test_settlement_paths),
        ("Exit Strips", test_exit_strips),
        ("Live Tuning", test_live_tuning),
    ]

    for name, fn in sections:
        try:
            fn()
        except Exception:
            _failed += 1
            print(f"\n  [CRASH] {name}: unhandled exception")
            traceback.print_exc()

    total = _passed + _failed
    print(f"\n{'=' * 60}")
    print(f"  Terrain Tests: {_passed} passed, {_failed} failed  "
          f"(total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)
